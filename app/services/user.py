import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.crud.base import PaginatedResponse
from app.crud.user import user as crud_user
from app.crud.user_role import user_role as crud_user_role
from app.models.user import User
from app.schemas.user import AdminUserCreate, UserContext, UserRoleUpdate, UserUpdate, User as UserSchema
from app.services.auth import auth_service
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class UserService:

    def _get_or_404(self, db: Session, user_id: int) -> User:
        user = crud_user.get(db, id=user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
        return user

    def get_profile(self, db: Session, current_user_context: UserContext) -> User:
        return self._get_or_404(db, current_user_context.user.id)

    def update_profile(self, db: Session, update_in: UserUpdate, current_user_context: UserContext) -> User:
        user = self._get_or_404(db, current_user_context.user.id)
        data = update_in.model_dump(exclude_unset=True)

        # Student and faculty identifiers only apply to their own role
        if not permission_helper.is_student(current_user_context):
            for field in ("regno", "year", "section", "dept"):
                data.pop(field, None)
        if not permission_helper.is_faculty(current_user_context):
            data.pop("faculty_id", None)

        return crud_user.update(db, db_obj=user, obj_in=data, commit=False)

    def list_users(self, db: Session, current_user_context: UserContext, skip: int = 0, limit: int = 50) -> PaginatedResponse[UserSchema]:
        permission_helper.require_admin(current_user_context)
        users, total = crud_user.get_multi_with_roles(db, skip=skip, limit=limit)
        items = [UserSchema.model_validate(u) for u in users]
        return PaginatedResponse[UserSchema].build(items, total=total, skip=skip, limit=limit)

    def create_user(self, db: Session, user_in: AdminUserCreate, current_user_context: UserContext) -> User:
        permission_helper.require_admin(current_user_context)
        user = auth_service.create_user(db, user_in=user_in, role=user_in.role)
        logger.info(f"Admin {current_user_context.user.id} created user {user.id} as {user_in.role.value}")
        return user

    def change_role(self, db: Session, user_id: int, role_in: UserRoleUpdate, current_user_context: UserContext) -> User:
        permission_helper.require_admin(current_user_context)
        user = self._get_or_404(db, user_id)
        if user.id == current_user_context.user.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own role.")

        crud_user_role.set_role(db, user_id=user.id, role=role_in.role, commit=False)
        db.refresh(user)
        logger.info(f"Admin {current_user_context.user.id} set role of user {user.id} to {role_in.role.value}")
        return user

    def delete_user(self, db: Session, user_id: int, current_user_context: UserContext) -> None:
        permission_helper.require_admin(current_user_context)
        user = self._get_or_404(db, user_id)
        if user.id == current_user_context.user.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account.")

        crud_user.delete(db, id=user.id, commit=False)
        logger.info(f"Admin {current_user_context.user.id} deleted user {user_id}")


user_service = UserService()

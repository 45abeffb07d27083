from typing import Optional
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.crud.base import CRUDBase
from app.models.user_role import UserRole
from app.schemas.user import UserRoleUpdate

class CRUDUserRole(CRUDBase[UserRole, UserRoleUpdate, UserRoleUpdate]):
    def get_by_user(self, db: Session, *, user_id: int) -> Optional[UserRole]:
        return db.query(UserRole).filter(UserRole.user_id == user_id).first()

    def set_role(self, db: Session, *, user_id: int, role: RoleEnum, commit: bool = True) -> UserRole:
        existing = self.get_by_user(db, user_id=user_id)
        if existing:
            return self.update(db, db_obj=existing, obj_in={"role": role}, commit=commit)
        return self.create(db, obj_in={"user_id": user_id, "role": role}, commit=commit)

user_role = CRUDUserRole(UserRole)

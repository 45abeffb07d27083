from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.crud.base import PaginatedResponse
from app.schemas.response import APIResponse
from app.schemas.site_setting import SiteSettings, SiteSettingsUpdate, SettingsSaveResult
from app.schemas.user import AdminUserCreate, User as UserSchema, UserContext, UserRoleUpdate
from app.services.site_settings import site_settings_service
from app.services.user import user_service
from app.utils import deps

router = APIRouter()

require_admin = deps.require_role(RoleEnum.ADMIN)


@router.get("/users", response_model=APIResponse[PaginatedResponse[UserSchema]])
def get_all_users_admin(
    *,
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(require_admin),
    skip: int = 0,
    limit: int = 50
):
    paginated_users = user_service.list_users(db, current_user_context=context, skip=skip, limit=limit)
    return APIResponse(message="Users retrieved successfully", data=paginated_users)

@router.post("/users", response_model=APIResponse[UserSchema], status_code=status.HTTP_201_CREATED)
def create_user_admin(
    *,
    db: Session = Depends(deps.get_transactional_db),
    user_in: AdminUserCreate,
    context: UserContext = Depends(require_admin)
):
    new_user = user_service.create_user(db, user_in=user_in, current_user_context=context)
    return APIResponse(message="User created successfully", data=UserSchema.model_validate(new_user))

@router.put("/users/{user_id}/role", response_model=APIResponse[UserSchema])
def change_user_role_admin(
    *,
    user_id: int,
    role_in: UserRoleUpdate,
    db: Session = Depends(deps.get_transactional_db),
    context: UserContext = Depends(require_admin)
):
    updated_user = user_service.change_role(db, user_id=user_id, role_in=role_in, current_user_context=context)
    return APIResponse(message="User role updated successfully", data=UserSchema.model_validate(updated_user))

@router.delete("/users/{user_id}", response_model=APIResponse[None])
def delete_user_admin(
    *,
    user_id: int,
    db: Session = Depends(deps.get_transactional_db),
    context: UserContext = Depends(require_admin)
):
    user_service.delete_user(db, user_id=user_id, current_user_context=context)
    return APIResponse(message="User deleted successfully")

@router.get("/settings", response_model=APIResponse[SiteSettings])
def get_site_settings(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(require_admin)
):
    site_settings = site_settings_service.get_settings(db, current_user_context=context)
    return APIResponse(message="Settings retrieved successfully", data=site_settings)

@router.put("/settings", response_model=APIResponse[SettingsSaveResult])
def save_site_settings(
    *,
    db: Session = Depends(deps.get_db),
    settings_in: SiteSettingsUpdate,
    context: UserContext = Depends(require_admin)
):
    """Each key is saved on its own. Keys that failed are listed under ``errors``."""
    result = site_settings_service.save_settings(db, settings_in=settings_in, current_user_context=context)
    message = "Settings saved successfully" if not result.errors else "Some settings could not be saved"
    return APIResponse(message=message, data=result)

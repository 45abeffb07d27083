from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.schemas.user import User, UserUpdate, UserContext
from app.services.user import user_service
from app.utils import deps

router = APIRouter()


@router.get("/me", response_model=APIResponse[User])
def read_users_me(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    user = user_service.get_profile(db, current_user_context=context)
    return APIResponse(message="User profile fetched successfully", data=User.model_validate(user))

@router.put("/me", response_model=APIResponse[User])
def update_user_me(
    *,
    db: Session = Depends(deps.get_transactional_db),
    user_in: UserUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    updated_user = user_service.update_profile(db, update_in=user_in, current_user_context=context)
    return APIResponse(message="User profile updated successfully", data=User.model_validate(updated_user))

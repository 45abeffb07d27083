from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.schemas.token import LoginResponse, LoginRequest, SignupRequest
from app.services.auth import auth_service
from app.utils import deps

router = APIRouter()


@router.post("/signup", response_model=APIResponse[LoginResponse], status_code=status.HTTP_201_CREATED)
def signup(
    *,
    db: Session = Depends(deps.get_db),
    signup_in: SignupRequest
):
    """Self-registration. The new account gets the site's default role."""
    signup_data = auth_service.signup(db=db, signup_in=signup_in)
    return APIResponse(message="Account created successfully", data=signup_data)

@router.post("/login", response_model=APIResponse[LoginResponse])
def login_for_access_token(
    request: LoginRequest,
    db: Session = Depends(deps.get_db)
):
    login_data = auth_service.login(db=db, email=request.email, password=request.password)
    return APIResponse(message="Login successful", data=login_data)

@router.post("/logout", status_code=status.HTTP_200_OK, response_model=APIResponse[None])
def logout(
    db: Session = Depends(deps.get_db),
    credentials: HTTPAuthorizationCredentials = Depends(deps.http_bearer)
):
    """Invalidate the current access token by adding it to the denylist."""
    auth_service.logout(db=db, token=credentials.credentials)
    return APIResponse(message="Logout successful")

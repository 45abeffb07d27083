import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import RoleEnum
from app.core.security import ALGORITHM, get_password_hash, verify_password, create_access_token
from app.crud.user import user as crud_user
from app.crud.user_role import user_role as crud_user_role
from app.crud.token_denylist import token_denylist as crud_token_denylist
from app.models.user import User
from app.schemas.token import LoginResponse, SignupRequest, Token, TokenPayload
from app.schemas.token_denylist import TokenDenylistCreate
from app.schemas.user import User as UserSchema, UserCreate
from app.services.site_settings import site_settings_service

logger = logging.getLogger(__name__)


class AuthService:

    def _issue_token(self, user: User) -> Token:
        token_payload = {"user_id": user.id, "role": user.role_name.value if user.role_name else None}
        access_token = create_access_token(data=token_payload, email=user.email)
        return Token(access_token=access_token, token_type="bearer")

    def create_user(self, db: Session, *, user_in: UserCreate, role: RoleEnum) -> User:
        """Creates the user row and its single role row in the current transaction."""
        email = user_in.email.lower()
        if crud_user.get_by_email(db, email=email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A user with this email already exists.",
            )

        data = user_in.model_dump(exclude={"password", "role"})
        data.update(email=email, hashed_password=get_password_hash(user_in.password), is_active=True)
        user = crud_user.create(db, obj_in=data, commit=False)
        crud_user_role.set_role(db, user_id=user.id, role=role, commit=False)
        db.refresh(user)
        return user

    def signup(self, db: Session, *, signup_in: SignupRequest) -> LoginResponse:
        if not site_settings_service.get_value(db, "registration_enabled"):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Registration is currently disabled.",
            )

        role = RoleEnum(site_settings_service.get_value(db, "default_user_role"))
        user_in = UserCreate(full_name=signup_in.full_name, email=signup_in.email, password=signup_in.password)
        user = self.create_user(db, user_in=user_in, role=role)
        db.commit()
        logger.info(f"User {user.id} signed up with role {role.value}")

        return LoginResponse(token=self._issue_token(user), user=UserSchema.model_validate(user))

    def login(self, db: Session, *, email: str, password: str) -> LoginResponse:
        user = crud_user.get_by_email(db, email=email)
        if not user or not verify_password(password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User is inactive",
            )

        return LoginResponse(token=self._issue_token(user), user=UserSchema.model_validate(user))

    def logout(self, db: Session, *, token: str) -> None:
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
            token_data = TokenPayload(**payload)
        except JWTError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

        if not token_data.jti or not token_data.exp:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token missing JTI or expiration claim")

        if not crud_token_denylist.get_by_jti(db, jti=token_data.jti):
            crud_token_denylist.create(
                db,
                obj_in=TokenDenylistCreate(
                    jti=token_data.jti,
                    exp=datetime.fromtimestamp(token_data.exp, tz=timezone.utc),
                ),
            )
        db.commit()


auth_service = AuthService()

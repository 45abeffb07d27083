from typing import List, Optional, Tuple
from sqlalchemy.orm import Session, selectinload

from app.core.constants import RoleEnum
from app.crud.base import CRUDBase
from app.models.user import User
from app.models.user_role import UserRole
from app.schemas.user import UserCreate, UserUpdate

class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    def _query_with_role(self, db: Session):
        return db.query(User).options(selectinload(User.role))

    def get(self, db: Session, id: int) -> Optional[User]:
        return self._query_with_role(db).filter(User.id == id).first()

    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return self._query_with_role(db).filter(User.email == email.lower()).first()

    def get_multi_with_roles(self, db: Session, *, skip: int = 0, limit: int = 100) -> Tuple[List[User], int]:
        query = self._query_with_role(db)
        total = query.count()
        users = query.order_by(User.created_at.desc(), User.id.desc()).offset(skip).limit(limit).all()
        return users, total

    def get_by_role(self, db: Session, *, role: RoleEnum) -> List[User]:
        return (
            self._query_with_role(db)
            .join(UserRole, UserRole.user_id == User.id)
            .filter(UserRole.role == role)
            .all()
        )

    def count_by_role(self, db: Session, *, role: RoleEnum) -> int:
        return db.query(UserRole).filter(UserRole.role == role).count()

    def get_created_since(self, db: Session, *, since) -> List[User]:
        return (
            db.query(User)
            .filter(User.created_at >= since)
            .order_by(User.created_at.asc())
            .all()
        )

user = CRUDUser(User)

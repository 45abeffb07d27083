from typing import Any, List, Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.site_setting import SiteSetting
from app.schemas.site_setting import SiteSettingCreate

class CRUDSiteSetting(CRUDBase[SiteSetting, SiteSettingCreate, SiteSettingCreate]):
    def get_by_key(self, db: Session, *, key: str) -> Optional[SiteSetting]:
        return db.query(SiteSetting).filter(SiteSetting.key == key).first()

    def get_all(self, db: Session) -> List[SiteSetting]:
        return db.query(SiteSetting).all()

    def upsert(self, db: Session, *, key: str, value: Any, commit: bool = True) -> SiteSetting:
        existing = self.get_by_key(db, key=key)
        if existing:
            return self.update(db, db_obj=existing, obj_in={"value": value}, commit=commit)
        return self.create(db, obj_in=SiteSettingCreate(key=key, value=value), commit=commit)

site_setting = CRUDSiteSetting(SiteSetting)

import logging
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import SITE_SETTING_DEFAULTS
from app.crud.site_setting import site_setting as crud_site_setting
from app.schemas.site_setting import SiteSettings, SiteSettingsUpdate, SettingsSaveResult
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class SiteSettingsService:

    def _load_values(self, db: Session) -> Dict[str, Any]:
        values = dict(SITE_SETTING_DEFAULTS)
        for row in crud_site_setting.get_all(db):
            if row.key in values and row.value is not None:
                values[row.key] = row.value
        return values

    def get_value(self, db: Session, key: str) -> Any:
        row = crud_site_setting.get_by_key(db, key=key)
        if row is None or row.value is None:
            return SITE_SETTING_DEFAULTS.get(key)
        return row.value

    def get_settings(self, db: Session, current_user_context: UserContext) -> SiteSettings:
        permission_helper.require_admin(current_user_context)
        return SiteSettings(**self._load_values(db))

    def save_settings(self, db: Session, settings_in: SiteSettingsUpdate, current_user_context: UserContext) -> SettingsSaveResult:
        """Upsert and commit every provided key on its own; a failing key does not stop the others."""
        permission_helper.require_admin(current_user_context)

        saved, errors = [], {}
        for key, value in settings_in.model_dump(exclude_unset=True, mode="json").items():
            try:
                crud_site_setting.upsert(db, key=key, value=value)
                saved.append(key)
            except SQLAlchemyError as exc:
                db.rollback()
                logger.error(f"Failed to save setting '{key}': {exc}")
                errors[key] = "Failed to save setting"

        logger.info(f"Admin {current_user_context.user.id} saved settings: {', '.join(saved) or 'none'}")
        return SettingsSaveResult(settings=SiteSettings(**self._load_values(db)), saved=saved, errors=errors)


site_settings_service = SiteSettingsService()

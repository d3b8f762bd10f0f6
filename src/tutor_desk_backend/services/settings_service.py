'''
Per-user settings, stored as one JSON document per account.
'''
from typing import Annotated, Optional
from uuid import UUID
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import ThemeMode
from ..models import settings as settings_models
from ..common.logger import log


class SettingsService:
    """
    Reads always return a complete, current-version settings object: a
    missing row is created with defaults and an older stored shape is
    migrated and written back.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def get_settings_internal(self, user_id: UUID) -> settings_models.UserSettings:
        row = await self.db.get(db_models.UserSettings, user_id)
        if row is None:
            log.info(f"No settings stored for user {user_id}; inserting defaults.")
            current = settings_models.UserSettings()
            self.db.add(db_models.UserSettings(user_id=user_id, settings=current.to_storage()))
            await self.db.flush()
            return current

        current = settings_models.migrate_settings(row.settings)
        stored = current.to_storage()
        if row.settings != stored:
            log.info(f"Upgrading stored settings of user {user_id} to version {current.version}.")
            row.settings = stored
            row.updated_at = db_models.utcnow()
            self.db.add(row)
            await self.db.flush()
        return current

    async def get_settings_for_api(self, user: db_models.Users) -> settings_models.UserSettings:
        log.info(f"User {user.id} requesting settings.")
        try:
            return await self.get_settings_internal(user.id)
        except Exception as e:
            log.error(f"Error in get_settings_for_api for user {user.id}: {e}", exc_info=True)
            raise

    async def save_settings_for_api(
        self,
        user: db_models.Users,
        data: settings_models.UserSettingsUpdate
    ) -> settings_models.UserSettings:
        """Replaces the stored settings (upsert)."""
        log.info(f"User {user.id} saving settings.")
        try:
            new_settings = settings_models.UserSettings(**data.model_dump())
            row = await self.db.get(db_models.UserSettings, user.id)
            if row is None:
                row = db_models.UserSettings(user_id=user.id)
            row.settings = new_settings.to_storage()
            row.updated_at = db_models.utcnow()
            self.db.add(row)
            await self.db.flush()
            return new_settings
        except Exception as e:
            log.error(f"Error in save_settings_for_api for user {user.id}: {e}", exc_info=True)
            raise

    async def update_theme_internal(
        self,
        user_id: UUID,
        mode: Optional[ThemeMode] = None,
        primary_color: Optional[str] = None
    ) -> settings_models.UserSettings:
        """Changes only the theme part of the stored settings."""
        current = await self.get_settings_internal(user_id)
        theme_changes = {}
        if mode is not None:
            theme_changes["mode"] = mode
        if primary_color is not None:
            theme_changes["primary_color"] = primary_color
        if not theme_changes:
            return current

        updated = current.model_copy(update={"theme": current.theme.model_copy(update=theme_changes)})
        row = await self.db.get(db_models.UserSettings, user_id)
        row.settings = updated.to_storage()
        row.updated_at = db_models.utcnow()
        self.db.add(row)
        await self.db.flush()
        return updated

'''
Tests for SettingsService: defaults, upgrades of stored blobs and saves.
'''
import pytest
from pprint import pprint

from src.tutor_desk_backend.services.settings_service import SettingsService
from src.tutor_desk_backend.database import models as db_models
from src.tutor_desk_backend.database.db_enums import ExportFormat, ThemeMode, TimeFormat
from src.tutor_desk_backend.models import settings as settings_models


@pytest.mark.anyio
class TestSettingsService:

    async def test_defaults_are_inserted(
        self,
        db_session,
        settings_service: SettingsService,
        test_user_orm: db_models.Users
    ):
        print("\n--- Testing get_settings_for_api defaults ---")
        current = await settings_service.get_settings_for_api(test_user_orm)
        pprint(current.model_dump())

        assert current == settings_models.UserSettings()
        row = await db_session.get(db_models.UserSettings, test_user_orm.id)
        assert row.settings["version"] == settings_models.CURRENT_SETTINGS_VERSION

    async def test_old_blob_is_upgraded_in_place(
        self,
        db_session,
        settings_service: SettingsService,
        test_user_orm: db_models.Users
    ):
        print("\n--- Testing settings upgrade on read ---")
        db_session.add(db_models.UserSettings(
            user_id=test_user_orm.id,
            settings={"theme": {"mode": "dark", "primaryColor": "teal"}, "timeFormat": "12h"}
        ))
        await db_session.flush()

        current = await settings_service.get_settings_internal(test_user_orm.id)
        assert current.theme.mode == ThemeMode.DARK
        assert current.theme.primary_color == "teal"
        assert current.time_format == TimeFormat.H12

        row = await db_session.get(db_models.UserSettings, test_user_orm.id)
        assert "primaryColor" not in row.settings["theme"]
        assert row.settings["theme"]["primary_color"] == "teal"

    async def test_save_replaces_everything(
        self,
        settings_service: SettingsService,
        test_user_orm: db_models.Users
    ):
        await settings_service.update_theme_internal(test_user_orm.id, mode=ThemeMode.DARK)

        saved = await settings_service.save_settings_for_api(
            test_user_orm,
            settings_models.UserSettingsUpdate(language="en", data_export=settings_models.DataExportSettings(format=ExportFormat.DOCX))
        )
        assert saved.language == "en"
        assert saved.theme.mode == ThemeMode.LIGHT

        reloaded = await settings_service.get_settings_internal(test_user_orm.id)
        assert reloaded == saved

    async def test_update_theme_only_touches_theme(
        self,
        settings_service: SettingsService,
        test_user_orm: db_models.Users
    ):
        await settings_service.save_settings_for_api(test_user_orm, settings_models.UserSettingsUpdate(language="en"))

        updated = await settings_service.update_theme_internal(test_user_orm.id, mode=ThemeMode.DARK, primary_color="rose")
        assert updated.theme.mode == ThemeMode.DARK
        assert updated.theme.primary_color == "rose"
        assert updated.language == "en"

        unchanged = await settings_service.update_theme_internal(test_user_orm.id)
        assert unchanged == updated

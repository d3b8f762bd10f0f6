'''
Versioned user settings.

Stored settings may be any older or partial shape. `migrate_settings` is the
single place that turns such a blob into a complete, current `UserSettings`:

    version 0  the unversioned camelCase layout
               (primaryColor, menuStyle, timeFormat, dataExport, include*)
    version 1  the snake_case layout defined below

Missing fields take the defaults declared on the models. Values that fail
validation are dropped and fall back to their defaults as well.
'''
import copy
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..database.db_enums import ThemeMode, MenuStyle, TimeFormat, ExportFormat, NotificationType
from ..common.logger import log

CURRENT_SETTINGS_VERSION = 1


class ThemeSettings(BaseModel):
    mode: ThemeMode = ThemeMode.LIGHT
    primary_color: str = "indigo"
    menu_style: MenuStyle = MenuStyle.FLOATING


class NotificationTypeSettings(BaseModel):
    lessons: bool = True
    payments: bool = True
    students: bool = True
    system: bool = True


class NotificationTimingSettings(BaseModel):
    """One switch per reminder lead time; keys match NotificationType values."""
    model_config = ConfigDict(populate_by_name=True)

    one_day: bool = Field(True, alias=NotificationType.ONE_DAY.value)
    three_hours: bool = Field(True, alias=NotificationType.THREE_HOURS.value)
    one_hour: bool = Field(True, alias=NotificationType.ONE_HOUR.value)
    ten_minutes: bool = Field(True, alias=NotificationType.TEN_MINUTES.value)

    def is_enabled(self, notification_type: NotificationType) -> bool:
        return self.model_dump(by_alias=True)[notification_type.value]


class NotificationSettings(BaseModel):
    enabled: bool = True
    sound: bool = True
    desktop: bool = True
    email: bool = False
    types: NotificationTypeSettings = Field(default_factory=NotificationTypeSettings)
    timing: NotificationTimingSettings = Field(default_factory=NotificationTimingSettings)


class DataExportSettings(BaseModel):
    format: ExportFormat = ExportFormat.JSON
    include_students: bool = True
    include_lessons: bool = True
    include_payments: bool = True


class UserSettings(BaseModel):
    version: int = CURRENT_SETTINGS_VERSION
    theme: ThemeSettings = Field(default_factory=ThemeSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    language: str = "tr"
    time_format: TimeFormat = TimeFormat.H24
    data_export: DataExportSettings = Field(default_factory=DataExportSettings)

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class UserSettingsUpdate(BaseModel):
    """Full replacement body; anything omitted is reset to its default."""
    theme: ThemeSettings = Field(default_factory=ThemeSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    language: str = "tr"
    time_format: TimeFormat = TimeFormat.H24
    data_export: DataExportSettings = Field(default_factory=DataExportSettings)


# --- Migration ---

_V0_KEY_MAP = {
    "primaryColor": "primary_color",
    "menuStyle": "menu_style",
    "timeFormat": "time_format",
    "dataExport": "data_export",
    "includeStudents": "include_students",
    "includeLessons": "include_lessons",
    "includePayments": "include_payments",
}


def _rename_keys(value: Any, key_map: dict[str, str]) -> Any:
    if isinstance(value, dict):
        return {key_map.get(k, k): _rename_keys(v, key_map) for k, v in value.items()}
    return value


def _migrate_v0_to_v1(raw: dict) -> dict:
    migrated = _rename_keys(raw, _V0_KEY_MAP)
    migrated["version"] = 1
    return migrated


_MIGRATIONS = {
    0: _migrate_v0_to_v1,
}


def _delete_path(data: Any, path: tuple) -> bool:
    """Removes the value at `path` from nested dicts. Returns False if nothing was removed."""
    node = data
    for key in path[:-1]:
        if not isinstance(node, dict) or key not in node:
            return False
        node = node[key]
    if isinstance(node, dict) and path and path[-1] in node:
        del node[path[-1]]
        return True
    return False


def migrate_settings(raw: Any) -> UserSettings:
    """
    Converts a persisted settings blob of any known version into a complete
    UserSettings instance.
    """
    if not isinstance(raw, dict):
        return UserSettings()

    data = copy.deepcopy(raw)
    version = data.get("version", 0)
    if not isinstance(version, int) or version < 0 or version > CURRENT_SETTINGS_VERSION:
        log.warning(f"Unknown settings version {version!r}; treating as unversioned.")
        version = 0

    while version < CURRENT_SETTINGS_VERSION:
        data = _MIGRATIONS[version](data)
        version += 1
    data["version"] = CURRENT_SETTINGS_VERSION

    # Drop whatever does not validate so it falls back to the default
    while True:
        try:
            return UserSettings.model_validate(data)
        except ValidationError as e:
            removed = False
            for error in e.errors():
                if _delete_path(data, tuple(error["loc"])):
                    removed = True
            if not removed:
                log.warning(f"Could not repair stored settings, using defaults: {e}")
                return UserSettings()
            log.warning(f"Dropped invalid settings fields: {[err['loc'] for err in e.errors()]}")

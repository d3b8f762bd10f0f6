'''
Holds all the configurations
'''
from zoneinfo import ZoneInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    The data service URL, the signing key and the storage credentials have
    no defaults: a missing value fails validation at import time.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Application Metadata
    APP_NAME: str = "TutorDesk Backend"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "The backend API for managing a private tutoring business."
    TEST_MODE: bool = False
    LOG_LEVEL: str = "INFO"

    # Database URL
    DATABASE_URL: str
    DATABASE_URL_TEST: str = "sqlite+aiosqlite:///:memory:"
    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL

    # JWT Settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Blob storage
    STORAGE_URL: str
    STORAGE_SERVICE_KEY: str
    AVATAR_BUCKET: str = "avatars"
    AVATAR_MAX_BYTES: int = 5 * 1024 * 1024
    RESOURCE_BUCKET: str = "resources"
    STORAGE_TIMEOUT_SECONDS: float = 30.0

    # Calendar used for "now", month and year boundaries
    TIMEZONE: str = "Europe/Istanbul"
    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)

    # Notifications
    NOTIFICATION_POLL_SECONDS: float = 60.0
    NOTIFICATION_FETCH_LIMIT: int = 10

    BACKEND_CORS_ORIGINS: list[str] = []

# Create a single, importable instance of the settings
settings = Settings()

"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from services.credential_manager import CREDENTIAL_KEYS, get_credential


class KeychainSettingsSource(PydanticBaseSettingsSource):
    """Load secret fields from the OS keychain via ``keyring``.

    Only fields whose uppercase name appears in
    :data:`~services.credential_manager.CREDENTIAL_KEYS` are looked up.
    All other fields return ``None`` so the next source in the chain
    handles them.
    """

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        env_name = field_name.upper()
        if env_name not in CREDENTIAL_KEYS:
            return None, field_name, False
        value = get_credential(env_name)
        return value, field_name, False

    def __call__(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        for field_name, field_info in self.settings_cls.model_fields.items():
            value, key, is_complex = self.get_field_value(field_info, field_name)
            if value is not None:
                d[key] = value
        return d


class Settings(BaseSettings):
    """Application settings loaded from keychain, environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            KeychainSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    # Database
    DATABASE_URL: str = "sqlite:///./dashboard.db"

    # Token encryption (64 hex chars = 32-byte AES-256 key). Validated by
    # TokenVault at startup, not here, so a bad key fails with a clear message.
    UP_TOKEN_ENCRYPTION_KEY: str = ""

    # Session tokens issued by the identity layer
    SESSION_SECRET: str = ""

    # OAuth client for the identity provider (used by the sign-in layer only)
    OAUTH_CLIENT_ID: str = ""
    OAUTH_CLIENT_SECRET: str = ""

    # Up Banking API
    UP_API_BASE_URL: str = "https://api.up.com.au/api/v1"
    UP_API_TIMEOUT_SECONDS: float = 30.0
    MAX_PAGES: int = 10
    RECENT_TRANSACTIONS_PAGE_SIZE: int = 25

    # Calendar months for dashboard figures are computed in this zone
    DASHBOARD_TIMEZONE: str = "Australia/Melbourne"

    @field_validator("UP_TOKEN_ENCRYPTION_KEY", mode="before")
    @classmethod
    def normalize_hex_key(cls, v: str) -> str:
        """Strip whitespace and lowercase the hex key.

        Keys pasted into ``.env`` files often carry a trailing newline or
        were generated in uppercase by other tools.
        """
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("MAX_PAGES", "RECENT_TRANSACTIONS_PAGE_SIZE")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be at least 1, got {v}")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once on first use."""
    return Settings()

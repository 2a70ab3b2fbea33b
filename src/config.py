from functools import lru_cache

from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator
from pydantic_core import PydanticCustomError
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.domain.errors import ConfigurationError

# Error types that mean a required value was not supplied
_MISSING_ERROR_TYPES = ("missing", "blank")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Backend-as-a-service project (required, no defaults)
    supabase_url: str
    supabase_anon_key: str

    # Object storage bucket for listing photos
    storage_bucket: str = "listing-images"

    # Direct Postgres access; when unset, listings go through the REST API
    database_url: str | None = None

    # Where the signed-in session is persisted between runs
    session_file: str = ".farmstand_session.json"

    # None leaves timeouts to the backend
    request_timeout: float | None = None

    # Remove already-uploaded photos when a multi-photo upload fails
    cleanup_orphaned_uploads: bool = True

    log_level: str = "INFO"

    @field_validator("supabase_url", "supabase_anon_key")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("blank", "Value must not be blank")
        return value


def _field_name(error: dict) -> str:  # type: ignore[type-arg]
    return ".".join(str(part) for part in error["loc"]).upper()


@lru_cache
def get_settings() -> Settings:
    """Build settings once. Missing backend credentials are fatal."""
    try:
        return Settings()  # type: ignore[call-arg]
    except PydanticValidationError as exc:
        errors = exc.errors()
        missing = [_field_name(err) for err in errors if err["type"] in _MISSING_ERROR_TYPES]
        if missing:
            raise ConfigurationError(
                "Missing backend credentials. Set "
                + ", ".join(missing)
                + " in the environment or your .env file."
            ) from exc
        invalid = [f"{_field_name(err)}: {err['msg']}" for err in errors]
        raise ConfigurationError("Invalid configuration. " + "; ".join(invalid)) from exc

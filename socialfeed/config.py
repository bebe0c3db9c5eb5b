"""Application configuration via environment variables."""

import base64
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic_settings import BaseSettings

_INSECURE_DEFAULTS = {"change-me-fernet-key"}


class OAuthSecrets(BaseModel):
    """App-level consumer key material handed to every OAuth client."""

    model_config = ConfigDict(frozen=True)

    consumer_key: str
    consumer_secret: str


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # --- App ---
    debug: bool = False

    # --- Database ---
    database_url: str = "sqlite:///data/socialfeed.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def _fix_db_scheme(cls, v: str) -> str:
        """Swap sync driver schemes for their async counterparts."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if isinstance(v, str) and v.startswith("sqlite:///"):
            return v.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return v

    # --- Encryption (Fernet) ---
    fernet_key: str = "change-me-fernet-key"

    # --- Twitter OAuth 1.0a ---
    twitter_consumer_key: str = ""
    twitter_consumer_secret: str = ""
    twitter_callback_url: str = "oob"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _validate_secrets(self) -> "Settings":
        """Refuse to start with an insecure default Fernet key outside debug mode."""
        if self.debug:
            return self

        if self.fernet_key in _INSECURE_DEFAULTS:
            raise ValueError(
                "Insecure default value detected for: FERNET_KEY. "
                "Set it to a secure random value via environment variables or .env file."
            )

        # Validate Fernet key format (must be 32 url-safe base64 bytes)
        try:
            key_bytes = base64.urlsafe_b64decode(self.fernet_key)
            if len(key_bytes) != 32:
                raise ValueError("decoded key is not 32 bytes")
        except Exception:
            raise ValueError(
                "FERNET_KEY is not a valid Fernet key. Generate one with: "
                "python -c \"from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())\""
            )

        return self

    @property
    def twitter_secrets(self) -> OAuthSecrets:
        return OAuthSecrets(
            consumer_key=self.twitter_consumer_key,
            consumer_secret=self.twitter_consumer_secret,
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()

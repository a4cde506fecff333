import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()

ENV_PREFIX = "NEXTRIP_"


class Settings(BaseModel):
    # Nextrip API Configuration
    base_url: str = Field(
        default="https://svc.metrotransit.org/nextrip", alias="NEXTRIP_BASE_URL"
    )
    request_timeout: float = Field(default=30.0, alias="NEXTRIP_REQUEST_TIMEOUT")

    # Verbose per-slot cache tracing
    debug: bool = Field(default=False, alias="NEXTRIP_DEBUG")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from NEXTRIP_* environment variables only."""
        return cls.model_validate(
            {k: v for k, v in os.environ.items() if k.startswith(ENV_PREFIX)}
        )


# Global settings instance (lazy initialization)
_global_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings, reading the environment on first use."""
    global _global_settings
    if _global_settings is None:
        _global_settings = Settings.from_env()
    return _global_settings

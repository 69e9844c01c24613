"""Engine configuration."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Configuration for the directive expansion engine.

    Resolution order: programmatic, environment vars, .env files, defaults.
    All fields can be overridden with the PINS_ prefix, e.g.
    PINS_SCRIPT_TIMEOUT_SECONDS=2.5.
    """

    model_config = SettingsConfigDict(
        env_prefix="PINS_", env_file=".env", extra="ignore"
    )

    # Resolver
    max_iterations: int = Field(
        default=250,
        ge=1,
        description="Substitution ceiling per directive in one resolution pass",
    )
    max_launch_depth: int = Field(
        default=5,
        ge=1,
        description="How many times launchPin/launchGroup may re-enter pin opening",
    )

    # Sandbox
    script_timeout_seconds: float = Field(
        default=1.0, gt=0, description="Wall-clock limit for script directives"
    )

    # AI directive
    ai_max_attempts: int = Field(default=10, ge=1)
    ai_default_creativity: float = Field(default=1.0, ge=0.0, le=2.0)
    ai_max_prompt_chars: int = Field(default=2048, ge=1)
    llm_provider: str = Field(
        default="anthropic", description="Options: 'anthropic', 'openai'"
    )
    llm_model: Optional[str] = Field(
        default=None, description="Model override; provider default when unset"
    )

    # Informational formats
    date_format: str = "%d %B %Y"
    time_format: str = "%H:%M:%S"

    # Storage (CLI)
    mongo_uri: Optional[str] = Field(default=None, description="MongoDB connection URI")
    mongo_db: str = Field(default="pins", description="MongoDB database name")


# Global settings instance
_settings: Optional[EngineSettings] = None


def get_settings() -> EngineSettings:
    """Get the global engine settings, loading them from the environment once."""
    global _settings
    if _settings is None:
        _settings = EngineSettings()
    return _settings


def set_settings(settings: EngineSettings) -> None:
    """Replace the global engine settings."""
    global _settings
    _settings = settings

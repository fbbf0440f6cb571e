"""
Runtime configuration.

Settings are read from DYM_* environment variables into a pydantic model.
"""

import os
from pathlib import Path
from typing import Callable, Mapping, TypeVar

from pydantic import BaseModel, Field, field_validator

from drawyourmeme.core.exceptions import ConfigurationError

ENV_PREFIX = "DYM_"

DEFAULT_PROJECT_TOKEN_URL = (
    "https://pump.fun/coin/7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
)

T = TypeVar("T")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


class Settings(BaseModel):
    """Service settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=5000, ge=1, le=65535)
    uploads_dir: Path = Path("uploads")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, ge=1)
    launch_delay_seconds: float = Field(default=1.0, ge=0)
    recent_tokens_default: int = Field(default=3, ge=1)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    # Read the client address from X-Forwarded-For / X-Real-IP; only behind a proxy that sets them
    trust_proxy_headers: bool = False

    # Telegram bot; polling starts only when a token is configured
    telegram_bot_token: str | None = None
    webapp_url: str = "https://localhost:5000"
    project_token_url: str = DEFAULT_PROJECT_TOKEN_URL
    channel_url: str = "https://t.me/drawyourmeme"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_origins(cls, value):
        if isinstance(value, str):
            return [x.strip() for x in value.split(",") if x.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def bot_enabled(self) -> bool:
        return bool(self.telegram_bot_token)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from DYM_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Settings with defaults for unset variables

        Raises:
            ConfigurationError: If a variable cannot be converted
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        def read(key: str, convert: Callable[[str], T]) -> None:
            env_var = f"{ENV_PREFIX}{key.upper()}"
            raw = env.get(env_var)
            if raw is None or raw == "":
                return
            try:
                values[key] = convert(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {env_var}: {raw!r}",
                    env_var=env_var,
                    config_key=key,
                ) from e

        read("host", str)
        read("port", int)
        read("uploads_dir", Path)
        read("max_upload_bytes", int)
        read("launch_delay_seconds", float)
        read("recent_tokens_default", int)
        read("cors_origins", str)
        read("log_level", str)
        read("trust_proxy_headers", parse_bool)
        read("telegram_bot_token", str)
        read("webapp_url", str)
        read("project_token_url", str)
        read("channel_url", str)

        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

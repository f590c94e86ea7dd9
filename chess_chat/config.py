"""Configuration module for loading environment variables and bot settings."""

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from chess_chat.confirmation import DEFAULT_TIMEOUT_SECONDS
from chess_chat.types import SessionScope

# Track whether environment has been loaded
_ENV_LOADED = False

# Settings field -> environment variable
ENV_VARS = {
    "discord_token": "DISCORD_TOKEN",
    "command_prefix": "CHESS_COMMAND_PREFIX",
    "confirmation_timeout": "CHESS_CONFIRMATION_TIMEOUT",
    "session_scope": "CHESS_SESSION_SCOPE",
    "unicode_pieces": "CHESS_UNICODE_PIECES",
}


def load_env(filename: str | None = None, override: bool = False) -> Path | None:
    """Load environment variables from .env file.

    Once loaded, subsequent calls are skipped unless override=True.
    Tests should use override=True to reload different configs.

    Args:
        filename: Optional .env filename. Defaults to ENV_FILE env var or '.env'.
        override: Whether to override existing environment variables.

    Returns:
        Path to the .env file that was loaded, or None if not found.
    """
    global _ENV_LOADED

    if _ENV_LOADED and not override:
        return None

    env_file = filename or os.environ.get("ENV_FILE", ".env")
    dotenv_path = find_dotenv(env_file, usecwd=True)

    if dotenv_path:
        load_dotenv(dotenv_path, override=override)
        _ENV_LOADED = True
        logger.debug(f"Loaded environment from: {dotenv_path}")
        return Path(dotenv_path)
    else:
        logger.debug(f"No .env file found: {env_file}")
        return None


class Settings(BaseModel):
    """Runtime settings for the chess bot.

    Values come from the environment (see ENV_VARS); unset variables keep
    the defaults below.
    """

    discord_token: str | None = None
    command_prefix: str = Field(default="~", min_length=1)
    confirmation_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    # Key games by requesting user or by channel, for both create and lookup
    session_scope: SessionScope = "user"
    unicode_pieces: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ.

        Returns:
            Validated settings.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        environ = os.environ if environ is None else environ
        values = {
            field: environ[var] for field, var in ENV_VARS.items() if var in environ
        }
        return cls(**values)

"""Configuration module for the Zettel CLI."""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from zettel_cli.exceptions import ConfigurationError, ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_HOME_NAME = "zettelkasten"
NOTE_EXTENSION = ".md"

# User-level dotenv file; None means ~/.config/zettel/.env. Its values
# never override the process environment
_USER_ENV: Optional[Path] = None


def user_env_path() -> Path:
    """Path of the user-level dotenv file, ``~/.config/zettel/.env``."""
    if _USER_ENV is not None:
        return _USER_ENV
    return Path.home() / ".config" / "zettel" / ".env"


class IdPrecision(str, Enum):
    """Granularity of the timestamp used for note IDs."""

    SECOND = "second"  # YYYYMMDDHHMMSS
    MINUTE = "minute"  # YYYYMMDDHHMM


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _default_notes_dir() -> Path:
    override = os.getenv("ZETTEL_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_HOME_NAME


def _default_editor() -> Optional[str]:
    return os.getenv("EDITOR") or os.getenv("VISUAL") or None


class ZettelConfig(BaseModel):
    """Configuration for a single CLI invocation.

    Resolved once at startup and passed explicitly to every component.
    """

    # Storage configuration
    notes_dir: Path = Field(default_factory=_default_notes_dir)
    note_extension: str = Field(default=NOTE_EXTENSION)
    # When True, listing and search also descend into subdirectories
    recursive: bool = Field(default_factory=lambda: _env_flag("ZETTEL_RECURSIVE"))
    # Tag side-index database; defaults to <notes_dir>/.zettel/index.db
    index_path: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.getenv("ZETTEL_INDEX_PATH")).expanduser()
            if os.getenv("ZETTEL_INDEX_PATH")
            else None
        )
    )
    # Naming policy
    id_precision: IdPrecision = Field(
        default_factory=lambda: os.getenv("ZETTEL_ID_PRECISION", IdPrecision.SECOND.value)
    )
    slug_separator: str = Field(default="-")
    # Editor configuration
    editor: Optional[str] = Field(default_factory=_default_editor)
    fallback_editor: str = Field(
        default_factory=lambda: os.getenv("ZETTEL_FALLBACK_EDITOR", "nano")
    )
    # Logging configuration
    log_level: str = Field(
        default_factory=lambda: os.getenv("ZETTEL_LOG_LEVEL", "WARNING").upper()
    )
    log_dir: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.getenv("ZETTEL_LOG_DIR")).expanduser()
            if os.getenv("ZETTEL_LOG_DIR")
            else None
        )
    )

    # Template for freshly created notes
    new_note_template: str = Field(default="# {heading}\n\n#tagme\n\n")

    model_config = {
        "validate_assignment": True,
        "validate_default": True,
        "extra": "forbid",
    }

    @field_validator("note_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Validate that the extension looks like '.md'."""
        if not v.startswith(".") or len(v) < 2 or "/" in v or "\\" in v:
            raise ValueError("note_extension must start with '.' and name a suffix")
        return v

    @field_validator("slug_separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Validate that the slug separator is a single safe character."""
        if len(v) != 1 or v in "/\\." or v.isspace():
            raise ValueError("slug_separator must be one non-space, non-path character")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{v}'")
        return level

    def get_index_path(self) -> Path:
        """Get the absolute path of the tag side-index database."""
        if self.index_path is not None:
            return self.index_path
        return self.notes_dir / ".zettel" / "index.db"

    def resolve_editor(self) -> str:
        """Return the editor command, falling back when none is configured."""
        if self.editor:
            return self.editor
        logger.warning(
            f"EDITOR is not set; falling back to '{self.fallback_editor}'"
        )
        return self.fallback_editor


def load_config(env_file: Optional[Path] = None, **overrides) -> ZettelConfig:
    """Load configuration from the environment.

    Args:
        env_file: Optional dotenv file to read first. Defaults to
            ~/.config/zettel/.env. Existing environment variables win.
        **overrides: Field values that take precedence over the environment.

    Returns:
        A validated ZettelConfig.

    Raises:
        ConfigurationError: If the home directory cannot be determined or
            a setting fails validation.
    """
    try:
        env_path = env_file if env_file is not None else user_env_path()
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded settings from {env_path}")
        return ZettelConfig(**overrides)
    except RuntimeError as e:
        # Path.home() raises RuntimeError when HOME cannot be resolved
        raise ConfigurationError(
            f"Cannot determine home directory: {e}",
            config_key="ZETTEL_HOME",
            code=ErrorCode.CONFIG_MISSING,
        ) from e
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(
            f"Invalid configuration: {first.get('msg')}",
            config_key=key or None,
        ) from e

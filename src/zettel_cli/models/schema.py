"""Data models and naming policy for the Zettel CLI."""

import datetime
import re
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from zettel_cli.config import IdPrecision
from zettel_cli.exceptions import InvalidNoteIdError

# strftime formats per precision; both are fixed-width and sort lexicographically
_ID_FORMATS = {
    IdPrecision.SECOND: "%Y%m%d%H%M%S",
    IdPrecision.MINUTE: "%Y%m%d%H%M",
}

# Characters that separate words in a title before slugging
_WORD_BREAK_PATTERN = re.compile(r"[\s/\\:;]+")


def validate_note_id(value: str) -> str:
    """Validate that a note ID is safe to use as a filename directly.

    Rejects:
    - Empty IDs
    - Path separators (/, \\)
    - Parent directory references (..)
    - Leading dots (hidden files, '.' and '..')

    Args:
        value: The note ID to validate

    Returns:
        The validated value (unchanged)

    Raises:
        InvalidNoteIdError: If the value cannot be used as a filename
    """
    if not value:
        raise InvalidNoteIdError(value, "cannot be empty")
    if "/" in value or "\\" in value:
        raise InvalidNoteIdError(value, "cannot contain path separators")
    if ".." in value:
        raise InvalidNoteIdError(value, "cannot contain '..'")
    if value.startswith("."):
        raise InvalidNoteIdError(value, "cannot start with '.'")
    if "\x00" in value:
        raise InvalidNoteIdError(value, "cannot contain NUL bytes")
    return value


def generate_id(
    precision: Union[IdPrecision, str] = IdPrecision.SECOND,
    now: Optional[datetime.datetime] = None,
) -> str:
    """Generate a timestamp-based note ID.

    Returns:
        ``YYYYMMDDHHMMSS`` for second precision, ``YYYYMMDDHHMM`` for
        minute precision, in local time.

    No uniqueness check happens here; two calls inside the same precision
    window return the same value.
    """
    moment = now or datetime.datetime.now()
    return moment.strftime(_ID_FORMATS[IdPrecision(precision)])


def slugify(title: str, separator: str = "-") -> str:
    """Turn a title into a filename-safe fragment.

    Examples:
        "My First Note" -> "My-First-Note"
        "a/b: c" -> "a-b-c"
        "What?!" -> "What"

    Args:
        title: Human-readable title.
        separator: Character placed between words.

    Returns:
        The slug; empty when nothing in the title survives.
    """
    words = _WORD_BREAK_PATTERN.split(title.strip())
    cleaned = []
    for word in words:
        kept = "".join(c for c in word if c.isalnum() or c in "-_")
        if kept:
            cleaned.append(kept)
    return separator.join(cleaned)


def make_note_id(
    title: Optional[str] = None,
    precision: Union[IdPrecision, str] = IdPrecision.SECOND,
    separator: str = "-",
    now: Optional[datetime.datetime] = None,
) -> str:
    """Build the filename stem of a new note.

    The timestamp ID alone, or ``<timestamp><separator><slug>`` when a title
    with a non-empty slug is given.
    """
    note_id = generate_id(precision, now)
    if title:
        slug = slugify(title, separator)
        if slug:
            note_id = f"{note_id}{separator}{slug}"
    return validate_note_id(note_id)


class NoteRef(BaseModel):
    """A reference to a note file in the store."""

    id: str = Field(..., description="Filename stem, or relative path without extension in a recursive store")
    path: Path = Field(..., description="Absolute path to the note file")

    model_config = {"frozen": True}

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Reject IDs that cannot be filenames."""
        if not v:
            raise ValueError("Note ID cannot be empty")
        return v

    @property
    def filename(self) -> str:
        """Base name of the note file."""
        return self.path.name

    def __str__(self) -> str:
        return self.id


class Note(BaseModel):
    """A note loaded from the store, with its raw content."""

    ref: NoteRef
    content: str = Field(default="", description="Raw file content")

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @property
    def id(self) -> str:
        return self.ref.id

    @property
    def tags(self):
        """Canonical tags found in the content."""
        from zettel_cli.storage.markdown_parser import extract_tags

        return extract_tags(self.content)

    @property
    def links(self):
        """IDs this note links to, in order of appearance."""
        from zettel_cli.storage.markdown_parser import extract_links

        return extract_links(self.content)

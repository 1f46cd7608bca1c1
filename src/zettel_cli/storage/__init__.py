"""Storage layer for the Zettel CLI."""

from zettel_cli.storage.index_cache import TagIndexCache
from zettel_cli.storage.note_repository import NoteRepository

__all__ = [
    "NoteRepository",
    "TagIndexCache",
]

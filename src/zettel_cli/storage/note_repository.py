"""Repository for note storage and retrieval."""

import logging
import os
from pathlib import Path
from typing import List

from zettel_cli.config import ZettelConfig
from zettel_cli.exceptions import (
    ErrorCode,
    InvalidNoteIdError,
    NoteExistsError,
    NoteNotFoundError,
    StorageError,
)
from zettel_cli.models.schema import Note, NoteRef, validate_note_id

logger = logging.getLogger(__name__)


class NoteRepository:
    """Repository for note files in a single notes directory.

    The directory is the only source of truth: every call goes to the
    filesystem and nothing is cached between calls. Each note is one file
    named ``<id><extension>``.
    """

    def __init__(self, config: ZettelConfig):
        """Initialize the repository.

        Args:
            config: Resolved configuration; ``notes_dir``,
                ``note_extension`` and ``recursive`` are used.
        """
        self.notes_dir = config.notes_dir
        self.extension = config.note_extension
        self.recursive = config.recursive

        logger.debug(
            f"NoteRepository initialized: notes_dir={self.notes_dir}, "
            f"extension={self.extension}, recursive={self.recursive}"
        )

    def ensure_directory(self) -> Path:
        """Create the notes directory if it is absent.

        Raises:
            StorageError: If the directory cannot be created or is not a directory.
        """
        try:
            self.notes_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create notes directory {self.notes_dir}",
                operation="mkdir",
                path=str(self.notes_dir),
                code=ErrorCode.STORAGE_DIRECTORY_FAILED,
                original_error=e,
            ) from e
        return self.notes_dir

    def path_for(self, note_id: str) -> Path:
        """Get the file path of a note ID (the file need not exist).

        In a recursive store, notes in subdirectories are identified by
        their POSIX path relative to the notes directory, without the
        extension (``sub/20240101120000``). Every component is validated
        like a plain ID, so the path never leaves the notes directory.

        Raises:
            InvalidNoteIdError: If the ID cannot name a file in the store.
        """
        if self.recursive and "/" in note_id:
            parts = note_id.split("/")
            for part in parts:
                try:
                    validate_note_id(part)
                except InvalidNoteIdError as e:
                    raise InvalidNoteIdError(note_id, e.reason) from e
            return self.notes_dir.joinpath(*parts[:-1], f"{parts[-1]}{self.extension}")
        validate_note_id(note_id)
        return self.notes_dir / f"{note_id}{self.extension}"

    def ref_for(self, note_id: str) -> NoteRef:
        return NoteRef(id=note_id, path=self.path_for(note_id))

    def exists(self, note_id: str) -> bool:
        """Check by stat whether a note file exists."""
        return self.path_for(note_id).is_file()

    def create(self, note_id: str, content: str) -> NoteRef:
        """Create a new note file.

        The file is opened in exclusive mode, so an existing note with the
        same ID is never overwritten.

        Raises:
            NoteExistsError: If a note with this ID is already present.
            StorageError: On any other write failure.
        """
        self.ensure_directory()
        file_path = self.path_for(note_id)
        try:
            with open(file_path, "x", encoding="utf-8") as f:
                f.write(content)
        except FileExistsError as e:
            raise NoteExistsError(note_id) from e
        except OSError as e:
            raise StorageError(
                f"Failed to write note {note_id}",
                operation="create",
                path=str(file_path),
                code=ErrorCode.STORAGE_WRITE_FAILED,
                original_error=e,
            ) from e
        logger.info(f"Created note {note_id}")
        return NoteRef(id=note_id, path=file_path)

    def read(self, note_id: str) -> str:
        """Read the raw content of a note.

        Raises:
            NoteNotFoundError: If the note does not exist.
            StorageError: If the file exists but cannot be read.
        """
        file_path = self.path_for(note_id)
        if not file_path.is_file():
            raise NoteNotFoundError(note_id)
        return self._read_file(file_path)

    def get(self, note_id: str) -> Note:
        """Load a note by ID."""
        return Note(ref=self.ref_for(note_id), content=self.read(note_id))

    def load(self, ref: NoteRef) -> Note:
        """Load a note from a reference returned by ``list_notes``."""
        return Note(ref=ref, content=self._read_file(ref.path))

    def append(self, note_id: str, text: str) -> None:
        """Append text to an existing note with a single append-mode write.

        The file is never read and rewritten, so a failure leaves the
        previous content intact.

        Raises:
            NoteNotFoundError: If the note does not exist.
            StorageError: If the write fails.
        """
        file_path = self.path_for(note_id)
        if not file_path.is_file():
            raise NoteNotFoundError(note_id)
        try:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise StorageError(
                f"Failed to append to note {note_id}",
                operation="append",
                path=str(file_path),
                code=ErrorCode.STORAGE_WRITE_FAILED,
                original_error=e,
            ) from e

    def list_notes(self) -> List[NoteRef]:
        """List every note file in the store.

        Only files with the configured extension count. Subdirectories are
        searched when the repository is recursive; hidden directories are
        always skipped, and notes below the top level get IDs such as
        ``sub/nested`` (see :meth:`path_for`). Results are sorted by path.

        Raises:
            StorageError: If the directory (or a subdirectory) cannot be read.
        """
        if not self.notes_dir.is_dir():
            return []

        refs: List[NoteRef] = []
        try:
            if self.recursive:
                for dirpath, dirnames, filenames in os.walk(
                    self.notes_dir, onerror=self._raise_walk_error
                ):
                    dirnames[:] = [d for d in dirnames if not d.startswith(".")]
                    for name in filenames:
                        refs.extend(self._ref_from_name(Path(dirpath), name))
            else:
                with os.scandir(self.notes_dir) as entries:
                    for entry in entries:
                        if entry.is_file():
                            refs.extend(self._ref_from_name(self.notes_dir, entry.name))
        except OSError as e:
            raise StorageError(
                f"Cannot list notes directory {self.notes_dir}",
                operation="list",
                path=str(getattr(e, "filename", None) or self.notes_dir),
                original_error=e,
            ) from e

        refs.sort(key=lambda ref: str(ref.path))
        return refs

    def _ref_from_name(self, directory: Path, name: str) -> List[NoteRef]:
        if name.startswith(".") or not name.endswith(self.extension):
            return []
        stem = name[: -len(self.extension)]
        if not stem:
            return []
        # Same identity path_for resolves: relative POSIX path without extension
        note_id = (directory.relative_to(self.notes_dir) / stem).as_posix()
        return [NoteRef(id=note_id, path=directory / name)]

    @staticmethod
    def _raise_walk_error(error: OSError) -> None:
        raise error

    @staticmethod
    def _read_file(file_path: Path) -> str:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(
                f"Failed to read note {file_path.name}",
                operation="read",
                path=str(file_path),
                original_error=e,
            ) from e

"""Custom exceptions for the Zettel CLI.

Provides a structured exception hierarchy with error codes and
machine-readable error information. Every command lets these propagate
to the top-level entry point, which reports them and exits nonzero.
"""
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Note errors (1xxx)
    NOTE_NOT_FOUND = 1001
    NOTE_ALREADY_EXISTS = 1002
    NOTE_ID_INVALID = 1003

    # Link errors (2xxx)
    LINK_SOURCE_NOT_FOUND = 2001
    LINK_TARGET_NOT_FOUND = 2002

    # Tag errors (3xxx)
    TAG_INVALID = 3001

    # Storage errors (4xxx)
    STORAGE_READ_FAILED = 4001
    STORAGE_WRITE_FAILED = 4002
    STORAGE_DIRECTORY_FAILED = 4003
    INDEX_CACHE_FAILED = 4004

    # Search errors (5xxx)
    SEARCH_NO_MATCHES = 5001
    SEARCH_INVALID_QUERY = 5002
    SELECTION_INVALID = 5003

    # Configuration errors (6xxx)
    CONFIG_INVALID = 6001
    CONFIG_MISSING = 6002

    # Usage errors (7xxx)
    USAGE_INVALID = 7001

    # Editor errors (8xxx)
    EDITOR_NOT_FOUND = 8001
    EDITOR_FAILED = 8002


class ZettelError(Exception):
    """Base exception for all Zettel CLI errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.USAGE_INVALID,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class UsageError(ZettelError):
    """Raised when a command is invoked with missing or invalid arguments."""

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        code: ErrorCode = ErrorCode.USAGE_INVALID
    ):
        details = {}
        if argument:
            details["argument"] = argument
        super().__init__(message, code=code, details=details)
        self.argument = argument


class NoteNotFoundError(ZettelError):
    """Raised when a note cannot be found.

    ``role`` names which side of an operation was missing (for example
    ``"source"`` or ``"target"`` when linking).
    """

    def __init__(
        self,
        note_id: str,
        message: Optional[str] = None,
        role: Optional[str] = None,
        code: ErrorCode = ErrorCode.NOTE_NOT_FOUND
    ):
        details = {"note_id": note_id}
        if role:
            details["role"] = role
        if message is None:
            prefix = f"{role.capitalize()} note" if role else "Note"
            message = f"{prefix} does not exist: {note_id}"
        super().__init__(message, code=code, details=details)
        self.note_id = note_id
        self.role = role


class NoteExistsError(ZettelError):
    """Raised when creating a note whose file is already present."""

    def __init__(self, note_id: str):
        super().__init__(
            f"Note already exists: {note_id}",
            code=ErrorCode.NOTE_ALREADY_EXISTS,
            details={"note_id": note_id}
        )
        self.note_id = note_id


class InvalidNoteIdError(ZettelError):
    """Raised when a note ID cannot be used as a filename."""

    def __init__(self, note_id: str, reason: str):
        super().__init__(
            f"Invalid note ID '{note_id}': {reason}",
            code=ErrorCode.NOTE_ID_INVALID,
            details={"note_id": note_id[:100]}
        )
        self.note_id = note_id
        self.reason = reason


class NoMatchesError(ZettelError):
    """Raised when an open-by-query finds no matching notes."""

    def __init__(self, query: str):
        super().__init__(
            "No matching notes found",
            code=ErrorCode.SEARCH_NO_MATCHES,
            details={"query": query[:100]}  # Truncate for safety
        )
        self.query = query


class InvalidSelectionError(ZettelError):
    """Raised when an interactive choice is not a valid candidate number."""

    def __init__(self, choice: Any, candidates: int):
        super().__init__(
            f"Invalid choice: expected a number between 1 and {candidates}",
            code=ErrorCode.SELECTION_INVALID,
            details={"choice": str(choice)[:20], "candidates": candidates}
        )
        self.choice = choice
        self.candidates = candidates


class StorageError(ZettelError):
    """Raised for filesystem errors in the notes directory."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        code: ErrorCode = ErrorCode.STORAGE_READ_FAILED,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if path:
            details["path"] = path
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.path = path
        self.original_error = original_error


class IndexCacheError(StorageError):
    """Raised when the tag side-index database cannot be read or rebuilt.

    The cache is always rebuildable from the note files, so this never
    indicates lost data.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message,
            operation="index_cache",
            path=path,
            code=ErrorCode.INDEX_CACHE_FAILED,
            original_error=original_error
        )


class EditorError(ZettelError):
    """Raised when the external editor cannot be started or fails."""

    def __init__(
        self,
        message: str,
        editor: Optional[str] = None,
        returncode: Optional[int] = None,
        code: ErrorCode = ErrorCode.EDITOR_FAILED
    ):
        details: Dict[str, Any] = {}
        if editor:
            details["editor"] = editor
        if returncode is not None:
            details["returncode"] = returncode
        super().__init__(message, code=code, details=details)
        self.editor = editor
        self.returncode = returncode


class ConfigurationError(ZettelError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        code: ErrorCode = ErrorCode.CONFIG_INVALID
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, code=code, details=details)
        self.config_key = config_key


class TagError(ZettelError):
    """Raised for malformed tag filters."""

    def __init__(self, message: str, tags: Optional[List[str]] = None):
        details = {}
        if tags:
            details["tags"] = ",".join(tags)[:100]
        super().__init__(message, code=ErrorCode.TAG_INVALID, details=details)
        self.tags = list(tags) if tags else []

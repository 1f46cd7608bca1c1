"""Tests for the exception hierarchy."""
from zettel_cli.exceptions import (
    ErrorCode,
    IndexCacheError,
    NoteNotFoundError,
    StorageError,
    UsageError,
    ZettelError,
)


class TestZettelError:
    def test_to_dict(self):
        error = NoteNotFoundError("abc")
        assert error.to_dict() == {
            "error": "NoteNotFoundError",
            "code": 1001,
            "code_name": "NOTE_NOT_FOUND",
            "message": "Note does not exist: abc",
            "details": {"note_id": "abc"},
        }

    def test_str_includes_code_and_details(self):
        error = UsageError("Missing title", argument="title")
        assert str(error) == "[USAGE_INVALID] Missing title (argument=title)"

    def test_str_without_details(self):
        assert str(ZettelError("plain")) == "[USAGE_INVALID] plain"

    def test_role_in_message(self):
        error = NoteNotFoundError("x", role="source", code=ErrorCode.LINK_SOURCE_NOT_FOUND)
        assert error.message == "Source note does not exist: x"
        assert error.details == {"note_id": "x", "role": "source"}

    def test_index_cache_error_is_storage_error(self):
        original = OSError("disk full")
        error = IndexCacheError("Cannot open tag index", path="/tmp/x.db", original_error=original)
        assert isinstance(error, StorageError)
        assert error.code == ErrorCode.INDEX_CACHE_FAILED
        assert error.details["original_error"] == "disk full"
        assert error.original_error is original

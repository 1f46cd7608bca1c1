"""Common test fixtures for the Zettel CLI."""

import datetime
import logging
from pathlib import Path

import pytest

from tests.fakes import FakeEditor
from zettel_cli.config import ZettelConfig
from zettel_cli.observability import ROOT_LOGGER_NAME
from zettel_cli.services.search_service import SearchService
from zettel_cli.services.zettel_service import ZettelService
from zettel_cli.storage.note_repository import NoteRepository


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the user's environment out of every test."""
    for name in (
        "ZETTEL_HOME",
        "ZETTEL_RECURSIVE",
        "ZETTEL_INDEX_PATH",
        "ZETTEL_ID_PRECISION",
        "ZETTEL_FALLBACK_EDITOR",
        "ZETTEL_LOG_LEVEL",
        "ZETTEL_LOG_DIR",
        "EDITOR",
        "VISUAL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("zettel_cli.config._USER_ENV", tmp_path / "no-such.env")


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach handlers installed by configure_logging during a test."""
    yield
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.NOTSET)


@pytest.fixture
def notes_dir(tmp_path):
    """Create a temporary notes directory."""
    path = tmp_path / "zettelkasten"
    path.mkdir()
    return path


@pytest.fixture
def test_config(notes_dir):
    """Explicit configuration pointing at the temporary directory."""
    return ZettelConfig(notes_dir=notes_dir, editor="fake-editor")


@pytest.fixture
def note_repository(test_config):
    """Create a test note repository."""
    return NoteRepository(test_config)


@pytest.fixture
def fake_editor():
    return FakeEditor()


@pytest.fixture
def search_service(note_repository):
    return SearchService(note_repository)


@pytest.fixture
def zettel_service(test_config, note_repository, fake_editor):
    """Create a test ZettelService with a recording editor."""
    service = ZettelService(test_config, repository=note_repository, editor=fake_editor)
    yield service
    service.close()


@pytest.fixture
def write_note(notes_dir):
    """Write a note file directly, bypassing the repository."""

    def _write(note_id: str, content: str) -> Path:
        path = notes_dir / f"{note_id}.md"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fixed_now():
    return datetime.datetime(2024, 3, 5, 14, 7, 9)

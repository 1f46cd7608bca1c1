"""Fake collaborators for testing.

FakeEditor stands in for the external editor process: it records every
path it was asked to open and can optionally write to the file (as a user
typing would) or fail like a crashed editor.
"""
from pathlib import Path
from typing import Callable, List, Optional

from zettel_cli.editor import Editor
from zettel_cli.exceptions import EditorError


class FakeEditor(Editor):
    """Editor that never spawns a process."""

    def __init__(
        self,
        on_open: Optional[Callable[[Path], None]] = None,
        fail_with: Optional[int] = None,
    ) -> None:
        super().__init__("fake-editor")
        self.opened: List[Path] = []
        self._on_open = on_open
        self._fail_with = fail_with

    def open(self, path: Path) -> None:
        self.opened.append(path)
        if self._fail_with is not None:
            raise EditorError(
                f"Editor 'fake-editor' exited with status {self._fail_with}",
                editor="fake-editor",
                returncode=self._fail_with,
            )
        if self._on_open is not None:
            self._on_open(path)

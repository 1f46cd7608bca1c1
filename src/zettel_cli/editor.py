"""Launching the user's interactive text editor on a note file."""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import List

from zettel_cli.exceptions import EditorError, ErrorCode

logger = logging.getLogger(__name__)


class Editor:
    """Runs an external editor as a foreground subprocess.

    The child inherits this process's stdin, stdout and stderr and the call
    blocks until the editor exits. There is no timeout.
    """

    def __init__(self, command: str):
        """Initialize the editor.

        Args:
            command: Editor command line, e.g. ``"vim"`` or ``"code --wait"``.
                It is split shell-style and the note path is appended.
        """
        self.command = command

    def argv(self, path: Path) -> List[str]:
        """Build the argument vector used to edit ``path``."""
        try:
            parts = shlex.split(self.command)
        except ValueError as e:
            raise EditorError(
                f"Cannot parse editor command '{self.command}': {e}",
                editor=self.command,
                code=ErrorCode.EDITOR_NOT_FOUND,
            ) from e
        if not parts:
            raise EditorError(
                "Editor command is empty",
                editor=self.command,
                code=ErrorCode.EDITOR_NOT_FOUND,
            )
        return parts + [str(path)]

    def open(self, path: Path) -> None:
        """Open ``path`` in the editor and wait for it to exit.

        Raises:
            EditorError: If the editor cannot be started or exits nonzero.
        """
        cmd = self.argv(path)
        logger.debug(f"Launching editor: {cmd}")
        try:
            subprocess.run(cmd, check=True)
        except FileNotFoundError as e:
            raise EditorError(
                f"Editor '{cmd[0]}' not found",
                editor=cmd[0],
                code=ErrorCode.EDITOR_NOT_FOUND,
            ) from e
        except subprocess.CalledProcessError as e:
            raise EditorError(
                f"Editor '{cmd[0]}' exited with status {e.returncode}",
                editor=cmd[0],
                returncode=e.returncode,
            ) from e
        except OSError as e:
            raise EditorError(
                f"Cannot start editor '{cmd[0]}': {e}",
                editor=cmd[0],
            ) from e

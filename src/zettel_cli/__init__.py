"""
Zettel CLI - a command-line Zettelkasten for plain markdown notes.
This package implements a small note-taking tool following the Zettelkasten
method: timestamped notes that reference each other by ID, hashtag tags,
and generated index notes that collect everything sharing a tag.

All state lives in the notes directory and is re-read on every invocation.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("zettel-cli")
except PackageNotFoundError:
    __version__ = "0.1.0"

"""Service layer for Zettelkasten operations.

Each public method implements one CLI command against the note store.
Nothing is kept between calls; every operation re-reads the directory.
"""

import datetime
import logging
from typing import List, Optional, Sequence, Set, Union

from zettel_cli.config import ZettelConfig
from zettel_cli.editor import Editor
from zettel_cli.exceptions import (
    ErrorCode,
    NoMatchesError,
    NoteNotFoundError,
    TagError,
    UsageError,
)
from zettel_cli.models.schema import NoteRef, make_note_id
from zettel_cli.observability import traced
from zettel_cli.services.search_service import SearchService, SelectionRequest
from zettel_cli.storage.index_cache import TagIndexCache
from zettel_cli.storage.markdown_parser import (
    content_has_any_tag,
    normalize_tag_filter,
    render_index_note,
    render_link_append,
    render_new_note,
)
from zettel_cli.storage.note_repository import NoteRepository

logger = logging.getLogger(__name__)


class ZettelService:
    """Service for creating, opening, linking and indexing notes."""

    def __init__(
        self,
        config: ZettelConfig,
        repository: Optional[NoteRepository] = None,
        editor: Optional[Editor] = None,
        search_service: Optional[SearchService] = None,
        tag_cache: Optional[TagIndexCache] = None,
    ):
        """Initialize the service.

        Args:
            config: Resolved configuration for this invocation.
            repository: Note store; built from ``config`` when omitted.
            editor: Editor used to open notes; built from ``config`` when
                omitted (falling back to ``config.fallback_editor``).
            search_service: Search over ``repository``.
            tag_cache: Tag side-index; created lazily on first use.
        """
        self.config = config
        self.repository = repository or NoteRepository(config)
        self._editor = editor
        self.search_service = search_service or SearchService(self.repository)
        self._tag_cache = tag_cache

    @property
    def editor(self) -> Editor:
        if self._editor is None:
            self._editor = Editor(self.config.resolve_editor())
        return self._editor

    @property
    def tag_cache(self) -> TagIndexCache:
        if self._tag_cache is None:
            self._tag_cache = TagIndexCache(self.repository, self.config.get_index_path())
        return self._tag_cache

    def _new_note_id(self, title: Optional[str], now: Optional[datetime.datetime]) -> str:
        return make_note_id(
            title,
            precision=self.config.id_precision,
            separator=self.config.slug_separator,
            now=now,
        )

    @traced("new_note")
    def new_note(
        self,
        title: Optional[str] = None,
        edit: bool = True,
        now: Optional[datetime.datetime] = None,
    ) -> NoteRef:
        """Create a note seeded with a heading and a placeholder tag.

        Args:
            title: Optional title; used for the heading and the ID slug.
                Without it, the heading is the ID itself.
            edit: Open the new note in the editor afterwards.
            now: Creation time (defaults to the current local time).

        Returns:
            Reference to the created note.
        """
        title = title.strip() if title else None
        note_id = self._new_note_id(title, now)
        content = render_new_note(title or note_id, self.config.new_note_template)
        ref = self.repository.create(note_id, content)
        if edit:
            self.editor.open(ref.path)
        return ref

    @traced("edit_note")
    def edit_note(self, note_id: str) -> NoteRef:
        """Open an existing note by ID.

        Raises:
            NoteNotFoundError: If the note does not exist.
        """
        if not self.repository.exists(note_id):
            raise NoteNotFoundError(note_id)
        ref = self.repository.ref_for(note_id)
        self.editor.open(ref.path)
        return ref

    @traced("open_notes")
    def open_notes(
        self, query: str, choice: Optional[Union[int, str]] = None
    ) -> Union[NoteRef, SelectionRequest]:
        """Open the note matching ``query`` by file name or content.

        Zero matches is an error. A single match is opened directly. With
        several matches and no ``choice``, a SelectionRequest is returned
        for the caller to resolve with :meth:`choose`; with a ``choice``
        it is resolved immediately.

        Raises:
            NoMatchesError: If nothing matches.
            InvalidSelectionError: If ``choice`` is out of range.
        """
        request = self.search_service.candidates(query)
        if not request.candidates:
            raise NoMatchesError(query)
        if len(request.candidates) == 1:
            ref = request.candidates[0]
        elif choice is None:
            return request
        else:
            ref = request.choose(choice)
        self.editor.open(ref.path)
        return ref

    def choose(self, request: SelectionRequest, choice: Union[int, str]) -> NoteRef:
        """Open the candidate picked from an earlier SelectionRequest."""
        ref = request.choose(choice)
        self.editor.open(ref.path)
        return ref

    @traced("list_notes")
    def list_notes(self) -> List[NoteRef]:
        """List every note in the store."""
        return self.repository.list_notes()

    def search(self, query: str) -> List[NoteRef]:
        """Find notes by literal substring in content or file name."""
        return self.search_service.search(query)

    @traced("link_notes")
    def link_notes(self, source_id: str, target_id: str) -> None:
        """Append a ``[[target_id]]`` reference to the source note.

        Both notes must exist. Nothing is written when either is missing.
        No back-link is created and duplicates are not detected.

        Raises:
            NoteNotFoundError: If the source or target note is missing.
        """
        if not self.repository.exists(source_id):
            raise NoteNotFoundError(
                source_id, role="source", code=ErrorCode.LINK_SOURCE_NOT_FOUND
            )
        if not self.repository.exists(target_id):
            raise NoteNotFoundError(
                target_id, role="target", code=ErrorCode.LINK_TARGET_NOT_FOUND
            )
        self.repository.append(source_id, render_link_append(target_id))
        logger.info(f"Linked {source_id} -> {target_id}")

    @traced("build_index")
    def build_index(
        self,
        title: str,
        tags: Sequence[str],
        edit: bool = True,
        now: Optional[datetime.datetime] = None,
    ) -> NoteRef:
        """Create an index note linking every note tagged with any of ``tags``.

        A note qualifies when its content contains ``#<tag>`` for at least
        one filter tag. Notes are scanned before the index note is written,
        so the index never lists itself.

        Raises:
            UsageError: If the title or the tag filter is empty.
            TagError: If a filter tag is blank after stripping '#'.
        """
        title = title.strip() if title else ""
        if not title or not tags:
            raise UsageError(
                "Title and at least one tag are required",
                argument="title" if not title else "tags",
            )
        filter_tags = [normalize_tag_filter(tag) for tag in tags]
        if not all(filter_tags):
            raise TagError("Tags cannot be empty", tags=list(tags))

        matched = [
            ref.id
            for ref in self.repository.list_notes()
            if content_has_any_tag(self.repository.load(ref).content, filter_tags)
        ]
        logger.info(f"Index '{title}' matched {len(matched)} notes")

        note_id = self._new_note_id(title, now)
        ref = self.repository.create(note_id, render_index_note(title, matched))
        if edit:
            self.editor.open(ref.path)
        return ref

    @traced("list_tags")
    def list_tags(self) -> Set[str]:
        """Union of canonical tags across every note, by full scan."""
        tags: Set[str] = set()
        for ref in self.repository.list_notes():
            tags |= self.repository.load(ref).tags
        return tags

    @traced("list_cached_tags")
    def list_cached_tags(self) -> Set[str]:
        """Tags from the side-index cache (rebuilt first when stale)."""
        return self.tag_cache.get_all_tags()

    @traced("find_tagged")
    def find_tagged(self, tag: str) -> List[str]:
        """IDs of notes carrying ``tag``, from the side-index cache."""
        if not normalize_tag_filter(tag):
            raise TagError("Tag cannot be empty", tags=[tag])
        return self.tag_cache.find_note_ids_by_tag(tag)

    @traced("reindex")
    def reindex(self) -> int:
        """Rebuild the tag side-index cache from the note files."""
        self.repository.ensure_directory()
        return self.tag_cache.rebuild()

    def close(self) -> None:
        if self._tag_cache is not None:
            self._tag_cache.close()

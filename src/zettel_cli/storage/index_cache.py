"""Rebuildable tag side-index backed by SQLite.

Scanning the note files stays the source of truth. This cache stores the
tags found at the last rebuild together with each file's mtime, and is
rebuilt whenever the set of files or their modification times change.
"""
import logging
from pathlib import Path
from typing import Dict, List, Set

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from zettel_cli.exceptions import IndexCacheError
from zettel_cli.models.db_models import DBNote, DBTag, get_session_factory, init_db, note_tags
from zettel_cli.storage.markdown_parser import normalize_tag_filter
from zettel_cli.storage.note_repository import NoteRepository

logger = logging.getLogger(__name__)


class TagIndexCache:
    """Cache of tag -> notes, persisted at ``db_path``."""

    def __init__(self, repository: NoteRepository, db_path: Path):
        self.repository = repository
        self.db_path = db_path
        self._engine = None
        self._session_factory = None

    def _sessions(self):
        if self._session_factory is None:
            try:
                self._engine = init_db(self.db_path)
            except (SQLAlchemyError, OSError) as e:
                raise IndexCacheError(
                    "Cannot open tag index",
                    path=str(self.db_path),
                    original_error=e,
                ) from e
            self._session_factory = get_session_factory(self._engine)
        return self._session_factory

    def close(self) -> None:
        """Release the database engine."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def _file_state(self) -> Dict[str, float]:
        state = {}
        for ref in self.repository.list_notes():
            try:
                state[str(ref.path)] = ref.path.stat().st_mtime
            except OSError as e:
                raise IndexCacheError(
                    f"Cannot stat note {ref.id}",
                    path=str(ref.path),
                    original_error=e,
                ) from e
        return state

    def is_stale(self) -> bool:
        """True when the notes on disk differ from the last rebuild."""
        files = self._file_state()
        try:
            with self._sessions()() as session:
                rows = session.execute(select(DBNote.path, DBNote.mtime)).all()
        except SQLAlchemyError as e:
            raise IndexCacheError(
                "Cannot read tag index", path=str(self.db_path), original_error=e
            ) from e
        return {path: mtime for path, mtime in rows} != files

    def rebuild(self) -> int:
        """Rebuild the cache from the note files in one transaction.

        Returns:
            Number of notes indexed.
        """
        refs = self.repository.list_notes()
        try:
            with self._sessions()() as session:
                session.execute(note_tags.delete())
                session.execute(delete(DBNote))
                session.execute(delete(DBTag))

                tags_by_name: Dict[str, DBTag] = {}
                for ref in refs:
                    note = self.repository.load(ref)
                    db_note = DBNote(
                        path=str(ref.path), id=ref.id, mtime=ref.path.stat().st_mtime
                    )
                    for name in sorted(note.tags):
                        if name not in tags_by_name:
                            tags_by_name[name] = DBTag(name=name)
                        db_note.tags.append(tags_by_name[name])
                    session.add(db_note)

                session.commit()
        except SQLAlchemyError as e:
            raise IndexCacheError(
                "Failed to rebuild tag index", path=str(self.db_path), original_error=e
            ) from e
        except OSError as e:
            raise IndexCacheError(
                "Failed to stat notes while rebuilding tag index",
                path=str(getattr(e, "filename", None) or self.db_path),
                original_error=e,
            ) from e

        logger.info(f"Tag index rebuilt: {len(refs)} notes, {len(tags_by_name)} tags")
        return len(refs)

    def _refresh_if_stale(self) -> None:
        if self.is_stale():
            logger.info("Tag index is stale; rebuilding")
            self.rebuild()

    def get_all_tags(self) -> Set[str]:
        """Return every tag in the cache, rebuilding it first if stale."""
        self._refresh_if_stale()
        try:
            with self._sessions()() as session:
                return set(session.scalars(select(DBTag.name)).all())
        except SQLAlchemyError as e:
            raise IndexCacheError(
                "Cannot read tag index", path=str(self.db_path), original_error=e
            ) from e

    def find_note_ids_by_tag(self, tag: str) -> List[str]:
        """Return IDs of notes carrying ``tag`` (with or without '#'), by path."""
        name = f"#{normalize_tag_filter(tag)}"
        self._refresh_if_stale()
        try:
            with self._sessions()() as session:
                rows = session.execute(
                    select(DBNote.id)
                    .join(note_tags, note_tags.c.note_path == DBNote.path)
                    .join(DBTag, DBTag.id == note_tags.c.tag_id)
                    .where(DBTag.name == name)
                    .order_by(DBNote.path)
                ).all()
        except SQLAlchemyError as e:
            raise IndexCacheError(
                "Cannot read tag index", path=str(self.db_path), original_error=e
            ) from e
        return [row[0] for row in rows]

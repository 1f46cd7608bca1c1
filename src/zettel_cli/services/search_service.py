"""Service for searching notes by literal substring."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from zettel_cli.exceptions import ErrorCode, InvalidSelectionError, UsageError
from zettel_cli.models.schema import NoteRef
from zettel_cli.observability import traced
from zettel_cli.storage.note_repository import NoteRepository

logger = logging.getLogger(__name__)


@dataclass
class SelectionRequest:
    """Several notes matched a query; the caller must pick one.

    Attributes:
        query: The query that produced the candidates.
        candidates: Matching notes in enumeration order. Choices are 1-based.
    """

    query: str
    candidates: List[NoteRef] = field(default_factory=list)

    def choose(self, choice) -> NoteRef:
        """Resolve a 1-based choice (int or numeric string) to a candidate.

        Raises:
            InvalidSelectionError: If the choice is not a number in range.
        """
        try:
            index = int(str(choice).strip())
        except (TypeError, ValueError) as e:
            raise InvalidSelectionError(choice, len(self.candidates)) from e
        if index < 1 or index > len(self.candidates):
            raise InvalidSelectionError(choice, len(self.candidates))
        return self.candidates[index - 1]

    def render(self) -> str:
        """Numbered list of candidate file names, one per line."""
        return "\n".join(
            f"{i}. {ref.filename}" for i, ref in enumerate(self.candidates, 1)
        )


class SearchService:
    """Linear scan over every note in the store.

    Matching is a case-sensitive literal substring test with no ranking.
    The scan fails fast: an unreadable note aborts the search with a
    StorageError rather than being skipped.
    """

    def __init__(self, repository: NoteRepository):
        self.repository = repository

    @traced("search")
    def search(self, query: str, include_filenames: bool = True) -> List[NoteRef]:
        """Find notes whose content (or file name) contains ``query``.

        Args:
            query: Literal text to look for.
            include_filenames: Also match against the note's file name.

        Returns:
            Matching notes in enumeration order (sorted by path).

        Raises:
            UsageError: If the query is empty.
        """
        if not query:
            raise UsageError(
                "Please provide a search query",
                argument="query",
                code=ErrorCode.SEARCH_INVALID_QUERY,
            )

        matches: List[NoteRef] = []
        for ref in self.repository.list_notes():
            if include_filenames and query in ref.filename:
                matches.append(ref)
                continue
            if query in self.repository.load(ref).content:
                matches.append(ref)

        logger.debug(f"Query {query!r} matched {len(matches)} notes")
        return matches

    def candidates(self, query: str) -> SelectionRequest:
        """Search by file name and content, wrapped for disambiguation."""
        return SelectionRequest(query=query, candidates=self.search(query))

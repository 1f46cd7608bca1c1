"""Parsing and rendering of the plain-text note format.

Notes carry no front matter: a heading line, free text, inline ``#tag``
tokens and inline ``[[note-id]]`` links. Everything here is a pure function
of strings so formatting can be tested without touching the filesystem.
"""
import re
from typing import Iterable, List, Set

# A canonical tag is '#' followed by ASCII letters and digits only
TAG_PATTERN = re.compile(r"#[A-Za-z0-9]+")

LINK_PATTERN = re.compile(r"\[\[([^\[\]\n]+)\]\]")


def extract_tags(content: str) -> Set[str]:
    """Extract canonical tags from note content.

    Content is split on whitespace and only tokens that are entirely a tag
    are kept, so ``#world!`` and ``#café`` are rejected.

    Example:
        >>> sorted(extract_tags("#hello #world! #123 plain"))
        ['#123', '#hello']
    """
    return {word for word in content.split() if TAG_PATTERN.fullmatch(word)}


def extract_links(content: str) -> List[str]:
    """Return link targets in order of appearance (duplicates kept)."""
    return [match.strip() for match in LINK_PATTERN.findall(content)]


def normalize_tag_filter(tag: str) -> str:
    """Strip surrounding whitespace and one leading '#' from a filter tag."""
    tag = tag.strip()
    if tag.startswith("#"):
        tag = tag[1:]
    return tag


def content_has_any_tag(content: str, tags: Iterable[str]) -> bool:
    """True when ``#<tag>`` occurs as a literal substring for any tag.

    Substring test, not a token test: ``#project`` also matches
    ``#projects``.
    """
    return any(f"#{tag}" in content for tag in tags)


def render_link_token(target_id: str) -> str:
    """Render the inline reference to another note."""
    return f"[[{target_id}]]"


def render_link_append(target_id: str) -> str:
    """Render the text appended to a note by the link operation."""
    return f"\n{render_link_token(target_id)}\n"


def render_new_note(heading: str, template: str = "# {heading}\n\n#tagme\n\n") -> str:
    """Render the seed content of a freshly created note."""
    return template.format(heading=heading)


def render_index_note(title: str, target_ids: Iterable[str]) -> str:
    """Render an index note: a heading followed by one link per line."""
    lines = [f"- {render_link_token(target_id)}" for target_id in target_ids]
    return f"# {title}\n\n" + "\n".join(lines) + "\n"

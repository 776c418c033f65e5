"""
Heading-path resolution and block lookup.

A heading path is a list of heading lines, outermost first, e.g.
``["# Guide", "## Install"]``. The first element must identify exactly one
section on its own. Each later element is looked up by scanning forward from
the current section until a heading at or above the first element's level
closes the scope.

Limitation: the first element is never disambiguated by the elements after
it. ``["## Child"]`` under two different parents is ambiguous, and so is
``["## Dup", "### Child"]`` when ``## Dup`` occurs twice, even if only one of
them has a ``### Child``.
"""
from __future__ import annotations
from typing import List, Sequence
import logging

from mdpatch.errors import (
    AmbiguousHeadingError,
    BlockIndexOutOfRangeError,
    HeadingNotFoundError,
    InvalidHeadingPathError,
    SubheadingNotFoundError,
)
from mdpatch.ir import Block, Section

logger = logging.getLogger(__name__)


def parse_heading_path(raw: str) -> List[str]:
    """
    Split ``"# Title ## Subtitle"`` into ``["# Title", "## Subtitle"]``.

    A word made only of ``#`` characters starts a new heading; words before
    the first marker are ignored.
    """
    headings: List[str] = []
    current: List[str] = []
    for word in raw.split():
        if word.strip("#") == "":
            if current:
                headings.append(" ".join(current))
            current = [word]
        elif current:
            current.append(word)
    if current:
        headings.append(" ".join(current))

    if not headings:
        raise InvalidHeadingPathError(
            f"Invalid heading path format: '{raw}'. Expected: '# Title ## Subtitle ...'",
            heading=raw,
        )
    return headings


def _matches(section: Section, heading: str) -> bool:
    return section.heading_text.strip() == heading.strip()


def find_section(sections: Sequence[Section], heading_path: Sequence[str]) -> Section:
    if not heading_path:
        raise InvalidHeadingPathError("Heading path cannot be empty")

    top = heading_path[0].strip()
    candidates = [i for i, s in enumerate(sections) if _matches(s, top)]
    if not candidates:
        raise HeadingNotFoundError(top)
    if len(candidates) > 1:
        raise AmbiguousHeadingError(top, len(candidates))

    position = candidates[0]
    scope_level = sections[position].heading_level
    for heading in heading_path[1:]:
        target = heading.strip()
        parent = sections[position].heading_text
        found = None
        for i in range(position + 1, len(sections)):
            if sections[i].heading_level <= scope_level:
                break
            if _matches(sections[i], target):
                found = i
                break
        if found is None:
            raise SubheadingNotFoundError(target, parent)
        position = found

    section = sections[position]
    logger.debug(f"Resolved {list(heading_path)} to '{section.heading_text}' at offset {section.heading_start}")
    return section


def get_block(section: Section, index: int) -> Block:
    if index < 0 or index >= len(section.blocks):
        raise BlockIndexOutOfRangeError(index, len(section.blocks))
    return section.blocks[index]


def resolve_block(sections: Sequence[Section], heading_path: Sequence[str], block_index: int) -> Block:
    return get_block(find_section(sections, heading_path), block_index)

"""
Section Builder

Partitions a Markdown document into heading-delimited sections. Each section
owns the blocks between its heading and the next heading of any level; text
before the first heading belongs to no section.
"""
from __future__ import annotations
from typing import List, Optional
import logging

from mdpatch.blocks import HEADING_PATTERN, classify_block, split_lines
from mdpatch.ir import Section, snapshot_digest

logger = logging.getLogger(__name__)


def parse_sections(text: str) -> List[Section]:
    sections: List[Section] = []
    lines = split_lines(text)
    snapshot = snapshot_digest(text)

    current: Optional[Section] = None
    offset = 0
    i = 0
    while i < len(lines):
        line = lines[i]
        m = HEADING_PATTERN.match(line)
        if m:
            if current is not None:
                sections.append(current)
            hashes = m.group(1)
            current = Section(
                heading_text=f"{hashes} {m.group(2).rstrip()}",
                heading_level=len(hashes),
                heading_start=offset,
                heading_end=offset + len(line),
                heading_line=line,
                snapshot=snapshot,
            )
        elif current is not None:
            step = classify_block(lines, i, offset, snapshot)
            if step is not None:
                block, next_i = step
                current.blocks.append(block)
                for j in range(i, next_i):
                    offset += len(lines[j]) + 1
                i = next_i
                continue

        offset += len(line) + 1
        i += 1

    if current is not None:
        sections.append(current)

    logger.debug(
        f"Parsed {len(sections)} sections, {sum(len(s.blocks) for s in sections)} blocks "
        f"(snapshot {snapshot})"
    )
    return sections

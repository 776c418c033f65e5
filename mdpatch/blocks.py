"""
Block Classifier

Recognizes the next structural unit in a Markdown line sequence and reports
its exact span. The rules are heuristics, not a CommonMark parser: the first
matching rule wins and anything unrecognized becomes a paragraph.
"""
from __future__ import annotations
from typing import List, Optional, Tuple
import re
from mdpatch.ir import Block, BlockType

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
LIST_ITEM_PATTERN = re.compile(r"^([-*+]|\d+\.)\s")
THEMATIC_BREAK_PATTERN = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})\s*$")
FENCE_PATTERN = re.compile(r"^(`{3,})(.*)$")

_OPEN_TAG = re.compile(r"<([A-Za-z][\w-]*)\b[^>]*?(/?)>")
_CLOSE_TAG = re.compile(r"</[A-Za-z][\w-]*\s*>")

# Tags that never get a closing tag
VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}

ParseStep = Optional[Tuple[Block, int]]


def split_lines(text: str) -> List[str]:
    """Split on newlines; a trailing newline does not add an empty line."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _emit(
    lines: List[str],
    start: int,
    next_index: int,
    start_offset: int,
    block_type: BlockType,
    snapshot: str,
    **variant,
) -> Tuple[Block, int]:
    kept = lines[start:next_index]
    # trailing blank lines are consumed but stay outside the block span
    while len(kept) > 1 and not kept[-1].strip():
        kept = kept[:-1]
    content = "\n".join(kept)
    block = Block(
        start=start_offset,
        end=start_offset + len(content),
        content=content,
        block_type=block_type,
        snapshot=snapshot,
        **variant,
    )
    return block, next_index


def _tag_balance(line: str) -> int:
    opened = 0
    for m in _OPEN_TAG.finditer(line):
        if m.group(2) == "/" or m.group(1).lower() in VOID_TAGS:
            continue
        opened += 1
    return opened - len(_CLOSE_TAG.findall(line))


def _starts_other_block(line: str) -> bool:
    return bool(
        line.startswith("```")
        or HEADING_PATTERN.match(line)
        or line.startswith(">")
        or LIST_ITEM_PATTERN.match(line)
        or THEMATIC_BREAK_PATTERN.match(line)
    )


def _parse_code_block(lines: List[str], start: int, start_offset: int, snapshot: str) -> Tuple[Block, int]:
    m = FENCE_PATTERN.match(lines[start].strip())
    ticks = m.group(1) if m else "```"
    language = (m.group(2).strip() if m else "") or None

    end = start + 1
    while end < len(lines):
        candidate = lines[end].strip()
        end += 1
        if candidate.startswith(ticks) and not candidate.strip("`"):
            break
    return _emit(lines, start, end, start_offset, "code_block", snapshot, language=language)


def _parse_table(lines: List[str], start: int, start_offset: int, snapshot: str) -> Tuple[Block, int]:
    end = start
    while end < len(lines):
        line = lines[end]
        blank = not line.strip()
        if end > start and HEADING_PATTERN.match(line):
            break
        if "|" not in line and not blank:
            break
        end += 1
        # an empty line ends the table
        if blank:
            break
    return _emit(lines, start, end, start_offset, "table", snapshot)


def _parse_block_quote(lines: List[str], start: int, start_offset: int, snapshot: str) -> Tuple[Block, int]:
    end = start
    while end < len(lines):
        line = lines[end]
        if line.strip() and not line.lstrip().startswith(">"):
            break
        end += 1
    return _emit(lines, start, end, start_offset, "block_quote", snapshot)


def _parse_list(lines: List[str], start: int, start_offset: int, snapshot: str) -> Tuple[Block, int]:
    ordered = lines[start].strip()[0].isdigit()
    end = start
    while end < len(lines):
        line = lines[end]
        stripped = line.strip()
        is_item = bool(LIST_ITEM_PATTERN.match(stripped))
        is_continuation = line.startswith(("  ", "\t")) or not stripped
        if not is_item and not is_continuation:
            break
        end += 1
    return _emit(lines, start, end, start_offset, "list", snapshot, ordered=ordered)


def _parse_html_block(lines: List[str], start: int, start_offset: int, snapshot: str) -> Tuple[Block, int]:
    depth = 0
    end = start
    while end < len(lines):
        line = lines[end]
        if end > start and HEADING_PATTERN.match(line):
            break
        if end > start and depth == 0 and not line.strip():
            break
        depth = max(0, depth + _tag_balance(line))
        end += 1
    return _emit(lines, start, end, start_offset, "html", snapshot)


def _parse_paragraph(lines: List[str], start: int, start_offset: int, snapshot: str) -> Tuple[Block, int]:
    end = start + 1
    while end < len(lines):
        line = lines[end]
        if not line.strip() or _starts_other_block(line):
            break
        end += 1
    return _emit(lines, start, end, start_offset, "paragraph", snapshot)


def classify_block(lines: List[str], start: int, start_offset: int, snapshot: str = "") -> ParseStep:
    """
    Recognize the block that begins at ``lines[start]``.

    Args:
        lines: Document lines without their newline characters
        start: Index of the line to classify
        start_offset: Offset of that line in the document text
        snapshot: Digest of the document text, stamped on the block

    Returns:
        None for a blank line (or past the end), otherwise the block and
        the index of the first line after it.
    """
    if start >= len(lines):
        return None
    line = lines[start].strip()
    if not line:
        return None

    if line.startswith("```"):
        return _parse_code_block(lines, start, start_offset, snapshot)
    if "|" in line:
        return _parse_table(lines, start, start_offset, snapshot)
    if line.startswith(">"):
        return _parse_block_quote(lines, start, start_offset, snapshot)
    if LIST_ITEM_PATTERN.match(line):
        return _parse_list(lines, start, start_offset, snapshot)
    if line.startswith("<") and not line.startswith("<!--"):
        return _parse_html_block(lines, start, start_offset, snapshot)
    if THEMATIC_BREAK_PATTERN.match(line):
        return _emit(lines, start, start + 1, start_offset, "thematic_break", snapshot)
    return _parse_paragraph(lines, start, start_offset, snapshot)

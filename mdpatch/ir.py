from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Literal, Optional
import hashlib

BlockType = Literal[
    "paragraph",
    "heading",
    "code_block",
    "list",
    "block_quote",
    "table",
    "html",
    "thematic_break",
]


def snapshot_digest(text: str) -> str:
    # Identity of one text snapshot; offsets are only valid for this text
    h = hashlib.sha256()
    h.update(text.encode("utf-8"))
    return h.hexdigest()[:16]


@dataclass(frozen=True)
class Block:
    start: int                       # offset of first char (inclusive)
    end: int                         # offset after last char (exclusive)
    content: str                     # text[start:end], delimiters included
    block_type: BlockType
    snapshot: str = ""               # snapshot_digest of the parsed text
    level: Optional[int] = None      # heading
    language: Optional[str] = None   # code_block
    ordered: Optional[bool] = None   # list

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Block start {self.start} is after end {self.end}")


@dataclass
class Section:
    heading_text: str                # "## Title", marker included
    heading_level: int
    heading_start: int
    heading_end: int
    heading_line: str = ""           # verbatim line
    snapshot: str = ""
    blocks: List[Block] = field(default_factory=list)

"""
mdpatch

Addresses a block in a Markdown document by heading path and index, and
applies an idempotent append, replace or delete to exactly that block.
"""
from mdpatch.apply import apply_operation
from mdpatch.editops import Applied, MutationResult, Operation, Planned
from mdpatch.ir import Block, Section, snapshot_digest
from mdpatch.redline import generate_diff
from mdpatch.resolve import find_section, get_block, parse_heading_path, resolve_block
from mdpatch.sections import parse_sections

__version__ = "0.3.0"

__all__ = [
    "apply_operation",
    "Applied",
    "MutationResult",
    "Operation",
    "Planned",
    "Block",
    "Section",
    "snapshot_digest",
    "generate_diff",
    "find_section",
    "get_block",
    "parse_heading_path",
    "resolve_block",
    "parse_sections",
]

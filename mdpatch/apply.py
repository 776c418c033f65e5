from __future__ import annotations
from typing import Optional
import logging
import re
from mdpatch.editops import Applied, MutationResult, Operation, Planned
from mdpatch.ir import Block
from mdpatch.redline import generate_diff
from mdpatch.verify import verify_operation

logger = logging.getLogger(__name__)

_BLANK_RUN = re.compile(r"(?:\r?\n){3,}")


def display_name(file: str) -> str:
    """Strip leading ``./`` and ``/`` for diff headers."""
    name = str(file)
    while name.startswith("./"):
        name = name[2:]
    return name.lstrip("/")


def _line_ending(block: Block) -> str:
    # lines keep their "\r" when split on "\n", so a CRLF block ends with it
    return "\r\n" if block.content.endswith("\r") else "\n"


def _with_line_ending(content: str, newline: str) -> str:
    return content.replace("\r\n", "\n").replace("\n", newline)


def _apply_append(text: str, block: Block, content: str) -> Optional[str]:
    """Returns None when the content is already present from the block onward."""
    newline = _line_ending(block)
    content = _with_line_ending(content, newline)
    if content in text[block.start:]:
        return None
    cut = block.end - len(newline) + 1
    return f"{text[:cut]}{newline}{content}{newline}{text[cut:]}"


def _apply_replace(text: str, block: Block, content: str) -> str:
    newline = _line_ending(block)
    content = _with_line_ending(content, newline)
    if newline == "\r\n":
        content += "\r"
    return text[:block.start] + content + text[block.end:]


def _apply_delete(text: str, block: Block) -> str:
    result = text[:block.start] + text[block.end:]
    # deleting leaves the surrounding blank lines behind; keep at most one
    return _BLANK_RUN.sub(_line_ending(block) * 2, result)


def apply_operation(
    text: str,
    block: Block,
    operation: Operation,
    force: bool = False,
    dry_run: Optional[bool] = None,
) -> MutationResult:
    """
    Apply one operation to the block it was resolved to.

    Args:
        text: The document snapshot ``block`` was parsed from
        block: Target block
        operation: Requested edit
        force: Allow replace/delete without a fingerprint
        dry_run: Return a Planned result instead of Applied. Defaults to
            ``not force``.

    Raises:
        StaleBlockError, FingerprintMismatchError, InvalidFingerprintError,
        UnsafeDestructiveOperationError, MissingContentError
    """
    if dry_run is None:
        dry_run = not force
    content = verify_operation(text, block, operation, force)

    if operation.kind == "append":
        new_text = _apply_append(text, block, content)
    elif operation.kind == "replace":
        new_text = _apply_replace(text, block, content)
    elif operation.kind == "delete":
        new_text = _apply_delete(text, block)
    else:
        raise ValueError(f"Unknown operation: {operation.kind}")

    if new_text is None:
        logger.info(f"{display_name(operation.file)}: content already present under {operation.heading_path}, nothing to do")
        if dry_run:
            return Planned(diff="", is_noop=True)
        return Applied(new_text=text, diff="", is_noop=True)

    diff = generate_diff(text, new_text, display_name(operation.file))
    logger.debug(f"{operation.kind} on {block.block_type} [{block.start}:{block.end}] of {display_name(operation.file)}")
    if dry_run:
        return Planned(diff=diff)
    return Applied(new_text=new_text, diff=diff)

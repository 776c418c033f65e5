from __future__ import annotations
from typing import Optional
import re
from mdpatch.editops import Operation
from mdpatch.errors import (
    FingerprintMismatchError,
    InvalidFingerprintError,
    MissingContentError,
    StaleBlockError,
    UnsafeDestructiveOperationError,
)
from mdpatch.ir import Block, snapshot_digest


def verify_snapshot(text: str, block: Block) -> None:
    actual = snapshot_digest(text)
    if block.snapshot != actual:
        raise StaleBlockError(expected=block.snapshot, actual=actual)


def verify_fingerprint(block: Block, fingerprint: Optional[str]) -> None:
    if fingerprint is None:
        return
    try:
        pattern = re.compile(fingerprint)
    except re.error as e:
        raise InvalidFingerprintError(fingerprint, str(e)) from e
    if not pattern.search(block.content):
        raise FingerprintMismatchError(fingerprint)


def verify_destructive_allowed(operation: Operation, force: bool) -> None:
    # replace/delete must be pattern-verified or explicitly forced
    if operation.is_destructive and operation.fingerprint is None and not force:
        raise UnsafeDestructiveOperationError(operation.kind)


def verify_content(operation: Operation) -> str:
    if operation.kind == "delete":
        return ""
    if not operation.content:
        raise MissingContentError(operation.kind)
    return operation.content


def verify_operation(text: str, block: Block, operation: Operation, force: bool) -> str:
    """Run every precondition in order; returns the content to insert."""
    verify_snapshot(text, block)
    verify_fingerprint(block, operation.fingerprint)
    verify_destructive_allowed(operation, force)
    return verify_content(operation)

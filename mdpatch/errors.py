"""
Typed errors for addressing and patching.

Every error carries a machine-readable ``kind``, the process exit code the
CLI maps it to, and a ``details`` dict with the values needed to render a
diagnostic (heading text, pattern, index, ...).
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional


class PatchError(Exception):
    kind = "error"
    exit_code = 1

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "details": dict(self.details)}


class ManifestError(PatchError):
    kind = "invalid_manifest"


class InvalidHeadingPathError(PatchError):
    kind = "invalid_heading_path"


class HeadingNotFoundError(PatchError):
    kind = "heading_not_found"
    exit_code = 2

    def __init__(self, heading: str):
        super().__init__(f"Heading not found: {heading}", heading=heading)


class SubheadingNotFoundError(PatchError):
    kind = "subheading_not_found"
    exit_code = 2

    def __init__(self, heading: str, parent: str):
        super().__init__(
            f"Subheading not found: '{heading}' under '{parent}'",
            heading=heading,
            parent=parent,
        )


class AmbiguousHeadingError(PatchError):
    kind = "ambiguous_heading"
    exit_code = 4

    def __init__(self, heading: str, matches: int):
        suggestion = f"# Parent {heading}"
        super().__init__(
            f"Multiple sections found for heading '{heading}' ({matches} matches). "
            f"Please provide a more specific path like '{suggestion}'.",
            heading=heading,
            matches=matches,
            suggestion=suggestion,
        )


class BlockIndexOutOfRangeError(PatchError):
    kind = "block_index_out_of_range"
    exit_code = 5

    def __init__(self, index: int, available: int):
        super().__init__(
            f"Block index {index} out of range (section has {available} blocks)",
            index=index,
            available=available,
        )


class FingerprintMismatchError(PatchError):
    kind = "fingerprint_mismatch"
    exit_code = 3

    def __init__(self, pattern: str):
        super().__init__(
            f"Fingerprint mismatch: expected pattern '{pattern}' not found in block content",
            pattern=pattern,
        )


class InvalidFingerprintError(PatchError):
    kind = "invalid_fingerprint"

    def __init__(self, pattern: str, reason: str):
        super().__init__(
            f"Invalid fingerprint pattern '{pattern}': {reason}",
            pattern=pattern,
            reason=reason,
        )


class UnsafeDestructiveOperationError(PatchError):
    kind = "unsafe_destructive_operation"
    exit_code = 6

    def __init__(self, operation: str):
        super().__init__(
            f"Destructive operation '{operation}' requires --force flag or fingerprint for safety. "
            "Provide a fingerprint pattern to verify the target block.",
            operation=operation,
        )


class MissingContentError(PatchError):
    kind = "missing_content"

    def __init__(self, operation: str):
        super().__init__(f"{operation.capitalize()} operation requires content", operation=operation)


class StaleBlockError(PatchError):
    kind = "stale_block"

    def __init__(self, expected: str, actual: str):
        super().__init__(
            "Block offsets belong to a different document snapshot; re-parse before applying",
            expected=expected,
            actual=actual,
        )


class BatchOperationError(PatchError):
    """Wraps the first failure of a batch; keeps the inner kind and exit code."""

    def __init__(self, number: int, file: str, heading_path: List[str], cause: PatchError):
        details = dict(cause.details)
        details.update(number=number, file=file, heading_path=list(heading_path))
        super().__init__(
            f"Operation {number} failed for {file} (heading: {heading_path}): {cause.message}",
            **details,
        )
        self.kind = cause.kind
        self.exit_code = cause.exit_code
        self.cause: Optional[PatchError] = cause

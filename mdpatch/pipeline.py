"""
Pipeline: read, resolve, apply and write.

Single operations and batches share the same steps. Batches are
validate-then-commit: every operation is resolved and checked against the
current file contents before any file is written, and each touched file gets
exactly one atomic write.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import logging
import os
import shutil
import tempfile

from mdpatch.apply import apply_operation
from mdpatch.editops import Applied, MutationResult, Operation
from mdpatch.errors import BatchOperationError, PatchError
from mdpatch.resolve import resolve_block
from mdpatch.sections import parse_sections

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("diff", "json", "short")


@dataclass
class PatchConfig:
    """Caller-side settings threaded through a run."""
    force: bool = False              # apply changes; allow unverified replace/delete
    backup: bool = True              # keep <file>.bak before overwriting
    output_format: str = "diff"      # diff|json|short


@dataclass
class PatchOutcome:
    operation: Operation
    result: MutationResult

    @property
    def status(self) -> str:
        if self.result.is_noop:
            return "noop"
        return self.result.status


@dataclass
class BatchResult:
    outcomes: List[PatchOutcome] = field(default_factory=list)
    files_written: List[str] = field(default_factory=list)


def read_document(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except OSError as e:
        raise PatchError(f"Failed to read {path}: {e}", file=str(path)) from e


def atomic_write(path: str, text: str, backup: bool = True) -> None:
    target = Path(path)
    if backup and target.exists():
        shutil.copy2(target, target.with_name(target.name + ".bak"))

    fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        if target.exists():
            shutil.copymode(target, tmp_name)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.info(f"Wrote {target}")


def plan_operation(operation: Operation, text: str, force: bool = False, dry_run: Optional[bool] = None) -> MutationResult:
    sections = parse_sections(text)
    block = resolve_block(sections, operation.heading_path, operation.block_index)
    return apply_operation(text, block, operation, force=force, dry_run=dry_run)


def run_patch(operation: Operation, config: PatchConfig) -> PatchOutcome:
    text = read_document(operation.file)
    result = plan_operation(operation, text, force=config.force)
    if isinstance(result, Applied) and not result.is_noop:
        atomic_write(operation.file, result.new_text, backup=config.backup)
    return PatchOutcome(operation=operation, result=result)


def run_batch(operations: List[Operation], config: PatchConfig) -> BatchResult:
    """
    Validate every operation, then write each changed file once.

    Operations on the same file are chained in order: each one is resolved
    against a fresh parse of the text produced by the previous one.
    """
    # keyed by resolved path: doc.md and ./doc.md are one file
    pending: Dict[str, str] = {}
    original: Dict[str, str] = {}
    targets: Dict[str, str] = {}
    batch = BatchResult()

    for number, operation in enumerate(operations, start=1):
        key = os.path.realpath(operation.file)
        try:
            if key not in pending:
                original[key] = read_document(operation.file)
                pending[key] = original[key]
                targets[key] = operation.file
            text = pending[key]
            # always compute the new text; whether to write is decided after validation
            result = plan_operation(operation, text, force=config.force, dry_run=False)
        except PatchError as e:
            logger.warning(f"Batch aborted at operation {number}; no files were written")
            raise BatchOperationError(number, operation.file, operation.heading_path, e) from e

        pending[key] = result.new_text
        if not config.force:
            result = result.as_planned()
        batch.outcomes.append(PatchOutcome(operation=operation, result=result))

    if config.force:
        for key, text in pending.items():
            if text != original[key]:
                atomic_write(targets[key], text, backup=config.backup)
                batch.files_written.append(targets[key])
    logger.info(f"Batch of {len(operations)} operations, {len(batch.files_written)} files written")
    return batch

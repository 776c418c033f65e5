"""
Batch manifest loading.

A manifest is a YAML file with an ``operations`` list:

    operations:
      - file: docs/guide.md
        heading: ["# Guide", "## Install"]
        index: 0
        operation: append
        content: "pip install mdpatch"
        fingerprint: null
"""
from __future__ import annotations
from typing import Any, Dict, List
import yaml

from mdpatch.editops import OPERATION_KINDS, Operation
from mdpatch.errors import InvalidHeadingPathError, ManifestError
from mdpatch.resolve import parse_heading_path


def load_manifest_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}", path=path) from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in manifest {path}: {e}", path=path) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must be a mapping with an 'operations' list", path=path)
    return data


def _heading_path(raw: Any, number: int) -> List[str]:
    if isinstance(raw, str):
        try:
            return parse_heading_path(raw)
        except InvalidHeadingPathError as e:
            raise ManifestError(f"Operation {number}: {e.message}", number=number) from e
    if isinstance(raw, list) and raw and all(isinstance(h, str) and h.strip() for h in raw):
        return [h.strip() for h in raw]
    raise ManifestError(f"Operation {number}: heading path cannot be empty", number=number)


def parse_operation(entry: Any, number: int) -> Operation:
    if not isinstance(entry, dict):
        raise ManifestError(f"Operation {number}: expected a mapping", number=number)

    file = entry.get("file")
    if not file:
        raise ManifestError(f"Operation {number}: 'file' is required", number=number)

    kind = str(entry.get("operation", "")).lower()
    if kind not in OPERATION_KINDS:
        raise ManifestError(
            f"Operation {number}: operation must be one of {', '.join(OPERATION_KINDS)} (got '{entry.get('operation')}')",
            number=number,
        )

    index = entry.get("index", 0)
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise ManifestError(f"Operation {number}: index must be a non-negative integer", number=number)

    content = entry.get("content")
    if kind in ("append", "replace") and not content:
        raise ManifestError(f"Operation {number}: content is required for append/replace", number=number)

    fingerprint = entry.get("fingerprint")
    return Operation(
        file=str(file),
        heading_path=_heading_path(entry.get("heading"), number),
        kind=kind,
        block_index=index,
        content=None if content is None else str(content),
        fingerprint=None if fingerprint is None else str(fingerprint),
    )


def load_operations(manifest: Dict[str, Any]) -> List[Operation]:
    entries = manifest.get("operations")
    if not isinstance(entries, list) or not entries:
        raise ManifestError("Manifest must contain a non-empty 'operations' list")
    return [parse_operation(entry, i) for i, entry in enumerate(entries, start=1)]


def load_manifest(path: str) -> List[Operation]:
    return load_operations(load_manifest_file(path))

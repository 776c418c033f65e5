from __future__ import annotations
from typing import Any, Dict, List, Optional
import json
from rich.console import Console
from mdpatch.errors import PatchError
from mdpatch.pipeline import PatchOutcome
from mdpatch.redline import count_changes


def _console(console: Optional[Console]) -> Console:
    return console or Console(highlight=False, emoji=False)


def change_to_dict(outcome: PatchOutcome) -> Dict[str, Any]:
    additions, deletions = count_changes(outcome.result.diff)
    op = outcome.operation
    return {
        "file": op.file,
        "operation": op.kind,
        "heading": op.heading,
        "index": op.block_index,
        "status": outcome.status,
        "additions": additions,
        "deletions": deletions,
        "diff": outcome.result.diff,
    }


def render_json(outcomes: List[PatchOutcome], applied: bool) -> str:
    payload = {
        "success": True,
        "applied": applied,
        "changes": [change_to_dict(o) for o in outcomes],
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)


def render_short(outcome: PatchOutcome) -> str:
    additions, deletions = count_changes(outcome.result.diff)
    label = {"applied": "Applied", "planned": "Planned", "noop": "Unchanged"}[outcome.status]
    return f"{label}: +{additions} -{deletions}"


def print_diff(diff: str, console: Optional[Console] = None) -> None:
    console = _console(console)
    for line in diff.splitlines():
        if line.startswith(("--- ", "+++ ")):
            style = "bold"
        elif line.startswith("+"):
            style = "green"
        elif line.startswith("-"):
            style = "red"
        elif line.startswith("@@"):
            style = "cyan"
        else:
            style = None
        # document text may contain [brackets]; print it verbatim
        console.print(line, style=style, markup=False, highlight=False, soft_wrap=True)


def print_outcomes(outcomes: List[PatchOutcome], output_format: str, applied: bool, console: Optional[Console] = None) -> None:
    console = _console(console)
    if output_format == "json":
        console.print(render_json(outcomes, applied), markup=False, highlight=False, soft_wrap=True)
        return

    for outcome in outcomes:
        if output_format == "short":
            style = {"applied": "green", "planned": "yellow", "noop": "dim"}[outcome.status]
            console.print(render_short(outcome), style=style, markup=False, highlight=False)
        elif outcome.result.is_noop:
            console.print(
                f"No changes for {outcome.operation.file} ({outcome.operation.heading}): content already present",
                markup=False,
                highlight=False,
            )
        else:
            print_diff(outcome.result.diff, console)


def render_error(error: PatchError) -> str:
    return json.dumps({"success": False, "error": error.to_dict()}, ensure_ascii=False, indent=2)


def print_error(error: PatchError, output_format: str, console: Optional[Console] = None, err_console: Optional[Console] = None) -> None:
    if output_format == "json":
        _console(console).print(render_error(error), markup=False, highlight=False, soft_wrap=True)
        return
    err_console = err_console or Console(stderr=True, highlight=False, emoji=False)
    err_console.print(f"Error: {error.message}", style="bold red", markup=False, highlight=False, soft_wrap=True)

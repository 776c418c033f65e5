from __future__ import annotations
from typing import List, Optional
import argparse
import logging
import os
import sys

from rich.console import Console

from mdpatch import __version__
from mdpatch.changelog import print_error, print_outcomes
from mdpatch.editops import OPERATION_KINDS, Operation
from mdpatch.errors import PatchError
from mdpatch.manifest import load_manifest
from mdpatch.pipeline import OUTPUT_FORMATS, PatchConfig, PatchOutcome, run_batch, run_patch
from mdpatch.resolve import parse_heading_path

EXIT_OK = 0

EPILOG = """\
examples:
  # append after the first block under a heading (index 0 = first block)
  mdpatch patch -f doc.md -H '## Features' -i 0 --op append -c 'New feature' --force

  # disambiguate a repeated heading with a nested path
  mdpatch patch -f doc.md -H '# Parent ## Child' --op append -c 'Text' --force

  # replace only if the block still matches the fingerprint
  mdpatch patch -f doc.md -H '## API' --op replace -c 'New docs' -p 'old.*pattern' --force

  # batch operations from a YAML manifest
  mdpatch plan patches.yaml
  mdpatch apply patches.yaml --force

addressing model:
  file -> heading path -> block index (0-based, blocks after the heading)

exit codes:
  0 ok, 1 error, 2 heading not found, 3 fingerprint mismatch,
  4 ambiguous heading, 5 block index out of range, 6 unsafe destructive op
"""


def _default_format() -> str:
    fmt = os.environ.get("MDPATCH_FORMAT", "diff").lower()
    return fmt if fmt in OUTPUT_FORMATS else "diff"


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-F", "--format",
        default=_default_format(),
        choices=list(OUTPUT_FORMATS),
        help="Output format (default: diff, or MDPATCH_FORMAT env var)"
    )
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    ap = argparse.ArgumentParser(
        prog="mdpatch",
        description="Declarative, idempotent Markdown block patching",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="command")

    patch = sub.add_parser("patch", parents=[common], help="Apply a single patch operation")
    patch.add_argument("-f", "--file", required=True, help="Target Markdown file")
    patch.add_argument("-H", "--heading", required=True, help="Heading path, e.g. '# Title ## Subtitle'")
    patch.add_argument("-i", "--index", type=int, default=0, help="Block index within the section (0-based)")
    patch.add_argument("-o", "--op", required=True, choices=list(OPERATION_KINDS), help="Operation type")
    patch.add_argument("-c", "--content", help="Content to append/replace (not needed for delete)")
    patch.add_argument("-p", "--fingerprint", help="Regex the target block must match")
    patch.add_argument("--force", action="store_true", help="Write changes; allow replace/delete without fingerprint")
    patch.add_argument("--no-backup", action="store_true", help="Skip creating <file>.bak")

    apply_cmd = sub.add_parser("apply", parents=[common], help="Apply operations from a YAML manifest")
    apply_cmd.add_argument("config", help="Manifest path")
    apply_cmd.add_argument("--force", action="store_true", help="Write changes; allow replace/delete without fingerprint")
    apply_cmd.add_argument("--no-backup", action="store_true", help="Skip creating <file>.bak")

    plan = sub.add_parser("plan", parents=[common], help="Preview manifest changes without writing")
    plan.add_argument("config", help="Manifest path")

    return ap


def _print_hint(outcomes: List[PatchOutcome], config: PatchConfig, console: Console) -> None:
    if config.force or config.output_format == "json":
        return
    if any(o.status == "planned" for o in outcomes):
        console.print("\n(Run with --force to apply changes)", markup=False, highlight=False)


def _run_patch_command(args: argparse.Namespace, console: Console) -> int:
    config = PatchConfig(force=args.force, backup=not args.no_backup, output_format=args.format)
    operation = Operation(
        file=args.file,
        heading_path=parse_heading_path(args.heading),
        kind=args.op,
        block_index=args.index,
        content=None if args.op == "delete" else args.content,
        fingerprint=args.fingerprint,
    )
    outcome = run_patch(operation, config)
    print_outcomes([outcome], config.output_format, applied=config.force, console=console)
    _print_hint([outcome], config, console)
    return EXIT_OK


def _run_batch_command(args: argparse.Namespace, console: Console, force: bool, backup: bool) -> int:
    config = PatchConfig(force=force, backup=backup, output_format=args.format)
    operations = load_manifest(args.config)
    batch = run_batch(operations, config)
    print_outcomes(batch.outcomes, config.output_format, applied=config.force, console=console)
    _print_hint(batch.outcomes, config, console)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if not args.command:
        ap.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    console = Console(highlight=False, emoji=False)

    try:
        if args.command == "patch":
            return _run_patch_command(args, console)
        if args.command == "apply":
            return _run_batch_command(args, console, force=args.force, backup=not args.no_backup)
        return _run_batch_command(args, console, force=False, backup=False)
    except PatchError as e:
        print_error(e, args.format, console=console)
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())

"""
Redline: line diff between two document snapshots.

Lines are aligned with a longest-common-subsequence table and rendered as a
unified diff (``--- a/`` / ``+++ b/`` header, ``@@`` hunks with three lines of
context). Identical inputs produce the header and no hunks.
"""
from __future__ import annotations
from typing import List, Sequence, Tuple

from mdpatch.blocks import split_lines

CONTEXT_LINES = 3

DiffLine = Tuple[str, str]  # (" " | "-" | "+", line)


def compute_lcs(a: Sequence[str], b: Sequence[str]) -> List[str]:
    m, n = len(a), len(b)
    if m == 0 or n == 0:
        return []

    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        prev, row = dp[i - 1], dp[i]
        ai = a[i - 1]
        for j in range(1, n + 1):
            if ai == b[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])

    # backtrack
    lcs: List[str] = []
    i, j = m, n
    while i > 0 and j > 0:
        if a[i - 1] == b[j - 1]:
            lcs.append(a[i - 1])
            i -= 1
            j -= 1
        elif dp[i - 1][j] > dp[i][j - 1]:
            i -= 1
        else:
            j -= 1
    lcs.reverse()
    return lcs


def align_lines(original: Sequence[str], modified: Sequence[str]) -> List[DiffLine]:
    """Classify every line as unchanged, deleted or added, in document order."""
    prefix = 0
    while prefix < len(original) and prefix < len(modified) and original[prefix] == modified[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < len(original) - prefix
        and suffix < len(modified) - prefix
        and original[-1 - suffix] == modified[-1 - suffix]
    ):
        suffix += 1

    a = original[prefix:len(original) - suffix]
    b = modified[prefix:len(modified) - suffix]
    lcs = compute_lcs(a, b)

    aligned: List[DiffLine] = [(" ", line) for line in original[:prefix]]
    i = j = k = 0
    while i < len(a) or j < len(b):
        if k < len(lcs) and i < len(a) and j < len(b) and a[i] == lcs[k] and b[j] == lcs[k]:
            aligned.append((" ", a[i]))
            i += 1
            j += 1
            k += 1
        elif i < len(a) and (k >= len(lcs) or a[i] != lcs[k]):
            aligned.append(("-", a[i]))
            i += 1
        else:
            aligned.append(("+", b[j]))
            j += 1
    aligned.extend((" ", line) for line in original[len(original) - suffix:])
    return aligned


def _format_range(start: int, length: int) -> str:
    # same convention as difflib.unified_diff
    beginning = start + 1
    if length == 1:
        return f"{beginning}"
    if not length:
        beginning -= 1
    return f"{beginning},{length}"


def _group_hunks(aligned: List[DiffLine], context: int) -> List[Tuple[int, int]]:
    groups: List[List[int]] = []
    for idx, (tag, _) in enumerate(aligned):
        if tag == " ":
            continue
        lo = max(0, idx - context)
        hi = min(len(aligned), idx + context + 1)
        if groups and lo <= groups[-1][1]:
            groups[-1][1] = hi
        else:
            groups.append([lo, hi])
    return [(lo, hi) for lo, hi in groups]


def generate_diff(original: str, modified: str, filename: str, context: int = CONTEXT_LINES) -> str:
    aligned = align_lines(split_lines(original), split_lines(modified))

    # line numbers before each aligned entry
    old_before: List[int] = []
    new_before: List[int] = []
    old_no = new_no = 0
    for tag, _ in aligned:
        old_before.append(old_no)
        new_before.append(new_no)
        if tag != "+":
            old_no += 1
        if tag != "-":
            new_no += 1

    out = [f"--- a/{filename}\n", f"+++ b/{filename}\n"]
    for lo, hi in _group_hunks(aligned, context):
        chunk = aligned[lo:hi]
        old_len = sum(1 for tag, _ in chunk if tag != "+")
        new_len = sum(1 for tag, _ in chunk if tag != "-")
        out.append(
            f"@@ -{_format_range(old_before[lo], old_len)} +{_format_range(new_before[lo], new_len)} @@\n"
        )
        for tag, line in chunk:
            out.append(f"{tag}{line}\n")
    return "".join(out)


def count_changes(diff: str) -> Tuple[int, int]:
    """Return (additions, deletions) in a diff produced by generate_diff."""
    lines = diff.split("\n")
    if len(lines) >= 2 and lines[0].startswith("--- ") and lines[1].startswith("+++ "):
        lines = lines[2:]
    additions = sum(1 for line in lines if line.startswith("+"))
    deletions = sum(1 for line in lines if line.startswith("-"))
    return additions, deletions

import re

import pytest

from mdpatch.blocks import split_lines
from mdpatch.redline import compute_lcs, count_changes, generate_diff

HUNK = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@$")


def _reconstruct(original, diff):
    """Apply a unified diff to the original lines."""
    src = split_lines(original)
    out = []
    pos = 0
    for line in diff.split("\n")[2:]:
        if not line:
            continue
        m = HUNK.match(line)
        if m:
            start = int(m.group(1))
            count = 1 if m.group(2) is None else int(m.group(2))
            old_start = start - 1 if count else start
            out.extend(src[pos:old_start])
            pos = old_start
        elif line.startswith(" "):
            assert src[pos] == line[1:]
            out.append(src[pos])
            pos += 1
        elif line.startswith("-"):
            assert src[pos] == line[1:]
            pos += 1
        elif line.startswith("+"):
            out.append(line[1:])
    out.extend(src[pos:])
    return out


def test_equal_inputs_have_no_hunks():
    assert generate_diff("a\nb\n", "a\nb\n", "f.md") == "--- a/f.md\n+++ b/f.md\n"
    assert count_changes(generate_diff("a\n", "a\n", "f.md")) == (0, 0)


def test_single_change_hunk():
    diff = generate_diff("a\nb\nc\n", "a\nB\nc\n", "f.md")
    assert diff == "--- a/f.md\n+++ b/f.md\n@@ -1,3 +1,3 @@\n a\n-b\n+B\n c\n"


def test_distant_changes_get_separate_hunks():
    original = "".join(f"l{i}\n" for i in range(1, 21))
    modified = original.replace("l2\n", "L2\n").replace("l18\n", "L18\n")
    diff = generate_diff(original, modified, "f.md")
    assert diff.count("\n@@ ") == 2
    assert count_changes(diff) == (2, 2)


def test_compute_lcs():
    assert compute_lcs(["a", "b", "c", "d"], ["a", "c", "d", "e"]) == ["a", "c", "d"]
    assert compute_lcs([], ["a"]) == []


@pytest.mark.parametrize("original,modified", [
    ("# Doc\n\n## Sec\n\nHello\n", "# Doc\n\n## Sec\n\nHello\nWorld\n\n"),
    ("# T\n\nKeep 1.\n\nDelete me.\n\nKeep 2.\n", "# T\n\nKeep 1.\n\nKeep 2.\n"),
    ("", "a\nb\n"),
    ("a\nb\n", ""),
    ("x\ny\nz\n", "y\nx\nz\nw\n"),
])
def test_diff_reconstructs_modified(original, modified):
    diff = generate_diff(original, modified, "f.md")
    assert _reconstruct(original, diff) == split_lines(modified)


def test_count_changes_ignores_only_the_header():
    diff = generate_diff("-- x\n", "", "f.md")
    assert "\n--- x\n" in diff
    assert count_changes(diff) == (0, 1)

import pytest

from mdpatch.errors import (
    AmbiguousHeadingError,
    BlockIndexOutOfRangeError,
    HeadingNotFoundError,
    InvalidHeadingPathError,
    SubheadingNotFoundError,
)
from mdpatch.resolve import find_section, get_block, parse_heading_path, resolve_block
from mdpatch.sections import parse_sections

TWO_DOCS = "# Doc A\n\n## Section\n\nContent A\n\n# Doc B\n\n## Section\n\nContent B\n"


def test_parse_heading_path():
    assert parse_heading_path("# Title ## Subtitle") == ["# Title", "## Subtitle"]
    assert parse_heading_path("## Multi word heading") == ["## Multi word heading"]
    assert parse_heading_path("  #   Spaced  ") == ["# Spaced"]


def test_parse_heading_path_requires_marker():
    with pytest.raises(InvalidHeadingPathError):
        parse_heading_path("no markers")


def test_single_heading():
    sections = parse_sections("# Doc\n\n## Sec\n\nHello\n")
    assert find_section(sections, ["## Sec"]).blocks[0].content == "Hello"
    assert find_section(sections, ["  ## Sec  "]).heading_text == "## Sec"


def test_heading_not_found():
    sections = parse_sections("# Doc\n\nContent\n")
    with pytest.raises(HeadingNotFoundError) as exc:
        find_section(sections, ["## NonExistent"])
    assert exc.value.exit_code == 2
    assert exc.value.details["heading"] == "## NonExistent"


def test_ambiguous_heading_suggests_nested_path():
    sections = parse_sections(TWO_DOCS)
    with pytest.raises(AmbiguousHeadingError) as exc:
        find_section(sections, ["## Section"])
    assert exc.value.exit_code == 4
    assert "# Parent ## Section" in exc.value.message
    assert exc.value.details["matches"] == 2


def test_nested_path_disambiguates():
    sections = parse_sections(TWO_DOCS)
    assert find_section(sections, ["# Doc A", "## Section"]).blocks[0].content == "Content A"
    assert find_section(sections, ["# Doc B", "## Section"]).blocks[0].content == "Content B"


def test_subheading_outside_scope():
    sections = parse_sections("# A\n\n## X\n\n# B\n\n## Other\n")
    with pytest.raises(SubheadingNotFoundError) as exc:
        find_section(sections, ["# A", "## Other"])
    assert exc.value.details["parent"] == "# A"


def test_subheading_missing_at_end_of_document():
    sections = parse_sections("# A\n\n## X\n")
    with pytest.raises(SubheadingNotFoundError):
        find_section(sections, ["# A", "## Y"])


def test_first_path_element_must_be_unique_on_its_own():
    # only the first "## Dup" has a "### Child", but the first element is
    # matched without looking at the rest of the path
    text = "## Dup\n\n### Child\n\nx\n\n## Dup\n\ntext\n"
    with pytest.raises(AmbiguousHeadingError):
        find_section(parse_sections(text), ["## Dup", "### Child"])


def test_deeper_scope_is_bounded_by_first_heading_level():
    text = "# A\n## B\n## B2\n### C\n\nbody\n"
    section = find_section(parse_sections(text), ["# A", "## B", "### C"])
    assert section.blocks[0].content == "body"


def test_empty_path():
    with pytest.raises(InvalidHeadingPathError):
        find_section(parse_sections(TWO_DOCS), [])


def test_block_index_out_of_range():
    section = find_section(parse_sections("# Doc\n\n## Sec\n\nHello\n"), ["## Sec"])
    assert get_block(section, 0).content == "Hello"
    with pytest.raises(BlockIndexOutOfRangeError) as exc:
        get_block(section, 3)
    assert exc.value.details == {"index": 3, "available": 1}
    assert exc.value.exit_code == 5
    with pytest.raises(BlockIndexOutOfRangeError):
        get_block(section, -1)


def test_resolve_block_picks_nth_block():
    text = "# Doc\n\n## Sec\n\nFirst\n\n- item\n\n```\ncode\n```\n"
    block = resolve_block(parse_sections(text), ["# Doc", "## Sec"], 2)
    assert block.block_type == "code_block"

import pytest

from songtype.exceptions import ParseError
from songtype.parser import parse
from songtype.syntax import Line, Sexp

AMAZING_GRACE = """\
⟦title Amazing Grace⟧
⟦attrib John Newton⟧

Amazing grace, how sweet the sound
    That saved a wretch like me
"""


# ---------------------------------------------------------------------------
# Blocks and lines
# ---------------------------------------------------------------------------


def test_blocks_split_on_blank_lines():
    blocks = parse(AMAZING_GRACE)
    assert len(blocks) == 2
    assert len(blocks[0]) == 2
    assert len(blocks[1]) == 2


def test_multiple_blank_lines_are_one_separator():
    blocks = parse("⟦title A⟧\n\n\n   \n\nverse\n")
    assert len(blocks) == 2


def test_leading_and_trailing_blank_lines_ignored():
    blocks = parse("\n\n⟦title A⟧\n\n")
    assert blocks == [[Line(indent="", items=[Sexp("title", ["A"])])]]


def test_empty_document():
    assert parse("") == []
    assert parse("\n  \n") == []


def test_indent_kept_verbatim():
    blocks = parse(AMAZING_GRACE)
    assert blocks[1][0].indent == ""
    assert blocks[1][1].indent == "    "
    assert blocks[1][1].items == ["That saved a wretch like me"]


def test_tab_indent_kept_verbatim():
    blocks = parse("⟦title A⟧\n\n\t line\n")
    assert blocks[1][0].indent == "\t "


def test_crlf_line_endings():
    blocks = parse("⟦title A⟧\r\n\r\nverse one\r\nverse two\r\n")
    assert len(blocks) == 2
    assert blocks[1][0].items == ["verse one"]


def test_byte_order_mark_dropped():
    blocks = parse("\ufeff⟦title A⟧\n")
    assert blocks[0][0].items == [Sexp("title", ["A"])]


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------


def test_keyword_and_text():
    [[line]] = parse("⟦title Amazing Grace⟧")
    assert line.items == [Sexp("title", ["Amazing Grace"])]


def test_keyword_without_arguments():
    [[line]] = parse("⟦Chorus:⟧")
    assert line.items == [Sexp("Chorus:", [])]


def test_only_one_separator_space_consumed():
    [[line]] = parse("⟦title  two spaces⟧")
    assert line.items == [Sexp("title", [" two spaces"])]


def test_nested_forms_and_text():
    [[line]] = parse("He ⟦italic said ⟦note softly⟧⟧ then⟦...⟧")
    assert line.items == [
        "He ",
        Sexp("italic", ["said ", Sexp("note", ["softly"])]),
        " then",
        Sexp("...", []),
    ]


def test_keyword_ends_at_nested_open():
    [[line]] = parse("⟦title⟦italic A⟧⟧")
    assert line.items == [Sexp("title", [Sexp("italic", ["A"])])]


def test_form_spanning_lines_keeps_newlines_as_text():
    [[line]] = parse("⟦note first line\n\nsecond line⟧")
    assert line.items == [Sexp("note", ["first line\n\nsecond line"])]


def test_whitespace_around_marker_preserved_as_text():
    [[line]] = parse("  ⟦Chorus:⟧  ")
    assert line.indent == "  "
    assert line.items == [Sexp("Chorus:", []), "  "]


def test_sexp_str_round_trips_for_diagnostics():
    [[line]] = parse("⟦title Amazing ⟦italic Grace⟧⟧")
    assert str(line.items[0]) == "⟦title Amazing ⟦italic Grace⟧⟧"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def test_unclosed_form():
    with pytest.raises(ParseError) as info:
        parse("⟦title A⟧\n\n⟦italic never closed\n")
    assert "Unclosed" in str(info.value)
    assert info.value.line == 3
    assert info.value.column == 1


def test_unmatched_close():
    with pytest.raises(ParseError) as info:
        parse("oops⟧")
    assert "Unmatched" in str(info.value)
    assert info.value.column == 5


def test_empty_keyword():
    with pytest.raises(ParseError, match="no keyword"):
        parse("⟦ text⟧")

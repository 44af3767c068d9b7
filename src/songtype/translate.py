"""Translate a parsed document into a :class:`~songtype.models.Song`.

The first block is the metadata block; every later block is one verse.

Metadata keyword table
----------------------

+-------------------------------------------+------------------------------+
| Keyword                                   | Result                       |
+===========================================+==============================+
| ``title``, ``alt-title``, ``attrib``,     | formatted text entry         |
| ``ref`` / ``xref``                        |                              |
+-------------------------------------------+------------------------------+
| ``white-book``, ``white-book-title``,     | rewritten to ``title`` /     |
| ``author``                                | ``attrib`` first             |
+-------------------------------------------+------------------------------+
| ``category``, ``index``, ``lang``,        | exactly one plain-text       |
| ``dance``                                 | argument, kept verbatim      |
+-------------------------------------------+------------------------------+
| ``descant``                               | flag, no arguments           |
+-------------------------------------------+------------------------------+
| ``todo``, ``note``, ``origin``, …         | :class:`Ignored`             |
+-------------------------------------------+------------------------------+

Verse markers
-------------

A verse whose first line holds nothing but one of these forms (whitespace
aside) is reclassified and the marker line is consumed:

* ``⟦Chorus:⟧`` → ``ChorusDef("Chorus", rest)``
* ``⟦Refrain:⟧`` → ``RefrainDef("Refrain", rest)``
* ``⟦Chorus⟧`` → ``ChorusRef("Chorus")``
* ``⟦refrain <label>⟧`` → ``ChorusRef(label)``
* ``⟦section-break <label>⟧`` → ``SectionBreak(label)``

Anything else on the first line makes the whole block a ``NormalVerse``.
"""

import logging

from .exceptions import (
    ArityError,
    DuplicateTitleError,
    EmptyDocumentError,
    MissingTitleError,
    TextInMetadataError,
    TranslationError,
    UnrecognizedFormattingError,
    UnrecognizedKeywordError,
)
from .models import (
    AltTitle,
    Attrib,
    Category,
    ChorusDef,
    ChorusRef,
    CrossRef,
    Dance,
    Descant,
    FormattedText,
    Ignored,
    IndexEntry,
    Language,
    Metadata,
    NormalVerse,
    RefrainDef,
    SectionBreak,
    Song,
    Span,
    Style,
    Title,
    Verse,
)
from .syntax import Block, Item, Line, Sexp, is_whitespace

logger = logging.getLogger(__name__)

TAB_WIDTH = 8
ELLIPSIS = "…"

# Legacy keywords folded into their modern equivalents before dispatch.
_SYNONYMS = {
    "white-book": "title",
    "white-book-title": "title",
    "author": "attrib",
    "xref": "ref",
}

_FORMATTED_META = {
    "title": Title,
    "alt-title": AltTitle,
    "attrib": Attrib,
    "ref": CrossRef,
}

_STRING_META = {
    "category": Category,
    "index": IndexEntry,
    "lang": Language,
    "dance": Dance,
}

IGNORED_META = frozenset({
    "numbered-verses",
    "todo",
    "TODO",
    "TODO-special-formatting",
    "note",
    "ignore-this-file",
    "inline-chorus-markers",
    "inline-chorus",
    "white-book-note",
    "origin",
    "source",
})

# Inline forms rendered as an italic span over their contents.
_ITALIC_FORMS = frozenset({"italic", "note", "footnote"})


def translate(blocks: list[Block]) -> Song:
    """Translate parsed *blocks* into a :class:`Song`.

    Raises a :class:`TranslationError` subclass on the first rule violation.
    """
    if not blocks:
        raise EmptyDocumentError()
    meta = translate_meta_block(blocks[0])
    verses = [translate_verse(block) for block in blocks[1:]]
    return Song(meta=meta, verses=verses)


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def translate_meta_block(block: Block) -> list[Metadata]:
    """Translate the metadata block and check that it names exactly one title."""
    meta: list[Metadata] = []
    for line in block:
        for item in line.items:
            if is_whitespace(item):
                continue
            if isinstance(item, str):
                raise TextInMetadataError(item)
            meta.append(translate_meta_entry(item))

    titles = sum(1 for entry in meta if isinstance(entry, Title))
    if titles == 0:
        raise MissingTitleError()
    if titles > 1:
        raise DuplicateTitleError(titles)
    return meta


def translate_meta_entry(sexp: Sexp) -> Metadata:
    keyword = _SYNONYMS.get(sexp.keyword, sexp.keyword)

    if keyword in _FORMATTED_META:
        return _FORMATTED_META[keyword](formatted_text(sexp.items))
    if keyword in _STRING_META:
        return _STRING_META[keyword](sexp.string_item())
    if keyword == "descant":
        if sexp.has_args():
            raise ArityError(sexp.keyword, sexp, "no arguments")
        return Descant()
    if keyword in IGNORED_META:
        return Ignored(sexp.keyword)
    raise UnrecognizedKeywordError(sexp.keyword, sexp)


# ---------------------------------------------------------------------------
# Verses
# ---------------------------------------------------------------------------


def translate_verse(block: Block) -> Verse:
    """Translate one verse block, classifying it by its first line."""
    if not block:
        raise TranslationError("Verse block has no lines")

    marker = verse_marker(block[0])
    if marker is None:
        return NormalVerse(lines=[translate_line(line) for line in block])

    keyword, label = marker
    rest = [translate_line(line) for line in block[1:]]
    if keyword == "Chorus:":
        return ChorusDef(label, rest)
    if keyword == "Refrain:":
        return RefrainDef(label, rest)

    if rest:
        logger.warning("Discarding %d line(s) after ⟦%s⟧ marker", len(rest), keyword)
    if keyword == "section-break":
        return SectionBreak(label)
    return ChorusRef(label)


def verse_marker(line: Line) -> tuple[str, str] | None:
    """Return ``(keyword, label)`` if *line* is a verse marker line, else None.

    A marker line holds exactly one non-whitespace item, and that item is a
    marker form with the right arity.  Anything else disqualifies the line.
    """
    content = [item for item in line.items if not is_whitespace(item)]
    if len(content) != 1 or not isinstance(content[0], Sexp):
        return None
    sexp = content[0]

    if sexp.keyword in ("Chorus:", "Refrain:", "Chorus"):
        if sexp.has_args():
            return None
        return sexp.keyword, sexp.keyword.rstrip(":")

    if sexp.keyword in ("refrain", "section-break"):
        if len(sexp.items) != 1 or not isinstance(sexp.items[0], str):
            return None
        return sexp.keyword, sexp.items[0]

    return None


def translate_line(line: Line) -> FormattedText:
    ft = formatted_text(line.items)
    ft.indent = indent_width(line.indent)
    return ft


def indent_width(indent: str) -> int:
    """Column width of a raw leading-whitespace string (tabs stop every 8)."""
    return len(indent.expandtabs(TAB_WIDTH))


# ---------------------------------------------------------------------------
# Formatted text
# ---------------------------------------------------------------------------


def formatted_text(items: list[Item]) -> FormattedText:
    """Build a :class:`FormattedText` from a sequence of items."""
    ft = FormattedText()
    _add_formatted_text(items, ft)
    return ft


def _add_formatted_text(items: list[Item], ft: FormattedText) -> None:
    for item in items:
        if isinstance(item, str):
            ft.text += item
        elif item.keyword in _ITALIC_FORMS:
            # Reserve the slot so an outer span precedes the spans nested in it.
            slot = len(ft.spans)
            start = len(ft.text)
            _add_formatted_text(item.items, ft)
            if len(ft.text) > start:
                ft.spans.insert(slot, Span(start, len(ft.text), Style.ITALIC))
        elif item.keyword == "...":
            if item.has_args():
                raise ArityError(item.keyword, item, "no arguments")
            ft.text += ELLIPSIS
        else:
            raise UnrecognizedFormattingError(item.keyword, item)

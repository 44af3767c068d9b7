"""Markup parser: raw text → list of blocks of :class:`~songtype.syntax.Line`.

Grammar (informal)
------------------

* A document is a sequence of blocks separated by one or more blank lines.
  The first block holds metadata forms, the rest are verses.
* Each physical line of a block becomes a :class:`~songtype.syntax.Line`.
  Its leading spaces/tabs are kept verbatim as the line's ``indent``.
* ``⟦keyword items…⟧`` is a form.  The keyword runs up to the first
  whitespace, ``⟦`` or ``⟧``; one whitespace character after it is a
  separator.  Forms nest, and may span several physical lines, in which case
  the newlines are ordinary text inside the form.

Usage::

    from songtype.parser import parse
    blocks = parse(Path("amazing-grace.song").read_text(encoding="utf-8"))
"""

from .exceptions import ParseError
from .syntax import Block, Item, Line, Sexp

OPEN = "⟦"
CLOSE = "⟧"

_INDENT_CHARS = " \t"


def parse(text: str) -> list[Block]:
    """Parse *text* into blocks.

    Raises ParseError for unbalanced brackets or a form without a keyword.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n").lstrip("\ufeff")
    return _Parser(text).document()


class _Parser:
    """Single-pass recursive-descent parser over the whole document."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    # -- position helpers ---------------------------------------------------

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _location(self, pos: int) -> tuple[int, int]:
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def _error(self, message: str, pos: int | None = None) -> ParseError:
        line, column = self._location(self.pos if pos is None else pos)
        return ParseError(message, line, column)

    def _at_blank_line(self) -> bool:
        """True if the physical line starting at ``pos`` is whitespace-only."""
        end = self.text.find("\n", self.pos)
        rest = self.text[self.pos:] if end == -1 else self.text[self.pos:end]
        return not rest.strip()

    def _skip_line(self) -> None:
        end = self.text.find("\n", self.pos)
        self.pos = len(self.text) if end == -1 else end + 1

    # -- grammar ------------------------------------------------------------

    def document(self) -> list[Block]:
        blocks: list[Block] = []
        current: Block = []
        while self.pos < len(self.text):
            if self._at_blank_line():
                if current:
                    blocks.append(current)
                    current = []
                self._skip_line()
                continue
            current.append(self.line())
        if current:
            blocks.append(current)
        return blocks

    def line(self) -> Line:
        start = self.pos
        while self._peek() and self._peek() in _INDENT_CHARS:
            self.pos += 1
        indent = self.text[start:self.pos]
        items = self.items(top_level=True)
        if self._peek() == "\n":
            self.pos += 1
        return Line(indent=indent, items=items)

    def items(self, top_level: bool) -> list[Item]:
        """Read items up to end of line (top level) or the closing bracket."""
        items: list[Item] = []
        buf: list[str] = []

        def flush() -> None:
            if buf:
                items.append("".join(buf))
                buf.clear()

        while True:
            ch = self._peek()
            if not ch:
                break
            if ch == "\n" and top_level:
                break
            if ch == CLOSE:
                if top_level:
                    raise self._error(f"Unmatched {CLOSE}")
                break
            if ch == OPEN:
                flush()
                items.append(self.sexp())
                continue
            buf.append(ch)
            self.pos += 1
        flush()
        return items

    def sexp(self) -> Sexp:
        start = self.pos
        self.pos += 1  # OPEN
        kw_start = self.pos
        while self._peek() and not self._peek().isspace() and self._peek() not in (OPEN, CLOSE):
            self.pos += 1
        keyword = self.text[kw_start:self.pos]
        if not keyword:
            raise self._error("Form has no keyword", start)
        if self._peek().isspace():
            self.pos += 1  # separator
        items = self.items(top_level=False)
        if self._peek() != CLOSE:
            raise self._error(f"Unclosed {OPEN}{keyword}", start)
        self.pos += 1  # CLOSE
        return Sexp(keyword=keyword, items=items)

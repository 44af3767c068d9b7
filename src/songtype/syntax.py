"""Syntax tree produced by :mod:`songtype.parser` and consumed by the translator.

A document is a list of blocks; each block is a list of :class:`Line`.  A line
holds its raw leading whitespace and a sequence of items, where an item is
either a plain ``str`` (a text run) or a :class:`Sexp`::

    ⟦title Amazing ⟦italic Grace⟧⟧

    Sexp("title", ["Amazing ", Sexp("italic", ["Grace"])])
"""

from dataclasses import dataclass, field

from .exceptions import ArgumentTypeError, ArityError


@dataclass
class Sexp:
    """A bracketed form: a keyword followed by nested items."""

    keyword: str
    items: list["Item"] = field(default_factory=list)

    def __str__(self) -> str:
        inner = "".join(str(item) for item in self.items)
        if not inner:
            return f"⟦{self.keyword}⟧"
        return f"⟦{self.keyword} {inner}⟧"

    def has_args(self) -> bool:
        return bool(self.items)

    def string_item(self) -> str:
        """Return the single plain-text argument of this form.

        Raises ArityError unless there is exactly one item, and
        ArgumentTypeError if that item is a nested form.
        """
        if len(self.items) != 1:
            raise ArityError(self.keyword, self, "exactly one argument")
        item = self.items[0]
        if not isinstance(item, str):
            raise ArgumentTypeError(self.keyword, self)
        return item


Item = str | Sexp


@dataclass
class Line:
    """One physical line of a block."""

    indent: str  # raw leading whitespace, e.g. "    "
    items: list[Item] = field(default_factory=list)


Block = list[Line]


def is_whitespace(item: Item) -> bool:
    """Return True for a text item made only of whitespace."""
    return isinstance(item, str) and not item.strip()

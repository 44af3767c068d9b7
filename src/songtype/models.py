from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator


class Style(Enum):
    ITALIC = auto()


@dataclass(frozen=True)
class Span:
    """A style applied to ``text[start:end]`` of a :class:`FormattedText`."""

    start: int
    end: int
    style: Style = Style.ITALIC


@dataclass
class FormattedText:
    """A run of text with style spans and an indent.

    ``indent`` is the raw indentation width (columns) as translated, and the
    dense indent ordinal once :func:`songtype.indent.normalize_indents` has run.
    """

    text: str = ""
    spans: list[Span] = field(default_factory=list)
    indent: int = 0

    def runs(self) -> list[tuple[str, bool]]:
        """Split the text into maximal ``(chunk, italic)`` runs.

        Nested or overlapping italic spans collapse into a single italic run.
        """
        if not self.text:
            return []
        cuts = {0, len(self.text)}
        for span in self.spans:
            cuts.update((span.start, span.end))
        bounds = sorted(c for c in cuts if 0 <= c <= len(self.text))

        runs: list[tuple[str, bool]] = []
        for start, end in zip(bounds, bounds[1:]):
            italic = any(
                s.style is Style.ITALIC and s.start <= start and end <= s.end
                for s in self.spans
            )
            chunk = self.text[start:end]
            if runs and runs[-1][1] == italic:
                runs[-1] = (runs[-1][0] + chunk, italic)
            else:
                runs.append((chunk, italic))
        return runs


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


@dataclass
class Title:
    """The primary title of the song."""

    text: FormattedText


@dataclass
class AltTitle:
    """An alternative title."""

    text: FormattedText


@dataclass
class Attrib:
    """Attribution (author, translator, tune)."""

    text: FormattedText


@dataclass
class CrossRef:
    """Reference to another book containing the song."""

    text: FormattedText


@dataclass
class Language:
    """RFC 5646 language tag of the lyrics."""

    tag: str


@dataclass
class Category:
    """The category in which to file this song."""

    name: str


@dataclass
class IndexEntry:
    """An additional phrase under which to index this song."""

    phrase: str


@dataclass
class Dance:
    """A type of dance this song may be suitable for."""

    name: str


@dataclass
class Descant:
    """This song has a descant (somewhere)."""


@dataclass
class Ignored:
    """A recognized keyword with no effect on the song."""

    keyword: str


Metadata = (
    Title | AltTitle | Attrib | CrossRef | Language | Category | IndexEntry | Dance
    | Descant | Ignored
)


# ---------------------------------------------------------------------------
# Verses
# ---------------------------------------------------------------------------


@dataclass
class NormalVerse:
    lines: list[FormattedText] = field(default_factory=list)


@dataclass
class ChorusDef:
    """A chorus printed in full under a ``Chorus:`` heading."""

    label: str
    lines: list[FormattedText] = field(default_factory=list)


@dataclass
class RefrainDef:
    """A refrain printed with its label inline, e.g. ``Refrain: …``."""

    label: str
    lines: list[FormattedText] = field(default_factory=list)


@dataclass
class ChorusRef:
    """A reference to a chorus printed elsewhere; only the label is shown."""

    label: str


@dataclass
class SectionBreak:
    """A divider, e.g. before the same tune in another language."""

    label: str


Verse = NormalVerse | ChorusDef | RefrainDef | ChorusRef | SectionBreak


@dataclass
class Song:
    """A translated song: metadata entries and verses in source order."""

    meta: list[Metadata] = field(default_factory=list)
    verses: list[Verse] = field(default_factory=list)

    @property
    def title(self) -> FormattedText | None:
        for entry in self.meta:
            if isinstance(entry, Title):
                return entry.text
        return None

    def lines(self) -> Iterator[FormattedText]:
        """Yield every verse line that carries content, in order."""
        for verse in self.verses:
            if isinstance(verse, (NormalVerse, ChorusDef, RefrainDef)):
                yield from verse.lines

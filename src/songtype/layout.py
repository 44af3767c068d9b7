"""Page layout: per-verse layout rules and the font-size fitting search.

The search treats text measurement as a black box.  Candidate font sizes are
tried from the largest down; each candidate is laid out in a *dry run* that
only measures, and the first one whose bounding box fits the page's content
box is committed (painted).  If nothing fits, the smallest size is committed
anyway and a warning is logged, so every song still produces a page.

Usage::

    from songtype.layout import LayoutSettings, fit_and_render
    from songtype.pdf import PdfEngine

    settings = LayoutSettings()
    with PdfEngine("amazing-grace.pdf") as engine:
        fit = fit_and_render(song, settings.content_box(), engine, settings)
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Protocol

from .exceptions import LayoutError
from .models import (
    ChorusDef,
    ChorusRef,
    FormattedText,
    NormalVerse,
    RefrainDef,
    SectionBreak,
    Song,
    Span,
    Verse,
)

logger = logging.getLogger(__name__)

PAGE_WIDTH = 8.5 * 72.0
PAGE_HEIGHT = 11.0 * 72.0
MARGIN = 72.0
INDENT = 24.0
FONT_SIZE = 16.0
MIN_FONT_SIZE = 13.0
SIZE_STEP = 0.5
TITLE_FONT_SIZE = 20.0
VERSE_GAP_RATIO = 0.875  # 14pt between verses at 16pt
COLUMN_GUTTER = 24.0

Size = tuple[float, float]


class Face(Enum):
    REGULAR = auto()
    BOLD = auto()
    ITALIC = auto()


class TextEngine(Protocol):
    """Measurement and paint service used by the layout.

    Positions are ``(x, y)`` in points from the top-left corner of the page,
    ``y`` growing downwards and naming the top of the text.
    """

    def measure(self, text: str, spans: list[Span], face: Face, size: float) -> Size:
        """Return ``(width, height)`` of *text* without drawing it."""

    def paint(
        self, text: str, spans: list[Span], face: Face, size: float, position: tuple[float, float]
    ) -> Size:
        """Draw *text* at *position* and return the same size as :meth:`measure`."""

    def new_page(self, size: Size) -> None: ...

    def end_page(self) -> None: ...


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Box:
    """Usable content rectangle on the page (top-left origin)."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class LayoutParams:
    """Parameters for a single trial layout."""

    font_size: float
    verse_gap: float = 0.0
    column_break: float | None = None  # start a new column past this height


@dataclass(frozen=True)
class Fit:
    """Outcome of the size search: the parameters to commit and their extent."""

    params: LayoutParams
    width: float
    height: float
    fits: bool


@dataclass(frozen=True)
class LayoutSettings:
    page_size: Size = (PAGE_WIDTH, PAGE_HEIGHT)
    margin: float = MARGIN
    max_font_size: float = FONT_SIZE
    min_font_size: float = MIN_FONT_SIZE
    size_step: float = SIZE_STEP
    title_font_size: float = TITLE_FONT_SIZE
    indent_unit: float = INDENT
    verse_gap_ratio: float = VERSE_GAP_RATIO
    column_break: float | None = None
    column_gutter: float = COLUMN_GUTTER

    def content_box(self) -> Box:
        width, height = self.page_size
        return Box(self.margin, self.margin, width - 2 * self.margin, height - 2 * self.margin)

    def params(self, font_size: float) -> LayoutParams:
        return LayoutParams(font_size, font_size * self.verse_gap_ratio, self.column_break)

    def sizes(self) -> list[float]:
        return candidate_sizes(self.max_font_size, self.min_font_size, self.size_step)


def candidate_sizes(max_size: float, min_size: float, step: float = SIZE_STEP) -> list[float]:
    """Return font sizes from *max_size* down to *min_size*, both inclusive.

    >>> candidate_sizes(14.0, 13.0)
    [14.0, 13.5, 13.0]
    """
    if step <= 0:
        raise LayoutError(f"Font size step must be positive, got {step}")
    if min_size <= 0 or min_size > max_size:
        raise LayoutError(f"Invalid font size range {max_size}..{min_size}")

    sizes: list[float] = []
    i = 0
    while True:
        size = round(max_size - i * step, 6)
        if size < min_size:
            break
        sizes.append(size)
        i += 1
    if sizes[-1] > min_size:
        sizes.append(min_size)
    return sizes


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def find_fit(
    box: Box,
    dry_run: Callable[[LayoutParams], Size],
    sizes: list[float],
    params_for: Callable[[float], LayoutParams] = LayoutParams,
) -> Fit:
    """Return the largest candidate whose dry run fits inside *box*.

    *sizes* must be in descending order.  When no candidate fits, the result
    describes the last (smallest) candidate with ``fits=False``.
    """
    if not sizes:
        raise LayoutError("No candidate font sizes")

    for size in sizes:
        params = params_for(size)
        width, height = dry_run(params)
        if width > box.width or height > box.height:
            logger.debug(
                "%.1fpt rejected: %.1f x %.1f exceeds %.1f x %.1f",
                size, width, height, box.width, box.height,
            )
            continue
        logger.info("%.1fpt fits: %.1f x %.1f", size, width, height)
        return Fit(params, width, height, True)

    return Fit(params, width, height, False)


def fit_and_render(
    song: Song, box: Box, engine: TextEngine, settings: LayoutSettings | None = None
) -> Fit:
    """Find the largest fitting font size for *song* and paint one page.

    Content that fits nowhere is painted at the minimum size (it may overflow
    the page) and reported with a warning; check ``Fit.fits`` to tell.

    Raises LayoutError if the song has no title or the size range is invalid.
    """
    settings = settings or LayoutSettings()
    layout = SongLayout(song, engine, settings)
    fit = find_fit(box, layout.dry_run, settings.sizes(), settings.params)
    if not fit.fits:
        logger.warning(
            "Content does not fit %.1f x %.1f even at %.1fpt (needs %.1f x %.1f)",
            box.width, box.height, fit.params.font_size, fit.width, fit.height,
        )

    engine.new_page(settings.page_size)
    layout.commit(fit.params, (box.x, box.y))
    engine.end_page()
    return fit


# ---------------------------------------------------------------------------
# Per-verse layout
# ---------------------------------------------------------------------------


Draw = Callable[[str, list[Span], Face, float, float, float], Size]


class SongLayout:
    """Lays out the title and verses of one song through a :class:`TextEngine`.

    :meth:`dry_run` only measures; :meth:`commit` paints with identical
    geometry, so a committed page has exactly the extent the dry run reported.
    """

    def __init__(self, song: Song, engine: TextEngine, settings: LayoutSettings | None = None):
        if song.title is None:
            raise LayoutError("Song requires a title")
        self.song = song
        self.engine = engine
        self.settings = settings or LayoutSettings()

    def dry_run(self, params: LayoutParams) -> Size:
        return self._run(params, self._measure)

    def commit(self, params: LayoutParams, origin: tuple[float, float]) -> Size:
        ox, oy = origin

        def paint(text, spans, face, size, x, y):
            return self.engine.paint(text, spans, face, size, (ox + x, oy + y))

        return self._run(params, paint)

    def _measure(self, text, spans, face, size, x, y) -> Size:
        return self.engine.measure(text, spans, face, size)

    def _run(self, params: LayoutParams, draw: Draw) -> Size:
        title = self.song.title
        title_w, title_h = draw(title.text, title.spans, Face.BOLD, self.settings.title_font_size, 0.0, 0.0)

        top = title_h
        x, y = 0.0, top
        column_width = 0.0
        width, height = title_w, title_h

        for verse in self.song.verses:
            if params.column_break is not None and y - top > params.column_break:
                x += column_width + self.settings.column_gutter
                y = top
                column_width = 0.0
            # A refrain continues the verse before it; a leading one still gets the gap.
            if not isinstance(verse, RefrainDef) or verse is self.song.verses[0]:
                y += params.verse_gap
            w, h = self._verse(verse, draw, params.font_size, x, y)
            y += h
            column_width = max(column_width, w)
            width = max(width, x + column_width)
            height = max(height, y)

        return width, height

    def _verse(self, verse: Verse, draw: Draw, size: float, x: float, y: float) -> Size:
        if isinstance(verse, NormalVerse):
            return self._lines(verse.lines, draw, size, x, y)

        if isinstance(verse, ChorusDef):
            label_w, label_h = draw(f"{verse.label}:", [], Face.BOLD, size, x, y)
            body_w, body_h = self._lines(verse.lines, draw, size, x, y + label_h)
            return max(label_w, body_w), label_h + body_h

        if isinstance(verse, RefrainDef):
            label_w, label_h = draw(f"{verse.label}: ", [], Face.BOLD, size, x, y)
            body_w, body_h = self._lines(verse.lines, draw, size, x + label_w, y)
            return label_w + body_w, max(label_h, body_h)

        if isinstance(verse, (ChorusRef, SectionBreak)):
            return draw(verse.label, [], Face.ITALIC, size, x, y)

        raise LayoutError(f"Unknown verse type {type(verse).__name__}")

    def _lines(self, lines: list[FormattedText], draw: Draw, size: float, x: float, y: float) -> Size:
        """Stack *lines* vertically, each shifted right by its indent."""
        width = height = 0.0
        for line in lines:
            offset = line.indent * self.settings.indent_unit
            w, h = draw(line.text, line.spans, Face.REGULAR, size, x + offset, y + height)
            width = max(width, offset + w)
            height += h
        return width, height

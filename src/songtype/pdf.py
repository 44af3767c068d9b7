"""ReportLab implementation of :class:`~songtype.layout.TextEngine`.

Text is measured with ``pdfmetrics.stringWidth`` and drawn run by run on a
``reportlab.pdfgen.canvas.Canvas``; italic spans switch to the italic face of
the current :class:`FontFamily`.  Layout coordinates have their origin at the
top-left of the page and are flipped to ReportLab's bottom-left origin here.
"""

from dataclasses import dataclass
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from .exceptions import LayoutError
from .layout import PAGE_HEIGHT, PAGE_WIDTH, Face, Size
from .models import FormattedText, Span

LINE_SPACING = 1.25  # line height as a multiple of the font size

_TTF_SUFFIXES = {
    "regular": "Regular",
    "bold": "Bold",
    "italic": "Italic",
    "bold_italic": "BoldItalic",
}


@dataclass(frozen=True)
class FontFamily:
    """Registered font names for the four faces a song uses."""

    regular: str
    bold: str
    italic: str
    bold_italic: str

    @classmethod
    def times(cls) -> "FontFamily":
        """The standard Type 1 Times faces; nothing to register."""
        return cls("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic")

    @classmethod
    def from_directory(cls, directory: str | Path, name: str) -> "FontFamily":
        """Register ``<name>-Regular.ttf`` and friends from *directory*.

        Raises LayoutError if any of the four files is missing.
        """
        directory = Path(directory)
        registered = pdfmetrics.getRegisteredFontNames()
        names: dict[str, str] = {}
        for attr, suffix in _TTF_SUFFIXES.items():
            font_name = f"{name}-{suffix}"
            path = directory / f"{font_name}.ttf"
            if not path.is_file():
                raise LayoutError(f"Font file not found: {path}")
            if font_name not in registered:
                pdfmetrics.registerFont(TTFont(font_name, str(path)))
            names[attr] = font_name
        pdfmetrics.registerFontFamily(
            name,
            normal=names["regular"],
            bold=names["bold"],
            italic=names["italic"],
            boldItalic=names["bold_italic"],
        )
        return cls(**names)

    def font_for(self, face: Face, italic: bool = False) -> str:
        bold = face is Face.BOLD
        italic = italic or face is Face.ITALIC
        if bold and italic:
            return self.bold_italic
        if bold:
            return self.bold
        if italic:
            return self.italic
        return self.regular


class PdfEngine:
    """Measure and paint song text into a PDF file, one page per song.

    Usage::

        with PdfEngine("song.pdf") as engine:
            fit_and_render(song, box, engine)
    """

    def __init__(
        self,
        path: str | Path,
        fonts: FontFamily | None = None,
        page_size: Size = (PAGE_WIDTH, PAGE_HEIGHT),
    ):
        self.path = Path(path)
        self.fonts = fonts or FontFamily.times()
        self.page_size = page_size
        self.canvas = canvas.Canvas(str(self.path), pagesize=page_size)

    def __enter__(self) -> "PdfEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Only a completed document is written out.
        if exc_type is None:
            self.close()

    def _rows(self, text: str, spans: list[Span]) -> list[list[tuple[str, bool]]]:
        """Split the styled runs of *text* into rows at each newline."""
        rows: list[list[tuple[str, bool]]] = [[]]
        for chunk, italic in FormattedText(text, spans).runs():
            first, *rest = chunk.split("\n")
            if first:
                rows[-1].append((first, italic))
            for piece in rest:
                rows.append([(piece, italic)] if piece else [])
        return rows

    def _row_width(self, row: list[tuple[str, bool]], face: Face, size: float) -> float:
        return sum(
            pdfmetrics.stringWidth(chunk, self.fonts.font_for(face, italic), size)
            for chunk, italic in row
        )

    def measure(self, text: str, spans: list[Span], face: Face, size: float) -> Size:
        rows = self._rows(text, spans)
        width = max(self._row_width(row, face, size) for row in rows)
        return width, len(rows) * size * LINE_SPACING

    def paint(
        self, text: str, spans: list[Span], face: Face, size: float, position: tuple[float, float]
    ) -> Size:
        left, y = position
        ascent, _descent = pdfmetrics.getAscentDescent(self.fonts.font_for(face), size)
        baseline = self.page_size[1] - y - ascent

        for row in self._rows(text, spans):
            x = left
            for chunk, italic in row:
                font = self.fonts.font_for(face, italic)
                self.canvas.setFont(font, size)
                self.canvas.drawString(x, baseline, chunk)
                x += pdfmetrics.stringWidth(chunk, font, size)
            baseline -= size * LINE_SPACING

        return self.measure(text, spans, face, size)

    def new_page(self, size: Size) -> None:
        self.page_size = size
        self.canvas.setPageSize(size)

    def end_page(self) -> None:
        self.canvas.showPage()

    def close(self) -> None:
        self.canvas.save()

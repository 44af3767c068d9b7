import logging
import sys
from pathlib import Path

import click

from .exceptions import SongtypeError
from .indent import normalize_indents
from .layout import FONT_SIZE, MIN_FONT_SIZE, Fit, LayoutSettings, fit_and_render
from .models import Song
from .parser import parse
from .pdf import FontFamily, PdfEngine
from .translate import translate


def load_song(path: Path) -> Song:
    """Read, parse, translate and normalize the song file at *path*."""
    text = path.read_text(encoding="utf-8")
    return normalize_indents(translate(parse(text)))


def render_song(song: Song, dest: Path, settings: LayoutSettings, fonts: FontFamily | None = None) -> Fit:
    """Typeset *song* onto a single page of a new PDF at *dest*."""
    with PdfEngine(dest, fonts=fonts, page_size=settings.page_size) as engine:
        return fit_and_render(song, settings.content_box(), engine, settings)


def _collect_files(sources: tuple[Path, ...]) -> list[Path]:
    """Expand directories to their (sorted, non-hidden) files."""
    files: list[Path] = []
    for source in sources:
        if source.is_dir():
            files.extend(
                sorted(p for p in source.iterdir() if p.is_file() and not p.name.startswith("."))
            )
        else:
            files.append(source)
    return files


@click.command()
@click.argument("sources", nargs=-1, required=True,
                type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output-dir", default=".", show_default=True, metavar="DIR",
              type=click.Path(file_okay=False, path_type=Path),
              help="Directory for the generated PDFs.")
@click.option("--check", is_flag=True, default=False,
              help="Only parse and translate; do not write PDFs.")
@click.option("--max-size", default=FONT_SIZE, show_default=True, type=float,
              help="Largest font size to try, in points.")
@click.option("--min-size", default=MIN_FONT_SIZE, show_default=True, type=float,
              help="Smallest font size to try, in points.")
@click.option("--column-break", default=None, type=float, metavar="HEIGHT",
              help="Start a new column once a column is taller than HEIGHT points.")
@click.option("--font-dir", default=None, metavar="DIR",
              type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Directory holding <NAME>-Regular.ttf, -Bold, -Italic, -BoldItalic.")
@click.option("--font-name", default="Caladea", show_default=True,
              help="Font family name to load from --font-dir.")
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Log the font size search.")
def main(
    sources: tuple[Path, ...],
    output_dir: Path,
    check: bool,
    max_size: float,
    min_size: float,
    column_break: float | None,
    font_dir: Path | None,
    font_name: str,
    verbose: bool,
) -> None:
    """Typeset song markup files to one-page PDFs.

    \b
    SOURCES are song files or directories of song files.  Each song is
    rendered at the largest font size that fits the page.  A file that
    fails to parse or translate is reported and skipped.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # --- Settings ---
    settings = LayoutSettings(max_font_size=max_size, min_font_size=min_size,
                              column_break=column_break)
    try:
        settings.sizes()
        fonts = FontFamily.from_directory(font_dir, font_name) if font_dir else None
    except SongtypeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if not check:
        output_dir.mkdir(parents=True, exist_ok=True)

    # --- Batch ---
    failures = 0
    for path in _collect_files(sources):
        click.echo(f"*** {path.name} ***")
        try:
            song = load_song(path)
            if check:
                continue
            dest = output_dir / f"{path.stem}.pdf"
            fit = render_song(song, dest, settings, fonts)
        except (SongtypeError, OSError, UnicodeDecodeError) as exc:
            click.echo(f"Error: {path}: {exc}", err=True)
            failures += 1
            continue

        if fit.fits:
            click.echo(f"Written to {dest} at {fit.params.font_size:g}pt")
        else:
            click.echo(
                f"Warning: {path}: content does not fit the page; "
                f"written to {dest} at {fit.params.font_size:g}pt",
                err=True,
            )

    if failures:
        sys.exit(1)

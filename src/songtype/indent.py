from .models import Song


def normalize_indents(song: Song) -> Song:
    """Replace raw indentation widths with dense ordinals, in place.

    The distinct widths found on verse lines are sorted and each line's indent
    becomes its rank, so ``k`` distinct widths map onto ``0 .. k-1`` with their
    order preserved.  Running this twice is the same as running it once.

    Returns *song* for chaining.
    """
    lines = list(song.lines())
    ranks = {width: rank for rank, width in enumerate(sorted({line.indent for line in lines}))}
    for line in lines:
        line.indent = ranks[line.indent]
    return song

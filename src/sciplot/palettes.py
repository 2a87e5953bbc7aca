"""Resolve project palettes into colors and matplotlib colormaps.

Discrete palettes map category labels to colors. Levels missing from the
palette get the *unseen* color, and one warning lists all of them. Continuous
palettes are the palette's colors in order, used as gradient stops.

The reserved name ``"default"`` selects matplotlib's built-in scales
(``tab10`` / ``RdBu_r``) unless a palette literally named ``default`` is loaded.

Examples:
    >>> from sciplot.config import ConfigStore
    >>> store = ConfigStore()
    >>> _ = store.set_palettes({"pair": {"A": "#111111", "B": "#222222"}})
    >>> discrete_lookup("pair", store=store)(["B", "A"])
    ['#222222', '#111111']
    >>> discrete_colors(["x", "y"], store=store)
    ['#1f77b4', '#ff7f0e']
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import matplotlib
import matplotlib.pyplot as plt
from matplotlib.colors import Colormap, LinearSegmentedColormap, ListedColormap, to_hex

from sciplot.config import ConfigStore, default_store
from sciplot.errors import PaletteKindError, PaletteNotFoundError
from sciplot.log import logger
from sciplot.models import LabeledPalette, Palette

DEFAULT_PALETTE = "default"
UNSEEN_COLOR = "#B3B3B3"  # medium grey
FALLBACK_DISCRETE = "tab10"
FALLBACK_CONTINUOUS = "RdBu_r"


def _resolve_store(store: ConfigStore | None) -> ConfigStore:
    return store if store is not None else default_store()


def get_palette(name: str, store: ConfigStore | None = None) -> Palette:
    """Return the loaded palette called *name*.

    Raises:
        NotLoadedError: No palette table has been loaded.
        PaletteNotFoundError: *name* is not in the table.
    """
    palettes = _resolve_store(store).get_palettes()
    if name not in palettes:
        raise PaletteNotFoundError(name, palettes)
    return palettes[name]


def uses_builtin(name: str, store: ConfigStore | None = None) -> bool:
    """True when *name* should defer to matplotlib's built-in scales."""
    if name != DEFAULT_PALETTE:
        return False
    store = _resolve_store(store)
    return not store.has_palettes or DEFAULT_PALETTE not in store.get_palettes()


def discrete_lookup(
    palette_name: str,
    unseen_color: str = UNSEEN_COLOR,
    store: ConfigStore | None = None,
) -> Callable[[Sequence[str]], list[str]]:
    """Build a function mapping data levels to the colors of a labeled palette.

    The palette is looked up immediately, so a bad name fails here and not
    when the returned function is first called.

    Args:
        palette_name: Name of a labeled palette.
        unseen_color: Color for levels that have no entry in the palette.
        store: Store to read from. Defaults to :func:`default_store`.

    Returns:
        A function taking a sequence of levels and returning one color per level.

    Raises:
        PaletteNotFoundError: The palette is not loaded.
        PaletteKindError: The palette is an unlabeled color list.
    """
    palette = get_palette(palette_name, store)
    if not isinstance(palette, LabeledPalette):
        raise PaletteKindError(palette_name)
    colors = dict(palette.colors)

    def lookup(levels: Sequence[str]) -> list[str]:
        output: list[str] = []
        unseen: dict[str, None] = {}
        for level in levels:
            key = str(level)
            color = colors.get(key)
            if color is None:
                color = unseen_color
                unseen[key] = None
            output.append(color)
        if unseen:
            logger.warning(
                f"The following data values were not found in the '{palette_name}' "
                f"palette and have been set to {unseen_color}: {', '.join(unseen)}"
            )
        return output

    return lookup


def continuous_colors(palette_name: str, store: ConfigStore | None = None) -> list[str]:
    """Return the palette's colors in stored order, labels dropped.

    Raises:
        PaletteNotFoundError: The palette is not loaded.
    """
    return get_palette(palette_name, store).values()


# -- matplotlib scales -----------------------------------------------------
def discrete_colors(
    levels: Sequence[str],
    palette: str = DEFAULT_PALETTE,
    unseen_color: str = UNSEEN_COLOR,
    store: ConfigStore | None = None,
) -> list[str]:
    """Resolve one color per level, ready for ``color=`` arguments.

    With the built-in default, ``tab10`` is cycled over the levels.
    """
    if uses_builtin(palette, store):
        cmap = matplotlib.colormaps[FALLBACK_DISCRETE]
        return [to_hex(cmap(i % cmap.N)) for i in range(len(levels))]
    return discrete_lookup(palette, unseen_color, store)(levels)


def discrete_colormap(
    levels: Sequence[str],
    palette: str = DEFAULT_PALETTE,
    unseen_color: str = UNSEEN_COLOR,
    store: ConfigStore | None = None,
) -> ListedColormap:
    """A ``ListedColormap`` whose i-th color belongs to ``levels[i]``."""
    return ListedColormap(
        discrete_colors(levels, palette, unseen_color, store), name=palette
    )


def continuous_colormap(
    palette: str = DEFAULT_PALETTE,
    store: ConfigStore | None = None,
    n: int = 256,
) -> Colormap:
    """A gradient colormap through the palette's colors.

    Examples:
        >>> continuous_colormap(store=ConfigStore()).name
        'RdBu_r'
    """
    if uses_builtin(palette, store):
        return matplotlib.colormaps[FALLBACK_CONTINUOUS]
    colors = continuous_colors(palette, store)
    if len(colors) == 1:
        colors = colors * 2
    return LinearSegmentedColormap.from_list(palette, colors, N=n)


def display_palette(
    palette_name: str,
    store: ConfigStore | None = None,
) -> tuple[plt.Figure, plt.Axes]:
    """Draw a swatch of a loaded palette, one bar per color.

    Each bar is annotated with its hex code, and with its label for labeled
    palettes.

    Returns:
        The ``(fig, ax)`` pair. The caller saves or closes the figure.
    """
    palette = get_palette(palette_name, store)
    colors = palette.values()
    if isinstance(palette, LabeledPalette):
        labels = list(palette.colors)
    else:
        labels = [str(i + 1) for i in range(len(colors))]

    fig, ax = plt.subplots(figsize=(max(4.0, 0.9 * len(colors)), 1.8))
    ax.bar(range(len(colors)), [1] * len(colors), width=1, color=colors)
    for i, (label, color) in enumerate(zip(labels, colors)):
        ax.text(i, 0.5, color, ha="center", va="center", color="white",
                fontsize=8, fontweight="bold")
        ax.text(i, 1.05, label, ha="center", va="bottom", color="black", fontsize=9)
    ax.set_xlim(-0.5, len(colors) - 0.5)
    ax.set_ylim(0, 1.3)
    ax.set_title(f"Project Palette: {palette_name}")
    ax.set_axis_off()
    return fig, ax

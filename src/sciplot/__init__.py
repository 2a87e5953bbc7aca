"""sciplot: project color palettes and plot themes for matplotlib.

Examples:
    >>> import sciplot
    >>> hasattr(sciplot, '__version__')
    True
"""

from importlib.metadata import PackageNotFoundError, version

from sciplot.config import ConfigStore, default_store, initialize
from sciplot.errors import (
    FetchError,
    NotLoadedError,
    PaletteNotFoundError,
    ParseError,
    SciplotError,
    ThemeNotFoundError,
    UnknownBaseThemeError,
)
from sciplot.palettes import (
    continuous_colormap,
    continuous_colors,
    discrete_colormap,
    discrete_colors,
    discrete_lookup,
    display_palette,
)
from sciplot.theme import Theme, resolve_theme

try:
    __version__ = version("sciplot")
except PackageNotFoundError:
    __version__ = "0.0.0"
__all__ = [
    "ConfigStore",
    "default_store",
    "initialize",
    "discrete_lookup",
    "discrete_colors",
    "discrete_colormap",
    "continuous_colors",
    "continuous_colormap",
    "display_palette",
    "Theme",
    "resolve_theme",
    "SciplotError",
    "FetchError",
    "ParseError",
    "NotLoadedError",
    "PaletteNotFoundError",
    "ThemeNotFoundError",
    "UnknownBaseThemeError",
]

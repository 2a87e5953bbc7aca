"""Resolve project themes into matplotlib rcParams.

A theme entry names a base preset, a font family, two text sizes and any
number of extra settings. :func:`resolve_theme` merges these with per-call
overrides and returns a :class:`Theme`, which can be applied globally, used as
a context manager, or flattened into an rcParams dict.

Settings use ggplot-style element names (``axis.text``, ``plot.title``,
``legend.position``...). The ones with a matplotlib equivalent are translated
by :meth:`Theme.rc_params`; keys that are already rcParams pass through.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import matplotlib as mpl
import matplotlib.pyplot as plt
from matplotlib import font_manager
from matplotlib import style as mpl_style
from matplotlib.axes import Axes

from sciplot.config import ConfigStore, default_store
from sciplot.elements import (
    ELEMENT_TYPES,
    BlankElement,
    LineElement,
    RectElement,
    TextElement,
    parse_element,
)
from sciplot.errors import ThemeNotFoundError, UnknownBaseThemeError
from sciplot.log import logger

FALLBACK_FONT = "sans-serif"

# -- Base presets ----------------------------------------------------------
_NO_SPINES = {
    "axes.spines.left": False,
    "axes.spines.right": False,
    "axes.spines.top": False,
    "axes.spines.bottom": False,
}

BASE_THEMES: dict[str, dict[str, Any]] = {
    "theme_minimal": {
        **_NO_SPINES,
        "figure.facecolor": "white",
        "axes.facecolor": "white",
        "axes.grid": True,
        "axes.axisbelow": True,
        "grid.color": "#EBEBEB",
        "grid.linewidth": 0.8,
        "xtick.major.size": 0,
        "ytick.major.size": 0,
        "legend.frameon": False,
    },
    "theme_bw": {
        "figure.facecolor": "white",
        "axes.facecolor": "white",
        "axes.edgecolor": "#333333",
        "axes.linewidth": 0.8,
        "axes.grid": True,
        "axes.axisbelow": True,
        "grid.color": "#EBEBEB",
        "grid.linewidth": 0.8,
        "xtick.color": "#333333",
        "ytick.color": "#333333",
        "legend.frameon": False,
    },
    "theme_classic": {
        "figure.facecolor": "white",
        "axes.facecolor": "white",
        "axes.edgecolor": "black",
        "axes.linewidth": 0.8,
        "axes.spines.top": False,
        "axes.spines.right": False,
        "axes.grid": False,
        "legend.frameon": False,
    },
    "theme_gray": {
        **_NO_SPINES,
        "figure.facecolor": "white",
        "axes.facecolor": "#EBEBEB",
        "axes.grid": True,
        "axes.axisbelow": True,
        "grid.color": "white",
        "grid.linewidth": 1.0,
        "xtick.color": "#333333",
        "ytick.color": "#333333",
        "legend.frameon": False,
    },
    "theme_light": {
        "figure.facecolor": "white",
        "axes.facecolor": "white",
        "axes.edgecolor": "#B3B3B3",
        "axes.linewidth": 0.6,
        "axes.grid": True,
        "axes.axisbelow": True,
        "grid.color": "#DEDEDE",
        "grid.linewidth": 0.5,
        "xtick.color": "#B3B3B3",
        "ytick.color": "#B3B3B3",
        "legend.frameon": False,
    },
    "theme_void": {
        **_NO_SPINES,
        "figure.facecolor": "white",
        "axes.facecolor": "white",
        "axes.grid": False,
        "xtick.bottom": False,
        "ytick.left": False,
        "xtick.labelbottom": False,
        "ytick.labelleft": False,
        "legend.frameon": False,
    },
}
BASE_THEMES["theme_grey"] = BASE_THEMES["theme_gray"]


def base_theme_params(name: str) -> dict[str, Any]:
    """Return the rcParams of a base preset or a matplotlib style sheet.

    Raises:
        UnknownBaseThemeError: *name* is neither.

    Examples:
        >>> base_theme_params("theme_classic")["axes.spines.top"]
        False
        >>> "axes.facecolor" in base_theme_params("ggplot")
        True
    """
    if name in BASE_THEMES:
        return dict(BASE_THEMES[name])
    if name in mpl_style.library:
        return dict(mpl_style.library[name])
    raise UnknownBaseThemeError(name, [*BASE_THEMES, *mpl_style.library])


# -- Element translation ---------------------------------------------------
_TEXT_TARGETS: dict[str, dict[str, list[str]]] = {
    "text": {"size": ["font.size"], "color": ["text.color"]},
    "axis.text": {
        "size": ["xtick.labelsize", "ytick.labelsize"],
        "color": ["xtick.labelcolor", "ytick.labelcolor"],
    },
    "axis.text.x": {"size": ["xtick.labelsize"], "color": ["xtick.labelcolor"]},
    "axis.text.y": {"size": ["ytick.labelsize"], "color": ["ytick.labelcolor"]},
    "axis.title": {
        "size": ["axes.labelsize"],
        "color": ["axes.labelcolor"],
        "weight": ["axes.labelweight"],
    },
    "plot.title": {
        "size": ["axes.titlesize"],
        "color": ["axes.titlecolor"],
        "weight": ["axes.titleweight"],
        "location": ["axes.titlelocation"],
    },
    "legend.text": {"size": ["legend.fontsize"], "color": ["legend.labelcolor"]},
    "legend.title": {"size": ["legend.title_fontsize"]},
}

_LINE_TARGETS: dict[str, dict[str, list[str]]] = {
    "panel.grid": {
        "color": ["grid.color"],
        "linewidth": ["grid.linewidth"],
        "linestyle": ["grid.linestyle"],
    },
    "axis.line": {"color": ["axes.edgecolor"], "linewidth": ["axes.linewidth"]},
    "axis.ticks": {
        "color": ["xtick.color", "ytick.color"],
        "linewidth": ["xtick.major.width", "ytick.major.width"],
    },
}
_LINE_TARGETS["panel.grid.major"] = _LINE_TARGETS["panel.grid"]

_RECT_TARGETS: dict[str, dict[str, list[str]]] = {
    "panel.background": {"fill": ["axes.facecolor"], "color": ["axes.edgecolor"]},
    "plot.background": {
        "fill": ["figure.facecolor", "savefig.facecolor"],
        "color": ["figure.edgecolor"],
    },
    "legend.background": {"fill": ["legend.facecolor"], "color": ["legend.edgecolor"]},
}

_BLANK_TARGETS: dict[str, dict[str, Any]] = {
    "panel.grid": {"axes.grid": False},
    "panel.grid.major": {"axes.grid": False},
    "panel.border": {"axes.spines.top": False, "axes.spines.right": False},
    "axis.line": {"axes.spines.left": False, "axes.spines.bottom": False},
    "axis.ticks": {"xtick.major.size": 0, "ytick.major.size": 0},
    "axis.text": {"xtick.labelbottom": False, "ytick.labelleft": False},
    "panel.background": {"axes.facecolor": "none"},
    "plot.background": {"figure.facecolor": "none"},
    "legend.background": {"legend.frameon": False},
}

_LINETYPES = {"solid": "-", "dashed": "--", "dotted": ":", "dotdash": "-.", "longdash": "--"}
_LEGEND_LOC = {
    "right": "center right",
    "left": "center left",
    "top": "upper center",
    "bottom": "lower center",
}


def _face_weight(face: str) -> str:
    return "bold" if face.startswith("bold") else "normal"


def _title_location(hjust: float) -> str:
    if hjust <= 0.25:
        return "left"
    if hjust >= 0.75:
        return "right"
    return "center"


def _element_values(key: str, value: Any) -> dict[str, Any] | None:
    if isinstance(value, BlankElement):
        return _BLANK_TARGETS.get(key)
    if isinstance(value, TextElement) and key in _TEXT_TARGETS:
        targets = _TEXT_TARGETS[key]
        found = {
            "size": value.size,
            "color": value.color,
            "weight": _face_weight(value.face) if value.face else None,
            "location": _title_location(value.hjust) if value.hjust is not None else None,
        }
    elif isinstance(value, LineElement) and key in _LINE_TARGETS:
        targets = _LINE_TARGETS[key]
        found = {
            "color": value.color,
            "linewidth": value.linewidth,
            "linestyle": _LINETYPES.get(value.linetype, value.linetype),
        }
    elif isinstance(value, RectElement) and key in _RECT_TARGETS:
        targets = _RECT_TARGETS[key]
        found = {"fill": value.fill, "color": value.color}
    else:
        return None

    params: dict[str, Any] = {}
    for attr, rc_keys in targets.items():
        if found.get(attr) is not None:
            params.update(dict.fromkeys(rc_keys, found[attr]))
    if isinstance(value, LineElement) and key.startswith("panel.grid"):
        params["axes.grid"] = True
    return params


def translate_setting(key: str, value: Any) -> dict[str, Any] | None:
    """Translate one theme setting to rcParams, or ``None`` if there is no equivalent.

    Examples:
        >>> translate_setting("axis.title", TextElement(size=12, face="bold"))
        {'axes.labelsize': 12, 'axes.labelweight': 'bold'}
        >>> translate_setting("legend.position", "bottom")
        {'legend.loc': 'lower center'}
        >>> translate_setting("lines.linewidth", 2)
        {'lines.linewidth': 2}
        >>> translate_setting("plot.margin", "whatever") is None
        True
    """
    if key == "legend.position":
        if not isinstance(value, str):
            return None
        if value == "none":
            return {}
        return {"legend.loc": _LEGEND_LOC.get(value, value)}
    if isinstance(value, ELEMENT_TYPES):
        return _element_values(key, value)
    if key in mpl.rcParams:
        return {key: value}
    return None


# -- Theme -----------------------------------------------------------------
@dataclass
class Theme:
    """A resolved theme.

    Attributes:
        name: Theme name in the theme table.
        base_theme: Name of the base preset.
        base_params: rcParams of the base preset.
        font_family: Font family in use (may be the fallback family).
        settings: Merged settings: sizes, ``other_settings``, then overrides.
    """

    name: str
    base_theme: str
    base_params: dict[str, Any]
    font_family: str
    settings: dict[str, Any] = field(default_factory=dict)

    def rc_params(self) -> dict[str, Any]:
        """Flatten base preset, font family and translated settings into rcParams."""
        params = dict(self.base_params)
        params["font.family"] = self.font_family
        for key, value in self.settings.items():
            translated = translate_setting(key, value)
            if translated is None:
                logger.debug(f"Theme '{self.name}': no matplotlib equivalent for '{key}'")
                continue
            params.update(translated)
        return params

    def apply(self) -> None:
        """Apply the theme to matplotlib globally."""
        plt.rcParams.update(self.rc_params())

    def context(self):
        """Context manager applying the theme temporarily."""
        return plt.rc_context(self.rc_params())

    @property
    def legend_visible(self) -> bool:
        return self.settings.get("legend.position") != "none"

    def decorate(self, ax: Axes) -> Axes:
        """Apply per-axes settings that have no rcParam, such as a hidden legend."""
        legend = ax.get_legend()
        if legend is not None and not self.legend_visible:
            legend.remove()
        return ax


def check_font(family: str) -> str:
    """Return *family* if matplotlib can find it, else warn and return the fallback."""
    try:
        font_manager.findfont(
            font_manager.FontProperties(family=family), fallback_to_default=False
        )
    except ValueError:
        logger.warning(
            f"Could not find or register font: {family}. It may need to be "
            f"installed manually; using {FALLBACK_FONT}."
        )
        return FALLBACK_FONT
    return family


def resolve_theme(
    theme_name: str = "default",
    overrides: Mapping[str, Any] | None = None,
    store: ConfigStore | None = None,
) -> Theme:
    """Resolve a named theme, layering *overrides* on top of its settings.

    Args:
        theme_name: Name of a loaded theme.
        overrides: Settings that replace the theme's own, key by key (shallow).
            Values may be literals, elements, or element expression strings.
        store: Store to read from. Defaults to :func:`default_store`.

    Raises:
        ThemeNotFoundError: *theme_name* is not loaded.
        UnknownBaseThemeError: The theme's base preset is unknown.
    """
    themes = (store if store is not None else default_store()).get_themes()
    if theme_name not in themes:
        raise ThemeNotFoundError(theme_name, themes)
    spec = themes[theme_name]

    base_params = base_theme_params(spec.base_theme)
    font_family = check_font(spec.font_family)

    settings: dict[str, Any] = {
        "axis.text": TextElement(size=spec.axis_text_size),
        "axis.title": TextElement(size=spec.axis_title_size),
    }
    settings.update(spec.other_settings)
    for key, value in (overrides or {}).items():
        settings[key] = parse_element(value)

    return Theme(
        name=theme_name,
        base_theme=spec.base_theme,
        base_params=base_params,
        font_family=font_family,
        settings=settings,
    )

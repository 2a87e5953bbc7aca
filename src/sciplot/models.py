"""Data structures for palette and theme tables.

A palette is either labeled (category -> color, insertion order is legend
order) or unlabeled (ordered gradient stops). Tables are validated when they
are parsed, so everything reaching a resolver is well formed.

Examples:
    >>> table = parse_palette_table({"primary": {"A": "#111111"}, "grad": ["red", "blue"]})
    >>> table["primary"]
    LabeledPalette(colors={'A': '#111111'})
    >>> table["grad"].values()
    ['red', 'blue']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from numbers import Real
from typing import Any

import yaml
from matplotlib.colors import is_color_like

from sciplot.elements import parse_element
from sciplot.errors import ParseError


@dataclass(frozen=True)
class LabeledPalette:
    """Label -> color mapping for discrete scales."""

    colors: dict[str, str]

    def values(self) -> list[str]:
        return list(self.colors.values())

    def to_yaml(self) -> dict[str, str]:
        return dict(self.colors)


@dataclass(frozen=True)
class UnlabeledPalette:
    """Ordered colors for continuous gradients."""

    colors: list[str]

    def values(self) -> list[str]:
        return list(self.colors)

    def to_yaml(self) -> list[str]:
        return list(self.colors)


Palette = LabeledPalette | UnlabeledPalette


@dataclass
class ThemeSpec:
    """One entry of a theme file.

    Attributes:
        name: Theme name (the key in the theme file).
        base_theme: Base preset name, e.g. ``theme_minimal`` or a matplotlib style.
        font_family: Font family used for all text.
        axis_text_size: Tick label size in points.
        axis_title_size: Axis label size in points.
        other_settings: Extra settings; element expressions are already materialized.
        fonts: Family name -> font file locations to fetch and register.
    """

    name: str
    base_theme: str
    font_family: str
    axis_text_size: float
    axis_title_size: float
    other_settings: dict[str, Any] = field(default_factory=dict)
    fonts: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class FontFamily:
    """Style slots that were fetched and registered for one family."""

    family: str
    regular: str | None = None
    bold: str | None = None
    italic: str | None = None
    bolditalic: str | None = None

    def styles(self) -> dict[str, str]:
        return {
            style: path
            for style in ("regular", "bold", "italic", "bolditalic")
            if (path := getattr(self, style)) is not None
        }


# -- Parsing ---------------------------------------------------------------
_MERGE_TAG = "tag:yaml.org,2002:merge"


class UniqueKeyLoader(yaml.SafeLoader):
    """``SafeLoader`` that rejects a mapping key repeated within one mapping."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _value_node in node.value:
                if key_node.tag == _MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    repeated = key in seen
                except TypeError:
                    # Unhashable keys are reported by the base constructor.
                    break
                if repeated:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key!r}",
                        key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def load_yaml(text: str, source: str = "<string>") -> Any:
    """Parse YAML text, converting parser errors to :class:`ParseError`.

    Examples:
        >>> load_yaml("p:\\n  A: red\\n")
        {'p': {'A': 'red'}}
        >>> load_yaml("p:\\n  A: red\\n  A: blue\\n")
        Traceback (most recent call last):
            ...
        sciplot.errors.ParseError: Malformed YAML in <string>: ...found duplicate key 'A'...
    """
    try:
        return yaml.load(text, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ParseError(f"Malformed YAML in {source}: {exc}") from exc


def _check_color(value: Any, where: str) -> str:
    if not isinstance(value, str) or not is_color_like(value):
        raise ParseError(f"{where}: {value!r} is not a valid color")
    return value


def parse_palette(name: str, raw: Any) -> Palette:
    """Build a palette from one YAML value."""
    if isinstance(raw, dict):
        colors: dict[str, str] = {}
        for label, value in raw.items():
            key = str(label)
            if key in colors:
                raise ParseError(f"Palette '{name}' has duplicate label '{key}'")
            colors[key] = _check_color(value, f"Palette '{name}', label '{key}'")
        if not colors:
            raise ParseError(f"Palette '{name}' is empty")
        return LabeledPalette(colors)
    if isinstance(raw, list):
        if not raw:
            raise ParseError(f"Palette '{name}' is empty")
        return UnlabeledPalette(
            [_check_color(v, f"Palette '{name}', entry {i}") for i, v in enumerate(raw)]
        )
    raise ParseError(
        f"Palette '{name}' must be a mapping of label: color or a list of colors, "
        f"got {type(raw).__name__}"
    )


def parse_palette_table(raw: Any) -> dict[str, Palette]:
    """Validate a parsed palette document.

    Raises:
        ParseError: The document is not a mapping or any palette is invalid.
    """
    if not isinstance(raw, dict) or not raw:
        raise ParseError("A palette file must be a non-empty mapping of palette names")
    return {str(name): parse_palette(str(name), value) for name, value in raw.items()}


def _number(config: dict[str, Any], key: str, theme: str) -> float:
    value = config.get(key)
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ParseError(f"Theme '{theme}': '{key}' must be a number, got {value!r}")
    return value


def _string(config: dict[str, Any], key: str, theme: str) -> str:
    value = config.get(key)
    if not isinstance(value, str) or not value:
        raise ParseError(f"Theme '{theme}': '{key}' must be a non-empty string")
    return value


def parse_theme(name: str, raw: Any) -> ThemeSpec:
    """Build a :class:`ThemeSpec` from one YAML value."""
    if not isinstance(raw, dict):
        raise ParseError(f"Theme '{name}' must be a mapping")

    other = raw.get("other_settings") or {}
    if not isinstance(other, dict):
        raise ParseError(f"Theme '{name}': 'other_settings' must be a mapping")
    other_settings = {str(k): parse_element(v) for k, v in other.items()}

    fonts_raw = raw.get("fonts") or {}
    if not isinstance(fonts_raw, dict):
        raise ParseError(f"Theme '{name}': 'fonts' must map family names to file lists")
    fonts: dict[str, list[str]] = {}
    for family, files in fonts_raw.items():
        if isinstance(files, str):
            files = [files]
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise ParseError(f"Theme '{name}': fonts for '{family}' must be a list of paths")
        fonts[str(family)] = files

    return ThemeSpec(
        name=name,
        base_theme=_string(raw, "base_theme", name),
        font_family=_string(raw, "font_family", name),
        axis_text_size=_number(raw, "axis_text_size", name),
        axis_title_size=_number(raw, "axis_title_size", name),
        other_settings=other_settings,
        fonts=fonts,
    )


def parse_theme_table(raw: Any) -> dict[str, ThemeSpec]:
    """Validate a parsed theme document.

    Raises:
        ParseError: The document is not a mapping or any theme is invalid.
    """
    if not isinstance(raw, dict) or not raw:
        raise ParseError("A theme file must be a non-empty mapping of theme names")
    return {str(name): parse_theme(str(name), value) for name, value in raw.items()}

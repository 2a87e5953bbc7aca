"""Theme element settings and their safe parser.

Theme files may describe a setting with a ggplot-style constructor string such
as ``"element_text(size = 14, face = 'bold')"``. Such strings are parsed with
:mod:`ast` and only a fixed set of constructors with literal arguments is
accepted; nothing is evaluated.

Examples:
    >>> parse_element("element_text(size = 14, face = 'bold')")
    TextElement(size=14, color=None, face='bold', family=None, hjust=None, vjust=None, angle=None, margin=None)
    >>> parse_element("element_blank()")
    BlankElement()
    >>> parse_element({"element": "line", "color": "lightgrey"})
    LineElement(color='lightgrey', linewidth=None, linetype=None)
    >>> parse_element("top")
    'top'
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, fields
from typing import Any

from matplotlib.colors import is_color_like

from sciplot.errors import ElementError


@dataclass(frozen=True)
class Margin:
    t: float = 0
    r: float = 0
    b: float = 0
    l: float = 0  # noqa: E741
    unit: str = "pt"


@dataclass(frozen=True)
class TextElement:
    size: float | None = None
    color: str | None = None
    face: str | None = None
    family: str | None = None
    hjust: float | None = None
    vjust: float | None = None
    angle: float | None = None
    margin: Margin | None = None


@dataclass(frozen=True)
class LineElement:
    color: str | None = None
    linewidth: float | None = None
    linetype: str | None = None


@dataclass(frozen=True)
class RectElement:
    fill: str | None = None
    color: str | None = None
    linewidth: float | None = None


@dataclass(frozen=True)
class BlankElement:
    pass


ELEMENT_TYPES = (TextElement, LineElement, RectElement, BlankElement, Margin)

CONSTRUCTORS: dict[str, type] = {
    "element_text": TextElement,
    "element_line": LineElement,
    "element_rect": RectElement,
    "element_blank": BlankElement,
    "margin": Margin,
}

# ggplot spellings accepted as keyword aliases
_ALIASES = {"colour": "color", "size": "linewidth"}


def _field_names(cls: type) -> list[str]:
    return [f.name for f in fields(cls)]


def build_element(cls: type, args: list[Any], kwargs: dict[str, Any]) -> Any:
    """Instantiate *cls* after normalizing ggplot keyword aliases."""
    names = _field_names(cls)
    normalized: dict[str, Any] = {}
    for key, value in kwargs.items():
        if key not in names:
            alias = _ALIASES.get(key)
            # ``size`` is a real field on text elements, an alias elsewhere
            if alias is None or alias not in names:
                raise ElementError(
                    f"{cls.__name__} does not accept '{key}'. Allowed: {', '.join(names)}"
                )
            key = alias
        normalized[key] = value
    if len(args) > len(names):
        raise ElementError(f"{cls.__name__} takes at most {len(names)} positional arguments")
    for name, value in zip(names, args):
        if name in normalized:
            raise ElementError(f"{cls.__name__} got multiple values for '{name}'")
        normalized[name] = value
    for key in ("color", "fill"):
        value = normalized.get(key)
        if value is not None and not (isinstance(value, str) and is_color_like(value)):
            raise ElementError(f"{cls.__name__}: {value!r} is not a valid {key}")
    return cls(**normalized)


def _eval_node(node: ast.AST) -> Any:
    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in CONSTRUCTORS:
            raise ElementError(
                f"Unsupported constructor '{ast.unparse(node.func)}'. "
                f"Allowed: {', '.join(CONSTRUCTORS)}"
            )
        args = [_eval_node(a) for a in node.args]
        kwargs = {}
        for kw in node.keywords:
            if kw.arg is None:
                raise ElementError("Keyword unpacking is not allowed in element expressions")
            kwargs[kw.arg] = _eval_node(kw.value)
        return build_element(CONSTRUCTORS[node.func.id], args, kwargs)
    try:
        return ast.literal_eval(node)
    except (ValueError, TypeError) as exc:
        raise ElementError(f"Only literal arguments are allowed, got '{ast.unparse(node)}'") from exc


def parse_expression(text: str) -> Any:
    """Parse one constructor call such as ``"margin(5, 5, 5, 5)"``."""
    try:
        tree = ast.parse(text.strip(), mode="eval")
    except SyntaxError as exc:
        raise ElementError(f"Malformed element expression {text!r}: {exc.msg}") from exc
    if not isinstance(tree.body, ast.Call):
        raise ElementError(f"Element expression must be a constructor call: {text!r}")
    return _eval_node(tree.body)


def _parse_mapping(value: dict[str, Any]) -> Any:
    kind = str(value["element"])
    cls = CONSTRUCTORS.get(kind) or CONSTRUCTORS.get(f"element_{kind}")
    if cls is None:
        raise ElementError(f"Unknown element kind '{kind}'")
    kwargs = {k: v for k, v in value.items() if k != "element"}
    if isinstance(kwargs.get("margin"), dict):
        kwargs["margin"] = build_element(Margin, [], kwargs["margin"])
    return build_element(cls, [], kwargs)


def parse_element(value: Any) -> Any:
    """Materialize one ``other_settings`` value.

    Strings containing ``(`` are parsed as constructor calls, mappings with an
    ``element`` key are built directly, anything else is returned unchanged.

    Raises:
        ElementError: The expression is malformed or not in the allowed set.
    """
    if isinstance(value, str) and "(" in value:
        return parse_expression(value)
    if isinstance(value, dict) and "element" in value:
        return _parse_mapping(value)
    return value

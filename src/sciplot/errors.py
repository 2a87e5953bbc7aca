"""Exception hierarchy for sciplot.

Every error raised by the library derives from :class:`SciplotError`. Lookup
and validation errors also derive from the matching builtin so callers that
catch ``KeyError`` or ``ValueError`` keep working.

Examples:
    >>> issubclass(PaletteNotFoundError, KeyError)
    True
    >>> str(PaletteNotFoundError("x", ["primary", "vibrant"]))
    "Palette 'x' not found. Available palettes are: primary, vibrant"
"""

from __future__ import annotations

from collections.abc import Iterable


class SciplotError(Exception):
    """Base class for all sciplot errors."""


# -- Fetching --------------------------------------------------------------
class FetchError(SciplotError):
    """Content could not be fetched from a local path or URL."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"Could not fetch {location}: {reason}")
        self.location = location
        self.reason = reason


class ConfigFileNotFoundError(FetchError):
    """A local configuration or font file does not exist."""

    def __init__(self, location: str) -> None:
        super().__init__(location, "local file not found")


class HTTPStatusError(FetchError):
    """The server answered with a non-2xx status."""

    def __init__(self, location: str, status_code: int, reason: str = "") -> None:
        detail = f"HTTP {status_code}" + (f" {reason}" if reason else "")
        super().__init__(location, detail)
        self.status_code = status_code


class UnreachableError(FetchError):
    """The host could not be reached at all (DNS, refused connection, timeout)."""


class FontFetchError(FetchError):
    """A single font file could not be fetched; its style slot is skipped with a warning."""


# -- Parsing ---------------------------------------------------------------
class ParseError(SciplotError, ValueError):
    """A YAML document is malformed or does not describe a valid table."""


class ElementError(ParseError):
    """An ``other_settings`` element expression is not in the allowed set."""


# -- Lookup ----------------------------------------------------------------
class NotLoadedError(SciplotError, LookupError):
    """A table was requested before any successful load."""

    def __init__(self, kind: str, loader: str) -> None:
        super().__init__(
            f"No {kind} loaded. Use {loader}() or initialize() with a valid file."
        )
        self.kind = kind


class _NamedLookupError(SciplotError, KeyError):
    kind = "Item"
    plural = "items"

    def __init__(self, name: str, available: Iterable[str] = ()) -> None:
        self.name = name
        self.available = list(available)
        super().__init__(name)

    def __str__(self) -> str:
        msg = f"{self.kind} '{self.name}' not found."
        if self.available:
            msg += f" Available {self.plural} are: {', '.join(self.available)}"
        return msg


class PaletteNotFoundError(_NamedLookupError):
    kind = "Palette"
    plural = "palettes"


class ThemeNotFoundError(_NamedLookupError):
    kind = "Theme"
    plural = "themes"


class UnknownBaseThemeError(SciplotError, ValueError):
    """A theme names a base theme that neither sciplot nor matplotlib knows."""

    def __init__(self, name: str, available: Iterable[str] = ()) -> None:
        self.name = name
        self.available = sorted(available)
        super().__init__(
            f"Unknown base theme '{name}'. Known base themes: {', '.join(self.available)}"
        )


class PaletteKindError(SciplotError, TypeError):
    """A discrete scale was requested from an unlabeled palette."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Palette '{name}' is an unlabeled color list; discrete scales need "
            "a mapping of label: color"
        )

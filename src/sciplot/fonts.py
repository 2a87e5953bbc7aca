"""Fetch and register custom font families declared by themes.

Each declared file is classified into a style slot from its filename, fetched
to a temporary file, and registered with matplotlib's font manager.

Examples:
    >>> classify_font_file("Roboto-Bold-Italic.ttf")
    'bolditalic'
    >>> classify_font_file("https://example.com/fonts/Lato-Oblique.ttf")
    'italic'
    >>> classify_font_file("SourceSans3-Bold.otf")
    'bold'
    >>> classify_font_file("Inter.ttf")
    'regular'
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Mapping
from pathlib import Path
from urllib.parse import urlparse

from matplotlib import font_manager

from sciplot.errors import FetchError, FontFetchError, UnreachableError
from sciplot.fetch import fetch_binary, is_url
from sciplot.log import logger
from sciplot.models import FontFamily, ThemeSpec

# Checked in order; the first matching class wins.
STYLE_PATTERNS: list[tuple[str, tuple[str, ...]]] = [
    (
        "bolditalic",
        (
            "bolditalic", "bold-italic", "bold_italic", "bold italic",
            "boldoblique", "bold-oblique", "bold_oblique",
            "italicbold", "italic-bold", "-bi.", "_bi.",
        ),
    ),
    ("italic", ("italic", "oblique")),
    ("bold", ("bold",)),
]


def classify_font_file(location: str | Path) -> str:
    """Return the style slot for a font file: regular, bold, italic or bolditalic."""
    location = str(location)
    name = Path(urlparse(location).path if is_url(location) else location).name.lower()
    for style, patterns in STYLE_PATTERNS:
        if any(p in name for p in patterns):
            return style
    return "regular"


def fetch_font_file(
    location: str | Path,
    credential: str | None = None,
    directory: str | Path | None = None,
) -> Path:
    """Fetch one font file into *directory*.

    Raises:
        UnreachableError: The host could not be reached at all.
        FontFetchError: Any other fetch failure (missing file, non-2xx status).
    """
    try:
        return fetch_binary(location, credential, directory=directory)
    except UnreachableError:
        raise
    except FetchError as exc:
        raise FontFetchError(str(location), exc.reason) from exc


class FontProvisioner:
    """Fetches declared font files into a private temp directory and registers them.

    The temp directory lives until :meth:`close` (or the end of a ``with`` block),
    since matplotlib reads registered font files lazily at draw time.

    Args:
        register: Called with each font file path. Defaults to
            ``matplotlib.font_manager.fontManager.addfont``.
    """

    def __init__(self, register: Callable[[str], None] | None = None) -> None:
        self._register = register or font_manager.fontManager.addfont
        self._tmpdir: tempfile.TemporaryDirectory | None = None
        self.families: dict[str, FontFamily] = {}

    @property
    def directory(self) -> Path:
        if self._tmpdir is None:
            self._tmpdir = tempfile.TemporaryDirectory(prefix="sciplot-fonts-")
        return Path(self._tmpdir.name)

    def close(self) -> None:
        if self._tmpdir is not None:
            self._tmpdir.cleanup()
            self._tmpdir = None

    def __enter__(self) -> FontProvisioner:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def provision_family(
        self,
        family: str,
        locations: list[str],
        credential: str | None = None,
    ) -> FontFamily | None:
        """Fetch, classify and register the files of one family.

        A file that cannot be fetched is logged and its slot left empty. A
        family with no fetched files is skipped and ``None`` returned.

        Raises:
            UnreachableError: A font host could not be reached at all.
        """
        fonts = FontFamily(family)
        for location in locations:
            style = classify_font_file(location)
            try:
                path = fetch_font_file(location, credential, self.directory)
            except FontFetchError as exc:
                logger.warning(f"Skipping {style} font for '{family}'. {exc}")
                continue
            if getattr(fonts, style) is not None:
                logger.debug(f"'{family}': {location} replaces earlier {style} file")
            setattr(fonts, style, str(path))

        styles = fonts.styles()
        if not styles:
            logger.debug(f"No font files fetched for '{family}', not registering")
            return None
        for path in styles.values():
            self._register(path)
        self.families[family] = fonts
        logger.info(f"Registered font family '{family}' ({', '.join(styles)})")
        return fonts

    def provision(
        self,
        themes: Mapping[str, ThemeSpec],
        credential: str | None = None,
    ) -> list[FontFamily]:
        """Provision every font family declared across *themes*."""
        registered = []
        for theme in themes.values():
            for family, locations in theme.fonts.items():
                fonts = self.provision_family(family, locations, credential)
                if fonts is not None:
                    registered.append(fonts)
        return registered

"""Configuration store for project palettes and themes.

A :class:`ConfigStore` holds the active palette table and theme table. Tables
are loaded from YAML files on disk or from URLs and replaced wholesale on every
successful load. The bundled ``palettes.yaml`` and ``themes.yaml`` are loaded by
:func:`initialize`; :func:`default_store` caches one such store per process.

Loading palettes is forgiving: a failure is logged and the previous table stays
active. Loading themes is strict: any failure raises.

Examples:
    >>> store = initialize()
    >>> "primary" in store.get_palettes()
    True
    >>> "default" in store.get_themes()
    True
    >>> ConfigStore().get_palettes()
    Traceback (most recent call last):
        ...
    sciplot.errors.NotLoadedError: No palettes loaded. Use load_palettes() or initialize() with a valid file.
"""

from __future__ import annotations

import threading
from functools import lru_cache
from pathlib import Path
from typing import Any

from sciplot.errors import FetchError, NotLoadedError, ParseError
from sciplot.fetch import fetch_text, is_url
from sciplot.fonts import FontProvisioner
from sciplot.log import logger
from sciplot.models import Palette, ThemeSpec, load_yaml, parse_palette_table, parse_theme_table

_PKG_DIR = Path(__file__).parent

BUNDLED_PALETTES = _PKG_DIR / "palettes.yaml"
BUNDLED_THEMES = _PKG_DIR / "themes.yaml"

# Passing this as the font credential disables reuse of the theme credential.
NO_CREDENTIAL = "none"


def font_credential_for(credential: str | None, font_credential: str | None) -> str | None:
    """Pick the credential used for font downloads.

    Examples:
        >>> font_credential_for("main", None)
        'main'
        >>> font_credential_for("main", "fonts")
        'fonts'
        >>> font_credential_for("main", "none") is None
        True
    """
    if font_credential == NO_CREDENTIAL:
        return None
    if font_credential is not None:
        return font_credential
    return credential


class ConfigStore:
    """Active palette and theme tables.

    Args:
        fonts: Provisioner used for theme font declarations. A private one is
            created when omitted.
    """

    def __init__(self, fonts: FontProvisioner | None = None) -> None:
        self._lock = threading.Lock()
        self._palettes: dict[str, Palette] | None = None
        self._themes: dict[str, ThemeSpec] | None = None
        self.fonts = fonts or FontProvisioner()

    # -- Palettes ----------------------------------------------------------
    def load_palettes(self, location: str | Path, credential: str | None = None) -> bool:
        """Replace the palette table with the one at *location*.

        Fetch and parse errors are logged as warnings and leave the current
        table in place.

        Returns:
            True if the table was replaced.
        """
        try:
            content = fetch_text(location, credential)
            table = self.set_palettes(load_yaml(content, str(location)))
        except (FetchError, ParseError) as exc:
            logger.warning(f"Failed to load palettes from: {location}\nError: {exc}")
            return False
        logger.info(f"Loaded {len(table)} palette(s) from: {_display_name(location)}")
        return True

    def set_palettes(self, raw: Any) -> dict[str, Palette]:
        """Validate a parsed palette document and make it the active table."""
        table = parse_palette_table(raw)
        with self._lock:
            self._palettes = table
        return table

    def get_palettes(self) -> dict[str, Palette]:
        if self._palettes is None:
            raise NotLoadedError("palettes", "load_palettes")
        return self._palettes

    @property
    def has_palettes(self) -> bool:
        return self._palettes is not None

    # -- Themes ------------------------------------------------------------
    def load_themes(
        self,
        location: str | Path,
        credential: str | None = None,
        font_credential: str | None = None,
    ) -> None:
        """Replace the theme table with the one at *location*, then fetch its fonts.

        Args:
            location: Local path or URL of the theme YAML.
            credential: Token for GitHub-hosted theme files.
            font_credential: Token for font files. ``"none"`` fetches fonts
                without a token; omitted reuses *credential*.

        Raises:
            FetchError: The theme file, or a font host, could not be reached.
            ParseError: The theme file is malformed or invalid.
        """
        content = fetch_text(location, credential)
        table = self.set_themes(load_yaml(content, str(location)))
        logger.info(f"Loaded {len(table)} theme(s) from: {location}")
        # the new table is already active if this raises
        self.fonts.provision(table, font_credential_for(credential, font_credential))

    def set_themes(self, raw: Any) -> dict[str, ThemeSpec]:
        """Validate a parsed theme document and make it the active table.

        Fonts declared by the themes are not fetched; see :meth:`load_themes`.
        """
        table = parse_theme_table(raw)
        with self._lock:
            self._themes = table
        return table

    def get_themes(self) -> dict[str, ThemeSpec]:
        if self._themes is None:
            raise NotLoadedError("themes", "load_themes")
        return self._themes

    @property
    def has_themes(self) -> bool:
        return self._themes is not None

    # -- Listing -----------------------------------------------------------
    def available_palettes(self) -> list[str]:
        """Log and return the names of the loaded palettes."""
        names = list(self.get_palettes())
        logger.info("Available palettes:\n" + "\n".join(f" - {n}" for n in names))
        return names

    def available_themes(self) -> list[str]:
        """Log and return the names of the loaded themes."""
        names = list(self.get_themes())
        logger.info("Available themes:\n" + "\n".join(f" - {n}" for n in names))
        return names


def _display_name(location: str | Path) -> str:
    return str(location).rstrip("/").rsplit("/", 1)[-1]


def initialize(
    palette_path: str | Path | None = BUNDLED_PALETTES,
    theme_path: str | Path | None = BUNDLED_THEMES,
    credential: str | None = None,
    font_credential: str | None = None,
) -> ConfigStore:
    """Build a store and load the given palette and theme files best-effort.

    A missing local file leaves that table unloaded. Pass ``None`` to skip a
    table entirely.
    """
    store = ConfigStore()
    if palette_path is not None and _exists(palette_path):
        store.load_palettes(palette_path, credential)
    else:
        logger.debug(f"No palette file at {palette_path}, palettes not loaded")
    if theme_path is not None and _exists(theme_path):
        store.load_themes(theme_path, credential, font_credential)
    else:
        logger.debug(f"No theme file at {theme_path}, themes not loaded")
    return store


def _exists(location: str | Path) -> bool:
    return is_url(location) or Path(location).expanduser().is_file()


@lru_cache(maxsize=1)
def default_store() -> ConfigStore:
    """Process-wide store initialized from the bundled defaults."""
    return initialize()

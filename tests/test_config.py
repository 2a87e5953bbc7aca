"""Tests for the palette/theme store: loading, replacing and failure policy."""

from __future__ import annotations

import pytest

from sciplot.config import (
    BUNDLED_PALETTES,
    BUNDLED_THEMES,
    ConfigStore,
    default_store,
    initialize,
)
from sciplot.errors import (
    ConfigFileNotFoundError,
    NotLoadedError,
    ParseError,
    UnreachableError,
)
from sciplot.models import LabeledPalette, UnlabeledPalette

from .conftest import FONT_DIR, warnings_in

PALETTES = {
    "primary": {"A": "#111111", "B": "#222222"},
    "npg_continuous": ["#4DBBD5FF", "#00A087FF", "#3C5488FF"],
}
OTHER_PALETTES = {"vibrant": {"x": "#E64B35", "y": "#4DBBD5"}}

THEMES = {
    "default": {
        "base_theme": "theme_minimal",
        "font_family": "DejaVu Sans",
        "axis_text_size": 10,
        "axis_title_size": 12,
        "other_settings": {"legend.position": "right"},
    }
}


def _as_yaml(table):
    return {name: palette.to_yaml() for name, palette in table.items()}


class TestLoadPalettes:
    def test_round_trip(self, store, write_yaml):
        assert store.load_palettes(write_yaml(PALETTES)) is True
        table = store.get_palettes()
        assert _as_yaml(table) == PALETTES
        assert list(table) == ["primary", "npg_continuous"]
        assert isinstance(table["primary"], LabeledPalette)
        assert isinstance(table["npg_continuous"], UnlabeledPalette)

    def test_second_load_replaces_whole_table(self, store, write_yaml):
        store.load_palettes(write_yaml(PALETTES, "a.yaml"))
        store.load_palettes(write_yaml(OTHER_PALETTES, "b.yaml"))
        assert list(store.get_palettes()) == ["vibrant"]

    def test_missing_file_warns_and_keeps_table(self, store, write_yaml, tmp_path, log_records):
        store.load_palettes(write_yaml(PALETTES))
        assert store.load_palettes(tmp_path / "missing.yaml") is False
        assert _as_yaml(store.get_palettes()) == PALETTES
        warnings = warnings_in(log_records)
        assert len(warnings) == 1
        assert "missing.yaml" in warnings[0]

    def test_malformed_yaml_warns_and_keeps_table(self, store, write_yaml, log_records):
        store.load_palettes(write_yaml(PALETTES, "good.yaml"))
        assert store.load_palettes(write_yaml("primary: [unclosed\n", "bad.yaml")) is False
        assert _as_yaml(store.get_palettes()) == PALETTES
        assert warnings_in(log_records)

    def test_invalid_utf8_warns_and_keeps_table(self, store, write_yaml, tmp_path, log_records):
        store.load_palettes(write_yaml(PALETTES))
        bad = tmp_path / "latin1.yaml"
        bad.write_bytes(b"p:\n  A: '#222222'\n  \xff\xfe: '#333333'\n")
        assert store.load_palettes(bad) is False
        assert _as_yaml(store.get_palettes()) == PALETTES
        warnings = warnings_in(log_records)
        assert len(warnings) == 1
        assert "latin1.yaml" in warnings[0]

    def test_duplicate_label_rejected(self, store, write_yaml):
        store.load_palettes(write_yaml(PALETTES, "good.yaml"))
        dup = write_yaml("p:\n  A: '#111111'\n  A: '#222222'\n", "dup.yaml")
        assert store.load_palettes(dup) is False
        assert _as_yaml(store.get_palettes()) == PALETTES

    def test_invalid_color_rejected_on_load(self, store, write_yaml):
        assert store.load_palettes(write_yaml({"p": {"A": "not-a-color"}})) is False
        assert not store.has_palettes

    def test_unreachable_url_only_warns(self, store, write_yaml, http, log_records):
        store.load_palettes(write_yaml(PALETTES))
        assert store.load_palettes("https://raw.githubusercontent.com/o/r/main/p.yaml") is False
        assert _as_yaml(store.get_palettes()) == PALETTES
        assert len(warnings_in(log_records)) == 1

    def test_remote_load_with_token(self, store, http):
        url = "https://raw.githubusercontent.com/o/r/main/p.yaml"
        http[url] = b"remote:\n  A: '#123456'\n"
        assert store.load_palettes(url, credential="secret")
        assert _as_yaml(store.get_palettes()) == {"remote": {"A": "#123456"}}
        assert http["calls"][0][1] == {"Authorization": "token secret"}


class TestLoadThemes:
    def test_load_and_get(self, store, write_yaml):
        store.load_themes(write_yaml(THEMES))
        spec = store.get_themes()["default"]
        assert spec.base_theme == "theme_minimal"
        assert spec.axis_title_size == 12
        assert spec.other_settings == {"legend.position": "right"}

    def test_malformed_yaml_raises_and_keeps_table(self, store, write_yaml):
        store.load_themes(write_yaml(THEMES, "good.yaml"))
        before = store.get_themes()
        with pytest.raises(ParseError):
            store.load_themes(write_yaml("default: {base_theme: [\n", "bad.yaml"))
        assert store.get_themes() is before

    def test_invalid_utf8_raises_and_keeps_table(self, store, write_yaml, tmp_path):
        store.load_themes(write_yaml(THEMES, "good.yaml"))
        before = store.get_themes()
        bad = tmp_path / "latin1.yaml"
        bad.write_bytes(b"default:\n  font_family: 'Caf\xe9 Sans'\n")
        with pytest.raises(ParseError, match="not valid UTF-8"):
            store.load_themes(bad)
        assert store.get_themes() is before

    def test_duplicate_theme_name_raises(self, store, write_yaml):
        body = (
            "  base_theme: theme_bw\n  font_family: DejaVu Sans\n"
            "  axis_text_size: 9\n  axis_title_size: 10\n"
        )
        with pytest.raises(ParseError, match="duplicate key 'paper'"):
            store.load_themes(write_yaml(f"paper:\n{body}paper:\n{body}"))
        assert not store.has_themes

    def test_missing_required_key_raises(self, store, write_yaml):
        broken = {"t": {"base_theme": "theme_bw", "font_family": "DejaVu Sans"}}
        with pytest.raises(ParseError, match="axis_text_size"):
            store.load_themes(write_yaml(broken))
        assert not store.has_themes

    def test_missing_file_raises(self, store, tmp_path):
        with pytest.raises(ConfigFileNotFoundError):
            store.load_themes(tmp_path / "themes.yaml")

    def test_bad_element_expression_raises(self, store, write_yaml):
        doc = {"t": {**THEMES["default"], "other_settings": {"x": "__import__('os')"}}}
        with pytest.raises(ParseError):
            store.load_themes(write_yaml(doc))

    def test_unreachable_font_is_fatal(self, store, write_yaml, http):
        doc = {"t": {**THEMES["default"], "fonts": {"Inter": ["https://fonts.invalid/Inter.ttf"]}}}
        with pytest.raises(UnreachableError):
            store.load_themes(write_yaml(doc))
        # the table was replaced before fonts were fetched
        assert "t" in store.get_themes()

    def test_fonts_registered_from_local_files(self, store, write_yaml, registered_fonts):
        fonts = [str(FONT_DIR / "DejaVuSans.ttf"), str(FONT_DIR / "DejaVuSans-Bold.ttf")]
        doc = {"t": {**THEMES["default"], "fonts": {"DejaVu Sans": fonts}}}
        store.load_themes(write_yaml(doc))
        assert len(registered_fonts) == 2
        family = store.fonts.families["DejaVu Sans"]
        assert set(family.styles()) == {"regular", "bold"}


class TestFontCredentialPrecedence:
    URL = "https://raw.githubusercontent.com/o/r/main/Inter-Regular.ttf"

    def _load(self, store, write_yaml, http, **kwargs):
        http[self.URL] = b"font"
        doc = {"t": {**THEMES["default"], "fonts": {"Inter": [self.URL]}}}
        store.load_themes(write_yaml(doc), **kwargs)
        return [headers for url, headers in http["calls"] if url == self.URL]

    def test_reuses_theme_credential(self, store, write_yaml, http):
        assert self._load(store, write_yaml, http, credential="main") == [
            {"Authorization": "token main"}
        ]

    def test_separate_font_credential(self, store, write_yaml, http):
        calls = self._load(store, write_yaml, http, credential="main", font_credential="fonts")
        assert calls == [{"Authorization": "token fonts"}]

    def test_none_sentinel_disables_credential(self, store, write_yaml, http):
        calls = self._load(store, write_yaml, http, credential="main", font_credential="none")
        assert calls == [{}]


class TestNotLoaded:
    def test_palettes(self):
        with pytest.raises(NotLoadedError, match="No palettes loaded"):
            ConfigStore().get_palettes()

    def test_themes(self):
        with pytest.raises(NotLoadedError, match="No themes loaded"):
            ConfigStore().get_themes()


class TestInitialize:
    def test_bundled_defaults(self):
        store = initialize()
        assert {"primary", "vibrant", "npg_continuous"} <= set(store.get_palettes())
        assert {"default", "publication"} <= set(store.get_themes())

    def test_bundled_files_ship_with_package(self):
        assert BUNDLED_PALETTES.is_file()
        assert BUNDLED_THEMES.is_file()

    def test_absent_files_leave_tables_unloaded(self, tmp_path):
        store = initialize(tmp_path / "p.yaml", tmp_path / "t.yaml")
        assert not store.has_palettes
        assert not store.has_themes

    def test_explicit_paths(self, write_yaml):
        store = initialize(write_yaml(OTHER_PALETTES, "p.yaml"), None)
        assert list(store.get_palettes()) == ["vibrant"]
        assert not store.has_themes

    def test_default_store_is_cached(self):
        assert default_store() is default_store()

    def test_available_names(self, store, write_yaml, log_records):
        store.load_palettes(write_yaml(PALETTES))
        assert store.available_palettes() == ["primary", "npg_continuous"]
        assert any(" - npg_continuous" in r["message"] for r in log_records)

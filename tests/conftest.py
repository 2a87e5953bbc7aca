"""Shared fixtures for sciplot tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import matplotlib

matplotlib.use("Agg")
import pytest
import requests
import yaml
from loguru import logger

from sciplot.config import ConfigStore
from sciplot.fonts import FontProvisioner

OUTPUT_DIR = Path(__file__).parent / "output"
FONT_DIR = Path(matplotlib.get_data_path()) / "fonts" / "ttf"


@pytest.fixture(scope="session", autouse=True)
def ensure_output_dir() -> None:
    """Create tests/output/ once per session."""
    OUTPUT_DIR.mkdir(exist_ok=True)


@pytest.fixture
def output_dir() -> Path:
    """Persistent output directory for visual inspection."""
    return OUTPUT_DIR


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture that dumps a document (or raw text) to a YAML file."""

    def _write(document: Any, filename: str = "config.yaml") -> Path:
        path = tmp_path / filename
        if isinstance(document, str):
            path.write_text(document)
        else:
            path.write_text(yaml.safe_dump(document, sort_keys=False))
        return path

    return _write


@pytest.fixture
def log_records() -> list[dict]:
    """Collect loguru records emitted during the test."""
    records: list[dict] = []
    handler_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def warnings_in(records: list[dict]) -> list[str]:
    return [r["message"] for r in records if r["level"].name == "WARNING"]


@pytest.fixture
def registered_fonts() -> list[str]:
    """Paths passed to the font registrar."""
    return []


@pytest.fixture
def store(registered_fonts) -> ConfigStore:
    """Empty store whose font provisioner records registrations instead of
    touching matplotlib's global font manager."""
    with FontProvisioner(register=registered_fonts.append) as fonts:
        yield ConfigStore(fonts=fonts)


def make_response(url: str, status: int = 200, content: bytes = b"") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = content
    response.url = url
    response.reason = "OK" if status < 400 else "Not Found"
    return response


@pytest.fixture
def http(monkeypatch) -> dict:
    """Route ``requests.get`` to an in-memory table of URL -> response.

    Values are bytes (200), ``(status, bytes)`` tuples, or an exception
    instance to raise. Unknown URLs raise ``ConnectionError``. Each call is
    recorded in ``http["calls"]`` as ``(url, headers)``.
    """
    routes: dict = {"calls": []}

    def fake_get(url, headers=None, **kwargs):
        routes["calls"].append((url, dict(headers or {})))
        if url not in routes:
            raise requests.ConnectionError(f"Failed to resolve host for {url}")
        target = routes[url]
        if isinstance(target, Exception):
            raise target
        if isinstance(target, tuple):
            status, content = target
            return make_response(url, status, content)
        return make_response(url, 200, target)

    monkeypatch.setattr("sciplot.fetch.requests.get", fake_get)
    return routes

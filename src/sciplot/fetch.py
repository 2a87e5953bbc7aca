"""Fetch configuration and font files from local paths or URLs.

URLs are fetched with a single ``requests.get`` (no retries, client default
timeout). For GitHub hosts a credential, when given, is sent as an
``Authorization: token <credential>`` header; other hosts never receive it.

Examples:
    >>> is_url("https://raw.githubusercontent.com/o/r/main/palettes.yaml")
    True
    >>> is_url("palettes.yaml")
    False
    >>> auth_headers("https://raw.githubusercontent.com/o/r/main/p.yaml", "abc")
    {'Authorization': 'token abc'}
    >>> auth_headers("https://example.com/p.yaml", "abc")
    {}
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from urllib.parse import urlparse

import requests

from sciplot.errors import (
    ConfigFileNotFoundError,
    HTTPStatusError,
    ParseError,
    UnreachableError,
)
from sciplot.log import logger

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
GITHUB_HOSTS = ("github.com", "githubusercontent.com")


def is_url(location: str | Path) -> bool:
    """Return True when *location* is an http(s) URL."""
    return isinstance(location, str) and bool(_URL_RE.match(location))


def is_github_url(url: str) -> bool:
    """Return True for github.com, raw.githubusercontent.com and their subdomains.

    Examples:
        >>> is_github_url("https://github.com/o/r/raw/main/f.ttf")
        True
        >>> is_github_url("https://api.github.com/repos/o/r")
        True
        >>> is_github_url("https://notgithub.com/f.yaml")
        False
    """
    host = (urlparse(url).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in GITHUB_HOSTS)


def auth_headers(url: str, credential: str | None) -> dict[str, str]:
    """Build request headers for *url*, attaching *credential* only for GitHub."""
    if credential and is_github_url(url):
        return {"Authorization": f"token {credential}"}
    return {}


def _get(url: str, credential: str | None) -> requests.Response:
    headers = auth_headers(url, credential)
    if headers:
        logger.info("Using GitHub token for authenticated access")
    try:
        response = requests.get(url, headers=headers)
    except requests.RequestException as exc:
        raise UnreachableError(url, str(exc)) from exc
    if not 200 <= response.status_code < 300:
        raise HTTPStatusError(url, response.status_code, response.reason or "")
    return response


def _local_path(location: str | Path) -> Path:
    path = Path(location).expanduser()
    if not path.is_file():
        raise ConfigFileNotFoundError(str(location))
    return path


def fetch_bytes(location: str | Path, credential: str | None = None) -> bytes:
    """Return the raw bytes at *location* (URL or local path).

    Raises:
        ConfigFileNotFoundError: Local path does not exist.
        HTTPStatusError: Server returned a non-2xx status.
        UnreachableError: The request failed at the transport level.
    """
    if is_url(location):
        return _get(str(location), credential).content
    return _local_path(location).read_bytes()


def fetch_text(location: str | Path, credential: str | None = None) -> str:
    """Return the UTF-8 text at *location* (URL or local path).

    Raises:
        FetchError: The content could not be fetched.
        ParseError: The content is not valid UTF-8.

    Examples:
        >>> import tempfile; from pathlib import Path
        >>> p = Path(tempfile.mkdtemp()) / "p.yaml"
        >>> _ = p.write_text("primary: [red]\\n")
        >>> fetch_text(p)
        'primary: [red]\\n'
        >>> fetch_text(p.parent / "missing.yaml")
        Traceback (most recent call last):
            ...
        sciplot.errors.ConfigFileNotFoundError: Could not fetch ...: local file not found
    """
    data = fetch_bytes(location, credential)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{location} is not valid UTF-8: {exc}") from exc


def fetch_binary(
    location: str | Path,
    credential: str | None = None,
    directory: str | Path | None = None,
) -> Path:
    """Fetch *location* and write its bytes to a fresh temporary file.

    The temporary file keeps the original suffix so downstream consumers that
    dispatch on extension (``.ttf``, ``.otf``) still work. The caller owns the
    file; pass *directory* to place it in a directory you clean up.

    Returns:
        Path of the temporary file.
    """
    data = fetch_bytes(location, credential)
    name = Path(urlparse(str(location)).path if is_url(location) else location).name
    fd, tmp = tempfile.mkstemp(
        suffix=Path(name).suffix,
        prefix=f"{Path(name).stem}-",
        dir=directory,
    )
    with os.fdopen(fd, "wb") as fh:
        fh.write(data)
    return Path(tmp)

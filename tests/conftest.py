"""Shared test fixtures for tabby."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from tabby.build.minify import Minifier


@pytest.fixture(autouse=True)
def _reset_tabby_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog sees tabby records in every test."""
    yield
    logger = logging.getLogger("tabby")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def collapse_whitespace(text: str) -> str:
    """Deterministic stand-in minifier: squeeze all whitespace runs."""
    return " ".join(text.split())


@pytest.fixture
def fixed_minifier() -> Minifier:
    """A Minifier with a deterministic transform for all three media types."""
    minifier = Minifier()
    for media_type in ("text/html", "text/css", "application/javascript"):
        minifier.add(media_type, collapse_whitespace)
    return minifier


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """A source tree with one file per category plus hidden entries.

    ``index.html`` is 500 bytes, ``style.css`` 200 bytes, ``logo.png`` 1000
    bytes.  Hidden files and directories must never reach the output.
    """
    src = tmp_path / "src"
    src.mkdir()
    (src / "index.html").write_bytes(b"<p>hello</p>" + b" " * 488)
    (src / "style.css").write_bytes(b"body { margin: 0; }" + b"\n" * 181)
    (src / "logo.png").write_bytes(bytes(range(256)) * 3 + b"\x89PNG" * 58)
    (src / ".env").write_text("SECRET=1\n")
    git = src / ".git"
    git.mkdir()
    (git / "config").write_text("[core]\n")
    return src

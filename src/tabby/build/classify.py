"""Classifier — route each source file to the minify or copy path.

Classification is a pure function of the lowercased file extension.
Hidden entries never reach the classifier; the walk skips them.
"""

from __future__ import annotations

import mimetypes
from enum import Enum
from pathlib import PurePath

from tabby._types import MediaType

# Names starting with this prefix are skipped by the build walk.
HIDDEN_PREFIX = "."


class Category(Enum):
    """Media category of a source file."""

    MARKUP = "text/html"
    STYLESHEET = "text/css"
    SCRIPT = "application/javascript"
    OPAQUE = ""

    @property
    def minifiable(self) -> bool:
        """Whether files of this category go through the minifier."""
        return self is not Category.OPAQUE

    @property
    def media_type(self) -> MediaType:
        """Media type handed to the minifier (empty for OPAQUE)."""
        return self.value


_EXTENSIONS: dict[str, Category] = {
    ".html": Category.MARKUP,
    ".css": Category.STYLESHEET,
    ".js": Category.SCRIPT,
}


def classify(path: str | PurePath) -> Category:
    """Return the Category for *path* based on its extension."""
    suffix = PurePath(path).suffix.lower()
    return _EXTENSIONS.get(suffix, Category.OPAQUE)


def is_hidden(name: str) -> bool:
    """Whether a file or directory name is hidden (dotfile)."""
    return name.startswith(HIDDEN_PREFIX)


def guess_media_type(path: str | PurePath) -> MediaType:
    """Best-effort MIME type for logging opaque files. Empty if unknown."""
    media_type, _ = mimetypes.guess_type(PurePath(path).name)
    return media_type or ""

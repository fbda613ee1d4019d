"""Minifier — media-type keyed registry of text transforms.

The build pipeline only talks to :class:`Minifier`.  The default registry
wires the three supported media types to their backends:

- ``text/html`` -> minify-html (inline ``<style>`` / ``<script>`` included)
- ``text/css`` -> rcssmin
- ``application/javascript`` -> rjsmin

Every failure surfaces as :class:`~tabby._errors.MinifyError`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from tabby._errors import MinifyError
from tabby._types import MediaType
from tabby.build.classify import Category

MinifyFunc: TypeAlias = Callable[[str], str]


class Minifier:
    """Registry of minify functions keyed by media type.

    Functions take and return text; the registry handles UTF-8 decoding
    and encoding and turns any backend exception into MinifyError.

    """

    __slots__ = ("_funcs",)

    def __init__(self) -> None:
        self._funcs: dict[MediaType, MinifyFunc] = {}

    def add(self, media_type: MediaType, func: MinifyFunc) -> None:
        """Register *func* for *media_type*, replacing any previous one."""
        self._funcs[media_type] = func

    def supports(self, media_type: MediaType) -> bool:
        """Whether a transform is registered for *media_type*."""
        return media_type in self._funcs

    def minify(self, media_type: MediaType, data: bytes) -> bytes:
        """Minify *data* as *media_type*.

        Raises:
            MinifyError: No transform is registered, the input is not valid
                UTF-8, or the backend rejected it.

        """
        func = self._funcs.get(media_type)
        if func is None:
            msg = f"No minifier registered for {media_type!r}"
            raise MinifyError(msg)

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"Cannot minify {media_type}: input is not valid UTF-8 ({exc})"
            raise MinifyError(msg) from exc

        try:
            result = func(text)
        except Exception as exc:
            msg = f"Minifier for {media_type} failed: {exc}"
            raise MinifyError(msg) from exc

        return result.encode("utf-8")


def minify_html(text: str) -> str:
    import minify_html as _minify_html

    return _minify_html.minify(text, minify_css=True, minify_js=True)


def minify_css(text: str) -> str:
    import rcssmin

    return rcssmin.cssmin(text)


def minify_js(text: str) -> str:
    import rjsmin

    return rjsmin.jsmin(text)


def default_minifier() -> Minifier:
    """Return a Minifier with HTML, CSS and JavaScript registered."""
    minifier = Minifier()
    minifier.add(Category.MARKUP.media_type, minify_html)
    minifier.add(Category.STYLESHEET.media_type, minify_css)
    minifier.add(Category.SCRIPT.media_type, minify_js)
    return minifier

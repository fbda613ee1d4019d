"""Tests for tabby.build.minify — the minifier registry and its backends."""

from __future__ import annotations

import pytest

from tabby._errors import MinifyError
from tabby.build.minify import Minifier, default_minifier


class TestMinifierRegistry:
    """Minifier — media-type keyed registry."""

    def test_add_and_supports(self) -> None:
        m = Minifier()
        assert not m.supports("text/css")
        m.add("text/css", str.strip)
        assert m.supports("text/css")

    def test_minify_round_trips_bytes(self) -> None:
        m = Minifier()
        m.add("text/css", str.strip)
        assert m.minify("text/css", b"  a{}  ") == b"a{}"

    def test_unregistered_media_type_raises(self) -> None:
        with pytest.raises(MinifyError, match="No minifier registered"):
            Minifier().minify("text/html", b"<p></p>")

    def test_invalid_utf8_raises(self) -> None:
        m = Minifier()
        m.add("text/css", str.strip)
        with pytest.raises(MinifyError, match="UTF-8"):
            m.minify("text/css", b"\xff\xfe\x00")

    def test_backend_error_is_wrapped(self) -> None:
        def broken(text: str) -> str:
            raise ValueError("unexpected token")

        m = Minifier()
        m.add("application/javascript", broken)
        with pytest.raises(MinifyError, match="unexpected token") as info:
            m.minify("application/javascript", b"var x")
        assert isinstance(info.value.__cause__, ValueError)

    def test_add_replaces_existing(self) -> None:
        m = Minifier()
        m.add("text/css", str.strip)
        m.add("text/css", str.upper)
        assert m.minify("text/css", b"a") == b"A"

    def test_unicode_preserved(self) -> None:
        m = Minifier()
        m.add("text/html", str.strip)
        assert m.minify("text/html", " <p>héllo ✓</p> ".encode()) == "<p>héllo ✓</p>".encode()


class TestDefaultMinifier:
    """default_minifier() — real backends for HTML, CSS and JS."""

    def test_registers_three_media_types(self) -> None:
        m = default_minifier()
        assert m.supports("text/html")
        assert m.supports("text/css")
        assert m.supports("application/javascript")
        assert not m.supports("image/png")

    def test_css_shrinks(self) -> None:
        source = b"body {\n    margin: 0;\n    padding: 0;\n}\n\n/* comment */\n"
        result = default_minifier().minify("text/css", source)
        assert len(result) < len(source)
        assert b"comment" not in result
        assert b"margin:0" in result

    def test_js_shrinks(self) -> None:
        source = b"// leading comment\nvar   answer = 42;\n\n\nfunction f ( a ) {\n  return a ;\n}\n"
        result = default_minifier().minify("application/javascript", source)
        assert len(result) < len(source)
        assert b"leading comment" not in result
        assert b"42" in result

    def test_html_shrinks(self) -> None:
        source = (
            b"<!DOCTYPE html>\n<html>\n  <body>\n\n"
            b"    <!-- drop me -->\n    <p>  Hello   world  </p>\n  </body>\n</html>\n"
        )
        result = default_minifier().minify("text/html", source)
        assert len(result) < len(source)
        assert b"drop me" not in result
        assert b"Hello" in result

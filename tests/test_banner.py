"""Tests for tabby.banner — startup banner output."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

from tabby.banner import print_banner
from tabby.config import TabbyConfig


class TestPrintBanner:
    """Tests for the startup banner."""

    def _capture_banner(self, mode: str, **kwargs: object) -> str:
        """Call print_banner and capture stderr output."""
        buf = io.StringIO()
        with patch.object(sys, "stderr", buf):
            config = TabbyConfig(root=Path("/tmp/test-site"), **kwargs)  # type: ignore[arg-type]
            print_banner(config, mode=mode)  # type: ignore[arg-type]
        return buf.getvalue()

    def test_build_mode_banner(self) -> None:
        output = self._capture_banner("build")

        assert "tabby" in output
        assert "[build]" in output
        assert "/tmp/test-site/src" in output
        assert "output:" in output
        assert "/tmp/test-site/dist" in output
        assert "Watching" not in output

    def test_run_mode_banner(self) -> None:
        output = self._capture_banner("run", port=9000)

        assert "[run]" in output
        assert "/__ws" in output
        assert "http://localhost:9000" in output
        assert "Watching for changes" in output
        assert "output:" not in output

    def test_explicit_host_shown(self) -> None:
        output = self._capture_banner("run", host="127.0.0.1")
        assert "http://127.0.0.1:8080" in output

    def test_debug_notice(self) -> None:
        assert "debug logging enabled" in self._capture_banner("build", debug=True)
        assert "debug logging enabled" not in self._capture_banner("build")

"""Integration tests for tabby.app — build and serve entry points."""

from __future__ import annotations

import socket
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

import tabby
from tabby.app import build, serve


def _idle_watch(*paths: Any, **kwargs: Any) -> Iterator[set[Any]]:
    kwargs["stop_event"].wait()
    yield from ()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("SRC_DIR", "DEST_DIR", "HOST", "PORT", "DEBUG"):
        monkeypatch.delenv(var, raising=False)


class TestBuild:
    def test_build_with_defaults(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        src = tmp_path / "src"
        src.mkdir()
        (src / "app.css").write_text("body  {  color : red ;  }\n")
        (src / "font.woff2").write_bytes(b"\x00font")

        stats = build(tmp_path)

        assert stats.total_files == 2
        assert stats.processed_files == 1
        assert (tmp_path / "dist" / "font.woff2").read_bytes() == b"\x00font"

        out = capsys.readouterr()
        assert "INFO\t[Build Summary] total_files=2 total_processed_files=1" in out.out
        assert "source:" in out.err
        assert "output:" in out.err

    def test_overrides_and_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        site = tmp_path / "site"
        site.mkdir()
        (site / "a.txt").write_text("a")
        monkeypatch.setenv("SRC_DIR", "site")

        build(tmp_path, destination="public")
        assert (tmp_path / "public" / "a.txt").read_text() == "a"

    def test_missing_source_exits_1(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            build(tmp_path)
        assert exc_info.value.code == 1
        assert "ERROR\tBuild failed" in capsys.readouterr().out

    def test_bad_config_exits_1(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("PORT", "not-a-port")
        with pytest.raises(SystemExit) as exc_info:
            build(tmp_path)
        assert exc_info.value.code == 1

    def test_debug_banner_notice(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "src").mkdir()
        build(tmp_path, debug=True)
        assert "debug logging enabled" in capsys.readouterr().err

    def test_debug_logs_event_log_stats(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        src = tmp_path / "src"
        src.mkdir()
        (src / "a.txt").write_text("a")

        build(tmp_path, debug=True)

        out = capsys.readouterr().out
        assert "DEBUG\tEvent log: " in out
        assert "'FileCopied': 1" in out
        assert "'BuildSummary': 1" in out


class TestServe:
    def test_missing_source_exits_1(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            serve(tmp_path, port=0)
        assert exc_info.value.code == 1
        assert "ERROR\tError starting server" in capsys.readouterr().out

    def test_port_in_use_exits_1(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "src").mkdir()
        monkeypatch.setattr("watchfiles.watch", _idle_watch)

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen()
            port = taken.getsockname()[1]

            with pytest.raises(SystemExit) as exc_info:
                serve(tmp_path, host="127.0.0.1", port=port)

        assert exc_info.value.code == 1
        assert "ERROR\tError starting server" in capsys.readouterr().out
        assert not any(
            t.name == "tabby-watcher" and t.is_alive() for t in threading.enumerate()
        )

    def test_refused_watch_exits_1(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "src").mkdir()

        def refuse(*paths: Any, **kwargs: Any) -> Iterator[set[Any]]:
            msg = "inotify watch limit reached"
            raise OSError(msg)

        monkeypatch.setattr("watchfiles.watch", refuse)

        with pytest.raises(SystemExit) as exc_info:
            serve(tmp_path, host="127.0.0.1", port=0)

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "ERROR\tError starting server" in out
        assert "inotify watch limit reached" in out


class TestPublicAPI:
    def test_lazy_exports(self) -> None:
        assert tabby.build is build
        assert tabby.serve is serve

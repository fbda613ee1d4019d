"""Build pipeline — minify text assets, copy everything else.

Walks the source tree once, depth-first in lexical order, and writes a
mirror of it into the destination tree:

- HTML, CSS and JS are minified (HTML also gets a build timestamp comment)
- Every other file is stream-copied byte-for-byte
- Hidden files are skipped and hidden directories are not descended

The first read, write or minify error aborts the whole build.  Output
already written stays on disk; there is no rollback.
"""

from __future__ import annotations

import os
import shutil
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import TYPE_CHECKING

from tabby.build.classify import Category, classify, guess_media_type, is_hidden
from tabby.build.minify import Minifier, default_minifier
from tabby.log import get_logger

if TYPE_CHECKING:
    from tabby._types import RelPath
    from tabby.observability.collector import EventCollector

logger = get_logger("build")

_CENT = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Record of a single file written during a build.

    Attributes:
        path: Source-relative path with POSIX separators.
        media_type: Minifier media type, or the guessed MIME type for
            copied files (empty if unknown).
        source_bytes: Size of the source file.
        output_bytes: Size of the written file.
        minified: True if the file went through the minifier.
        reduction: Per-file reduction percentage (0.0 for copies).

    """

    path: RelPath
    media_type: str
    source_bytes: int
    output_bytes: int
    minified: bool
    reduction: float


@dataclass(slots=True)
class BuildStats:
    """Aggregate counters over one build run.

    ``original_bytes`` and ``saved_bytes`` cover minified files only, so
    :attr:`reduction` is measured over exactly the processed subset.
    ``saved_bytes`` is negative when minification grew the output.

    """

    total_files: int = 0
    processed_files: int = 0
    original_bytes: int = 0
    saved_bytes: int = 0
    total_bytes: int = 0
    duration_ms: float = 0.0
    records: list[FileRecord] = field(default_factory=list)

    @property
    def reduction(self) -> float:
        """Aggregate reduction percentage, 0.0 when nothing was minified."""
        return reduction_percent(self.saved_bytes, self.original_bytes)

    def add(self, record: FileRecord) -> None:
        """Fold one processed file into the counters."""
        self.total_files += 1
        self.total_bytes += record.source_bytes
        if record.minified:
            self.processed_files += 1
            self.original_bytes += record.source_bytes
            self.saved_bytes += record.source_bytes - record.output_bytes
        self.records.append(record)


def reduction_percent(saved: int, original: int) -> float:
    """Return ``100 * saved / original`` rounded half away from zero to 2 places.

    Returns 0.0 when *original* is zero.
    """
    if original == 0:
        return 0.0
    ratio = Decimal(100 * saved) / Decimal(original)
    return float(ratio.quantize(_CENT, rounding=ROUND_HALF_UP))


def timestamp_comment(now: datetime | None = None) -> str:
    """HTML comment stamping the build time (RFC 3339, UTC)."""
    now = now if now is not None else datetime.now(UTC)
    return f"<!-- minified at {now.astimezone(UTC).strftime('%Y-%m-%dT%H:%M:%SZ')} -->"


def iter_source_files(source: Path, *, exclude: Path | None = None) -> Iterator[Path]:
    """Yield every non-hidden regular file under *source*, depth-first, sorted.

    Entries of each directory are visited in name order and a subdirectory
    is descended as soon as it is reached, so ``a/1.txt`` comes before
    ``z.txt``.  Hidden directories are pruned, as is *exclude* when it lies
    inside *source* (a destination nested in its own source tree).  Walk
    errors are raised, not ignored.
    """
    if not source.exists():
        msg = f"Source directory not found: {source}"
        raise FileNotFoundError(msg)
    if not source.is_dir():
        msg = f"Source is not a directory: {source}"
        raise NotADirectoryError(msg)

    excluded = exclude.resolve() if exclude is not None else None
    yield from _walk(source, excluded)


def _walk(directory: Path, excluded: Path | None) -> Iterator[Path]:
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        if is_hidden(entry.name):
            continue
        path = directory / entry.name
        if entry.is_dir(follow_symlinks=False):
            if path.resolve() != excluded:
                yield from _walk(path, excluded)
        elif entry.is_file():
            yield path


class BuildPipeline:
    """Single-threaded source -> destination transform.

    Args:
        source: Source tree root.
        destination: Destination tree root (created if missing).
        minifier: Minifier to use (defaults to :func:`default_minifier`).
        collector: Optional event collector for structured records.
        clock: Returns the timestamp stamped into HTML output.

    """

    def __init__(
        self,
        source: Path,
        destination: Path,
        *,
        minifier: Minifier | None = None,
        collector: EventCollector | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._source = Path(source)
        self._destination = Path(destination)
        self._minifier = minifier if minifier is not None else default_minifier()
        self._collector = collector
        self._clock = clock

    def run(self) -> BuildStats:
        """Run the build and return its statistics.

        The summary is logged and recorded even when the build fails; the
        error is then re-raised.

        Raises:
            OSError: The source cannot be walked, a file cannot be read or
                written, or the destination cannot be created.
            MinifyError: The minifier rejected a file.

        """
        stats = BuildStats()
        start = time.perf_counter()
        failed = True
        try:
            self._destination.mkdir(parents=True, exist_ok=True)
            for src_file in iter_source_files(self._source, exclude=self._destination):
                stats.add(self._process(src_file))
            failed = False
        finally:
            stats.duration_ms = (time.perf_counter() - start) * 1000
            self._summarize(stats, failed=failed)
        return stats

    def _process(self, src_file: Path) -> FileRecord:
        relative = src_file.relative_to(self._source)
        dest_file = self._destination / relative
        category = classify(src_file)

        match category:
            case Category.MARKUP | Category.STYLESHEET | Category.SCRIPT:
                return self._minify(src_file, dest_file, relative.as_posix(), category)
            case Category.OPAQUE:
                return self._copy(src_file, dest_file, relative.as_posix())

    def _minify(
        self, src_file: Path, dest_file: Path, rel: RelPath, category: Category,
    ) -> FileRecord:
        data = src_file.read_bytes()
        minified = self._minifier.minify(category.media_type, data)
        if category is Category.MARKUP:
            now = self._clock() if self._clock is not None else None
            minified += b"\n" + timestamp_comment(now).encode("utf-8")

        dest_file.parent.mkdir(parents=True, exist_ok=True)
        dest_file.write_bytes(minified)

        source_bytes = len(data)
        output_bytes = len(minified)
        reduction = reduction_percent(source_bytes - output_bytes, source_bytes)

        logger.info(
            "[Minified] path=%s mime_type=%s source_bytes=%d minified_bytes=%d "
            "minified_reduction=%.2f",
            rel, category.media_type, source_bytes, output_bytes, reduction,
        )
        if self._collector is not None:
            self._collector.record_minified(
                rel,
                category.media_type,
                source_bytes=source_bytes,
                minified_bytes=output_bytes,
                reduction=reduction,
            )

        return FileRecord(
            path=rel,
            media_type=category.media_type,
            source_bytes=source_bytes,
            output_bytes=output_bytes,
            minified=True,
            reduction=reduction,
        )

    def _copy(self, src_file: Path, dest_file: Path, rel: RelPath) -> FileRecord:
        dest_file.parent.mkdir(parents=True, exist_ok=True)
        with src_file.open("rb") as src, dest_file.open("wb") as dst:
            shutil.copyfileobj(src, dst)
        size = dest_file.stat().st_size
        media_type = guess_media_type(src_file)

        logger.info("[Copied] path=%s mime_type=%s source_bytes=%d", rel, media_type, size)
        if self._collector is not None:
            self._collector.record_copied(rel, media_type, source_bytes=size)

        return FileRecord(
            path=rel,
            media_type=media_type,
            source_bytes=size,
            output_bytes=size,
            minified=False,
            reduction=0.0,
        )

    def _summarize(self, stats: BuildStats, *, failed: bool) -> None:
        logger.info(
            "[Build Summary] total_files=%d total_processed_files=%d "
            "total_minified_reduction=%.2f",
            stats.total_files, stats.processed_files, stats.reduction,
        )
        if self._collector is not None:
            self._collector.record_build_summary(
                total_files=stats.total_files,
                processed_files=stats.processed_files,
                reduction=stats.reduction,
                failed=failed,
                duration_ms=stats.duration_ms,
            )


def build(
    source: Path,
    destination: Path,
    *,
    minifier: Minifier | None = None,
    collector: EventCollector | None = None,
    clock: Callable[[], datetime] | None = None,
) -> BuildStats:
    """Build *source* into *destination* and return the run's statistics.

    Convenience wrapper around :class:`BuildPipeline`.

    """
    return BuildPipeline(
        source,
        destination,
        minifier=minifier,
        collector=collector,
        clock=clock,
    ).run()

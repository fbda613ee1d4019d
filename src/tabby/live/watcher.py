"""File watcher — turns filesystem events into reload signals.

Watches the source tree for changes and sends one payload-free signal on
the reload channel per change reported by watchfiles.  Only directories
present when the watcher starts are watched: each is registered
non-recursively, so directories created later are not picked up until the
server restarts.

watchfiles batches events over ``debounce_ms`` and reports each
``(change, path)`` pair at most once per batch, so several writes to the
same file inside one window produce a single signal.

The watcher runs watchfiles in a background thread and bridges each event
to the asyncio reload channel, blocking until a receiver takes it.  A
failure of the very first ``watch()`` call is a setup failure and is
raised from :meth:`SourceWatcher.start`; later failures are logged and the
watch is re-established.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from tabby._errors import ChannelClosedError, WatchRuntimeError, WatchSetupError
from tabby.log import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from watchfiles import Change

    from tabby.live.channel import ReloadChannel
    from tabby.observability.collector import EventCollector

logger = get_logger("watcher")

# Platform metadata entries never registered for watching.
IGNORED_NAMES = frozenset({".DS_Store"})

# How often a blocked hand-off re-checks for a stop request (seconds).
_POLL_INTERVAL = 0.2


def watch_targets(root: Path) -> tuple[Path, ...]:
    """Return *root* and every directory below it, in lexical walk order.

    Entries named in :data:`IGNORED_NAMES` are skipped.

    Raises:
        WatchSetupError: *root* is missing, not a directory, or cannot be
            walked.

    """
    if not root.is_dir():
        msg = f"Cannot watch {root}: not a directory"
        raise WatchSetupError(msg)

    def _raise(exc: OSError) -> None:
        raise exc

    targets: list[Path] = []
    try:
        for dirpath, dirnames, _ in os.walk(root, onerror=_raise):
            dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_NAMES)
            targets.append(Path(dirpath))
            logger.debug("Watching.... path=%s", dirpath)
    except OSError as exc:
        msg = f"Failed to walk source directory {root}: {exc}"
        raise WatchSetupError(msg) from exc
    return tuple(targets)


class SourceWatcher:
    """Watches a source tree and feeds the reload channel.

    Args:
        root: Source tree to watch.
        channel: Channel receiving one signal per filesystem event.
        loop: Event loop that owns *channel*.
        collector: Optional event collector for structured records.
        debounce_ms: watchfiles batching window.
        step_ms: watchfiles polling step.
        watch_filter: watchfiles filter; None reports every change.
        retry_delay: Seconds to wait before re-establishing a failed watch.
        startup_grace: Seconds :meth:`start` waits for the first ``watch()``
            call to fail before treating the registration as successful.

    """

    def __init__(
        self,
        root: Path,
        channel: ReloadChannel,
        loop: asyncio.AbstractEventLoop,
        *,
        collector: EventCollector | None = None,
        debounce_ms: int = 50,
        step_ms: int = 50,
        watch_filter: Callable[[Change, str], bool] | None = None,
        retry_delay: float = 1.0,
        startup_grace: float = 0.25,
    ) -> None:
        self._root = Path(root)
        self._channel = channel
        self._loop = loop
        self._collector = collector
        self._debounce_ms = debounce_ms
        self._step_ms = step_ms
        self._watch_filter = watch_filter
        self._retry_delay = retry_delay
        self._startup_grace = startup_grace
        self._targets: tuple[Path, ...] = ()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        # Hand-off of the first watch() outcome from the thread to start().
        self._setup_lock = threading.Lock()
        self._setup_reported = threading.Event()
        self._setup_settled = False
        self._setup_error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def targets(self) -> tuple[Path, ...]:
        """Directories registered at start."""
        return self._targets

    def start(self) -> None:
        """Register the watch and start the background thread.

        Blocks for up to ``startup_grace`` seconds so that a watch backend
        refusing the registration (watch limit reached, permission denied)
        is reported here rather than in the background.

        Raises:
            WatchSetupError: The source tree cannot be watched.

        """
        if self.is_running:
            return

        self._targets = watch_targets(self._root)
        self._stop_event.clear()
        self._setup_reported.clear()
        self._setup_settled = False
        self._setup_error = None

        thread = threading.Thread(
            target=self._watch_loop,
            name="tabby-watcher",
            daemon=True,
        )
        self._thread = thread
        thread.start()

        self._setup_reported.wait(self._startup_grace)
        with self._setup_lock:
            self._setup_settled = True
            error = self._setup_error

        if error is not None:
            thread.join(timeout=5.0)
            self._thread = None
            msg = f"Failed to watch {self._root}: {error}"
            raise WatchSetupError(msg) from error

        logger.info("Watching directory: '%s'", self._root)

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    def _report_setup(self, error: BaseException | None) -> bool:
        """Tell start() how the first watch() call went.

        Returns True if start() was still waiting and took the report.
        """
        with self._setup_lock:
            if self._setup_settled:
                return False
            self._setup_settled = True
            self._setup_error = error
        self._setup_reported.set()
        return True

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles and hand each event to the channel."""
        from watchfiles import watch

        while not self._stop_event.is_set():
            targets = [t for t in self._targets if t.is_dir()]
            if not targets:
                logger.error("[Watcher] no watched directories left under %s", self._root)
                return
            try:
                for raw_changes in watch(
                    *targets,
                    watch_filter=self._watch_filter,
                    debounce=self._debounce_ms,
                    step=self._step_ms,
                    stop_event=self._stop_event,
                    recursive=False,
                    raise_interrupt=False,
                ):
                    self._report_setup(None)
                    for change, path in sorted(raw_changes, key=lambda c: c[1]):
                        if not self._deliver(change, path):
                            return
            except (OSError, RuntimeError) as exc:
                if self._report_setup(exc):
                    return
                error = WatchRuntimeError(str(exc))
                logger.error("[Watcher] file error: %s", error)
                self._stop_event.wait(self._retry_delay)
            else:
                return

    def _deliver(self, change: Change, path: str) -> bool:
        """Send one signal for *path*.  Returns False when the loop must end."""
        logger.info("[Watcher] file changed: %s", path)
        if self._collector is not None:
            self._collector.record_change(path, change.name)

        try:
            future = asyncio.run_coroutine_threadsafe(self._channel.send(), self._loop)
        except RuntimeError:
            # Event loop already closed.
            return False

        while True:
            try:
                future.result(timeout=_POLL_INTERVAL)
                return True
            except TimeoutError:
                if self._stop_event.is_set():
                    future.cancel()
                    return False
            except (ChannelClosedError, concurrent.futures.CancelledError):
                return False

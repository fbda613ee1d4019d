"""Live layer — serve the source tree and reload browsers on change.

Connects filesystem changes to browser reloads through the watcher,
the reload channel and the WebSocket broadcaster.
"""

from tabby.live.broadcaster import Broadcaster, LiveClient
from tabby.live.channel import ReloadChannel
from tabby.live.server import LiveServer
from tabby.live.watcher import SourceWatcher, watch_targets

__all__ = [
    "Broadcaster",
    "LiveClient",
    "LiveServer",
    "ReloadChannel",
    "SourceWatcher",
    "watch_targets",
]

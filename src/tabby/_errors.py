"""Tabby error hierarchy.

All tabby-specific errors inherit from TabbyError for easy catching.
Filesystem failures are left as ``OSError`` and are not wrapped.
"""


class TabbyError(Exception):
    """Base error for all tabby operations."""


class ConfigError(TabbyError):
    """Invalid or missing configuration."""


class BuildError(TabbyError):
    """Error in the build pipeline."""


class MinifyError(BuildError):
    """The minifier rejected its input or has no transform for a media type."""


class LiveError(TabbyError):
    """Error in the live-reload layer (watching, channel, broadcasting)."""


class WatchSetupError(LiveError):
    """The initial watch over the source tree could not be registered."""


class WatchRuntimeError(LiveError):
    """The watch backend failed after startup. Logged, never fatal."""


class SendError(LiveError):
    """A reload message could not be written to one live client."""


class ChannelClosedError(LiveError):
    """A signal was sent on a reload channel that has been closed."""

"""Tabby configuration.

TabbyConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class TabbyConfig:
    """Configuration for a tabby run.

    Attributes:
        root: Directory that relative ``source`` / ``destination`` paths are
              resolved against. Always resolved to an absolute path on
              construction.
        source: Source tree to build or serve.
        destination: Output tree written by ``tabby build``.
        host: Bind address for ``tabby run``.
        port: Bind port for ``tabby run``.
        debug: Enable debug-level logging.

    """

    root: Path = field(default_factory=Path.cwd)
    source: Path = field(default_factory=lambda: Path("src"))
    destination: Path = field(default_factory=lambda: Path("dist"))
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    def __post_init__(self) -> None:
        # watchfiles reports absolute paths; keep everything comparable.
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def source_path(self) -> Path:
        """Absolute path to the source tree."""
        if self.source.is_absolute():
            return self.source
        return self.root / self.source

    @property
    def destination_path(self) -> Path:
        """Absolute path to the build output tree."""
        if self.destination.is_absolute():
            return self.destination
        return self.root / self.destination

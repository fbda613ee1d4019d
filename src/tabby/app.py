"""Tabby application — the public ``build`` and ``serve`` entry points.

Both load the layered configuration, set up logging, print the banner and
run.  Fatal errors are logged and end the process with exit status 1.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from tabby._errors import ConfigError, TabbyError
from tabby.build.pipeline import BuildStats
from tabby.config import TabbyConfig
from tabby.config_loader import load_config
from tabby.log import configure_logging, get_logger
from tabby.observability import EventCollector, EventLog

logger = get_logger()


def _setup(root: str | Path | None, overrides: dict[str, object]) -> TabbyConfig:
    """Load config and configure logging, exiting on a bad config."""
    try:
        config = load_config(Path(root) if root is not None else None, **overrides)
    except ConfigError as exc:
        configure_logging()
        logger.error("Failed to load config: %s", exc)
        sys.exit(1)
    configure_logging(debug=config.debug)
    return config


def build(root: str | Path | None = None, **kwargs: object) -> BuildStats:
    """Build the source tree into the destination tree once.

    Args:
        root: Directory relative paths are resolved against (default: cwd).
        **kwargs: Override TabbyConfig fields.

    Returns:
        The run's BuildStats.

    """
    from tabby.banner import print_banner
    from tabby.build.pipeline import BuildPipeline

    config = _setup(root, kwargs)
    print_banner(config, mode="build")
    logger.info(
        "Starting build process... source_directory=%s destination_directory=%s",
        config.source_path, config.destination_path,
    )

    collector = EventCollector(EventLog())
    pipeline = BuildPipeline(
        config.source_path,
        config.destination_path,
        collector=collector,
    )
    try:
        return pipeline.run()
    except (OSError, TabbyError) as exc:
        logger.error("Build failed: %s", exc)
        sys.exit(1)
    finally:
        logger.debug("Event log: %s", collector.log.stats())


def serve(root: str | Path | None = None, **kwargs: object) -> None:
    """Serve the source tree with live reload until interrupted.

    Args:
        root: Directory relative paths are resolved against (default: cwd).
        **kwargs: Override TabbyConfig fields.

    """
    from tabby.banner import print_banner
    from tabby.live.server import LiveServer

    config = _setup(root, kwargs)
    print_banner(config, mode="run")
    logger.info(
        "Starting serve... source_directory=%s port=%d",
        config.source_path, config.port,
    )

    collector = EventCollector(EventLog())
    server = LiveServer(
        config.source_path,
        config.host,
        config.port,
        collector=collector,
    )
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except (OSError, TabbyError) as exc:
        logger.error("Error starting server: %s", exc)
        sys.exit(1)
    finally:
        logger.debug("Event log: %s", collector.log.stats())

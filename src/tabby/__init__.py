"""Tabby — minify a static site, or serve it with live reload.

Two modes::

    import tabby

    tabby.build()     # src/ -> dist/, HTML/CSS/JS minified, the rest copied
    tabby.serve()     # serve src/ on :8080, reload browsers on every change

Both read ``SRC_DIR``, ``DEST_DIR``, ``HOST``, ``PORT`` and ``DEBUG`` from
the environment (and ``tabby.toml`` / ``tabby.yaml`` if present); keyword
arguments override them.

"""

__version__ = "0.1.0"
__all__ = [
    "TabbyConfig",
    "__version__",
    "build",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import tabby`` fast; websockets and watchfiles are only loaded
    when a mode actually runs.
    """
    if name == "TabbyConfig":
        from tabby.config import TabbyConfig

        return TabbyConfig

    if name == "build":
        from tabby.app import build

        return build

    if name == "serve":
        from tabby.app import serve

        return serve

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)

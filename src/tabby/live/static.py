"""Static file responses for ``run`` mode.

Maps request paths onto the source tree and builds complete HTTP
responses for the websockets server's ``process_request`` hook:

- ``/dir/`` serves ``dir/index.html`` when present, else a listing
- ``/dir`` (a directory without trailing slash) redirects to ``/dir/``
- HTML files get the live reload script appended
- Paths escaping the root and missing files are 404
"""

from __future__ import annotations

import html
import mimetypes
from http import HTTPStatus
from pathlib import Path
from urllib.parse import quote, unquote, urlsplit

from websockets.datastructures import Headers
from websockets.http11 import Response

from tabby.build.classify import Category, classify, is_hidden
from tabby.live.inject import inject_reload_script
from tabby.log import get_logger

logger = get_logger("live")

DEFAULT_DOCUMENT = "index.html"


def resolve(root: Path, url_path: str) -> Path | None:
    """Map a decoded URL path to a filesystem path under *root*.

    Returns None when the path escapes *root*.
    """
    root = root.resolve()
    candidate = (root / url_path.lstrip("/")).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate


def make_response(
    status: HTTPStatus,
    body: bytes = b"",
    *,
    content_type: str = "text/plain; charset=utf-8",
    extra_headers: dict[str, str] | None = None,
) -> Response:
    """Build a complete, self-delimiting HTTP response."""
    headers = Headers()
    headers["Content-Type"] = content_type
    headers["Content-Length"] = str(len(body))
    headers["Cache-Control"] = "no-cache"
    headers["Connection"] = "close"
    for name, value in (extra_headers or {}).items():
        headers[name] = value
    return Response(status.value, status.phrase, headers, body)


def error_response(status: HTTPStatus) -> Response:
    """Plain-text error page for *status*."""
    return make_response(status, f"{status.value} {status.phrase}\n".encode())


def respond(root: Path, raw_path: str) -> Response:
    """Serve *raw_path* (as sent by the client, query included) from *root*."""
    parts = urlsplit(raw_path)
    url_path = unquote(parts.path) or "/"

    target = resolve(root, url_path)
    if target is None:
        return error_response(HTTPStatus.NOT_FOUND)

    if target.is_dir():
        if not url_path.endswith("/"):
            location = quote(url_path) + "/"
            if parts.query:
                location += "?" + parts.query
            return make_response(
                HTTPStatus.MOVED_PERMANENTLY,
                extra_headers={"Location": location},
            )
        index = target / DEFAULT_DOCUMENT
        if not index.is_file():
            return _listing(target, url_path)
        target = index

    if not target.is_file():
        return error_response(HTTPStatus.NOT_FOUND)

    try:
        body = target.read_bytes()
    except OSError as exc:
        logger.error("Failed to read %s: %s", target, exc)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)

    if classify(target) is Category.MARKUP:
        return make_response(
            HTTPStatus.OK,
            inject_reload_script(body),
            content_type="text/html; charset=utf-8",
        )

    content_type, _ = mimetypes.guess_type(target.name)
    return make_response(
        HTTPStatus.OK,
        body,
        content_type=content_type or "application/octet-stream",
    )


def _listing(directory: Path, url_path: str) -> Response:
    """Minimal HTML directory listing (hidden entries omitted)."""
    try:
        entries = sorted(p for p in directory.iterdir() if not is_hidden(p.name))
    except OSError as exc:
        logger.error("Failed to list %s: %s", directory, exc)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)

    lines = [
        "<!DOCTYPE html>",
        f"<title>Index of {html.escape(url_path)}</title>",
        "<pre>",
    ]
    for entry in entries:
        name = entry.name + ("/" if entry.is_dir() else "")
        lines.append(f'<a href="{quote(name)}">{html.escape(name)}</a>')
    lines.append("</pre>")
    body = ("\n".join(lines) + "\n").encode("utf-8")
    return make_response(HTTPStatus.OK, body, content_type="text/html; charset=utf-8")

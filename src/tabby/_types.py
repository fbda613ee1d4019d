"""Shared type definitions for tabby."""

from typing import Literal, TypeAlias

# Mode of operation
TabbyMode: TypeAlias = Literal["build", "run"]

# Minifier media type (e.g., "text/css")
MediaType: TypeAlias = str

# Source-relative path with POSIX separators (e.g., "css/site.css")
RelPath: TypeAlias = str

# Live client identifier
ClientID: TypeAlias = str

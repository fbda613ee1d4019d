"""Build layer — classify, minify or copy, and aggregate statistics.

Turns a source tree into a distributable tree in a single sequential walk.
"""

from tabby.build.classify import Category, classify
from tabby.build.minify import Minifier, default_minifier
from tabby.build.pipeline import BuildPipeline, BuildStats, FileRecord, build

__all__ = [
    "BuildPipeline",
    "BuildStats",
    "Category",
    "FileRecord",
    "Minifier",
    "build",
    "classify",
    "default_minifier",
]

from __future__ import annotations

from enum import StrEnum, auto
from pathlib import PurePath
from typing import Any


class OutputFormat(StrEnum):
    """Textual layout used when a file's content is emitted."""

    DEFAULT = auto()
    MARKDOWN = auto()
    CXML = auto()


DEFAULT_CONCURRENCY = 10

# Keys are extensions without the leading dot.
EXT_TO_LANG: dict[str, str] = {
    "py": "python",
    "c": "c",
    "cpp": "cpp",
    "java": "java",
    "js": "javascript",
    "ts": "typescript",
    "html": "html",
    "css": "css",
    "xml": "xml",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "sh": "bash",
    "rb": "ruby",
}

BINARY_FILE_EXTENSIONS: frozenset[str] = frozenset(
    {
        # images
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".bmp",
        ".tiff",
        ".webp",
        ".ico",
        ".svg",
        # executables and libraries
        ".exe",
        ".dll",
        ".so",
        ".dylib",
        ".bin",
        # archives
        ".zip",
        ".gz",
        ".tar",
        ".rar",
        ".7z",
        # audio and video
        ".mp3",
        ".mp4",
        ".avi",
        ".mov",
        ".wav",
        ".ogg",
        ".flac",
        # office documents
        ".pdf",
        ".doc",
        ".docx",
        ".xls",
        ".xlsx",
        ".ppt",
        ".pptx",
        # fonts
        ".ttf",
        ".otf",
        ".woff",
        ".woff2",
        # databases and disk images
        ".db",
        ".sqlite",
        ".sqlite3",
        ".iso",
        ".dmg",
        ".img",
    },
)

DEFAULT_CONFIG: dict[str, Any] = {
    "ignore": [
        "**/node_modules/**",
        "*.log",
        "package-lock.json",
        "coverage/**",
        ".git/**",
        ".DS_Store",
    ],
    "include-hidden": False,
    "line-numbers": False,
    "markdown": False,
    "cxml": False,
    "include-binary": False,
    "tree": False,
}


def file_extension(path: str | PurePath) -> str:
    """Return the dot-inclusive extension of the last path segment.

    A leading dot does not start an extension, so `.bashrc` has none while
    `archive.tar.gz` yields `.gz`.

    Args:
        path (str | PurePath): the path to inspect

    Returns:
        str: the extension including its dot, or "" when there is none
    """
    return PurePath(path).suffix


def is_binary_file(path: str | PurePath) -> bool:
    """Classify a file as binary from its lower-cased extension alone.

    Args:
        path (str | PurePath): the file path to classify

    Returns:
        bool: True if the extension is on the binary denylist
    """
    return file_extension(path).lower() in BINARY_FILE_EXTENSIONS


def guess_language(path: str | PurePath) -> str:
    """Get the Markdown fence language for a file, or "" if unknown."""
    return EXT_TO_LANG.get(file_extension(path)[1:], "")

"""
MIME type <-> file extension lookup over the bundled tables.
"""

from __future__ import annotations

import re

from mimekit.mime.config import DEFAULT_EXTENSION, DEFAULT_MIME_TYPE
from mimekit.tables_loader import get_mime_tables

_WHITESPACE_RE = re.compile(r"\s")


class MimeTypes:
    """Table lookups; unknown input falls back to ``bin`` / ``application/octet-stream``."""

    @staticmethod
    def detect_extension(mime_type: str) -> str:
        """File extension for a content type, e.g. ``image/jpeg`` -> ``jpeg``."""
        mime_type = _WHITESPACE_RE.sub("", (mime_type or "").lower())
        entry = get_mime_tables()["types"].get(mime_type)
        if entry is None:
            return DEFAULT_EXTENSION
        if isinstance(entry, str):
            return entry

        subtype = mime_type.split("/", 1)[-1]
        if subtype in entry:
            return subtype
        if entry[0] == "*":
            return DEFAULT_EXTENSION
        return entry[0]

    @staticmethod
    def detect_mime_type(extension: str) -> str:
        """Content type for an extension or a file name, e.g. ``index.js`` -> ``application/javascript``."""
        extension = _WHITESPACE_RE.sub("", (extension or "").lower())
        if extension.startswith("."):
            extension = extension[1:]
        extension = extension.rsplit(".", 1)[-1]
        entry = get_mime_tables()["extensions"].get(extension)
        if entry is None:
            return DEFAULT_MIME_TYPE
        if isinstance(entry, str):
            return entry

        for mime_type in entry:
            if mime_type.split("/", 1)[-1] == extension:
                return mime_type
        return entry[0]

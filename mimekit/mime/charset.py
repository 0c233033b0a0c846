"""
Charset normalisation and transcoding.

Responsibilities:
- Map the many spellings of a charset label onto one canonical label.
- Decode bytes in any supported charset, never raising on bad input.
- Produce UTF-8 bytes from text or from bytes in another charset.
"""

from __future__ import annotations

import codecs
from typing import Optional, Union

from mimekit.logger import get_logger
from mimekit.mime.config import (
    ASCII_COMPATIBLE_RE,
    CHARSET_DECODE_FALLBACKS,
    CHARSET_REWRITE_RULES,
    DEFAULT_CHARSET,
    SURROGATE_RE,
)
from mimekit.tables_loader import get_charset_aliases

logger = get_logger(__name__)

Data = Union[str, bytes, bytearray]


class Charset:
    """Stateless charset helpers; the alias table is shared read-only data."""

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    @staticmethod
    def normalize(name: Optional[str]) -> str:
        """Canonical label for ``name``, e.g. ``win-1257`` -> ``WINDOWS-1257``.

        Unknown labels come back uppercased, so the function never fails.
        """
        label = (name or "").lower().strip()
        aliases = get_charset_aliases()

        if aliases.get(label):
            return aliases[label]

        for pattern, replacement in CHARSET_REWRITE_RULES:
            label = pattern.sub(replacement, label, count=1)

        if aliases.get(label):
            return aliases[label]

        return label.upper()

    @staticmethod
    def is_ascii_compatible(label: str) -> bool:
        return bool(ASCII_COMPATIBLE_RE.search(label or ""))

    # ------------------------------------------------------------------
    # Text <-> bytes
    # ------------------------------------------------------------------

    @staticmethod
    def join_surrogates(text: str) -> str:
        """Merge UTF-16 surrogate pairs into single code points; lone halves become U+FFFD."""
        if not SURROGATE_RE.search(text):
            return text
        return text.encode("utf-16", "surrogatepass").decode("utf-16", "replace")

    @classmethod
    def encode(cls, text: str) -> bytes:
        """UTF-8 bytes for ``text``. Other target charsets are not offered."""
        return cls.join_surrogates(text).encode("utf-8")

    @classmethod
    def decode(cls, data: Data, from_charset: Optional[str] = DEFAULT_CHARSET) -> str:
        """Decode ``data`` from ``from_charset``.

        Unknown charsets and undecodable input fall back to UTF-8 with
        replacement characters; nothing is raised.
        """
        if isinstance(data, str):
            return data

        raw = bytes(data)
        label = cls.normalize(from_charset or DEFAULT_CHARSET)

        if cls.is_ascii_compatible(label):
            return raw.decode("utf-8", "replace")

        usable = None
        for codec_name in [label] + CHARSET_DECODE_FALLBACKS.get(label, []):
            if not cls._is_text_codec(codec_name):
                continue
            if usable is None:
                usable = codec_name
            try:
                return raw.decode(codec_name)
            except (LookupError, UnicodeError):
                logger.debug("Strict %s decode failed, trying next codec", codec_name)

        if usable is not None:
            try:
                return raw.decode(usable, "replace")
            except (LookupError, UnicodeError):
                # idna rejects the "replace" handler
                logger.debug("Lossy %s decode failed", usable)

        logger.debug("Unknown charset %s, decoding as UTF-8", label)
        return raw.decode("utf-8", "replace")

    @staticmethod
    def _is_text_codec(codec_name: str) -> bool:
        """True for codecs that turn bytes into str; base64, hex, zlib and friends are not."""
        try:
            info = codecs.lookup(codec_name)
        except LookupError:
            return False
        return getattr(info, "_is_text_encoding", True)

    @classmethod
    def convert(cls, data: Data, from_charset: Optional[str] = DEFAULT_CHARSET) -> bytes:
        """UTF-8 bytes for ``data``; bytes in an ASCII compatible charset pass through as is."""
        if isinstance(data, str):
            return cls.encode(data)

        label = cls.normalize(from_charset or DEFAULT_CHARSET)
        if cls.is_ascii_compatible(label):
            return bytes(data)

        return cls.encode(cls.decode(data, label))

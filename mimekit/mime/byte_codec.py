"""
Byte-range codecs: ``=XX`` escaping (the quoted-printable family) and base64.

Responsibilities:
- Escape bytes outside the safe ranges as ``=XX`` and reverse it leniently.
- Quoted-printable bodies: CRLF line endings, escaped trailing whitespace.
- Base64 that tolerates garbage characters and missing padding.
"""

from __future__ import annotations

import base64
from typing import Optional, Union

from mimekit.mime.charset import Charset
from mimekit.mime.config import (
    BASE64_ALPHABET,
    DEFAULT_CHARSET,
    HEX_DIGITS,
    LINE_BREAK_RE,
    NON_PLAIN_TEXT_RE,
    QP_SOFT_BREAK_RE,
    SAFE_BYTES,
    TRAILING_WHITESPACE_RE,
)

Data = Union[str, bytes, bytearray]


class ByteCodec:
    """Stateless encoders/decoders working on byte ranges."""

    # ------------------------------------------------------------------
    # =XX escaping
    # ------------------------------------------------------------------

    @staticmethod
    def escape(data: bytes) -> str:
        """Keep safe bytes as characters, write every other byte as ``=XX`` (uppercase hex)."""
        out = []
        for byte in bytes(data):
            if byte in SAFE_BYTES:
                out.append(chr(byte))
            else:
                out.append("=%02X" % byte)
        return "".join(out)

    @staticmethod
    def unescape(text: str) -> bytes:
        """Reverse of escape().

        ``=`` followed by two hex digits (either case) becomes one byte. A
        stray ``=`` and every other character are kept, the latter as UTF-8.
        """
        out = bytearray()
        i = 0
        n = len(text)
        while i < n:
            ch = text[i]
            hex_pair = text[i + 1:i + 3]
            if ch == "=" and len(hex_pair) == 2 and all(c in HEX_DIGITS for c in hex_pair):
                out.append(int(hex_pair, 16))
                i += 3
                continue
            out.extend(ch.encode("utf-8", "surrogatepass"))
            i += 1
        return bytes(out)

    @classmethod
    def mime_encode(cls, data: Data, from_charset: Optional[str] = DEFAULT_CHARSET) -> str:
        """Escape ``data`` after converting it to UTF-8. Line breaks are left alone."""
        return cls.escape(Charset.convert(data or b"", from_charset or DEFAULT_CHARSET))

    @classmethod
    def mime_decode(cls, text: str, from_charset: Optional[str] = DEFAULT_CHARSET) -> str:
        return Charset.decode(cls.unescape(text or ""), from_charset or DEFAULT_CHARSET)

    # ------------------------------------------------------------------
    # Quoted-printable
    # ------------------------------------------------------------------

    @classmethod
    def quoted_printable_encode(cls, data: Data, from_charset: Optional[str] = DEFAULT_CHARSET) -> str:
        """mime_encode() with CRLF line endings and escaped whitespace at line ends.

        No soft line breaks are added; see LineFolder.add_soft_linebreaks().
        """
        encoded = LINE_BREAK_RE.sub("\r\n", cls.mime_encode(data, from_charset))
        return TRAILING_WHITESPACE_RE.sub(
            lambda m: m.group(0).replace(" ", "=20").replace("\t", "=09"),
            encoded,
        )

    @classmethod
    def quoted_printable_decode(cls, text: str, from_charset: Optional[str] = DEFAULT_CHARSET) -> str:
        """Drop soft line breaks, then mime_decode()."""
        return cls.mime_decode(QP_SOFT_BREAK_RE.sub("", text or ""), from_charset)

    # ------------------------------------------------------------------
    # Base64
    # ------------------------------------------------------------------

    @staticmethod
    def base64_encode(data: Data, from_charset: Optional[str] = None) -> str:
        """Standard base64 with padding, no line breaks.

        Text is encoded as UTF-8; bytes are converted from ``from_charset``
        unless it is ``binary``.
        """
        if not data:
            return ""
        if isinstance(data, str):
            raw = Charset.encode(data)
        elif from_charset == "binary":
            raw = bytes(data)
        else:
            raw = Charset.convert(data, from_charset or DEFAULT_CHARSET)
        return base64.b64encode(raw).decode("ascii")

    @staticmethod
    def base64_decode(text: str) -> bytes:
        """Lenient base64: non-alphabet characters are ignored and padding is repaired."""
        cleaned = "".join(ch for ch in (text or "") if ch in BASE64_ALPHABET)
        remainder = len(cleaned) % 4
        if remainder == 1:
            # a lone trailing character carries less than one byte
            cleaned = cleaned[:-1]
        elif remainder:
            cleaned += "=" * (4 - remainder)
        return base64.b64decode(cleaned)

    @classmethod
    def base64_decode_text(cls, text: str, from_charset: Optional[str] = DEFAULT_CHARSET) -> str:
        return Charset.decode(cls.base64_decode(text), from_charset or DEFAULT_CHARSET)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    @staticmethod
    def is_plain_text(value) -> bool:
        """True for strings made of printable 7bit characters, tab and line breaks."""
        return isinstance(value, str) and not NON_PLAIN_TEXT_RE.search(value)

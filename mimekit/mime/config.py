"""
Centralised constants for the mime codec layer.

Byte allow-lists, regex patterns, rewrite rules and magic-number thresholds
live here.
"""

from __future__ import annotations

import re
from typing import Dict, FrozenSet, List, Tuple

# ---------------------------------------------------------------------------
# Charset labels
# ---------------------------------------------------------------------------

DEFAULT_CHARSET = "UTF-8"
TARGET_CHARSET = "UTF-8"

# Labels decoded as UTF-8 and passed through convert() untouched; searched, not fully anchored
ASCII_COMPATIBLE_RE = re.compile(r"^(?:us-)?ascii|utf-8|7bit$", re.IGNORECASE)

# Ordered rewrite rules applied when the first alias lookup misses
CHARSET_REWRITE_RULES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"^utf[-_]?(\d+)"), r"utf-\1"),
    (re.compile(r"^(?:us[-_]?)ascii"), "windows-1252"),
    (re.compile(r"^win(?:dows)?[-_]?(\d+)"), r"windows-\1"),
    (re.compile(r"^(?:latin|iso[-_]?8859)?[-_]?(\d+)"), r"iso-8859-\1"),
    (re.compile(r"^l[-_]?(\d+)"), r"iso-8859-\1"),
]

# Extra Python codecs tried, in order, when the canonical label fails to decode
CHARSET_DECODE_FALLBACKS: Dict[str, List[str]] = {
    "ISO-2022-JP": ["iso2022_jp_ext", "iso2022_jp_2004"],
    "SHIFT_JIS": ["cp932"],
    "EUC-JP": ["euc_jis_2004"],
    "EUC-KR": ["cp949"],
    "GBK": ["gb18030"],
}

SURROGATE_RE = re.compile("[\ud800-\udfff]")

# ---------------------------------------------------------------------------
# Byte-range escaping (quoted-printable family)
# ---------------------------------------------------------------------------

# tab, LF, CR, space, "!", "#"-"<", ">", "@"-"^", "`"-"~"
SAFE_BYTES: FrozenSet[int] = frozenset(
    [0x09, 0x0A, 0x0D, 0x20, 0x21]
    + list(range(0x23, 0x3D))
    + [0x3E]
    + list(range(0x40, 0x5F))
    + list(range(0x60, 0x7F))
)

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# RFC 2047 section 5 rule (3): characters allowed verbatim inside a Q payload
Q_SAFE_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789!*+-/=")

BASE64_ALPHABET = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/")

# Not plain 7bit text: control characters other than tab/LF/CR, and anything above ASCII
NON_PLAIN_TEXT_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\u0080-\U0010ffff]")

LINE_BREAK_RE = re.compile(r"\r?\n|\r")
TRAILING_WHITESPACE_RE = re.compile(r"[\t ]+(?=\r\n|\Z)")
QP_SOFT_BREAK_RE = re.compile(r"=(?:\r?\n|\Z)")

# ---------------------------------------------------------------------------
# Line folding
# ---------------------------------------------------------------------------

# A Q chunk must fit at least one 4-byte UTF-8 sequence (4 x "=XX")
MIN_ENCODED_CHUNK = 12

# One "=XX" escape plus the "=" of a soft break
MIN_QP_LINE_LENGTH = 4

# RFC 3676 section 4.2 space-stuffing
FLOWED_STUFFING_RE = re.compile(r"^( |From|>)", re.IGNORECASE)
FLOWED_SIGNATURE_LINE = "-- "

# Quoted-printable soft break heuristics
QP_NEWLINE_TAIL_RE = re.compile(r"\n[^\n\r]*\Z")
QP_BREAKABLE_TAIL_RE = re.compile(r"[ \t.,!?][^ \t.,!?]*\Z")
QP_PARTIAL_ESCAPE_RE = re.compile(r"=[0-9a-f]{0,2}\Z", re.IGNORECASE)
QP_INCOMPLETE_ESCAPE_RE = re.compile(r"=[0-9a-f]?\Z", re.IGNORECASE)
QP_ESCAPE_TAIL_RE = re.compile(r"=[0-9a-f]{2}\Z", re.IGNORECASE)
QP_ESCAPES_ONLY_RE = re.compile(r"(?:=[0-9a-f]{2}){1,4}\Z", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Mime words
# ---------------------------------------------------------------------------

ENCODED_WORD_RE = re.compile(r"=\?([\w\-*]+)\?([QqBb])\?([^?]*)\?=", re.ASCII)

# "=?UTF-8?Q?" + "?=" around every encoded word
WORD_ENVELOPE_OVERHEAD = 7 + len(TARGET_CHARSET)

# Whitespace wrongly inserted after "=" by naive line unwrapping
Q_BROKEN_ESCAPE_RE = re.compile(r"=\s+([0-9a-fA-F])")
Q_SPACE_RE = re.compile(r"[_\s]")

# ---------------------------------------------------------------------------
# Structured headers
# ---------------------------------------------------------------------------

# "name*", "name*0", "name*0*"
CONTINUATION_KEY_RE = re.compile(r"\*(?:(\d+)\*?)?$")
CHARSET_MARKER_RE = re.compile(r"^([^']*)'[^']*'(.*)$", re.DOTALL)

# RFC 2231 values must not carry these verbatim once rewrapped as a Q word
RFC2231_Q_UNSAFE_RE = re.compile(r"[=?_\s]")

# Plain parameter values with any of these are sent as quoted strings
PARAM_NEEDS_QUOTES_RE = re.compile(r"[\s'\"\;:/=(),<>@\[\]?]|^-")
FRAGMENT_NEEDS_QUOTES_RE = re.compile(r"[\s\"\;:/=(),<>@\[\]?]|^[-']|'$")

# Characters kept verbatim by percent-encoding besides letters, digits and "_.-~"
PERCENT_SAFE_EXTRA = "!"

RFC2231_CHARSET_PREFIX = "utf-8''"

HEADER_UNFOLD_RE = re.compile(r"(?:\r?\n|\r)[ \t]*")
HEADER_LINE_RE = re.compile(r"^\s*([^:]+):(.*)$", re.DOTALL)
HEADER_CONTINUATION_RE = re.compile(r"^\s")

# ---------------------------------------------------------------------------
# MIME types
# ---------------------------------------------------------------------------

DEFAULT_EXTENSION = "bin"
DEFAULT_MIME_TYPE = "application/octet-stream"

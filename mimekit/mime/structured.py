"""
Structured header values and raw header lines.

Responsibilities:
- Parse ``value; key=value; ...`` header bodies, including quoted strings,
  flag parameters and RFC 2231 continuations (``key*0*=utf-8''...``).
- Build such header bodies back, splitting long or non-ASCII parameters
  into continuation fragments.
- Split raw header lines and header blocks into keys and values.
"""

from __future__ import annotations

import enum
from typing import Dict, List, Mapping, Optional, Union
from urllib.parse import quote

from mimekit.config import get_settings
from mimekit.logger import get_logger
from mimekit.mime.byte_codec import ByteCodec
from mimekit.mime.charset import Charset
from mimekit.mime.config import (
    CHARSET_MARKER_RE,
    CONTINUATION_KEY_RE,
    FRAGMENT_NEEDS_QUOTES_RE,
    HEADER_CONTINUATION_RE,
    HEADER_LINE_RE,
    HEADER_UNFOLD_RE,
    LINE_BREAK_RE,
    PARAM_NEEDS_QUOTES_RE,
    PERCENT_SAFE_EXTRA,
    RFC2231_CHARSET_PREFIX,
    RFC2231_Q_UNSAFE_RE,
)
from mimekit.mime.folding import LineFolder
from mimekit.mime.mime_words import MimeWords
from mimekit.models import ContinuationFragment, HeaderLine, StructuredHeaderValue

logger = get_logger(__name__)

Data = Union[str, bytes, bytearray]


class _Stage(enum.Enum):
    KEY = "key"
    VALUE = "value"


class _ValueBuffer:
    """Characters of the current token; quoted and escaped text is protected from trimming."""

    def __init__(self) -> None:
        self.chars: List[str] = []
        self.protected = 0

    def append(self, ch: str, protect: bool = False) -> None:
        self.chars.append(ch)
        if protect:
            self.protected = len(self.chars)

    def protect(self) -> None:
        self.protected = len(self.chars)

    def is_empty(self) -> bool:
        return not self.chars and not self.protected

    def text(self) -> str:
        head = "".join(self.chars[:self.protected])
        tail = "".join(self.chars[self.protected:])
        return head + tail.rstrip()


def _percent_encode(text: str) -> str:
    return quote(text, safe=PERCENT_SAFE_EXTRA)


def _quote_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class StructuredHeaders:
    """Parser and builder for parameterised header values (Content-Type, Content-Disposition, ...)."""

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def parse_header_value(cls, text: str) -> StructuredHeaderValue:
        """Split a header body into its main value and parameters.

        ``text/plain; CHARSET= UTF-8; format=flowed;`` gives value
        ``text/plain`` and params ``{"charset": "UTF-8", "format": "flowed"}``.
        Keys are lowercased; a bare token becomes a parameter with an empty
        value; RFC 2231 continuations are joined and decoded.
        """
        value = ""
        params: Dict[str, str] = {}
        key: Optional[str] = None
        stage = _Stage.VALUE
        buffer = _ValueBuffer()
        quoted = False
        escaped = False

        def store() -> None:
            nonlocal value
            if key is None:
                value = buffer.text()
            else:
                params[key] = buffer.text()

        def store_flag() -> None:
            token = buffer.text().strip()
            if token:
                params[token.lower()] = ""

        for ch in text or "":
            if stage is _Stage.KEY:
                if ch == "=":
                    key = buffer.text().strip().lower()
                    buffer = _ValueBuffer()
                    stage = _Stage.VALUE
                elif ch == ";":
                    store_flag()
                    buffer = _ValueBuffer()
                else:
                    buffer.append(ch)
                continue

            if escaped:
                buffer.append(ch, protect=True)
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                quoted = not quoted
                if not quoted:
                    buffer.protect()
            elif ch == ";" and not quoted:
                store()
                buffer = _ValueBuffer()
                stage = _Stage.KEY
            elif ch.isspace() and not quoted and buffer.is_empty():
                continue
            else:
                buffer.append(ch)

        if stage is _Stage.VALUE:
            store()
        else:
            store_flag()

        return StructuredHeaderValue(value=value, params=cls._merge_continuations(params))

    @staticmethod
    def _decode_charset_value(charset: str, value: str) -> str:
        # percent-encoding is rewritten as a Q payload so MimeWords does the byte work
        payload = RFC2231_Q_UNSAFE_RE.sub(
            lambda m: "_" if m.group(0) == " " else "%%%02x" % ord(m.group(0)),
            value,
        ).replace("%", "=")
        return MimeWords.decode_word(charset, "Q", payload)

    @classmethod
    def _merge_continuations(cls, params: Mapping[str, str]) -> Dict[str, str]:
        """Join ``key*N`` / ``key*N*`` fragments into ``key``.

        The merged value replaces a plain parameter with the same name and
        keeps the position where that name was first seen.
        """
        merged: Dict[str, Optional[str]] = {}
        groups: Dict[str, dict] = {}

        for key, value in params.items():
            match = CONTINUATION_KEY_RE.search(key)
            if not match:
                if key not in groups:
                    merged[key] = value
                continue

            base = key[:match.start()]
            group = groups.setdefault(base, {"charset": None, "fragments": []})
            merged.setdefault(base, None)

            nr = int(match.group(1)) if match.group(1) else 0
            encoded = match.group(0).endswith("*")
            if nr == 0 and encoded:
                marker = CHARSET_MARKER_RE.match(value)
                if marker:
                    group["charset"] = marker.group(1) or get_settings().RFC2231_DEFAULT_CHARSET
                    value = marker.group(2)

            group["fragments"].append((nr, value))

        for base, group in groups.items():
            joined = "".join(v for _, v in sorted(group["fragments"], key=lambda item: item[0]))
            if group["charset"]:
                merged[base] = cls._decode_charset_value(group["charset"], joined)
            else:
                merged[base] = MimeWords.decode_words(joined)
            logger.debug("Joined %d fragment(s) of parameter %s", len(group["fragments"]), base)

        return {k: v for k, v in merged.items() if v is not None}

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    @classmethod
    def build_header_value(cls, structured: Union[StructuredHeaderValue, Mapping]) -> str:
        """Join a structured value back into ``value; key=value; ...``.

        Raises:
            pydantic.ValidationError: ``structured`` is a mapping of the wrong shape
        """
        if not isinstance(structured, StructuredHeaderValue):
            data = dict(structured)
            data["params"] = data.get("params") or {}
            structured = StructuredHeaderValue.model_validate(data)

        settings = get_settings()
        parts: List[str] = []

        for key, value in structured.params.items():
            if not ByteCodec.is_plain_text(value) or len(value) >= settings.PARAM_PLAIN_LIMIT:
                for fragment in cls.build_header_param(key, value, settings.PARAM_CHUNK_LENGTH):
                    if fragment.key.endswith("*") or not FRAGMENT_NEEDS_QUOTES_RE.search(fragment.value):
                        parts.append(f"{fragment.key}={fragment.value}")
                    else:
                        parts.append(f"{fragment.key}={_quote_string(fragment.value)}")
            elif PARAM_NEEDS_QUOTES_RE.search(value):
                parts.append(f"{key}={_quote_string(value)}")
            else:
                parts.append(f"{key}={value}")

        if not parts:
            return structured.value
        return structured.value + "; " + "; ".join(parts)

    @staticmethod
    def build_header_param(
        key: str,
        data: Data,
        max_length: Optional[int] = None,
        from_charset: Optional[str] = None,
    ) -> List[ContinuationFragment]:
        """Split a parameter value into RFC 2231 continuation fragments.

        Short ASCII values come back as one plain fragment (index -1), long
        ASCII values as unencoded fixed-size fragments. Anything else starts
        with a ``utf-8''`` fragment; later fragments are percent-encoded only
        when they need to be. A character is never split between fragments.
        """
        max_length = max_length or get_settings().PARAM_CHUNK_LENGTH
        text = data if isinstance(data, str) else Charset.decode(data, from_charset)
        text = Charset.join_surrogates(text)

        if ByteCodec.is_plain_text(text):
            if len(text) <= max_length:
                return [ContinuationFragment(base_key=key, value=text)]
            return [
                ContinuationFragment(base_key=key, index=i, value=text[pos:pos + max_length])
                for i, pos in enumerate(range(0, len(text), max_length))
            ]

        lines = []
        line = RFC2231_CHARSET_PREFIX
        encoded = True
        line_start = 0
        i = 0

        while i < len(text):
            unit = text[i]

            if encoded:
                piece = _percent_encode(unit)
            else:
                piece = unit if unit == " " else _percent_encode(unit)
                if piece != unit:
                    if len(_percent_encode(line)) + len(piece) >= max_length:
                        # no room to re-encode this line, close it and encode from here on
                        lines.append((line, False))
                        line = ""
                        line_start = i
                        encoded = True
                    else:
                        # redo the current line in encoded form
                        encoded = True
                        line = ""
                        i = line_start
                        continue

            if line and len(line) + len(piece) >= max_length:
                lines.append((line, encoded))
                line_start = i
                if unit == " " or _percent_encode(unit) == unit:
                    line = unit
                    encoded = False
                else:
                    line = _percent_encode(unit)
                    encoded = True
            else:
                line += piece
            i += 1

        if line:
            lines.append((line, encoded))

        return [
            ContinuationFragment(base_key=key, index=index, encoded=is_encoded, value=value)
            for index, (value, is_encoded) in enumerate(lines)
        ]

    # ------------------------------------------------------------------
    # Raw header lines
    # ------------------------------------------------------------------

    @staticmethod
    def decode_header(line: str) -> HeaderLine:
        """Unfold one header line and split it at the first colon. Mime words are left as they are."""
        unfolded = HEADER_UNFOLD_RE.sub(" ", line or "").strip()
        match = HEADER_LINE_RE.match(unfolded)
        if not match:
            return HeaderLine()
        return HeaderLine(key=match.group(1).strip().lower(), value=match.group(2).strip())

    @classmethod
    def decode_headers(cls, block: str) -> Dict[str, List[str]]:
        """Parse a header block into ``{key: [value, ...]}``, values in order of appearance."""
        lines: List[str] = []
        for raw in LINE_BREAK_RE.split(block or ""):
            if lines and HEADER_CONTINUATION_RE.match(raw):
                lines[-1] += "\r\n" + raw
            else:
                lines.append(raw)

        headers: Dict[str, List[str]] = {}
        for raw in lines:
            if not raw.strip():
                continue
            header = cls.decode_header(raw)
            headers.setdefault(header.key, []).append(header.value)
        return headers

    @staticmethod
    def encode_header_line(key: str, value: Data, from_charset: Optional[str] = None) -> str:
        """``Key: value`` with non-ASCII words encoded and the line folded."""
        settings = get_settings()
        encoded = MimeWords.encode_words(value, "Q", settings.HEADER_WORD_LENGTH, from_charset)
        return LineFolder.fold_lines(f"{key}: {encoded}", settings.LINE_LENGTH)

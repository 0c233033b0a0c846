"""
Line folding and soft line breaks.

Responsibilities:
- Fold header lines and format=flowed text at whitespace (fold_lines).
- RFC 3676 format=flowed encoding and decoding.
- Soft line breaks for quoted-printable and base64 bodies.
- Split escaped strings into chunks that never cut an ``=XX`` escape or a
  multi-byte UTF-8 sequence.
"""

from __future__ import annotations

import re
from typing import List, Optional

from mimekit.config import get_settings
from mimekit.mime.config import (
    FLOWED_SIGNATURE_LINE,
    FLOWED_STUFFING_RE,
    HEX_DIGITS,
    LINE_BREAK_RE,
    MIN_ENCODED_CHUNK,
    MIN_QP_LINE_LENGTH,
    QP_BREAKABLE_TAIL_RE,
    QP_ESCAPE_TAIL_RE,
    QP_ESCAPES_ONLY_RE,
    QP_INCOMPLETE_ESCAPE_RE,
    QP_NEWLINE_TAIL_RE,
    QP_PARTIAL_ESCAPE_RE,
)

_FIRST_LINE_RE = re.compile(r"[^\n\r]*(?:\r?\n|\r)")
_NEXT_WORD_RE = re.compile(r"\S*(\s*)")
_FLOWED_SPLIT_RE = re.compile(r"\r?\n")
_STUFFED_SPACE_RE = re.compile(r"^ ", re.MULTILINE)


def _line_length(line_length: Optional[int]) -> int:
    return line_length or get_settings().LINE_LENGTH


class LineFolder:
    """Stateless folding helpers; every call owns its output buffer."""

    # ------------------------------------------------------------------
    # Whitespace folding
    # ------------------------------------------------------------------

    @staticmethod
    def _whitespace_cut(line: str, after_space: bool) -> Optional[int]:
        """Cut offset at the last whitespace run of ``line``, or None when there is none to use.

        Header folding cuts before the run so the next line starts with it;
        flowed folding cuts after it so the line keeps its trailing space.
        """
        run_end = len(line)
        while run_end > 0 and not line[run_end - 1].isspace():
            run_end -= 1
        if run_end == 0:
            return None

        run_start = run_end
        while run_start > 0 and line[run_start - 1].isspace():
            run_start -= 1

        cut = run_end if after_space else run_start
        return cut or None

    @classmethod
    def fold_lines(cls, text: str, line_length: Optional[int] = None, after_space: bool = False) -> str:
        """Insert CRLF breaks so lines stay within ``line_length`` where whitespace allows.

        Existing line breaks are kept. A word longer than the line is never
        split; the line is stretched up to the next whitespace instead.
        Text that already fits is returned unchanged.
        """
        text = text or ""
        max_length = _line_length(line_length)

        pos = 0
        total = len(text)
        out: List[str] = []

        while pos < total:
            if total - pos <= max_length:
                out.append(text[pos:])
                break

            line = text[pos:pos + max_length]

            match = _FIRST_LINE_RE.match(line)
            if match:
                out.append(match.group(0))
                pos += len(match.group(0))
                continue

            cut = cls._whitespace_cut(line, after_space)
            if cut is not None:
                line = line[:cut]
            else:
                match = _NEXT_WORD_RE.match(text, pos + len(line))
                if match:
                    word = match.group(0)
                    if not after_space:
                        word = word[:len(word) - len(match.group(1))]
                    line += word

            out.append(line)
            pos += len(line)
            if pos < total:
                out.append("\r\n")

        return "".join(out)

    # ------------------------------------------------------------------
    # format=flowed (RFC 3676)
    # ------------------------------------------------------------------

    @classmethod
    def encode_flowed(cls, text: str, line_length: Optional[int] = None) -> str:
        """Space-stuff every line, then fold it leaving a trailing space at each soft break."""
        max_length = _line_length(line_length)
        flowed = []
        for line in _FLOWED_SPLIT_RE.split(text or ""):
            stuffed = FLOWED_STUFFING_RE.sub(r" \1", line, count=1)
            flowed.append(cls.fold_lines(stuffed, max_length, True))
        return "\r\n".join(flowed)

    @staticmethod
    def decode_flowed(text: str, del_sp: bool = False) -> str:
        """Join soft-broken lines and remove space stuffing.

        A line ending with a space continues on the next line, except for the
        ``-- `` signature separator. With ``del_sp`` (delsp=yes) that space is
        dropped when joining.
        """
        result: List[str] = []
        buffer: Optional[str] = None

        for line in _FLOWED_SPLIT_RE.split(text or ""):
            soft_break = buffer is not None and buffer.endswith(" ") and buffer != FLOWED_SIGNATURE_LINE
            if soft_break:
                buffer = (buffer[:-1] if del_sp else buffer) + line
            else:
                if buffer is not None:
                    result.append(buffer)
                buffer = line

        if buffer:
            result.append(buffer)

        return _STUFFED_SPACE_RE.sub("", "\n".join(result))

    # ------------------------------------------------------------------
    # Soft line breaks for encoded bodies
    # ------------------------------------------------------------------

    @classmethod
    def add_soft_linebreaks(cls, text: str, encoding: str = "b", line_length: Optional[int] = None) -> str:
        """Wrap an encoded body: ``q`` quoted-printable, ``f`` format=flowed, anything else base64."""
        max_length = _line_length(line_length)
        mode = (encoding or "b").lower().strip()

        if mode == "q":
            return cls._add_qp_soft_linebreaks(text or "", max_length)
        if mode == "f":
            return cls.encode_flowed(text or "", max_length)
        return cls._add_base64_soft_linebreaks(text or "", max_length)

    @staticmethod
    def _add_base64_soft_linebreaks(text: str, max_length: int) -> str:
        text = text.strip()
        return "\r\n".join(text[i:i + max_length] for i in range(0, len(text), max_length))

    @staticmethod
    def _add_qp_soft_linebreaks(text: str, max_length: int) -> str:
        """Break quoted-printable text with ``=`` CRLF soft breaks.

        Prefers existing line breaks and then punctuation or whitespace near the
        window end, and never leaves an ``=XX`` escape split across two lines.
        UTF-8 byte sequences are kept together when the line is long enough
        for them. Line lengths below 4 are raised to 4.
        """
        max_length = max(max_length, MIN_QP_LINE_LENGTH)
        pos = 0
        total = len(text)
        margin = max_length // 3
        out: List[str] = []

        while pos < total:
            window = text[pos:pos + max_length]
            line = window

            crlf = line.find("\r\n")
            if crlf >= 0:
                line = line[:crlf + 2]
                out.append(line)
                pos += len(line)
                continue

            if line.endswith("\n"):
                out.append(line)
                pos += len(line)
                continue

            tail = line[-margin:] if margin else ""
            match = QP_NEWLINE_TAIL_RE.search(tail)
            if match:
                line = line[:len(line) - (len(match.group(0)) - 1)]
                out.append(line)
                pos += len(line)
                continue

            match = QP_BREAKABLE_TAIL_RE.search(tail) if len(line) > max_length - margin else None
            if match:
                line = line[:len(line) - (len(match.group(0)) - 1)]
            elif line.endswith("\r"):
                line = line[:-1]
            elif QP_PARTIAL_ESCAPE_RE.search(line):
                # move an incomplete escape to the next line
                match = QP_INCOMPLETE_ESCAPE_RE.search(line)
                if match:
                    line = line[:match.start()]

                # back off until no UTF-8 sequence is cut
                while 3 < len(line) < total - pos and not QP_ESCAPES_ONLY_RE.match(line):
                    match = QP_ESCAPE_TAIL_RE.search(line)
                    if not match:
                        break
                    code = int(match.group(0)[1:], 16)
                    if code < 0x80:
                        break
                    line = line[:-3]
                    if code >= 0xC0:
                        break

            if not line:
                line = window

            if pos + len(line) < total and not line.endswith("\n"):
                # make room for the "=" of the soft break, never emptying the line
                if len(line) == max_length and QP_ESCAPE_TAIL_RE.search(line):
                    if len(line) > 3:
                        line = line[:-3]
                elif len(line) == max_length and len(line) > 1:
                    line = line[:-1]
                pos += len(line)
                out.append(line + "=\r\n")
            else:
                pos += len(line)
                out.append(line)

        return "".join(out)

    # ------------------------------------------------------------------
    # Escaped string chunking
    # ------------------------------------------------------------------

    @staticmethod
    def _escape_units(encoded: str) -> List[str]:
        """Split an escaped string into atomic units.

        A unit is a single literal character, a single ``=XX`` escape, or a
        UTF-8 lead byte escape together with its continuation byte escapes.
        """
        units: List[str] = []
        i = 0
        total = len(encoded)

        def escape_at(index: int) -> Optional[int]:
            pair = encoded[index + 1:index + 3]
            if encoded[index:index + 1] == "=" and len(pair) == 2 and all(c in HEX_DIGITS for c in pair):
                return int(pair, 16)
            return None

        while i < total:
            code = escape_at(i)
            if code is None:
                units.append(encoded[i])
                i += 1
                continue

            end = i + 3
            if code >= 0xC0:
                continuation = 0
                while continuation < 3:
                    follower = escape_at(end)
                    if follower is None or not 0x80 <= follower <= 0xBF:
                        break
                    end += 3
                    continuation += 1
            units.append(encoded[i:end])
            i = end

        return units

    @classmethod
    def split_encoded_string(cls, encoded: str, max_length: int = 0) -> List[str]:
        """Split an ``=XX`` escaped string into chunks of at most ``max_length`` characters.

        ``max_length`` is raised to 12 so a 4-byte UTF-8 sequence always fits.
        """
        max_length = max(max_length or 0, MIN_ENCODED_CHUNK)
        chunks: List[str] = []
        current: List[str] = []
        current_length = 0

        for unit in cls._escape_units(encoded or ""):
            if current and current_length + len(unit) > max_length:
                chunks.append("".join(current))
                current = []
                current_length = 0
            current.append(unit)
            current_length += len(unit)

        if current:
            chunks.append("".join(current))
        return chunks

    @staticmethod
    def has_longer_lines(text: str, line_length: Optional[int] = None) -> bool:
        """True when at least one line of ``text`` is longer than ``line_length``."""
        max_length = _line_length(line_length)
        return any(len(line) > max_length for line in LINE_BREAK_RE.split(text or ""))

"""
RFC 2047 encoded words.

Responsibilities:
- Build ``=?UTF-8?Q?...?=`` / ``=?UTF-8?B?...?=`` words, split to a length limit
  without cutting escapes or characters.
- Encode only the non-ASCII span of a longer value (encode_words).
- Decode words found anywhere in a header value, joining adjacent words that
  share charset and encoding before decoding.
"""

from __future__ import annotations

import base64
from typing import List, Optional, Union

from mimekit.mime.byte_codec import ByteCodec
from mimekit.mime.charset import Charset
from mimekit.mime.config import (
    ENCODED_WORD_RE,
    Q_BROKEN_ESCAPE_RE,
    Q_SAFE_CHARS,
    Q_SPACE_RE,
    TARGET_CHARSET,
    WORD_ENVELOPE_OVERHEAD,
)
from mimekit.mime.folding import LineFolder
from mimekit.models import EncodedWord, WordOptions

Data = Union[str, bytes, bytearray]


class MimeWords:
    """Encoder/decoder for RFC 2047 encoded words. Output is always UTF-8."""

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    @staticmethod
    def _q_payload(raw: bytes) -> str:
        out = []
        for ch in ByteCodec.escape(raw):
            if ch in Q_SAFE_CHARS:
                out.append(ch)
            elif ch == " ":
                out.append("_")
            else:
                out.append("=%02X" % ord(ch))
        return "".join(out)

    @staticmethod
    def _b_chunks(text: str, byte_budget: int) -> List[str]:
        """Split ``text`` into runs of whole characters of at most ``byte_budget`` UTF-8 bytes.

        A character is never split; the first one is always taken even when it
        is larger than the budget.
        """
        chunks: List[str] = []
        current = ""
        current_bytes = 0
        for ch in text:
            size = len(ch.encode("utf-8"))
            if current and current_bytes + size > byte_budget:
                chunks.append(current)
                current = ""
                current_bytes = 0
            current += ch
            current_bytes += size
        if current:
            chunks.append(current)
        return chunks

    @classmethod
    def encode_word(
        cls,
        data: Data,
        encoding: str = "Q",
        max_length: int = 0,
        from_charset: Optional[str] = None,
    ) -> str:
        """Encode ``data`` as one or more UTF-8 encoded words.

        Args:
            data: text, or bytes in ``from_charset``
            encoding: ``Q`` or ``B``
            max_length: target length of each word including the envelope, 0 for a single word
            from_charset: charset of byte input

        Raises:
            pydantic.ValidationError: unsupported encoding or negative max_length
        """
        options = WordOptions(encoding=encoding, max_length=max_length or 0, from_charset=from_charset)

        if isinstance(data, str):
            text = Charset.join_surrogates(data)
        else:
            text = Charset.decode(Charset.convert(data or b"", options.from_charset), TARGET_CHARSET)

        limit = options.max_length
        if limit > WORD_ENVELOPE_OVERHEAD:
            limit -= WORD_ENVELOPE_OVERHEAD

        joiner = f"?= =?{TARGET_CHARSET}?{options.encoding}?"

        if options.encoding == "Q":
            payload = cls._q_payload(Charset.encode(text))
            if limit and len(payload) > limit:
                payload = joiner.join(LineFolder.split_encoded_string(payload, limit))
        else:
            raw = Charset.encode(text)
            payload = base64.b64encode(raw).decode("ascii")
            byte_budget = max(3, (limit - limit % 4) // 4 * 3) if limit else 0
            if byte_budget and len(payload) > limit:
                parts = [
                    base64.b64encode(Charset.encode(chunk)).decode("ascii")
                    for chunk in cls._b_chunks(text, byte_budget)
                ]
                payload = joiner.join(parts)

        return EncodedWord(charset=TARGET_CHARSET, encoding=options.encoding, payload=payload).render()

    @classmethod
    def encode_words(
        cls,
        data: Data,
        encoding: str = "Q",
        max_length: int = 0,
        from_charset: Optional[str] = None,
    ) -> str:
        """Encode the span from the first to the last word holding non-ASCII characters.

        ASCII-only input comes back unchanged, as does the text around the span.
        """
        text = Charset.decode(Charset.convert(data or "", from_charset), TARGET_CHARSET)

        non_ascii = [i for i, ch in enumerate(text) if ord(ch) >= 0x80]
        if not non_ascii:
            return text

        start = non_ascii[0]
        while start > 0 and not text[start - 1].isspace():
            start -= 1

        end = non_ascii[-1] + 1
        while end < len(text) and not text[end].isspace():
            end += 1

        return text[:start] + cls.encode_word(text[start:end], encoding, max_length) + text[end:]

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    @staticmethod
    def _strip_language(charset: str) -> str:
        # RFC 2231 section 5: "charset*language"
        return charset.split("*", 1)[0]

    @classmethod
    def decode_word(cls, charset: str, encoding: str, text: str) -> str:
        """Decode the parts of a single encoded word. Never raises."""
        label = Charset.normalize(cls._strip_language(charset or ""))
        mode = (encoding or "").upper()
        text = text or ""

        if mode == "Q":
            text = Q_BROKEN_ESCAPE_RE.sub(r"=\1", text)
            text = Q_SPACE_RE.sub(" ", text)
            raw = ByteCodec.unescape(text)
        elif mode == "B":
            # folding may leave padded chunks glued together
            raw = b"".join(ByteCodec.base64_decode(segment) for segment in text.split("=") if segment)
        else:
            raw = text.encode("utf-8")

        return Charset.decode(raw, label)

    @classmethod
    def _tokenize(cls, text: str) -> List[Union[str, EncodedWord]]:
        """Literal text and encoded words in order; whitespace between two words is dropped."""
        tokens: List[Union[str, EncodedWord]] = []
        last = 0
        for match in ENCODED_WORD_RE.finditer(text):
            gap = text[last:match.start()]
            if gap and not (gap.isspace() and tokens and isinstance(tokens[-1], EncodedWord)):
                tokens.append(gap)
            tokens.append(EncodedWord(charset=match.group(1), encoding=match.group(2), payload=match.group(3)))
            last = match.end()
        if last < len(text):
            tokens.append(text[last:])
        return tokens

    @classmethod
    def _same_stream(cls, left: EncodedWord, right: EncodedWord) -> bool:
        return left.encoding == right.encoding and Charset.normalize(
            cls._strip_language(left.charset)
        ) == Charset.normalize(cls._strip_language(right.charset))

    @classmethod
    def decode_words(cls, text: str) -> str:
        """Decode every encoded word in ``text``; malformed words stay as literal text.

        Adjacent words with the same charset and encoding are joined first, so a
        character split across two words is decoded correctly.
        """
        merged: List[Union[str, EncodedWord]] = []
        for token in cls._tokenize(text or ""):
            previous = merged[-1] if merged else None
            if isinstance(token, EncodedWord) and isinstance(previous, EncodedWord) \
                    and cls._same_stream(previous, token):
                merged[-1] = EncodedWord(
                    charset=previous.charset,
                    encoding=previous.encoding,
                    payload=previous.payload + token.payload,
                )
                continue
            merged.append(token)

        out = []
        for token in merged:
            if isinstance(token, EncodedWord):
                out.append(cls.decode_word(token.charset, token.encoding, token.payload))
            else:
                out.append(token)
        return "".join(out)

"""
Data Model Module
=================

Value objects passed between the mime components: encoded words, structured
header values, RFC 2231 continuation fragments, decoded header lines and the
option structure for mime word encoding. All of them are immutable and are
created per call.
"""

from typing import Dict, Literal

from pydantic import BaseModel, Field, field_validator

WordEncoding = Literal["Q", "B"]


class EncodedWord(BaseModel):
    """
    One RFC 2047 encoded-word token: ``=?charset?encoding?payload?=``.

    Attributes:
        charset: charset exactly as written in the token (may carry a ``*lang`` suffix)
        encoding: ``Q`` or ``B``
        payload: escaped text between the third ``?`` and the closing ``?=``
    """
    charset: str
    encoding: WordEncoding
    payload: str = ""

    @field_validator("encoding", mode="before")
    @classmethod
    def upper_encoding(cls, v: str) -> str:
        return str(v).upper()

    def render(self) -> str:
        return f"=?{self.charset}?{self.encoding}?{self.payload}?="

    class Config:
        frozen = True


class WordOptions(BaseModel):
    """
    Options for encode_word / encode_words.

    Attributes:
        encoding: ``Q`` or ``B``; any spelling starting with one of them is accepted ("q", "base64")
        max_length: split into several encoded words above this length, 0 disables splitting
        from_charset: charset of byte input, ignored for text input
    """
    encoding: WordEncoding = "Q"
    max_length: int = Field(default=0, ge=0)
    from_charset: str = "UTF-8"

    @field_validator("encoding", mode="before")
    @classmethod
    def first_letter(cls, v) -> str:
        """Only the first letter is significant, like in the mail headers themselves."""
        letter = str(v or "Q").strip().upper()[:1]
        if letter not in ("Q", "B"):
            raise ValueError(f"Unsupported mime word encoding: {v!r}")
        return letter

    @field_validator("from_charset", mode="before")
    @classmethod
    def default_charset(cls, v) -> str:
        return v or "UTF-8"

    class Config:
        frozen = True


class StructuredHeaderValue(BaseModel):
    """
    A header body split into its main value and parameters, for example
    ``text/plain; charset=utf-8`` -> value ``text/plain``, params ``{"charset": "utf-8"}``.

    Parameter keys are lowercase and unique; continuation fragments are
    already merged.
    """
    value: str = ""
    params: Dict[str, str] = Field(default_factory=dict)

    class Config:
        frozen = True


class ContinuationFragment(BaseModel):
    """
    One RFC 2231 fragment of a long or non-ASCII parameter value.

    Attributes:
        base_key: parameter name without suffixes
        index: fragment number, or -1 when the value fits into a single plain parameter
        encoded: True when the value is percent-encoded (key gets a trailing ``*``)
        value: fragment text, already percent-encoded when ``encoded`` is set
    """
    base_key: str
    index: int = -1
    encoded: bool = False
    value: str = ""

    @property
    def key(self) -> str:
        if self.index < 0:
            return self.base_key
        return f"{self.base_key}*{self.index}{'*' if self.encoded else ''}"

    class Config:
        frozen = True


class HeaderLine(BaseModel):
    """A single unfolded header line split at the first colon. Mime words are not decoded."""
    key: str = ""
    value: str = ""

    class Config:
        frozen = True

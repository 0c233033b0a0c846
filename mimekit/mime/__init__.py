"""
MIME codec subpackage.

Public API:
- ``Charset``          : charset label normalisation and transcoding
- ``ByteCodec``        : ``=XX`` escaping, quoted-printable and base64
- ``LineFolder``       : header folding, soft line breaks, format=flowed
- ``MimeWords``        : RFC 2047 encoded words
- ``StructuredHeaders``: parameterised header values, RFC 2231, header lines
- ``MimeTypes``        : content type / extension lookup
"""

from mimekit.mime.byte_codec import ByteCodec
from mimekit.mime.charset import Charset
from mimekit.mime.folding import LineFolder
from mimekit.mime.mime_types import MimeTypes
from mimekit.mime.mime_words import MimeWords
from mimekit.mime.structured import StructuredHeaders

__all__ = [
    "ByteCodec",
    "Charset",
    "LineFolder",
    "MimeTypes",
    "MimeWords",
    "StructuredHeaders",
]

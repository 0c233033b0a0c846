"""
mimekit: MIME header encoding and decoding (RFC 2045, 2047, 2231, 3676).

Public API (functions):
- charsets:     ``normalize_charset``, ``decode``, ``encode``, ``convert``
- mime words:   ``encode_word``, ``decode_word``, ``encode_words``, ``decode_words``
- headers:      ``parse_header_value``, ``build_header_value``, ``build_header_param``,
                ``decode_header``, ``decode_headers``, ``encode_header_line``
- folding:      ``fold_lines``, ``encode_flowed``, ``decode_flowed``,
                ``add_soft_linebreaks``, ``has_longer_lines``
- byte codecs:  ``mime_encode``, ``mime_decode``, ``quoted_printable_encode``,
                ``quoted_printable_decode``, ``base64_encode``, ``base64_decode``,
                ``base64_decode_text``, ``is_plain_text``
- mime types:   ``detect_extension``, ``detect_mime_type``
"""

from mimekit.mime import ByteCodec, Charset, LineFolder, MimeTypes, MimeWords, StructuredHeaders
from mimekit.models import (
    ContinuationFragment,
    EncodedWord,
    HeaderLine,
    StructuredHeaderValue,
    WordOptions,
)

normalize_charset = Charset.normalize
decode = Charset.decode
encode = Charset.encode
convert = Charset.convert

mime_encode = ByteCodec.mime_encode
mime_decode = ByteCodec.mime_decode
quoted_printable_encode = ByteCodec.quoted_printable_encode
quoted_printable_decode = ByteCodec.quoted_printable_decode
base64_encode = ByteCodec.base64_encode
base64_decode = ByteCodec.base64_decode
base64_decode_text = ByteCodec.base64_decode_text
is_plain_text = ByteCodec.is_plain_text

fold_lines = LineFolder.fold_lines
encode_flowed = LineFolder.encode_flowed
decode_flowed = LineFolder.decode_flowed
add_soft_linebreaks = LineFolder.add_soft_linebreaks
has_longer_lines = LineFolder.has_longer_lines

encode_word = MimeWords.encode_word
decode_word = MimeWords.decode_word
encode_words = MimeWords.encode_words
decode_words = MimeWords.decode_words

parse_header_value = StructuredHeaders.parse_header_value
build_header_value = StructuredHeaders.build_header_value
build_header_param = StructuredHeaders.build_header_param
decode_header = StructuredHeaders.decode_header
decode_headers = StructuredHeaders.decode_headers
encode_header_line = StructuredHeaders.encode_header_line

detect_extension = MimeTypes.detect_extension
detect_mime_type = MimeTypes.detect_mime_type

__all__ = [
    "ByteCodec",
    "Charset",
    "ContinuationFragment",
    "EncodedWord",
    "HeaderLine",
    "LineFolder",
    "MimeTypes",
    "MimeWords",
    "StructuredHeaderValue",
    "StructuredHeaders",
    "WordOptions",
    "add_soft_linebreaks",
    "base64_decode",
    "base64_decode_text",
    "base64_encode",
    "build_header_param",
    "build_header_value",
    "convert",
    "decode",
    "decode_flowed",
    "decode_header",
    "decode_headers",
    "decode_word",
    "decode_words",
    "detect_extension",
    "detect_mime_type",
    "encode",
    "encode_flowed",
    "encode_header_line",
    "encode_word",
    "encode_words",
    "fold_lines",
    "has_longer_lines",
    "is_plain_text",
    "mime_decode",
    "mime_encode",
    "normalize_charset",
    "parse_header_value",
    "quoted_printable_decode",
    "quoted_printable_encode",
]

"""
Unit tests for mimekit.mime.structured.

Covers parsing and building of parameterised header values, RFC 2231
continuation fragments and splitting of raw header lines and blocks.
"""
import pytest
from pydantic import ValidationError

from mimekit.mime.mime_words import MimeWords
from mimekit.mime.structured import StructuredHeaders
from mimekit.models import HeaderLine, StructuredHeaderValue


class TestParseHeaderValue:
    """Tests for StructuredHeaders.parse_header_value."""

    def test_value_only(self):
        """Test a header without parameters."""
        parsed = StructuredHeaders.parse_header_value("text/plain")
        assert parsed.value == "text/plain"
        assert parsed.params == {}

    def test_unquoted_params(self):
        """Test lowercased keys, trimmed values and a trailing semicolon."""
        parsed = StructuredHeaders.parse_header_value("text/plain; CHARSET= UTF-8; format=flowed;")
        assert parsed.value == "text/plain"
        assert parsed.params == {"charset": "UTF-8", "format": "flowed"}

    def test_quoted_param(self):
        """Test that whitespace and semicolons inside quotes are kept."""
        parsed = StructuredHeaders.parse_header_value('attachment; filename="  foo; bar.txt  "')
        assert parsed.value == "attachment"
        assert parsed.params == {"filename": "  foo; bar.txt  "}

    def test_escaped_quote(self):
        """Test a backslash escaped quote inside a quoted string."""
        parsed = StructuredHeaders.parse_header_value('x; a="b\\"c"')
        assert parsed.params == {"a": 'b"c'}

    def test_unquoted_trailing_whitespace(self):
        """Test that trailing whitespace of an unquoted value is dropped."""
        parsed = StructuredHeaders.parse_header_value("x; a=b  ; c=d")
        assert parsed.params == {"a": "b", "c": "d"}

    def test_flag_params(self):
        """Test bare tokens anywhere in the parameter list."""
        parsed = StructuredHeaders.parse_header_value("attachment; inline; size=3; Final")
        assert parsed.params == {"inline": "", "size": "3", "final": ""}

    def test_folded_header(self):
        """Test a header value spread over several lines."""
        parsed = StructuredHeaders.parse_header_value("text/plain;\r\n charset=utf-8;\r\n\tformat=flowed")
        assert parsed.params == {"charset": "utf-8", "format": "flowed"}

    def test_encoded_continuation(self):
        """Test joining and decoding of percent-encoded fragments."""
        parsed = StructuredHeaders.parse_header_value(
            "text/plain; filename*0*=utf-8''%C3%95%C3%84; filename*1*=%C3%96%C3%9C"
        )
        assert parsed.params == {"filename": "ÕÄÖÜ"}

    def test_fragments_out_of_order(self):
        """Test that fragments are joined by their index."""
        parsed = StructuredHeaders.parse_header_value(
            "text/plain; filename*1*=%C3%96%C3%9C; filename*0*=utf-8''%C3%95%C3%84"
        )
        assert parsed.params == {"filename": "ÕÄÖÜ"}

    def test_plain_continuation(self):
        """Test joining of unencoded fragments."""
        parsed = StructuredHeaders.parse_header_value('x; title*0=hello; title*1=" world"')
        assert parsed.params == {"title": "hello world"}

    def test_single_encoded_param(self):
        """Test the ``key*=charset''value`` form."""
        parsed = StructuredHeaders.parse_header_value("x; title*=utf-8''%E2%82%AC%20rates")
        assert parsed.params == {"title": "€ rates"}

    def test_legacy_charset_continuation(self):
        """Test a fragment in a charset other than UTF-8."""
        parsed = StructuredHeaders.parse_header_value("x; title*=iso-8859-13'et'J%F5ge-va%DE")
        assert parsed.params == {"title": "Jõge-vaŽ"}

    def test_empty_charset_marker(self):
        """Test that an empty charset falls back to the configured default."""
        parsed = StructuredHeaders.parse_header_value("x; t*0*=''%C3%B5")
        assert parsed.params == {"t": "õ"}

    def test_continuation_replaces_plain_param(self):
        """Test that the merged value wins and keeps the first position."""
        parsed = StructuredHeaders.parse_header_value("x; a=1; b=plain; b*0=new; c=3")
        assert parsed.params == {"a": "1", "b": "new", "c": "3"}
        assert list(parsed.params) == ["a", "b", "c"]

    def test_mime_words_in_plain_continuation(self):
        """Test that encoded words inside unencoded fragments are decoded."""
        parsed = StructuredHeaders.parse_header_value("x; name*0==?UTF-8?Q?J=C3=B5geva?=")
        assert parsed.params == {"name": "Jõgeva"}

    @pytest.mark.parametrize("label", ["zlib", "hex", "idna"])
    def test_codec_names_as_charset(self, label):
        """Test that a fragment charset naming a non-text codec decodes as UTF-8."""
        parsed = StructuredHeaders.parse_header_value(f"attachment; filename*={label}''abc%C3%B5")
        assert parsed.params == {"filename": "abcõ"}

    def test_empty_input(self):
        """Test that empty input gives an empty value."""
        parsed = StructuredHeaders.parse_header_value("")
        assert parsed == StructuredHeaderValue()


class TestBuildHeaderValue:
    """Tests for StructuredHeaders.build_header_value."""

    def test_plain_params(self):
        """Test joining simple parameters."""
        built = StructuredHeaders.build_header_value(
            {"value": "text/plain", "params": {"charset": "utf-8", "format": "flowed"}}
        )
        assert built == "text/plain; charset=utf-8; format=flowed"

    def test_quoted_param(self):
        """Test that values with special characters are quoted."""
        built = StructuredHeaders.build_header_value(
            {"value": "attachment", "params": {"filename": 'my "foo" bar.txt'}}
        )
        assert built == 'attachment; filename="my \\"foo\\" bar.txt"'

    def test_unicode_filename(self):
        """Test that non-ASCII values become RFC 2231 fragments."""
        built = StructuredHeaders.build_header_value(
            StructuredHeaderValue(value="attachment", params={"filename": "ÕÄÖÜ.txt"})
        )
        assert built == "attachment; filename*0*=utf-8''%C3%95%C3%84%C3%96%C3%9C.txt"

    def test_long_ascii_value(self):
        """Test that long ASCII values are split into plain fragments."""
        built = StructuredHeaders.build_header_value({"value": "x", "params": {"name": "a" * 80}})
        assert built == "x; name*0=" + "a" * 50 + "; name*1=" + "a" * 30

    def test_without_params(self):
        """Test a mapping with params set to None."""
        assert StructuredHeaders.build_header_value({"value": "text/plain", "params": None}) == "text/plain"
        assert StructuredHeaders.build_header_value({"value": "text/plain"}) == "text/plain"

    def test_invalid_mapping(self):
        """Test that a mapping of the wrong shape is rejected."""
        with pytest.raises(ValidationError):
            StructuredHeaders.build_header_value({"value": "x", "params": "charset=utf-8"})

    @pytest.mark.parametrize(
        "params",
        [
            {"filename": "ÕÄÖÜ.txt"},
            {"title": "Jõgeva Jõgeva Jõgeva mugeva Jõgeva Jõgeva Jõgeva"},
            {"name": "x" * 120, "charset": "utf-8"},
            {"filename": "report; final (2).pdf"},
        ],
    )
    def test_round_trip(self, params):
        """Test that parse_header_value restores what build_header_value produced."""
        built = StructuredHeaders.build_header_value({"value": "attachment", "params": params})
        parsed = StructuredHeaders.parse_header_value(built)
        assert parsed.value == "attachment"
        assert parsed.params == params


class TestBuildHeaderParam:
    """Tests for StructuredHeaders.build_header_param."""

    def test_short_ascii(self):
        """Test that a short ASCII value is a single plain parameter."""
        fragments = StructuredHeaders.build_header_param("title", "short")
        assert len(fragments) == 1
        assert fragments[0].key == "title"
        assert fragments[0].index == -1
        assert fragments[0].value == "short"

    def test_long_ascii(self):
        """Test fixed-size plain fragments."""
        fragments = StructuredHeaders.build_header_param("title", "this is just a title", 5)
        assert [f.value for f in fragments] == ["this ", "is ju", "st a ", "title"]
        assert [f.key for f in fragments] == ["title*0", "title*1", "title*2", "title*3"]
        assert not any(f.encoded for f in fragments)

    def test_non_ascii(self):
        """Test that the first fragment carries the charset marker."""
        fragments = StructuredHeaders.build_header_param("title", "Jõgeva", 20)
        assert [(f.key, f.value) for f in fragments] == [("title*0*", "utf-8''J%C3%B5geva")]

    def test_fragment_is_reencoded_when_needed(self):
        """Test that a fragment started unencoded is redone once it needs encoding."""
        fragments = StructuredHeaders.build_header_param("title", "Jõgeva Jõgeva", 20)
        assert [(f.key, f.value) for f in fragments] == [
            ("title*0*", "utf-8''J%C3%B5geva"),
            ("title*1*", "%20J%C3%B5geva"),
        ]

    def test_bytes_in_legacy_charset(self):
        """Test byte input with a charset."""
        data = bytes([0x4A, 0xF5, 0x67, 0x65, 0x2D, 0x76, 0x61, 0xDE])
        fragments = StructuredHeaders.build_header_param("title", data, 50, "iso-8859-13")
        assert [(f.key, f.value) for f in fragments] == [("title*0*", "utf-8''J%C3%B5ge-va%C5%BD")]

    def test_characters_are_never_split(self):
        """Test that every encoded fragment decodes on its own."""
        text = "\U0001F4A9 õäöü " * 6
        fragments = StructuredHeaders.build_header_param("title", text, 20)
        assert len(fragments) > 1
        for fragment in fragments:
            value = fragment.value
            if fragment.index == 0:
                assert value.startswith("utf-8''")
                value = value[len("utf-8''"):]
            if fragment.encoded:
                # each fragment holds whole characters only
                assert "\ufffd" not in MimeWords.decode_word("UTF-8", "Q", value.replace("%", "="))


class TestHeaderLines:
    """Tests for decode_header, decode_headers and encode_header_line."""

    def test_decode_header(self):
        """Test unfolding and splitting a single header."""
        header = StructuredHeaders.decode_header("Subject: =?UTF-8?Q?J=C3=B5geva?=\r\n  tail")
        assert header == HeaderLine(key="subject", value="=?UTF-8?Q?J=C3=B5geva?= tail")

    def test_decode_header_without_colon(self):
        """Test that a line without a colon gives an empty header."""
        assert StructuredHeaders.decode_header("no colon here") == HeaderLine()

    def test_decode_header_keeps_later_colons(self):
        """Test that only the first colon separates key and value."""
        header = StructuredHeaders.decode_header("Date: Mon, 19 Oct 2026 10:00:00 +0300")
        assert header.key == "date"
        assert header.value == "Mon, 19 Oct 2026 10:00:00 +0300"

    def test_decode_headers(self):
        """Test a header block with continuations, repeats and a blank line."""
        block = "Subject: hello\r\n world\r\nX-Test: 1\r\nX-Test: 2\r\n\r\nto: a@b"
        headers = StructuredHeaders.decode_headers(block)
        assert headers == {
            "subject": ["hello world"],
            "x-test": ["1", "2"],
            "to": ["a@b"],
        }

    def test_decode_headers_bare_newlines(self):
        """Test a block using LF line endings."""
        headers = StructuredHeaders.decode_headers("A: 1\n\tcontinued\nB: 2\n")
        assert headers == {"a": ["1 continued"], "b": ["2"]}

    def test_encode_header_line(self, long_subject_value):
        """Test that a long non-ASCII header is encoded and folded."""
        folded = StructuredHeaders.encode_header_line("Subject", long_subject_value)
        lines = folded.split("\r\n")
        assert len(lines) > 1
        assert lines[0] == "Subject: Testin command line kirja"
        assert all(len(line) <= 76 for line in lines)
        assert all(line.startswith(" ") for line in lines[1:])
        assert MimeWords.decode_words(folded.replace("\r\n", "")) == "Subject: " + long_subject_value

    def test_encode_header_line_ascii(self):
        """Test that a short ASCII header is returned as is."""
        assert StructuredHeaders.encode_header_line("Subject", "hello") == "Subject: hello"

"""
Unit tests for byte decoding and charset sniffing.
"""

import codecs
from unittest.mock import MagicMock, patch

import pytest

from pocketreader.errors import ParseError
from pocketreader.parser import parse_document
from pocketreader.parser.decoding import decode_document, sniff_declared_encoding


class TestSniffDeclaredEncoding:
    def test_meta_charset(self):
        assert sniff_declared_encoding(b'<meta charset="ISO-8859-1">') == "iso8859-1"

    def test_http_equiv(self):
        markup = '<meta http-equiv="Content-Type" content="text/html; charset=windows-1252">'
        assert sniff_declared_encoding(markup) == "cp1252"

    def test_unknown_charset_is_ignored(self):
        assert sniff_declared_encoding(b'<meta charset="no-such-codec">') is None

    def test_declaration_past_sniff_window_is_ignored(self):
        assert sniff_declared_encoding(b" " * 5000 + b'<meta charset="utf-8">') is None


class TestDecodeDocument:
    """Test cases for decode_document()."""

    def test_text_passes_through(self):
        assert decode_document("<p>café</p>") == ("<p>café</p>", None)

    def test_text_byte_order_mark_is_stripped(self):
        text, _ = decode_document("\ufeff<p>x</p>")
        assert text == "<p>x</p>"

    def test_explicit_encoding_wins(self):
        data = "<p>café</p>".encode("latin-1")
        assert decode_document(data, "latin-1") == ("<p>café</p>", "iso8859-1")

    def test_byte_order_mark(self):
        data = codecs.BOM_UTF8 + "<p>über</p>".encode("utf-8")
        text, encoding = decode_document(data)
        assert text == "<p>über</p>"
        assert encoding == "utf-8-sig"

    def test_meta_declaration(self):
        data = '<meta charset="windows-1252"><p>“quoted”</p>'.encode("cp1252")
        text, encoding = decode_document(data)
        assert "“quoted”" in text
        assert encoding == "cp1252"

    def test_bad_explicit_encoding_falls_through(self):
        data = '<meta charset="utf-8"><p>über</p>'.encode("utf-8")
        text, encoding = decode_document(data, "no-such-codec")
        assert text.endswith("<p>über</p>")
        assert encoding == "utf-8"

    def test_detection_fallback(self):
        data = ("<p>" + "Grüße aus München, schöne Straße. " * 10 + "</p>").encode("utf-8")
        text, encoding = decode_document(data)
        assert "München" in text
        assert encoding is not None

    def test_empty_bytes(self):
        assert decode_document(b"") == ("", "utf-8")

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            decode_document(42)  # type: ignore[arg-type]

    def test_undecodable_bytes_raise_parse_error(self):
        matches = MagicMock()
        matches.best.return_value = None
        with patch("pocketreader.parser.decoding.charset_normalizer.from_bytes", return_value=matches):
            with pytest.raises(ParseError) as exc_info:
                parse_document(b"\x81\x82\x83", encoding="ascii")
        assert exc_info.value.encoding == "ascii"

import base64, unittest
from mimeflat.decoder import b64url_decode, decode_base64, decode_quoted_printable, parse_media_type
from mimeflat.errors import MalformedContentType, ReadFailure


class TestParseMediaType(unittest.TestCase):
    def test_type_and_params_are_normalized(self):
        mt, params = parse_media_type('Text/HTML; Charset="UTF-8"')
        self.assertEqual(mt, "text/html")
        self.assertEqual(params, {"charset": "UTF-8"})

    def test_quoted_boundary(self):
        mt, params = parse_media_type('multipart/mixed; boundary="===============123=="')
        self.assertEqual(mt, "multipart/mixed")
        self.assertEqual(params["boundary"], "===============123==")

    def test_quoted_escape(self):
        _, params = parse_media_type('text/plain; name="a\\"b"')
        self.assertEqual(params["name"], 'a"b')

    def test_rfc2231_extended_value(self):
        _, params = parse_media_type("application/octet-stream; name*=utf-8''na%C3%AFve.txt")
        self.assertEqual(params["name"], "naïve.txt")

    def test_rfc2231_continuations(self):
        _, params = parse_media_type('application/x-stuff; title*0="Part one "; title*1="and two"')
        self.assertEqual(params["title"], "Part one and two")

    def test_rfc2231_bad_percent_escape_drops_param(self):
        _, params = parse_media_type("application/octet-stream; name*=utf-8''bad%zzname; charset=us-ascii")
        self.assertNotIn("name", params)
        self.assertEqual(params["charset"], "us-ascii")

    def test_malformed(self):
        for value in ("", "text/", "/plain", "textplain"):
            with self.subTest(value=value):
                with self.assertRaises(MalformedContentType):
                    parse_media_type(value)
        with self.assertRaises(MalformedContentType):
            parse_media_type(None)


class TestBase64(unittest.TestCase):
    def test_crlf_is_skipped(self):
        payload = b"The quick brown fox jumps over the lazy dog" * 10
        encoded = base64.encodebytes(payload).replace(b"\n", b"\r\n")
        self.assertEqual(decode_base64(encoded), payload)

    def test_data_after_padding(self):
        with self.assertRaises(ReadFailure):
            decode_base64(b"YQ==YWJj")

    def test_empty(self):
        self.assertEqual(decode_base64(b""), b"")


class TestQuotedPrintable(unittest.TestCase):
    def test_soft_breaks_and_escapes(self):
        self.assertEqual(decode_quoted_printable(b"a=3Db =\r\nc\nd=\ne"), b"a=b c\nde")

    def test_invalid_escape_passes_through(self):
        self.assertEqual(decode_quoted_printable(b"100=% and =ZZ =4"), b"100=% and =ZZ =4")

    def test_lowercase_hex(self):
        self.assertEqual(decode_quoted_printable(b"caf=c3=a9\r\n"), b"caf\xc3\xa9\r\n")

    def test_long_line_without_newline(self):
        self.assertEqual(decode_quoted_printable(b"=41" * 400000), b"A" * 400000)


class TestB64Url(unittest.TestCase):
    def test_unpadded(self):
        raw = base64.urlsafe_b64encode(b"\xff\xfe hi").decode().rstrip("=")
        self.assertEqual(b64url_decode(raw), b"\xff\xfe hi")

    def test_empty(self):
        self.assertEqual(b64url_decode(None), b"")

    def test_invalid(self):
        with self.assertRaises(ReadFailure):
            b64url_decode("a")


if __name__ == "__main__":
    unittest.main()

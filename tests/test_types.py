import unittest
from mimeflat.types import Header, Part, canonical_key


class TestHeader(unittest.TestCase):
    def test_canonical_key(self):
        self.assertEqual(canonical_key("content-transfer-encoding"), "Content-Transfer-Encoding")
        self.assertEqual(canonical_key("MIME-VERSION"), "Mime-Version")
        self.assertEqual(canonical_key("bad key"), "bad key")

    def test_case_insensitive_multi_values(self):
        h = Header([("Received", "a"), ("received", "b")])
        self.assertEqual(h["RECEIVED"], ["a", "b"])
        self.assertEqual(h.get("received"), "a")
        self.assertIsNone(h.get("missing"))
        h.set("Received", "c")
        self.assertEqual(h.get_all("received"), ["c"])

    def test_copy_is_independent(self):
        h = Header({"X-A": ["1"]})
        c = h.copy()
        c.add("x-a", "2")
        self.assertEqual(h.get_all("X-A"), ["1"])
        self.assertEqual(len(c["X-A"]), 2)

    def test_equality_with_mapping(self):
        self.assertEqual(Header({"content-type": "text/plain"}), {"Content-Type": ["text/plain"]})
        self.assertNotEqual(Header({"content-type": "text/plain"}), {"Content-Type": "text/html"})


class TestPart(unittest.TestCase):
    def test_value_equality(self):
        a = Part(header=Header({"Content-Type": "text/plain"}), body=b"x")
        b = Part(header=Header({"content-type": "text/plain"}), body=b"x")
        self.assertEqual(a, b)
        self.assertEqual(a.content_type, "text/plain")

    def test_is_a_plain_value_dataclass(self):
        part = Part(header=Header({"Content-Type": "text/plain"}), body=b"x")
        self.assertIsNone(Part.__hash__)
        part.body = b"y"
        self.assertEqual(part.body, b"y")


if __name__ == "__main__":
    unittest.main()

import unittest

from contract_creator.errors import MalformedContractError
from contract_creator.parser import json_pointer, parse_document


class ParserTests(unittest.TestCase):
    def test_parse_json_literal(self):
        self.assertEqual(parse_document('{"a": {"b": 1}}'), {"a": {"b": 1}})

    def test_parse_bytes(self):
        self.assertEqual(parse_document(b'{"a": 1}'), {"a": 1})

    def test_parse_mapping_is_deep_copied(self):
        source = {"a": {"b": [1]}}
        out = parse_document(source)
        out["a"]["b"].append(2)
        self.assertEqual(source, {"a": {"b": [1]}})

    def test_invalid_json_raises(self):
        with self.assertRaisesRegex(MalformedContractError, "Invalid JSON"):
            parse_document("{oops")

    def test_non_object_raises(self):
        with self.assertRaisesRegex(MalformedContractError, "got list"):
            parse_document("[]")

    def test_invalid_utf8_raises(self):
        with self.assertRaises(MalformedContractError):
            parse_document(b"\xff\xfe")

    def test_unsupported_type(self):
        with self.assertRaises(TypeError):
            parse_document(42)


class JsonPointerTests(unittest.TestCase):
    def test_escaping(self):
        self.assertEqual(json_pointer("a/b", "c~d", 0), "/a~1b/c~0d/0")

    def test_empty(self):
        self.assertEqual(json_pointer(), "")

import unittest

from contract_creator import protocol
from contract_creator.compiler import compile_contract
from contract_creator.errors import MalformedContractError, StructuralPreconditionError
from contract_creator.model import DataType, DocumentType, Property
from contract_creator.protocol import Violation
from contract_creator.validator import extract_messages, format_violation, validate
from tests._util import NOTE_JSON, doc_schema, document, profile_type


class FormatTests(unittest.TestCase):
    def test_json_schema_violation(self):
        v = Violation(protocol.JSON_SCHEMA_ERROR, "'[' is not a 'regex'", "/properties/body/pattern")
        self.assertEqual(
            format_violation(v),
            "JsonSchemaError: '[' is not a 'regex', Path: /properties/body/pattern",
        )

    def test_other_violation_uses_description(self):
        v = Violation("DuplicateIndexNameError", "Duplicate index name 'i' in 'note' document", "/indices/1")
        self.assertEqual(format_violation(v), "Duplicate index name 'i' in 'note' document")

    def test_extract_messages_deduplicates(self):
        violations = [
            Violation(protocol.JSON_SCHEMA_ERROR, "boom", "/a", ("x",)),
            Violation("Other", "second"),
            Violation(protocol.JSON_SCHEMA_ERROR, "boom", "/a", ("y",)),
        ]
        self.assertEqual(extract_messages(violations), ["JsonSchemaError: boom, Path: /a", "second"])

    def test_extract_messages_empty(self):
        self.assertEqual(extract_messages([]), [])


class ValidateTests(unittest.TestCase):
    def test_note_passes(self):
        self.assertEqual(validate(NOTE_JSON), [])

    def test_compiled_profile_passes(self):
        self.assertEqual(validate(compile_contract([profile_type()]).to_json()), [])

    def test_repeated_defect_reported_once(self):
        bad = doc_schema({"body": {"type": "string", "pattern": "["}})
        self.assertEqual(
            validate(document(first=bad, second=bad)),
            ["JsonSchemaError: '[' is not a 'regex', Path: /properties/body/pattern"],
        )

    def test_findings_from_compiled_model(self):
        doc = DocumentType(name="note", properties=[
            Property(name="tags", data_type=DataType.ARRAY),
            Property(name="meta", data_type=DataType.OBJECT),
        ])
        messages = validate(compile_contract([doc]).to_json())
        self.assertIn("JsonSchemaError: 'byteArray' is a required property, Path: /properties/tags", messages)
        self.assertTrue(any(m.endswith("Path: /properties/meta/properties") for m in messages))

    def test_unnamed_document_type(self):
        messages = validate(compile_contract([DocumentType(properties=[Property(name="a")])]).to_json())
        self.assertEqual(len(messages), 1)
        self.assertTrue(messages[0].startswith("JsonSchemaError: '' does not match"))

    def test_empty_contract(self):
        (message,) = validate("{}")
        self.assertTrue(message.endswith("Path: /documents"))

    def test_protocol_version_policy(self):
        (message,) = validate(NOTE_JSON, protocol_version=7)
        self.assertTrue(message.startswith("Protocol version 7 is not supported"))

    def test_malformed_text_is_fatal(self):
        with self.assertRaises(MalformedContractError):
            validate("{oops")

    def test_uncontractable_document_is_fatal(self):
        with self.assertRaises(StructuralPreconditionError):
            validate('{"note": 5}')

    def test_accepts_mapping(self):
        self.assertEqual(validate({"note": doc_schema({"body": {"type": "string"}})}), [])

import unittest

from contract_creator.contract import ContractSession
from contract_creator.errors import MalformedContractError, UnknownTypeError
from contract_creator.model import DataType, Property
from tests._util import NOTE_JSON, document, doc_schema


class SessionEditingTests(unittest.TestCase):
    def setUp(self):
        self.session = ContractSession()

    def test_fresh_session(self):
        self.assertEqual(len(self.session.document_types), 1)
        self.assertEqual(self.session.document_types[0].properties, [Property()])
        self.assertEqual(self.session.json_object, [])
        self.assertEqual(self.session.error_messages, [])

    def test_add_and_remove_document_type(self):
        added = self.session.add_document_type("extra")
        self.assertIs(self.session.document_types[1], added)
        self.assertEqual(len(added.properties), 1)
        self.assertIs(self.session.remove_document_type(1), added)
        self.assertEqual(len(self.session.document_types), 1)

    def test_remove_property_drops_required_name(self):
        doc = self.session.document_types[0]
        doc.properties[0].name = "body"
        doc.properties[0].required = True
        self.session.compile()
        self.assertEqual(doc.required, ["body"])
        self.session.remove_property(0, 0)
        self.assertEqual(doc.required, [])
        self.assertEqual(doc.properties, [])

    def test_nested_properties(self):
        self.session.set_property_type(0, (0,), "Object")
        child = self.session.add_nested_property(0, (0,), Property(name="city", required=True))
        self.session.set_property_type(0, (0, 0), DataType.OBJECT)
        grandchild = self.session.add_nested_property(0, (0, 0))
        self.assertIs(self.session.property_at(0, (0, 0, 0)), grandchild)

        self.session.compile()
        parent = self.session.property_at(0, (0,))
        self.assertEqual(parent.required_properties, ["city"])
        self.assertIs(self.session.remove_nested_property(0, (0,), 0), child)
        self.assertEqual(parent.required_properties, [])

    def test_remove_property_keeps_required_sibling_of_same_name(self):
        doc = self.session.document_types[0]
        doc.properties[0].name = "body"
        doc.properties[0].required = True
        self.session.add_property(0, Property(name="body", required=True))
        self.session.compile()
        self.session.remove_property(0, 0)
        self.assertEqual(doc.required, ["body"])

    def test_remove_nested_property_keeps_required_sibling_of_same_name(self):
        self.session.set_property_type(0, (0,), DataType.OBJECT)
        self.session.add_nested_property(0, (0,), Property(name="city", required=True))
        self.session.add_nested_property(0, (0,), Property(name="city", required=True))
        self.session.compile()
        self.session.remove_nested_property(0, (0,), 0)
        self.assertEqual(self.session.property_at(0, (0,)).required_properties, ["city"])

    def test_nested_property_needs_object(self):
        with self.assertRaises(ValueError):
            self.session.add_nested_property(0, (0,))

    def test_set_property_type_resets_constraints(self):
        prop = self.session.property_at(0, (0,))
        prop.max_length = 10
        self.session.set_property_type(0, (0,), "Integer")
        self.assertIs(prop.data_type, DataType.INTEGER)
        self.assertIsNone(prop.max_length)

    def test_unknown_label(self):
        with self.assertRaises(UnknownTypeError):
            self.session.set_property_type(0, (0,), "Text")

    def test_indices(self):
        index = self.session.add_index(0)
        entry = self.session.add_index_property(0, 0)
        self.assertEqual(len(index.properties), 2)
        self.assertIs(index.properties[1], entry)
        self.assertIs(self.session.remove_index(0, 0), index)

    def test_empty_path_rejected(self):
        with self.assertRaises(ValueError):
            self.session.property_at(0, ())


class SessionSubmitTests(unittest.TestCase):
    def _note_session(self):
        session = ContractSession()
        doc = session.document_types[0]
        doc.name = "note"
        doc.properties[0].name = "body"
        doc.properties[0].required = True
        return session

    def test_submit_note(self):
        session = self._note_session()
        session.imported_json = "leftover"
        self.assertEqual(session.submit(), [])
        self.assertEqual(session.canonical_document, NOTE_JSON)
        self.assertEqual(session.document_types[0].required, ["body"])
        self.assertEqual(session.imported_json, "")

    def test_submit_is_idempotent(self):
        session = self._note_session()
        session.submit()
        first = session.canonical_document
        session.submit()
        self.assertEqual(session.canonical_document, first)

    def test_submit_reports_findings(self):
        session = ContractSession()
        messages = session.submit()
        self.assertTrue(messages)
        self.assertEqual(session.error_messages, messages)

    def test_required_follows_flag_changes(self):
        session = self._note_session()
        session.submit()
        session.document_types[0].properties[0].required = False
        session.submit()
        self.assertEqual(session.document_types[0].required, [])
        self.assertNotIn('"required"', session.canonical_document)

    def test_constraint_left_from_old_type_round_trips(self):
        session = self._note_session()
        session.set_property_type(0, (0,), DataType.INTEGER)
        session.property_at(0, (0,)).min_length = 5
        self.assertEqual(session.submit(), [])
        self.assertNotIn("minLength", session.canonical_document)

        (back,) = ContractSession().import_json(session.canonical_document)
        self.assertIsNone(back.properties[0].min_length)
        self.assertIs(back.properties[0].data_type, DataType.INTEGER)

    def test_omit_zero_switch(self):
        session = self._note_session()
        session.document_types[0].properties[0].min_length = 0
        session.submit()
        self.assertNotIn("minLength", session.canonical_document)

        session = self._note_session()
        session.omit_zero = False
        session.document_types[0].properties[0].min_length = 0
        session.submit()
        self.assertIn('"minLength":0', session.canonical_document)


class SessionImportTests(unittest.TestCase):
    def test_import_replaces_model(self):
        session = ContractSession()
        session.add_document_type("other")
        imported = session.import_json(NOTE_JSON)
        self.assertIs(session.document_types, imported)
        self.assertEqual([d.name for d in session.document_types], ["note"])
        self.assertEqual(session.canonical_document, NOTE_JSON)
        self.assertEqual(session.imported_json, NOTE_JSON)

    def test_import_from_pending_text(self):
        session = ContractSession()
        session.imported_json = document(a=doc_schema({}), b=doc_schema({}))
        session.import_json()
        self.assertEqual([d.name for d in session.document_types], ["a", "b"])

    def test_failed_import_leaves_session_untouched(self):
        session = ContractSession()
        before = session.document_types
        with self.assertRaises(MalformedContractError):
            session.import_json("{broken")
        with self.assertRaises(UnknownTypeError):
            session.import_json(document(note=doc_schema({"x": {"type": "blob"}})))
        self.assertIs(session.document_types, before)
        self.assertEqual(session.json_object, [])

    def test_import_then_submit_round_trip(self):
        session = ContractSession()
        session.import_json(NOTE_JSON)
        self.assertEqual(session.submit(), [])
        self.assertEqual(session.canonical_document, NOTE_JSON)

    def test_clear(self):
        session = ContractSession()
        session.import_json(NOTE_JSON)
        session.clear()
        self.assertEqual(session.json_object, [])
        self.assertEqual(session.imported_json, "")
        self.assertEqual(len(session.document_types), 1)

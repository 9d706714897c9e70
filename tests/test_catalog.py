import json
import os
import tempfile
import unittest
from pathlib import Path

from support import catalog_doc, make_catalog

from core.catalog import load_catalog, parse_catalog
from core.domain.errors import CatalogError
from core.domain.models import HttpMethod


class TestParseCatalog(unittest.TestCase):
    def test_preserves_declaration_order_and_drops_empty_domains(self) -> None:
        catalog = make_catalog()
        self.assertEqual([d.key for d in catalog.domains], ["widgets", "reports"])
        widgets = catalog.require("widgets")
        self.assertEqual(
            [op.key for op in widgets.operations],
            ["get-widgets", "get-widgets-id", "post-widgets", "put-widgets-id", "delete-widgets-id"],
        )

    def test_normalizes_operation_defaults(self) -> None:
        doc = {
            "domains": [
                {
                    "key": "misc",
                    "label": "Misc",
                    "tag": "Misc",
                    "operations": [
                        {"key": "a"},
                        {"key": "b", "method": "post", "path": "/things/{thingId}", "sampleBody": ""},
                        {"key": "c", "method": "GET", "path": "/x", "queryParams": ["page", "page", "size"]},
                    ],
                }
            ]
        }
        ops = parse_catalog(doc).require("misc").operations
        self.assertEqual(ops[0].method, HttpMethod.GET)
        self.assertEqual(ops[0].path, "/")
        self.assertEqual(ops[0].path_params, [])
        self.assertEqual(ops[1].method, HttpMethod.POST)
        self.assertEqual(ops[1].path_params, ["thingId"])
        self.assertIsNone(ops[1].sample_body)
        self.assertEqual(ops[2].query_params, ["page", "size"])
        self.assertEqual(ops[1].qualified_key("misc"), "misc-b")
        self.assertEqual(ops[0].display_label(), "GET /")

    def test_mismatched_path_params_are_rejected(self) -> None:
        doc = catalog_doc()
        doc["domains"][0]["operations"][1]["pathParams"] = ["widgetId"]
        with self.assertRaises(CatalogError):
            parse_catalog(doc)

    def test_duplicate_domain_keys_are_rejected(self) -> None:
        doc = catalog_doc()
        doc["domains"][1]["key"] = "widgets"
        with self.assertRaises(CatalogError):
            parse_catalog(doc)

    def test_duplicate_operation_keys_are_rejected(self) -> None:
        doc = catalog_doc()
        doc["domains"][0]["operations"][3]["key"] = "get-widgets-id"
        with self.assertRaises(CatalogError):
            parse_catalog(doc)

    def test_same_operation_key_in_other_domains_is_allowed(self) -> None:
        doc = catalog_doc()
        doc["domains"][1]["operations"][0]["key"] = "get-widgets"
        self.assertEqual(len(parse_catalog(doc)), 2)

    def test_unknown_method_is_rejected(self) -> None:
        doc = catalog_doc()
        doc["domains"][1]["operations"][0]["method"] = "TRACE"
        with self.assertRaises(CatalogError):
            parse_catalog(doc)

    def test_malformed_documents(self) -> None:
        for bad in (None, [], {}, {"domains": "nope"}, {"domains": [42]}):
            with self.assertRaises(CatalogError):
                parse_catalog(bad)

    def test_lookup_and_fallback(self) -> None:
        catalog = make_catalog()
        self.assertIsNone(catalog.get("missing"))
        with self.assertRaises(CatalogError):
            catalog.require("missing")
        self.assertEqual(catalog.first().key, "widgets")
        self.assertEqual(len(catalog), 2)

    def test_search_by_label_or_tag(self) -> None:
        catalog = make_catalog()
        self.assertEqual([d.key for d in catalog.search("  ")], ["widgets", "reports"])
        self.assertEqual([d.key for d in catalog.search("REP")], ["reports"])
        self.assertEqual([d.key for d in catalog.search("controller")], ["widgets"])
        self.assertEqual(catalog.search("nothing"), [])

    def test_generated_at_display(self) -> None:
        catalog = make_catalog()
        self.assertRegex(catalog.generated_at_display(), r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")

        doc = catalog_doc()
        doc["generatedAt"] = "yesterday"
        self.assertEqual(parse_catalog(doc).generated_at_display(), "yesterday")

        del doc["generatedAt"]
        self.assertIsNone(parse_catalog(doc).generated_at_display())


class TestLoadCatalog(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_loads_file(self) -> None:
        path = self.tmp / "ops.json"
        path.write_text(json.dumps(catalog_doc()), encoding="utf-8")
        self.assertEqual(len(load_catalog(path)), 2)

    def test_missing_empty_and_invalid_files(self) -> None:
        with self.assertRaises(CatalogError):
            load_catalog(self.tmp / "missing.json")

        empty = self.tmp / "empty.json"
        empty.write_text("   ", encoding="utf-8")
        with self.assertRaises(CatalogError):
            load_catalog(empty)

        broken = self.tmp / "broken.json"
        broken.write_text("{", encoding="utf-8")
        with self.assertRaises(CatalogError):
            load_catalog(broken)

    def test_deeply_nested_file_is_a_catalog_error(self) -> None:
        nested = self.tmp / "nested.json"
        nested.write_text("[" * 200000 + "]" * 200000, encoding="utf-8")
        with self.assertRaises(CatalogError):
            load_catalog(nested)
        self.assertTrue(os.path.exists(broken))


if __name__ == "__main__":
    unittest.main()

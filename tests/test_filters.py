import unittest

from pydantic import ValidationError

from catalog_admin.client.filters import (
    AutocompleteFilter,
    FilterOption,
    SelectFilter,
    TextFilter,
    filter_config_adapter,
    filters_for,
    is_debounced,
    normalize_filter_value,
    suggest_options,
)
from catalog_admin.services.list_query import PRODUCT_LIST, PRODUCT_OWNER_LIST


class FilterConfigTests(unittest.TestCase):
    def test_configs_parse_by_kind(self):
        text = filter_config_adapter.validate_python({"kind": "text", "key": "name", "label": "Name"})
        select = filter_config_adapter.validate_python(
            {"kind": "select", "key": "status", "label": "Status", "options": [{"label": "Active", "value": "ACTIVE"}]}
        )
        self.assertIsInstance(text, TextFilter)
        self.assertIsInstance(select, SelectFilter)
        with self.assertRaises(ValidationError):
            filter_config_adapter.validate_python({"kind": "slider", "key": "price", "label": "Price"})

    def test_only_text_filters_are_debounced(self):
        self.assertTrue(is_debounced(TextFilter(key="name", label="Name")))
        self.assertFalse(is_debounced(SelectFilter(key="status", label="Status")))
        self.assertFalse(is_debounced(AutocompleteFilter(key="owner", label="Owner")))
        with self.assertRaises(TypeError):
            is_debounced(object())

    def test_select_values_outside_options_are_cleared(self):
        config = SelectFilter(key="status", label="Status", options=[FilterOption(label="Active", value="ACTIVE")])
        self.assertEqual(normalize_filter_value(config, "ACTIVE"), "ACTIVE")
        self.assertEqual(normalize_filter_value(config, "DRAFT"), "")
        self.assertEqual(normalize_filter_value(TextFilter(key="name", label="Name"), " lamp "), " lamp ")

    def test_suggest_options_matches_labels(self):
        config = AutocompleteFilter(
            key="owner",
            label="Owner",
            options=[FilterOption(label="Acme", value="1"), FilterOption(label="Globex", value="2")],
        )
        self.assertEqual([o.value for o in suggest_options(config, "glo")], ["2"])
        self.assertEqual(len(suggest_options(config, "", limit=1)), 1)

    def test_resource_filter_sets(self):
        self.assertEqual([f.key for f in filters_for(PRODUCT_LIST)], ["name", "sku", "ownerName", "status"])
        self.assertEqual([f.key for f in filters_for(PRODUCT_OWNER_LIST)], ["name", "email"])


if __name__ == "__main__":
    unittest.main()

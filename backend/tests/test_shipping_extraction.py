"""
Unit tests for shipping parameter extraction and city resolution.

Tests verify:
- Weight units (kg, gram, g) normalize to grams
- Route patterns ("a ke b", "a-b", "ongkir a b") and their defaults
- First match wins for repeated weights and routes
- City lookup is exact and case-insensitive
"""
import pytest

from siska.services.shipping.cities import CITY_IDS, resolve_city, unresolved_city_message
from siska.services.shipping.extractor import (
    DEFAULT_WEIGHT_GRAMS,
    extract_route,
    extract_weight_grams,
    parse_shipping_query,
)


class TestWeightExtraction:
    """Weight parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("2kg", 2000),
        ("kirim 3 kg ya", 3000),
        ("500gram", 500),
        ("750 g", 750),
        ("paket 1200 gram", 1200),
    ])
    def test_units_normalized_to_grams(self, text, expected):
        assert extract_weight_grams(text) == expected

    def test_default_when_no_weight(self):
        assert extract_weight_grams("ongkir jkt ke sby") == DEFAULT_WEIGHT_GRAMS == 1000

    def test_first_weight_wins(self):
        assert extract_weight_grams("2kg atau 5kg") == 2000

    def test_zero_weight_falls_back_to_default(self):
        assert extract_weight_grams("0kg") == 1000


class TestRouteExtraction:
    """Origin/destination parsing."""

    def test_ke_pattern(self):
        assert extract_route("ongkir jkt ke sby") == ("jkt", "sby")

    def test_dari_prefix_is_dropped(self):
        assert extract_route("ongkir dari bandung ke medan") == ("bandung", "medan")

    @pytest.mark.parametrize("text", ["jkt-sby", "jkt - sby", "cek jkt -sby"])
    def test_dash_pattern(self, text):
        assert extract_route(text) == ("jkt", "sby")

    def test_simple_ongkir_pattern(self):
        assert extract_route("ongkir bdg smg") == ("bdg", "smg")

    def test_defaults_without_route(self):
        assert extract_route("berapa ongkirnya?") == ("jakarta", "surabaya")

    def test_first_route_wins(self):
        assert extract_route("jkt ke sby lalu bdg ke medan") == ("jkt", "sby")


def test_parse_shipping_query_scenario():
    """Full extraction lower-cases the message first."""
    query = parse_shipping_query("Ongkir JKT ke SBY 2kg")

    assert query.origin == "jkt"
    assert query.destination == "sby"
    assert query.weight_grams == 2000


def test_parse_shipping_query_defaults():
    query = parse_shipping_query("")

    assert query.origin == "jakarta"
    assert query.destination == "surabaya"
    assert query.weight_grams == 1000


class TestCityResolver:
    """Static city table lookup."""

    def test_case_insensitive_and_idempotent(self):
        assert resolve_city("JKT") == resolve_city("jkt") == resolve_city("Jakarta")
        assert resolve_city("jkt").city_id == "152"

    def test_aliases_share_ids(self):
        assert resolve_city("sby").city_id == resolve_city("surabaya").city_id == "444"
        assert resolve_city("bali").city_id == resolve_city("denpasar").city_id == "114"

    def test_label_is_human_readable(self):
        assert resolve_city("jogja").label == "Yogyakarta"

    def test_unknown_city(self):
        assert resolve_city("atlantis") is None
        assert resolve_city("") is None

    def test_no_fuzzy_matching(self):
        assert resolve_city("jakart") is None

    def test_table_size(self):
        assert len(CITY_IDS) >= 12

    def test_unresolved_message_names_city(self):
        assert '"atlantis"' in unresolved_city_message("atlantis")

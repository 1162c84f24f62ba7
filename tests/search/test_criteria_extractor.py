"""Tests for the deterministic Criteria Extractor.

Covers: area gazetteer, property type keywords, bedrooms, price bounds
with unit scaling, and empty input.
"""

import pytest
from realyield.agents.search.criteria_extractor import extract_criteria


# ---------------------------------------------------------------------------
# Full requests
# ---------------------------------------------------------------------------

class TestFullRequest:
    def test_marina_apartment_under_one_and_a_half_million(self):
        c = extract_criteria("2 bedroom apartment in Dubai Marina under 1.5M AED")
        assert c.area == "Dubai Marina"
        assert c.property_type == "apartment"
        assert c.bedrooms == "2"
        assert c.max_price == 1_500_000
        assert c.min_price is None

    def test_villa_with_minimum(self):
        c = extract_criteria("villa in Palm Jumeirah above 5 million")
        assert c.area == "Palm Jumeirah"
        assert c.property_type == "villa"
        assert c.min_price == 5_000_000

    def test_studio_with_k_suffix(self):
        c = extract_criteria("studio in JVC under 600k")
        assert c.area == "JVC"
        assert c.bedrooms == "studio"
        assert c.max_price == 600_000


# ---------------------------------------------------------------------------
# Area
# ---------------------------------------------------------------------------

class TestAreaExtraction:
    def test_case_insensitive(self):
        assert extract_criteria("something in downtown please").area == "Downtown"

    def test_first_gazetteer_entry_wins(self):
        # "Barsha" precedes "Al Barsha" in the gazetteer
        assert extract_criteria("flat in Al Barsha").area == "Barsha"

    def test_no_area(self):
        assert extract_criteria("2 bed flat").area is None


# ---------------------------------------------------------------------------
# Property type
# ---------------------------------------------------------------------------

class TestPropertyType:
    @pytest.mark.parametrize("text,expected", [
        ("looking for a flat", "apartment"),
        ("apartments near the metro", "apartment"),
        ("a house with a garden", "villa"),
        ("3br townhouse in Arabian Ranches", "townhouse"),
        ("penthouse in Downtown", "penthouse"),
        ("anything at all", None),
    ])
    def test_property_type(self, text, expected):
        assert extract_criteria(text).property_type == expected


# ---------------------------------------------------------------------------
# Bedrooms
# ---------------------------------------------------------------------------

class TestBedrooms:
    @pytest.mark.parametrize("text,expected", [
        ("4 bedrooms", "4"),
        ("3br", "3"),
        ("2 beds", "2"),
        ("1 bhk", "1"),
        ("Studio apartment", "studio"),
        ("somewhere quiet", None),
    ])
    def test_bedrooms(self, text, expected):
        assert extract_criteria(text).bedrooms == expected


# ---------------------------------------------------------------------------
# Price bounds
# ---------------------------------------------------------------------------

class TestPriceParsing:
    @pytest.mark.parametrize("text,expected", [
        ("under 1.5M", 1_500_000),
        ("less than 1m", 1_000_000),
        ("under 1.5 million", 1_500_000),
        ("under 3,200,000", 3_200_000),
        ("up to 2.5k", 2_500),
        ("below 2000 AED", 2_000),
    ])
    def test_max_price(self, text, expected):
        assert extract_criteria(text).max_price == expected

    @pytest.mark.parametrize("text,expected", [
        ("over 2M", 2_000_000),
        ("at least 1,200,000 AED", 1_200_000),
        ("over 750k", 750_000),
    ])
    def test_min_price(self, text, expected):
        assert extract_criteria(text).min_price == expected

    def test_both_bounds(self):
        c = extract_criteria("above 1m and under 2m")
        assert c.min_price == 1_000_000
        assert c.max_price == 2_000_000

    @pytest.mark.parametrize("text,expected", [
        ("max 500k", 500_000_000),
        ("maximum 900000", 900_000_000_000),
        ("below 2000 dirhams", 2_000_000_000),
    ])
    def test_max_scale_reads_whole_phrase(self, text, expected):
        # Any "m" in the matched phrase, lead word included, means millions
        assert extract_criteria(text).max_price == expected

    @pytest.mark.parametrize("text,expected", [
        ("min 2000000", 2_000_000_000_000),
        ("minimum 750k", 750_000_000_000),
    ])
    def test_min_scale_reads_whole_phrase(self, text, expected):
        assert extract_criteria(text).min_price == expected

    def test_word_boundary_on_lead(self):
        assert extract_criteria("moreover 5 million").min_price is None


# ---------------------------------------------------------------------------
# Edge cases
# ---------------------------------------------------------------------------

class TestEdgeCases:
    def test_empty_string(self):
        assert extract_criteria("").is_empty()

    def test_none(self):
        assert extract_criteria(None).is_empty()

    def test_small_talk(self):
        assert extract_criteria("hello there").is_empty()

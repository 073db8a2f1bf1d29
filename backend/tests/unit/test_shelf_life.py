"""Unit tests for shelf-life hints."""

import pytest

from shelfscan.services.shelf_life import (
    parse_shelf_life_days,
    product_text,
    shelf_life_from_product,
)


class TestParseShelfLifeDays:
    """Tests for free-text durations."""

    @pytest.mark.unit
    def test_days(self):
        assert parse_shelf_life_days("Once opened consume within 3 days.") == 3
        assert parse_shelf_life_days("keeps 5d refrigerated") == 5

    @pytest.mark.unit
    def test_weeks(self):
        assert parse_shelf_life_days("best consumed within 2 weeks of opening") == 14

    @pytest.mark.unit
    def test_months(self):
        assert parse_shelf_life_days("Store for up to 6 months") == 180

    @pytest.mark.unit
    def test_days_checked_before_weeks(self):
        assert parse_shelf_life_days("2 weeks sealed, 4 days once opened") == 4

    @pytest.mark.unit
    def test_caps(self):
        assert parse_shelf_life_days("keeps 90 days") == 60
        assert parse_shelf_life_days("keeps 30 weeks") == 180
        assert parse_shelf_life_days("keeps 18 months") == 365

    @pytest.mark.unit
    def test_long_counts_are_not_truncated(self):
        """Three digit counts hit the cap instead of losing their first digit."""
        assert parse_shelf_life_days("best before 120 days from packing") == 60
        assert parse_shelf_life_days("keeps 100 days") == 60
        assert parse_shelf_life_days("keeps 104 weeks") == 180
        assert parse_shelf_life_days("lasts 120 months") == 365

    @pytest.mark.unit
    def test_digits_inside_longer_numbers_are_ignored(self):
        assert parse_shelf_life_days("batch 2024 d") is None
        assert parse_shelf_life_days("lot 1000 days") is None

    @pytest.mark.unit
    def test_no_duration(self):
        assert parse_shelf_life_days("Keep refrigerated") is None
        assert parse_shelf_life_days("500ml") is None
        assert parse_shelf_life_days("") is None
        assert parse_shelf_life_days(None) is None


class TestProductShelfLife:
    """Tests for Open Food Facts product records."""

    @pytest.mark.unit
    def test_product_text_joins_fields(self):
        text = product_text({
            "conservation_conditions": "Keep cool",
            "labels": ["Organic", "Vegan"],
            "product_name": "ignored",
        })

        assert "Keep cool" in text
        assert "Organic, Vegan" in text
        assert "ignored" not in text

    @pytest.mark.unit
    def test_shelf_life_from_product(self, sample_off_product):
        assert shelf_life_from_product(sample_off_product) == 3

    @pytest.mark.unit
    def test_empty_product(self):
        assert shelf_life_from_product(None) is None
        assert shelf_life_from_product({}) is None

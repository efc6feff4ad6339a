"""
Tests for guess normalization and date helpers
"""

import datetime

import pytest

from modle.utils.helpers import days_since_epoch, format_date, normalize, parse_date


class TestNormalize:

    @pytest.mark.parametrize("raw, expected", [
        ("Bahubali", "BAHUBALI"),
        ("  the godfather ", "THEGODFATHER"),
        ("Spider-Man: No Way Home", "SPIDERMANNOWAYHOME"),
        ("2001: A Space Odyssey", "2001ASPACEODYSSEY"),
        ("K.G.F", "KGF"),
    ])
    def test_canonical_form(self, raw, expected):
        assert normalize(raw) == expected

    def test_non_ascii_is_dropped(self):
        """Letters outside A-Z disappear, they are not transliterated"""
        assert normalize("Amélie") == "AMLIE"
        assert normalize("बाहुबली") == ""

    @pytest.mark.parametrize("raw", [None, "", "   ", "!!!", "--:--"])
    def test_empty_results(self, raw):
        assert normalize(raw) == ""

    @pytest.mark.parametrize("raw", ["Jab We Met", "rang-de basanti", "Kumbalangi  Nights!"])
    def test_idempotent(self, raw):
        once = normalize(raw)
        assert normalize(once) == once

    def test_spacing_and_case_variants_are_equal(self):
        assert normalize("jab we met") == normalize("JABWEMET") == normalize("Jab-We-Met")


class TestDates:

    def test_parse_and_format(self):
        day = parse_date("2024-05-01")
        assert day == datetime.date(2024, 5, 1)
        assert format_date(day) == "2024-05-01"

    @pytest.mark.parametrize("value", ["2024-5-1", "01-05-2024", "2024-02-30", "", "yesterday", None])
    def test_malformed_dates_rejected(self, value):
        with pytest.raises(ValueError):
            parse_date(value)

    def test_days_since_epoch(self):
        assert days_since_epoch(datetime.date(1970, 1, 1)) == 0
        assert days_since_epoch(datetime.date(1970, 1, 31)) == 30

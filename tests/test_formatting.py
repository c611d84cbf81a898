"""
Tests for display formatting helpers.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from dealdesk.utils.formatting import (
    export_filename,
    format_currency,
    format_date,
    format_percent,
    or_na,
)


class TestFormatCurrency:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("1234.5"), "$1,235"),
            (Decimal("0.49"), "$0"),
            (1000000, "$1,000,000"),
            ("250.50", "$251"),
            (Decimal("-75.5"), "-$76"),
        ],
    )
    def test_whole_dollars(self, amount, expected):
        assert format_currency(amount) == expected

    @pytest.mark.parametrize("amount", [None, "", "abc", "NaN"])
    def test_missing_or_invalid(self, amount):
        assert format_currency(amount) == "N/A"


class TestOtherFormats:
    def test_percent(self):
        assert format_percent(Decimal("33.333")) == "33.33%"
        assert format_percent(None) == "N/A"

    def test_date(self):
        assert format_date(date(2026, 3, 1)) == "03/01/2026"
        assert format_date(datetime(2026, 12, 31, 23, 59)) == "12/31/2026"
        assert format_date(None) == "N/A"

    def test_or_na(self):
        assert or_na("  ") == "N/A"
        assert or_na(None) == "N/A"
        assert or_na("Won") == "Won"

    def test_export_filename(self):
        assert export_filename("Acme x Tara 2026", "csv") == "Acme_x_Tara_2026_export.csv"
        assert export_filename("", "pdf") == "deal_export.pdf"

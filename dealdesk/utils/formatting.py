"""
Display formatting helpers for exports and search results.

Missing values degrade to "N/A" instead of raising.
"""

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

NOT_AVAILABLE = "N/A"

# Anything outside [A-Za-z0-9] becomes "_" in download names
UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def format_currency(amount: Optional[Union[Decimal, int, float, str]]) -> str:
    """
    Format an amount as whole US dollars.

    Examples:
        Decimal("1234.5") -> $1,235
        None -> N/A
    """
    if amount is None or amount == "":
        return NOT_AVAILABLE
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        return NOT_AVAILABLE
    if not value.is_finite():
        return NOT_AVAILABLE
    rounded = value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def format_percent(value: Optional[Union[Decimal, int, float]]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}%"


def format_date(value: Optional[Union[date, datetime]]) -> str:
    """
    Format a date as MM/DD/YYYY.
    """
    if value is None:
        return NOT_AVAILABLE
    return value.strftime("%m/%d/%Y")


def or_na(value) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return NOT_AVAILABLE
    return str(value)


def export_filename(deal_name: str, fmt: str) -> str:
    """
    Build the download name for a deal export.

    Example:
        ("Nike x Jordan 2025", "pdf") -> Nike_x_Jordan_2025_export.pdf
    """
    return f"{UNSAFE_FILENAME_CHARS.sub('_', deal_name or 'deal')}_export.{fmt}"

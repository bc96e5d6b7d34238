"""
GST Calculation
Bill arithmetic and numeric input policy for the billing engine.

All amounts are floats. Rounding to 2 decimals happens only in
`format_money`, never on stored values.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

import config
from errors import ValidationError


class GSTCalculation:
    """GST arithmetic and input parsing for bills."""

    def __init__(self, max_percentage: float = 100.0, max_price: float = None,
                 max_quantity: int = None):
        self.max_percentage = max_percentage
        self.max_price = config.MAX_ITEM_PRICE if max_price is None else max_price
        self.max_quantity = config.MAX_ITEM_QUANTITY if max_quantity is None else max_quantity

    # ------------------------------------------------------------------
    # Input policy: reject anything that would turn a total into NaN
    # ------------------------------------------------------------------

    @staticmethod
    def _to_float(value: Any, field: str) -> float:
        if isinstance(value, bool) or value is None:
            raise ValidationError(f"{field} must be a number", field=field)
        if isinstance(value, str):
            value = value.replace(",", "").replace("₹", "").strip()
            if not value:
                raise ValidationError(f"{field} must not be empty", field=field)
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
        if not math.isfinite(number):
            raise ValidationError(f"{field} must be a finite number", field=field)
        return number

    def parse_quantity(self, value: Any) -> int:
        """Whole number of pieces, between 1 and max_quantity."""
        number = self._to_float(value, "quantity")
        if not number.is_integer():
            raise ValidationError(f"quantity must be a whole number, got {value!r}", field="quantity")
        if number < 1:
            raise ValidationError("quantity must be at least 1", field="quantity")
        if number > self.max_quantity:
            raise ValidationError(f"quantity must not exceed {self.max_quantity}", field="quantity")
        return int(number)

    def parse_price(self, value: Any) -> float:
        """Unit price, between 0 and max_price."""
        number = self._to_float(value, "price")
        if number < 0:
            raise ValidationError("price must not be negative", field="price")
        if number > self.max_price:
            raise ValidationError(f"price must not exceed {self.max_price:,.2f}", field="price")
        return number

    def parse_percentage(self, value: Any) -> float:
        """GST rate between 0 and max_percentage."""
        number = self._to_float(value, "gstPercentage")
        if not 0 <= number <= self.max_percentage:
            raise ValidationError(
                f"gstPercentage must be between 0 and {self.max_percentage:g}",
                field="gstPercentage",
            )
        return number

    # ------------------------------------------------------------------
    # Derivations
    # ------------------------------------------------------------------

    @staticmethod
    def line_amount(quantity: float, price: float) -> float:
        return quantity * price

    @staticmethod
    def subtotal(amounts: Iterable[float]) -> float:
        """Full re-sum; never incremental."""
        return sum(amounts, 0.0)

    @staticmethod
    def gst_amount(subtotal: float, gst_percentage: float) -> float:
        return subtotal * gst_percentage / 100

    @classmethod
    def total(cls, subtotal: float, gst_percentage: float) -> float:
        return subtotal + cls.gst_amount(subtotal, gst_percentage)


def format_money(amount: float) -> str:
    """Two-decimal display string. Presentation only."""
    return f"{amount:,.2f}"

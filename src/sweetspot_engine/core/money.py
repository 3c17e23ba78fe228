"""Currency value object and display formatting.

Amounts travel through the engine as plain numbers.  They only become
strings here, at the presentation boundary, via :func:`format_currency`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Tuple

from ..errors import InvalidInputError

# code -> (symbol, thousands separator)
CURRENCY_FORMATS: Dict[str, Tuple[str, str]] = {
    "IDR": ("Rp", "."),
    "USD": ("$", ","),
    "EUR": ("€", "."),
    "GBP": ("£", ","),
    "SGD": ("S$", ","),
    "MYR": ("RM", ","),
    "JPY": ("¥", ","),
    "INR": ("₹", ","),
}

_NON_DIGITS = re.compile(r"[^0-9]")
_TRAILING_FRACTION = re.compile(r"[.,]\d{1,2}\s*$")


@dataclass(frozen=True)
class Money:
    """An amount tagged with its ISO-4217 currency code."""

    amount: Decimal
    currency: str = "IDR"

    @classmethod
    def of(cls, amount: float | int | Decimal | str, currency: str = "IDR") -> "Money":
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        if not value.is_finite():
            raise InvalidInputError("amount", "must be a finite number")
        return cls(amount=value, currency=currency.upper())

    def whole_units(self) -> int:
        """Round half-up to whole currency units."""

        return int(self.amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def format(self) -> str:
        if self.amount < 0:
            raise InvalidInputError("amount", "cannot format a negative amount")
        units = self.whole_units()
        grouped = f"{units:,}"
        fmt = CURRENCY_FORMATS.get(self.currency)
        if fmt is None:
            return f"{self.currency} {grouped}"
        symbol, sep = fmt
        return f"{symbol}{grouped.replace(',', sep)}"

    def __str__(self) -> str:
        return self.format()


def format_currency(amount: float | int | Decimal, currency: str = "IDR") -> str:
    """Render ``amount`` as a display string, e.g. ``Rp1.000.000``."""

    return Money.of(amount, currency).format()


def parse_currency(text: str) -> int:
    """Extract the integer amount from a display string.

    Grouping separators are dropped, so ``"Rp1,000,000"`` and
    ``"Rp1.000.000"`` both parse to ``1000000``.  A trailing one or two digit
    group such as ``"Rp49.50"`` reads as a fraction and is rejected.
    """

    if _TRAILING_FRACTION.search(text or ""):
        raise InvalidInputError("amount", f"fractional display amounts are not supported: {text!r}")
    digits = _NON_DIGITS.sub("", text or "")
    return int(digits) if digits else 0


__all__ = ["CURRENCY_FORMATS", "Money", "format_currency", "parse_currency"]

"""Exact-decimal money parsing and task item totals.

Prices and quantities are stored as free-form strings ("$10.00", "3").
Everything here degrades to zero on malformed input instead of raising, so
a single bad price cannot break a running total.
"""

from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_EVEN, Context, Decimal, InvalidOperation, localcontext
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENTS = Decimal("0.01")
MIN_PRECISION = 28
DOLLAR_SIGN = "$"
CURRENCY_SYMBOLS = "$€£¥"

RE_PLAIN_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")


class PricedItem(Protocol):
    quantity: str
    unit_price: str


class PurchasedItem(PricedItem, Protocol):
    was_purchased: bool


class OwnedItem(PricedItem, Protocol):
    task_id: str


def _sum_context(*amounts: Decimal) -> Context:
    """A context wide enough to add the amounts without rounding."""
    top = max(a.adjusted() for a in amounts) + 2
    bottom = min(a.as_tuple().exponent for a in amounts)
    return Context(prec=max(top - bottom, MIN_PRECISION))


def parse_amount(text: str) -> Decimal:
    """Parse a price or quantity string into an exact Decimal.

    One leading currency symbol is stripped. Anything that is not a plain
    base-10 number afterwards (empty, letters, two decimal points, grouping
    separators, exponents) yields zero, as does a value that is not a string.
    """
    if not text or not isinstance(text, str):
        if text:
            logger.debug("Non-text amount %r treated as zero", text)
        return ZERO
    raw = text.strip()
    if raw and raw[0] in CURRENCY_SYMBOLS:
        raw = raw[1:].strip()
    if not RE_PLAIN_NUMBER.match(raw):
        logger.debug("Unparseable amount %r treated as zero", text)
        return ZERO
    try:
        return Decimal(raw)
    except InvalidOperation:
        logger.debug("Unparseable amount %r treated as zero", text)
        return ZERO


def line_total(quantity: str, unit_price: str) -> Decimal:
    """Quantity times unit price; zero if either side is malformed."""
    qty = parse_amount(quantity)
    price = parse_amount(unit_price)
    digits = len(qty.as_tuple().digits) + len(price.as_tuple().digits)
    with localcontext(Context(prec=max(digits, MIN_PRECISION))):
        return qty * price


def format_currency(amount: Decimal) -> str:
    """Render an amount as US dollars, e.g. ``Decimal("1234.5")`` -> ``"$1,234.50"``."""
    with localcontext(Context(prec=max(amount.adjusted() + 4, MIN_PRECISION))):
        rounded = amount.quantize(CENTS, rounding=ROUND_HALF_EVEN)
        sign = "-" if rounded < 0 else ""
        return f"{sign}{DOLLAR_SIGN}{abs(rounded):,.2f}"


def formatted_line_total(quantity: str, unit_price: str) -> str:
    return format_currency(line_total(quantity, unit_price))


def grand_total(items: Iterable[PricedItem]) -> Decimal:
    """Sum the line totals of every item given.

    Purchase status is ignored; the caller picks the scope by choosing which
    items to pass in.
    """
    total = ZERO
    for item in items:
        amount = line_total(item.quantity, item.unit_price)
        with localcontext(_sum_context(total, amount)):
            total += amount
    return total


def purchased_total(items: Iterable[PurchasedItem]) -> Decimal:
    """Like grand_total, but only for items marked as purchased."""
    return grand_total(item for item in items if item.was_purchased)


def task_total(task_id: str, items: Iterable[OwnedItem]) -> Decimal:
    """Grand total of the items owned by one task."""
    return grand_total(item for item in items if item.task_id == task_id)

"""
Best-price analytics over one product's price entries.

All functions are pure: they accept any finite sequence (including an
empty one) and never mutate it. Ties on price resolve to the entry that
appears first in the input.
"""
from decimal import Decimal
from typing import Optional, Sequence

from pricewise.schemas.price import PriceEntry, PriceSummary


def lowest_entry(entries: Sequence[PriceEntry]) -> Optional[PriceEntry]:
    """Cheapest entry, or None when there are no entries."""
    lowest = None
    for entry in entries:
        if lowest is None or entry.price < lowest.price:
            lowest = entry
    return lowest


def highest_entry(entries: Sequence[PriceEntry]) -> Optional[PriceEntry]:
    """Most expensive entry, or None when there are no entries."""
    highest = None
    for entry in entries:
        if highest is None or entry.price > highest.price:
            highest = entry
    return highest


def savings(entries: Sequence[PriceEntry]) -> Optional[Decimal]:
    """Absolute difference between the highest and lowest price."""
    lowest = lowest_entry(entries)
    highest = highest_entry(entries)
    if lowest is None or highest is None:
        return None
    return highest.price - lowest.price


def sort_by_price(entries: Sequence[PriceEntry]) -> list[PriceEntry]:
    """New list sorted cheapest first. Stable, so ties keep input order."""
    return sorted(entries, key=lambda e: e.price)


def summarize(entries: Sequence[PriceEntry]) -> PriceSummary:
    """Build the price comparison shown on a product detail view."""
    return PriceSummary(
        entries=sort_by_price(entries),
        lowest=lowest_entry(entries),
        highest=highest_entry(entries),
        savings=savings(entries),
        store_count=len(entries),
        in_stock_count=sum(1 for e in entries if e.in_stock),
    )

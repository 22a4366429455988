"""
Row predicates for filtered table sections, looked up by name.
"""

from __future__ import annotations

import re
from typing import Callable

from app.scraping.config.models import NOT_AVAILABLE

RowFilter = Callable[[dict[str, str]], bool]

CURRENCY_AMOUNT_REGEX = re.compile(r"^[€$£]\s?\d[\d,. ]*(?:[km])?$", flags=re.IGNORECASE)
PURE_MULTIPLIER_REGEX = re.compile(r"^\d+(\.\d+)?x$", flags=re.IGNORECASE)

_ROW_FILTERS: dict[str, RowFilter] = {}


def register_row_filter(name: str) -> Callable[[RowFilter], RowFilter]:
    def decorator(func: RowFilter) -> RowFilter:
        normalized = name.strip().lower()
        if normalized in _ROW_FILTERS:
            raise ValueError(f"Row filter already registered for '{name}'.")
        _ROW_FILTERS[normalized] = func
        return func

    return decorator


def get_row_filter(name: str) -> RowFilter:
    normalized = name.strip().lower()
    row_filter = _ROW_FILTERS.get(normalized)
    if row_filter is None:
        known = ", ".join(sorted(_ROW_FILTERS))
        raise KeyError(f"No row filter registered for '{name}'. Known: {known}")
    return row_filter


def list_row_filters() -> list[str]:
    return sorted(_ROW_FILTERS)


@register_row_filter("individual_win")
def is_valid_individual_win(row: dict[str, str]) -> bool:
    """
    Keep a win only when it has a finish time, a currency amount and a
    player name that is not a bare multiplier like "500x".
    """

    finished = (row.get("finished") or "").strip()
    if not finished or finished == NOT_AVAILABLE:
        return False

    amount = (row.get("won_amount") or "").strip()
    if not CURRENCY_AMOUNT_REGEX.match(amount):
        return False

    player = (row.get("player") or "").strip()
    if len(player) <= 2:
        return False
    return PURE_MULTIPLIER_REGEX.match(player) is None


@register_row_filter("landing_square")
def is_named_landing_square(row: dict[str, str]) -> bool:
    name = (row.get("square_name") or "").strip()
    return name != NOT_AVAILABLE and len(name) > 2


def _title_contains(row: dict[str, str], key: str, needles: tuple[str, ...]) -> bool:
    title = row.get(key) or ""
    return any(needle in title for needle in needles)


@register_row_filter("chance_multiplier")
def is_chance_multiplier_bar(row: dict[str, str]) -> bool:
    """Progress bars titled with a Chance multiplier or cash award."""
    return _title_contains(row, "multiplier_type", ("Multiplier", "Cash Award"))


@register_row_filter("board_move_bar")
def is_board_move_bar(row: dict[str, str]) -> bool:
    return _title_contains(row, "stat_type", ("Bonus Game Stats", "Doubles Rolled"))

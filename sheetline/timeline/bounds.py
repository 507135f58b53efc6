from typing import Iterable

from sheetline.store.models import Bounds, Item

FALLBACK_BOUNDS = Bounds(min_year=1800, max_year=2030)
YEAR_PADDING = 10


def calculate_bounds(items: Iterable[Item]) -> Bounds:
    """Padded year window covering every item with a positive ``yr``."""
    years = [y for y in (item.year for item in items) if y is not None and y > 0]
    if not years:
        return FALLBACK_BOUNDS
    return Bounds(min_year=min(years) - YEAR_PADDING, max_year=max(years) + YEAR_PADDING)

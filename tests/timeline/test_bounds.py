from sheetline.store.models import Bounds, Item
from sheetline.timeline.bounds import FALLBACK_BOUNDS, calculate_bounds


def _items(*years):
    return [Item(row=i + 2, fields={"yr": y}) for i, y in enumerate(years)]


def test_bounds_pad_min_and_max_by_ten_years():
    assert calculate_bounds(_items(1040, 1443, 1957, 2000)) == Bounds(1030, 2010)


def test_bounds_accept_string_years():
    assert calculate_bounds(_items("1443", "1957abc")) == Bounds(1433, 1967)


def test_single_year_still_spans_twenty_years():
    bounds = calculate_bounds(_items(1443))
    assert bounds.min_year < bounds.max_year
    assert bounds.span == 20


def test_empty_items_fall_back():
    assert calculate_bounds([]) == FALLBACK_BOUNDS == Bounds(1800, 2030)


def test_invalid_and_non_positive_years_are_ignored():
    assert calculate_bounds(_items("", None, "abc", 0, -300)) == FALLBACK_BOUNDS
    assert calculate_bounds(_items("abc", 1500, -20)) == Bounds(1490, 1510)

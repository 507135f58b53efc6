import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

ROW_FIELD = "_row"
ITEM_FIELDS = ("nation", "category", "yr", "item", "info", "link", "cite")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_year(value: Any) -> Optional[int]:
    """Integer prefix of ``value`` (``"1443abc"`` -> 1443), or None when there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


@dataclass
class Item:
    row: int
    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        value = self.fields.get(name.lower())
        return default if value is None else value

    def text(self, name: str) -> str:
        value = self.get(name)
        return "" if value is None else str(value)

    @property
    def year(self) -> Optional[int]:
        return parse_year(self.get("yr"))

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.fields)
        data[ROW_FIELD] = self.row
        return data

    def form_values(self) -> Dict[str, str]:
        values = {name: self.text(name) for name in ITEM_FIELDS}
        values[ROW_FIELD] = str(self.row)
        return values

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        fields = {k.lower(): v for k, v in data.items() if k != ROW_FIELD}
        return cls(row=int(data[ROW_FIELD]), fields=fields)


@dataclass(frozen=True)
class Bounds:
    min_year: int
    max_year: int

    @property
    def span(self) -> int:
        return self.max_year - self.min_year

    def as_tuple(self) -> Tuple[int, int]:
        return (self.min_year, self.max_year)


@dataclass(frozen=True)
class ViewState:
    items: Tuple[Item, ...]
    bounds: Bounds
    source: str = "remote"

    def find(self, row: int) -> Optional[Item]:
        for item in self.items:
            if item.row == row:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "bounds": {"min_year": self.bounds.min_year, "max_year": self.bounds.max_year},
            "source": self.source,
        }


def row_of(fields: Dict[str, Any]) -> Optional[int]:
    """Row index carried by form fields, or None for a new item."""
    raw = fields.get(ROW_FIELD)
    if raw is None or str(raw).strip() == "":
        return None
    return int(str(raw).strip())


def clean_form(fields: Dict[str, Any]) -> Dict[str, str]:
    cleaned: Dict[str, str] = {}
    for key, value in fields.items():
        cleaned[key] = "" if value is None else str(value)
    return cleaned

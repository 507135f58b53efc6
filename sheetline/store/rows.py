from typing import Any, List, Sequence

from .models import Item

DEFAULT_HEADER_ROWS = 1


def row_offset(header_rows: int = DEFAULT_HEADER_ROWS) -> int:
    # Sheet rows are 1-based and the header occupies the first row(s).
    return header_rows + 1


def parse_rows(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    header_rows: int = DEFAULT_HEADER_ROWS,
) -> List[Item]:
    """
    Turn a header row and a row matrix into Items.

    Keys are the lower-cased header names; a short row leaves the missing
    columns as None and extra cells are ignored. Order is preserved.
    """
    keys = [str(h).lower() for h in headers]
    offset = row_offset(header_rows)
    items: List[Item] = []
    for index, row in enumerate(rows):
        cells = list(row or [])
        fields = {key: (cells[i] if i < len(cells) else None) for i, key in enumerate(keys)}
        items.append(Item(row=index + offset, fields=fields))
    return items


def sample_items() -> List[Item]:
    """Built-in dataset shown when the remote store cannot be reached."""
    return [
        Item(row=2, fields={"nation": "Korea", "category": "서체", "yr": 1443, "item": "Hunminjeongeum",
                            "info": "Creation of Hangul", "link": "", "cite": "Annals"}),
        Item(row=3, fields={"nation": "China", "category": "기술", "yr": 1040, "item": "Bi Sheng",
                            "info": "Movable Type", "link": "", "cite": "History"}),
        Item(row=4, fields={"nation": "Japan", "category": "서체", "yr": 1957, "item": "Helvetica",
                            "info": "Not Asian but test", "link": "", "cite": "Wiki"}),
        Item(row=5, fields={"nation": "Korea", "category": "경향", "yr": 2000, "item": "Digital Era",
                            "info": "Web fonts", "link": "", "cite": "News"}),
    ]

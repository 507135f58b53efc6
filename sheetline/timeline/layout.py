from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence

from sheetline.store.models import Bounds, Item
from sheetline.utils.logging_setup import setup_logger

logger = setup_logger(__name__)

ROW_HEIGHT_REM = 2
ITEM_WIDTH_PX = 400
DESCRIPTION_LIMIT = 50


@dataclass(frozen=True)
class RenderDescriptor:
    """One positioned timeline element; ``x`` in pixels, ``y`` in rem."""

    row: int
    x: float
    y: float
    width: int
    year_label: str
    title: str
    nation: str
    category: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def truncate(text: str, limit: int = DESCRIPTION_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def sort_key(item: Item) -> int:
    # Unparsable years sort as 0, while positioning falls back to min_year.
    return item.year or 0


def sort_items(items: Sequence[Item]) -> List[Item]:
    return sorted(items, key=sort_key)


def render(items: Sequence[Item], bounds: Bounds, viewport_width: float) -> List[RenderDescriptor]:
    """
    Map items onto the horizontal year axis.

    Items are stacked one per row in ascending year order; x grows linearly
    from ``bounds.min_year`` at 0 to ``bounds.max_year`` at ``viewport_width``.
    """
    if bounds.span <= 0:
        raise ValueError(f"bounds must satisfy min_year < max_year, got {bounds.as_tuple()}")

    pixels_per_year = viewport_width / bounds.span
    descriptors: List[RenderDescriptor] = []
    for index, item in enumerate(sort_items(items)):
        year = item.year
        if year is None:
            year = bounds.min_year
        x = (year - bounds.min_year) * pixels_per_year
        y = index * ROW_HEIGHT_REM

        if index < 3:
            logger.debug(f"Item {index} pos: x={x} y={y} year={year} min={bounds.min_year}")

        descriptors.append(
            RenderDescriptor(
                row=item.row,
                x=x,
                y=y,
                width=ITEM_WIDTH_PX,
                year_label=item.text("yr"),
                title=item.text("item") or "Unknown",
                nation=item.text("nation"),
                category=item.text("category"),
                description=truncate(item.text("info")),
            )
        )

    logger.debug(f"Rendered {len(descriptors)} timeline items")
    return descriptors

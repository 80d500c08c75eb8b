"""Boundary adapter turning untyped spreadsheet rows into SourceItems.

Spreadsheet cells arrive as whatever the parser produced: strings with
thousands separators, blanks, ``None``, floats, occasionally ``NaN``. Nothing
here raises for bad cell content; values are coerced to safe defaults so the
matching core always receives a well-formed ``SourceItem``.
"""

import logging
import math
import numbers
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, field_validator

from labelmatch.models.records import SourceItem

logger = logging.getLogger(__name__)

# Thousands separators (ASCII and full-width) and any whitespace
_NUMBER_NOISE = re.compile(r"[,，\s]")

_FULLWIDTH_DIGIT_OFFSET = 0xFEE0


def parse_quantity(value: Any) -> float:
    """Parse a quantity cell into a non-negative finite number.

    Handles:
    - ints, floats, Decimals and other numeric scalars (numpy, Fraction)
    - strings like "1,234", "１２", " 3 "
    - blanks, None, NaN, infinities, negatives and values too large for a
      float (all become 0)
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, str):
        value = _NUMBER_NOISE.sub("", value)
        value = "".join(
            chr(ord(c) - _FULLWIDTH_DIGIT_OFFSET) if "０" <= c <= "９" else c for c in value
        )
        if not value:
            return 0.0
    elif not isinstance(value, numbers.Number):
        return 0.0

    try:
        number = float(value)
    except (OverflowError, ValueError, TypeError):
        return 0.0

    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def coerce_label(value: Any) -> str:
    """Coerce a label cell to a string; missing values become empty.

    Strings are returned unchanged: learned mappings are keyed by the exact
    raw label, so trimming belongs to the row adapter, not the match path.
    """
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if isinstance(value, str):
        return value
    return str(value)


class SourceRow(BaseModel):
    """Validated view of one spreadsheet row."""

    raw_label: str = ""
    quantity: float = 0.0
    source_tag: str = ""

    @field_validator("raw_label", "source_tag", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return coerce_label(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: Any) -> float:
        return parse_quantity(value)

    def to_source_item(self) -> SourceItem:
        return SourceItem(
            raw_label=self.raw_label,
            quantity=self.quantity,
            source_tag=self.source_tag,
        )


def sanitize_item(item: Any) -> SourceItem:
    """Return a well-formed SourceItem for anything that looks like one."""
    if isinstance(item, SourceItem):
        label = item.raw_label
        quantity = item.quantity
        tag = item.source_tag
    elif isinstance(item, Mapping):
        label = item.get("raw_label")
        quantity = item.get("quantity")
        tag = item.get("source_tag")
    else:
        label = getattr(item, "raw_label", item if isinstance(item, str) else None)
        quantity = getattr(item, "quantity", None)
        tag = getattr(item, "source_tag", None)

    return SourceRow(raw_label=label, quantity=quantity, source_tag=tag).to_source_item()


def rows_to_items(
    rows: Iterable[Mapping[str, Any]],
    label_column: str,
    quantity_column: str,
    source_tag: str = "",
    skip_blank: bool = False,
) -> list[SourceItem]:
    """Convert parsed spreadsheet rows into SourceItems.

    Args:
        rows: Rows as dicts keyed by column header
        label_column: Header of the product-name column (values are trimmed)
        quantity_column: Header of the quantity column
        source_tag: Tag recorded on every item (channel or file name)
        skip_blank: Drop rows whose label is blank instead of keeping them

    Returns:
        One SourceItem per kept row, in input order
    """
    items = []
    blank_rows = 0

    for row in rows:
        item = SourceRow(
            raw_label=coerce_label(row.get(label_column)).strip(),
            quantity=row.get(quantity_column),
            source_tag=source_tag,
        ).to_source_item()

        if not item.raw_label:
            blank_rows += 1
            if skip_blank:
                continue
        items.append(item)

    if blank_rows:
        logger.info(f"{blank_rows} rows with blank '{label_column}' in {source_tag or 'source'}")

    return items

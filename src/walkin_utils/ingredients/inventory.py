"""Loading inventory snapshots from spreadsheets."""

import logging
import os
from typing import List

import pandas as pd

from .models import InventoryItem

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["id", "name", "unit"]


def _split_list(value, separator: str = ";") -> tuple:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ()
    return tuple(part.strip() for part in str(value).split(separator) if part.strip())


def _parse_active(value) -> bool:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return True
    if isinstance(value, str):
        return value.strip().lower() not in {"0", "false", "no", "n", "inactive"}
    return bool(value)


def load_inventory_csv(csv_file: str) -> List[InventoryItem]:
    """Load an inventory snapshot from a CSV export.

    The file needs ``id``, ``name`` and ``unit`` columns. Optional columns are
    ``aliases`` and ``supported_units`` (semicolon separated) and ``is_active``.

    Args:
        csv_file: Path to the CSV file.

    Returns:
        Inventory items in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a required column is missing.
    """
    if not os.path.exists(csv_file):
        raise FileNotFoundError(csv_file)

    df = pd.read_csv(csv_file, dtype={"id": str, "name": str, "unit": str})
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Inventory file {csv_file} is missing columns: {missing}")

    items = []
    for _, row in df.iterrows():
        if pd.isna(row["id"]) or pd.isna(row["name"]):
            logger.warning(f"Skipping inventory row without id or name: {row.to_dict()}")
            continue
        items.append(
            InventoryItem(
                id=str(row["id"]).strip(),
                name=str(row["name"]).strip(),
                unit=str(row["unit"]).strip() if pd.notna(row["unit"]) else "",
                aliases=_split_list(row.get("aliases")),
                supported_units=_split_list(row.get("supported_units")),
                is_active=_parse_active(row.get("is_active")),
            )
        )

    logger.info(f"Loaded {len(items)} inventory items from {csv_file}")
    return items

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import polars as pl

from .models import Slot

EXPORT_SCHEMA = {
    "Location": pl.Utf8,
    "Aisle": pl.Utf8,
    "Bay": pl.Utf8,
    "Level": pl.Int64,
    "Occupied": pl.Boolean,
    "ProductCode": pl.Utf8,
    "Quantity": pl.Int64,
    "Status": pl.Utf8,
    "EntryDate": pl.Utf8,
    "ExpiryDate": pl.Utf8,
}


def export_rows(slots: Iterable[Slot]) -> List[Dict[str, Any]]:
    """One flat record per slot; empty slots leave pallet fields blank and quantity 0."""
    rows: List[Dict[str, Any]] = []
    for slot in slots:
        pallet = slot.pallet
        rows.append(
            {
                "Location": slot.location,
                "Aisle": slot.aisle,
                "Bay": slot.bay,
                "Level": slot.level,
                "Occupied": slot.occupied,
                "ProductCode": pallet.product_code if pallet else "",
                "Quantity": pallet.quantity if pallet else 0,
                "Status": pallet.status if pallet else "",
                "EntryDate": pallet.entry_date.isoformat() if pallet else "",
                "ExpiryDate": pallet.expiry_date.isoformat() if pallet and pallet.expiry_date else "",
            }
        )
    return rows


def export_frame(slots: Iterable[Slot]) -> pl.DataFrame:
    return pl.DataFrame(export_rows(slots), schema=EXPORT_SCHEMA)


def save_csv(slots: Iterable[Slot], path: str) -> None:
    export_frame(slots).write_csv(path)

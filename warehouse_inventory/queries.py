"""Read-only views over a slot snapshot: filtering, grouping and totals."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from .models import PALLET_STATUSES, Slot

ALL = "all"
EMPTY = "empty"


@dataclass(frozen=True)
class SlotFilter:
    """Search and filter criteria applied to the slot grid.

    Fields:
        search_term: Case-insensitive substring of the location code or the
                     pallet's product code; empty matches everything
        status: "all", "empty", or a pallet status
        aisle: "all" or an aisle label
    """

    search_term: str = ""
    status: str = ALL
    aisle: str = ALL

    def matches(self, slot: Slot) -> bool:
        return self._matches_search(slot) and self._matches_status(slot) and self._matches_aisle(slot)

    def _matches_search(self, slot: Slot) -> bool:
        if not self.search_term:
            return True
        term = self.search_term.lower()
        if term in slot.location.lower():
            return True
        return slot.pallet is not None and term in slot.pallet.product_code.lower()

    def _matches_status(self, slot: Slot) -> bool:
        if self.status == ALL:
            return True
        if self.status == EMPTY:
            return not slot.occupied
        return slot.occupied and slot.pallet is not None and slot.pallet.status == self.status

    def _matches_aisle(self, slot: Slot) -> bool:
        return self.aisle == ALL or slot.aisle == self.aisle


def filter_slots(slots: Iterable[Slot], criteria: SlotFilter | None = None) -> List[Slot]:
    """Return the slots matching `criteria`, keeping their original order."""
    if criteria is None:
        return list(slots)
    return [s for s in slots if criteria.matches(s)]


def group_by_aisle(slots: Iterable[Slot]) -> Dict[str, List[Slot]]:
    """Partition slots by aisle.

    Aisles appear in first-seen order; within an aisle slots are sorted by bay
    label, then by level. The sort is stable, so equal keys keep input order.
    """
    grouped: Dict[str, List[Slot]] = {}
    for slot in slots:
        grouped.setdefault(slot.aisle, []).append(slot)
    for aisle, members in grouped.items():
        grouped[aisle] = sorted(members, key=lambda s: (s.bay, s.level))
    return grouped


@dataclass(frozen=True)
class WarehouseStats:
    total: int
    occupied: int
    empty: int
    expiring: int
    expired: int
    by_status: Dict[str, int] = field(default_factory=dict)

    @property
    def occupancy_rate(self) -> float:
        return self.occupied / self.total if self.total else 0.0


def compute_stats(slots: Sequence[Slot]) -> WarehouseStats:
    by_status = {status: 0 for status in PALLET_STATUSES}
    occupied = 0
    for slot in slots:
        if slot.occupied and slot.pallet is not None:
            occupied += 1
            by_status[slot.pallet.status] += 1
    total = len(slots)
    return WarehouseStats(
        total=total,
        occupied=occupied,
        empty=total - occupied,
        expiring=by_status["expiring"],
        expired=by_status["expired"],
        by_status=by_status,
    )

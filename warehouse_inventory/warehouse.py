from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .errors import ValidationError
from .models import Pallet, Slot

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[Tuple[Slot, ...], Tuple[Slot, ...]], None]


class Warehouse:
    """Holds the ordered slot grid as one immutable snapshot.

    Every change replaces the whole snapshot. Slots that a change does not
    touch are carried over as the same objects, so observers can detect what
    changed with an identity check. Listeners registered with `subscribe`
    receive `(old_snapshot, new_snapshot)` after each replacement.
    """

    def __init__(self, slots: Optional[Iterable[Slot]] = None):
        self._slots: Tuple[Slot, ...] = ()
        self._index: Dict[str, int] = {}
        self._listeners: List[SnapshotListener] = []
        self.version = 0
        if slots is not None:
            self._slots, self._index = self._validated(slots)

    @staticmethod
    def _validated(slots: Iterable[Slot]) -> Tuple[Tuple[Slot, ...], Dict[str, int]]:
        snapshot = tuple(slots)
        index: Dict[str, int] = {}
        for pos, slot in enumerate(snapshot):
            if slot.id in index:
                raise ValidationError(f"Duplicate slot id '{slot.id}'")
            index[slot.id] = pos
        return snapshot, index

    def all_slots(self) -> Tuple[Slot, ...]:
        return self._slots

    def replace_all(self, slots: Iterable[Slot]) -> None:
        snapshot, index = self._validated(slots)
        old = self._slots
        self._slots = snapshot
        self._index = index
        self.version += 1
        logger.debug("Replaced snapshot: %d slots, version %d", len(snapshot), self.version)
        for listener in list(self._listeners):
            listener(old, snapshot)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_slot(self, slot_id: str) -> Optional[Slot]:
        pos = self._index.get(slot_id)
        return self._slots[pos] if pos is not None else None

    def slot_exists(self, slot_id: str) -> bool:
        return slot_id in self._index

    def find_pallet(self, pallet_id: str) -> Optional[Tuple[Slot, Pallet]]:
        """Return the first slot, in grid order, holding `pallet_id` together with the pallet.

        Pallet ids are unique for pallets created through the editor. Sample
        ids drawn by the generator can repeat; a lookup then resolves to the
        earliest slot, so edits by pallet id touch that slot only.
        """
        for slot in self._slots:
            if slot.pallet is not None and slot.pallet.id == pallet_id:
                return slot, slot.pallet
        return None

    def aisles(self) -> List[str]:
        """Aisle labels in first-seen order."""
        return list(dict.fromkeys(s.aisle for s in self._slots))

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        occupied = sum(1 for s in self._slots if s.occupied)
        return f"Warehouse(n_slots={len(self._slots)}, occupied={occupied}, version={self.version})"

from __future__ import annotations

import random
import string
from typing import Iterable, Optional, Set

from .models import Slot

TOKEN_ALPHABET = string.ascii_uppercase + string.digits
TOKEN_LENGTH = 6


class IdFactory:
    """Issues short random pallet and product ids.

    Ids are unique within one store: every issued id is remembered, and ids
    already present in the store (for example from generated sample data) are
    reserved before new ones are drawn. Uniqueness is the only guarantee; the
    tokens are not meant to be unguessable.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._used: Set[str] = set()

    def reserve(self, ids: Iterable[str]) -> None:
        self._used.update(ids)

    def reserve_slots(self, slots: Iterable[Slot]) -> None:
        """Reserve every pallet and product id found in `slots`."""
        for slot in slots:
            if slot.pallet is None:
                continue
            self._used.add(slot.pallet.id)
            self._used.update(p.id for p in slot.pallet.products)

    def _token(self) -> str:
        return "".join(self._rng.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))

    def _issue(self, prefix: str) -> str:
        while True:
            candidate = f"{prefix}{self._token()}"
            if candidate not in self._used:
                self._used.add(candidate)
                return candidate

    def pallet_id(self) -> str:
        return self._issue("P")

    def product_id(self) -> str:
        return self._issue("PROD-")

    def __contains__(self, item: str) -> bool:
        return item in self._used

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Tuple

from .errors import InvalidState, NotFound
from .events import EventBus, PalletChanged
from .ids import IdFactory
from .models import Pallet, PalletPatch, Product, ProductPatch, Slot
from .warehouse import Warehouse

logger = logging.getLogger(__name__)


class InventoryEditor:
    """Applies pallet and product edits to a Warehouse.

    Slot states are Empty (no pallet) and Occupied (pallet set). Each
    successful edit builds new Slot/Pallet values and swaps them into the
    store with a single `replace_all`; a failed edit raises before the store
    is touched.

    Product edits act on the pallet currently selected with `select_pallet`.
    That pallet is always looked up in the store by id, and every edit that
    changes it publishes `PalletChanged` with the new value, so a view never
    holds on to the pre-edit pallet.

    Errors:
        NotFound: the target slot, pallet or product does not exist
        InvalidState: assigning to an occupied slot, or product edits with no
                      pallet selected
        ValidationError: raised by the patch types for bad or missing fields
    """

    def __init__(self, warehouse: Warehouse, ids: Optional[IdFactory] = None, bus: Optional[EventBus] = None):
        self.warehouse = warehouse
        self.bus = bus or EventBus()
        self._ids = ids or IdFactory()
        self._ids.reserve_slots(warehouse.all_slots())
        # Ids from imported layouts must never be issued again either
        warehouse.subscribe(lambda _old, new: self._ids.reserve_slots(new))
        self._selected_pallet_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Product-editing selection
    # ------------------------------------------------------------------

    @property
    def selected_pallet(self) -> Optional[Pallet]:
        if self._selected_pallet_id is None:
            return None
        found = self.warehouse.find_pallet(self._selected_pallet_id)
        return found[1] if found is not None else None

    def select_pallet(self, pallet_id: str) -> Pallet:
        found = self.warehouse.find_pallet(pallet_id)
        if found is None:
            raise NotFound(f"No slot holds pallet '{pallet_id}'")
        self._selected_pallet_id = pallet_id
        return found[1]

    def clear_pallet(self) -> None:
        self._selected_pallet_id = None

    def _require_selected(self) -> Tuple[Slot, Pallet]:
        if self._selected_pallet_id is None:
            raise InvalidState("No pallet is selected for product editing")
        found = self.warehouse.find_pallet(self._selected_pallet_id)
        if found is None:
            raise NotFound(f"Selected pallet '{self._selected_pallet_id}' is no longer stored")
        return found

    def _republish(self, pallet_id: str, pallet: Optional[Pallet]) -> None:
        if pallet_id == self._selected_pallet_id:
            if pallet is None:
                self._selected_pallet_id = None
            self.bus.publish(PalletChanged(pallet_id=pallet_id, pallet=pallet))

    def _commit(self, updated: Slot) -> None:
        self.warehouse.replace_all(
            updated if s.id == updated.id else s for s in self.warehouse.all_slots()
        )

    # ------------------------------------------------------------------
    # Pallets
    # ------------------------------------------------------------------

    def assign_pallet(self, slot_id: str, patch: PalletPatch) -> Pallet:
        """Place a new pallet in an empty slot; the pallet id is always generated."""
        slot = self.warehouse.get_slot(slot_id)
        if slot is None:
            raise NotFound(f"Unknown slot '{slot_id}'")
        if slot.occupied:
            raise InvalidState(f"Slot '{slot_id}' already holds pallet '{slot.pallet.id}'")

        pallet = patch.build(self._ids.pallet_id())
        self._commit(slot.with_pallet(pallet))
        logger.info("Assigned pallet %s (%s) to slot %s", pallet.id, pallet.product_code, slot_id)
        return pallet

    def update_pallet(self, pallet_id: str, patch: PalletPatch) -> Pallet:
        """Merge `patch` into the stored pallet with `pallet_id`.

        Only the slot that `Warehouse.find_pallet` resolves is changed.
        """
        found = self.warehouse.find_pallet(pallet_id)
        if found is None:
            raise NotFound(f"No slot holds pallet '{pallet_id}'")
        slot, pallet = found

        updated = patch.apply(pallet)
        self._commit(slot.with_pallet(updated))
        logger.info("Updated pallet %s in slot %s: %s", pallet_id, slot.id, sorted(patch.supplied()))
        self._republish(pallet_id, updated)
        return updated

    def delete_pallet(self, slot_id: str) -> Optional[Pallet]:
        """Empty a slot. Returns the removed pallet, or None if there was nothing to remove."""
        slot = self.warehouse.get_slot(slot_id)
        if slot is None or slot.pallet is None:
            logger.debug("Delete on slot %s ignored: nothing stored", slot_id)
            return None

        removed = slot.pallet
        self._commit(slot.with_pallet(None))
        logger.info("Removed pallet %s from slot %s", removed.id, slot_id)
        self._republish(removed.id, None)
        return removed

    # ------------------------------------------------------------------
    # Products of the selected pallet
    # ------------------------------------------------------------------

    def add_product(self, patch: ProductPatch) -> Product:
        slot, pallet = self._require_selected()
        product = patch.build(self._ids.product_id())
        updated = replace(pallet, products=pallet.products + (product,))
        self._commit(slot.with_pallet(updated))
        logger.info("Added product %s to pallet %s", product.id, pallet.id)
        self._republish(pallet.id, updated)
        return product

    def update_product(self, product_id: str, patch: ProductPatch) -> Product:
        slot, pallet = self._require_selected()
        if pallet.get_product(product_id) is None:
            raise NotFound(f"Pallet '{pallet.id}' has no product '{product_id}'")

        products = tuple(patch.apply(p) if p.id == product_id else p for p in pallet.products)
        updated = replace(pallet, products=products)
        self._commit(slot.with_pallet(updated))
        logger.info("Updated product %s on pallet %s", product_id, pallet.id)
        self._republish(pallet.id, updated)
        return updated.get_product(product_id)

    def delete_product(self, product_id: str) -> Optional[Product]:
        """Remove a product from the selected pallet; missing ids are ignored."""
        pallet = self.selected_pallet
        product = pallet.get_product(product_id) if pallet is not None else None
        if product is None:
            logger.debug("Delete of product %s ignored: not on the selected pallet", product_id)
            return None

        slot, _ = self._require_selected()
        updated = replace(pallet, products=tuple(p for p in pallet.products if p.id != product_id))
        self._commit(slot.with_pallet(updated))
        logger.info("Removed product %s from pallet %s", product_id, pallet.id)
        self._republish(pallet.id, updated)
        return product

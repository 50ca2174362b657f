from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

import polars as pl

from .config import DEFAULT_CONFIG, LayoutConfig
from .editor import InventoryEditor
from .errors import InvalidState, InventoryError, NotFound
from .events import EditRequested, EventBus, LayoutReplaced, PalletChanged, SelectionChanged, SlotClicked
from .export import export_frame, save_csv
from .generator import LayoutGenerator
from .ids import IdFactory
from .models import Pallet, PalletPatch, Product, ProductPatch, Slot
from .queries import SlotFilter, WarehouseStats, compute_stats, filter_slots, group_by_aisle
from .warehouse import Warehouse

logger = logging.getLogger(__name__)

CREATE = "create"
EDIT = "edit"


@dataclass(frozen=True)
class PalletForm:
    """Open pallet form: `create` targets an empty slot, `edit` an existing pallet."""

    mode: str
    slot_id: str
    pallet_id: Optional[str] = None


@dataclass(frozen=True)
class ProductForm:
    pallet_id: str
    product_id: Optional[str] = None

    @property
    def mode(self) -> str:
        return EDIT if self.product_id is not None else CREATE


@dataclass(frozen=True)
class PendingDeletion:
    """A delete awaiting confirm_delete() or cancel_delete()."""

    kind: str  # "pallet" or "product"
    target_id: str  # slot id for pallets, product id for products
    pallet_id: Optional[str] = None  # pallet the product belongs to


@dataclass(frozen=True)
class WarehouseView:
    slots: List[Slot]
    selected_slot: Optional[Slot]
    stats: WarehouseStats
    criteria: SlotFilter


class WarehouseController:
    """Owns the interactive session: selection, open forms and pending deletes.

    The rendering layer reads `view()` and reports user actions either by
    calling the methods below or by publishing events on `bus` (`SlotClicked`,
    `EditRequested`). All edits go through the controller's InventoryEditor.

    Operations that need a slot context (`open_pallet_detail`,
    `open_edit_form`, `add_to_slot`, `request_delete_pallet`) return None and
    change nothing when no slot is selected.
    """

    def __init__(
        self,
        warehouse: Optional[Warehouse] = None,
        seed: int | None = None,
        config: LayoutConfig = DEFAULT_CONFIG,
        now: datetime | None = None,
        ids: Optional[IdFactory] = None,
    ):
        self.config = config
        self.seed = config.seed if seed is None else seed
        self.generator = LayoutGenerator(config)
        self._now = now
        if warehouse is None:
            warehouse = Warehouse(self.generator.generate(self.seed, now=now))
        self.warehouse = warehouse
        self.bus = EventBus()
        self.editor = InventoryEditor(warehouse, ids=ids, bus=self.bus)

        self._selected_slot_id: Optional[str] = None
        self.pallet_form: Optional[PalletForm] = None
        self.product_form: Optional[ProductForm] = None
        self.pending_deletion: Optional[PendingDeletion] = None

        self.bus.subscribe(SlotClicked, lambda event: self.select(event.slot_id))
        self.bus.subscribe(EditRequested, self._on_edit_requested)
        self.bus.subscribe(PalletChanged, self._on_pallet_changed)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected_slot(self) -> Optional[Slot]:
        if self._selected_slot_id is None:
            return None
        return self.warehouse.get_slot(self._selected_slot_id)

    def select(self, slot_id: str) -> Optional[Slot]:
        """Select `slot_id`; selecting the current selection again clears it."""
        if not self.warehouse.slot_exists(slot_id):
            raise NotFound(f"Unknown slot '{slot_id}'")
        self._selected_slot_id = None if self._selected_slot_id == slot_id else slot_id
        logger.debug("Selection is now %s", self._selected_slot_id)
        self.bus.publish(SelectionChanged(self._selected_slot_id))
        return self.selected_slot

    def clear_selection(self) -> None:
        if self._selected_slot_id is not None:
            self._selected_slot_id = None
            self.bus.publish(SelectionChanged(None))

    # ------------------------------------------------------------------
    # Pallet detail and pallet form
    # ------------------------------------------------------------------

    @property
    def detail_pallet(self) -> Optional[Pallet]:
        """Pallet shown in the detail view, re-read from the store on every access."""
        return self.editor.selected_pallet

    def open_pallet_detail(self) -> Optional[Pallet]:
        slot = self.selected_slot
        if slot is None or slot.pallet is None:
            return None
        current = self.detail_pallet
        if current is not None and current.id != slot.pallet.id:
            self._drop_product_context()
        return self.editor.select_pallet(slot.pallet.id)

    def _drop_product_context(self) -> None:
        self.product_form = None
        if self.pending_deletion is not None and self.pending_deletion.kind == "product":
            self.pending_deletion = None

    def _check_detail_pallet(self, pallet_id: Optional[str]) -> None:
        current = self.detail_pallet
        if current is None or current.id != pallet_id:
            raise InvalidState(
                f"Pallet '{pallet_id}' is no longer open "
                f"(detail shows {current.id if current else 'nothing'})"
            )

    def close_pallet_detail(self) -> None:
        self.editor.clear_pallet()
        self.product_form = None

    def request_edit(self, pallet_id: str) -> None:
        self.bus.publish(EditRequested(pallet_id))

    def _on_edit_requested(self, event: EditRequested) -> None:
        found = self.warehouse.find_pallet(event.pallet_id)
        if found is None:
            logger.warning("Edit requested for unknown pallet %s", event.pallet_id)
            raise NotFound(f"No slot holds pallet '{event.pallet_id}'")
        slot, pallet = found
        self.pallet_form = PalletForm(mode=EDIT, slot_id=slot.id, pallet_id=pallet.id)

    def open_edit_form(self) -> Optional[PalletForm]:
        slot = self.selected_slot
        if slot is None or slot.pallet is None:
            return None
        self.request_edit(slot.pallet.id)
        return self.pallet_form

    def add_to_slot(self) -> Optional[PalletForm]:
        slot = self.selected_slot
        if slot is None:
            return None
        if slot.occupied:
            logger.debug("Slot %s is occupied; not opening the create form", slot.id)
            return None
        self.pallet_form = PalletForm(mode=CREATE, slot_id=slot.id)
        return self.pallet_form

    def close_pallet_form(self) -> None:
        self.pallet_form = None

    def submit_pallet_form(self, data: Union[PalletPatch, Mapping[str, Any]]) -> Pallet:
        """Create or update a pallet from the open form.

        The form stays open when the edit is rejected so the user can fix it.
        """
        form = self.pallet_form
        if form is None:
            raise InvalidState("No pallet form is open")
        try:
            patch = data if isinstance(data, PalletPatch) else PalletPatch.from_form(data)
            if form.mode == EDIT:
                pallet = self.editor.update_pallet(form.pallet_id, patch)
            else:
                pallet = self.editor.assign_pallet(form.slot_id, patch)
        except InventoryError as exc:
            logger.warning("Rejected pallet form for slot %s: %s", form.slot_id, exc)
            raise
        self.pallet_form = None
        return pallet

    # ------------------------------------------------------------------
    # Product form
    # ------------------------------------------------------------------

    def open_product_form(self, product_id: Optional[str] = None) -> Optional[ProductForm]:
        pallet = self.detail_pallet
        if pallet is None:
            return None
        if product_id is not None and pallet.get_product(product_id) is None:
            raise NotFound(f"Pallet '{pallet.id}' has no product '{product_id}'")
        self.product_form = ProductForm(pallet_id=pallet.id, product_id=product_id)
        return self.product_form

    def close_product_form(self) -> None:
        self.product_form = None

    def submit_product_form(self, data: Union[ProductPatch, Mapping[str, Any]]) -> Product:
        form = self.product_form
        if form is None:
            raise InvalidState("No product form is open")
        self._check_detail_pallet(form.pallet_id)
        try:
            patch = data if isinstance(data, ProductPatch) else ProductPatch.from_form(data)
            if form.product_id is not None:
                product = self.editor.update_product(form.product_id, patch)
            else:
                product = self.editor.add_product(patch)
        except InventoryError as exc:
            logger.warning("Rejected product form for pallet %s: %s", form.pallet_id, exc)
            raise
        self.product_form = None
        return product

    def _on_pallet_changed(self, event: PalletChanged) -> None:
        if event.pallet is None:
            self.product_form = None
            if self.pallet_form is not None and self.pallet_form.pallet_id == event.pallet_id:
                self.pallet_form = None

    # ------------------------------------------------------------------
    # Two-step deletion
    # ------------------------------------------------------------------

    def request_delete_pallet(self) -> Optional[PendingDeletion]:
        slot = self.selected_slot
        if slot is None:
            return None
        self.pending_deletion = PendingDeletion(kind="pallet", target_id=slot.id)
        return self.pending_deletion

    def request_delete_product(self, product_id: str) -> Optional[PendingDeletion]:
        pallet = self.detail_pallet
        if pallet is None:
            return None
        self.pending_deletion = PendingDeletion(kind="product", target_id=product_id, pallet_id=pallet.id)
        return self.pending_deletion

    def confirm_delete(self) -> Optional[Union[Pallet, Product]]:
        """Run the pending delete. Returns what was removed, or None."""
        pending = self.pending_deletion
        if pending is None:
            return None
        self.pending_deletion = None
        if pending.kind == "pallet":
            removed = self.editor.delete_pallet(pending.target_id)
            self.close_pallet_detail()
            self.pallet_form = None
            self.clear_selection()
            return removed
        self._check_detail_pallet(pending.pallet_id)
        return self.editor.delete_product(pending.target_id)

    def cancel_delete(self) -> None:
        self.pending_deletion = None

    # ------------------------------------------------------------------
    # Views, import and export
    # ------------------------------------------------------------------

    def view(self, criteria: Optional[SlotFilter] = None) -> WarehouseView:
        criteria = criteria or SlotFilter()
        slots = self.warehouse.all_slots()
        return WarehouseView(
            slots=filter_slots(slots, criteria),
            selected_slot=self.selected_slot,
            stats=compute_stats(slots),
            criteria=criteria,
        )

    def aisle_grid(self, criteria: Optional[SlotFilter] = None) -> Dict[str, List[Slot]]:
        return group_by_aisle(self.view(criteria).slots)

    def stats(self) -> WarehouseStats:
        return compute_stats(self.warehouse.all_slots())

    def import_layout(self, seed: int | None = None) -> None:
        """Replace the whole store with a freshly generated layout and reset the session.

        Without `seed` the session's current seed is reused; a given seed
        becomes the session seed for later imports.
        """
        if seed is not None:
            self.seed = seed
        slots = self.generator.generate(self.seed, now=self._now)
        self.pending_deletion = None
        self.pallet_form = None
        self.close_pallet_detail()
        self.clear_selection()
        self.warehouse.replace_all(slots)
        logger.info("Imported layout with %d slots (seed=%s)", len(slots), self.seed)
        self.bus.publish(LayoutReplaced(self.warehouse.version))

    def export_frame(self) -> pl.DataFrame:
        return export_frame(self.warehouse.all_slots())

    def export_csv(self, path: str) -> None:
        save_csv(self.warehouse.all_slots(), path)
        logger.info("Exported %d slots to %s", len(self.warehouse), path)

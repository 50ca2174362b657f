import marimo

__generated_with = "0.18.4"
app = marimo.App(width="medium")


@app.cell
def _():
    # Add project root to sys.path (safe to paste in a notebook cell)
    from pathlib import Path
    import sys

    root = Path.cwd()
    # climb parents until we find the package folder
    while not (root / "warehouse_inventory").exists() and root.parent != root:
        root = root.parent

    sys.path.insert(0, str(root))
    return


@app.cell
def _():
    import marimo as mo
    import polars as pl

    from warehouse_inventory.controller import WarehouseController
    from warehouse_inventory.models import PALLET_STATUSES
    from warehouse_inventory.queries import SlotFilter

    controller = WarehouseController(seed=12345)
    return PALLET_STATUSES, SlotFilter, controller, mo, pl


@app.cell
def _(PALLET_STATUSES, controller, mo):
    search = mo.ui.text(placeholder="Location or product code", label="Search")
    status = mo.ui.dropdown(["all", "empty", *PALLET_STATUSES], value="all", label="Status")
    aisle = mo.ui.dropdown(["all", *controller.warehouse.aisles()], value="all", label="Aisle")
    mo.hstack([search, status, aisle])
    return aisle, search, status


@app.cell
def _(SlotFilter, aisle, controller, mo, search, status):
    view = controller.view(SlotFilter(search_term=search.value, status=status.value, aisle=aisle.value))
    stats = view.stats
    mo.hstack(
        [
            mo.stat(stats.total, label="Total slots"),
            mo.stat(stats.occupied, label="Occupied"),
            mo.stat(stats.empty, label="Empty"),
            mo.stat(stats.expiring, label="Expiring"),
            mo.stat(stats.expired, label="Expired"),
        ]
    )
    return (view,)


@app.cell
def _(controller, mo, view):
    grid = controller.aisle_grid(view.criteria)
    rows = []
    for aisle_label, slots in grid.items():
        cells = " ".join(
            f"<span style='background:{s.pallet.color if s.pallet else '#6b7280'};padding:2px 4px'>{s.id}</span>"
            for s in slots
        )
        rows.append(f"<p><b>Aisle {aisle_label}</b> {cells}</p>")
    mo.Html("".join(rows))
    return


@app.cell
def _(mo, view):
    slot_picker = mo.ui.dropdown([s.id for s in view.slots], label="Slot")
    slot_picker
    return (slot_picker,)


@app.cell
def _(controller, mo, pl, slot_picker):
    detail = mo.md("Select a slot to see its pallet.")
    if slot_picker.value:
        if controller.selected_slot is None or controller.selected_slot.id != slot_picker.value:
            controller.select(slot_picker.value)
        pallet = controller.open_pallet_detail()
        if pallet is None:
            detail = mo.md(f"**{slot_picker.value}** is empty.")
        else:
            detail = mo.vstack(
                [
                    mo.md(
                        f"**{pallet.id}** · {pallet.product_code} · {pallet.status} · "
                        f"{pallet.total_quantity} units · ${pallet.total_value:,.2f}"
                    ),
                    mo.ui.table(pl.DataFrame([p.to_dict() for p in pallet.products])),
                ]
            )
    detail
    return


@app.cell
def _(controller, mo):
    mo.ui.table(controller.export_frame(), label="Export preview")
    return


if __name__ == "__main__":
    app.run()

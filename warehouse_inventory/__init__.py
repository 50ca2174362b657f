"""warehouse_inventory package

In-memory model for a visual warehouse-inventory manager: the slot grid and
its sample contents (`generator`), the slot/pallet/product values
(`models`), the store (`warehouse`), filters and totals (`queries`), the
edit protocol (`editor`) and the interactive session (`controller`).

"""

__all__ = [
    "config",
    "errors",
    "models",
    "generator",
    "warehouse",
    "queries",
    "ids",
    "events",
    "editor",
    "controller",
    "export",
]

"""Generate a warehouse layout and export it as CSV.

Writes one row per slot (Location, Aisle, Bay, Level, Occupied, ProductCode,
Quantity, Status, EntryDate, ExpiryDate) and prints occupancy totals.

Usage:
    uv run scripts/export_layout.py --seed 12345 --out data/layout.csv
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path so local package can be imported
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from warehouse_inventory.config import LayoutConfig
from warehouse_inventory.controller import WarehouseController
from warehouse_inventory.export import save_csv
from warehouse_inventory.queries import SlotFilter


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", type=int, default=12345, help="Generator seed")
    parser.add_argument("--out", default="layout.csv", help="CSV output path")
    parser.add_argument("--aisles", default="ABCD", help="Aisle labels, one character each")
    parser.add_argument("--bays", type=int, default=8, help="Bays per aisle")
    parser.add_argument("--levels", type=int, default=4, help="Levels per bay")
    parser.add_argument("--status", default="all", help="Only export slots with this status (or 'empty')")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = LayoutConfig(
        aisles=tuple(args.aisles),
        bays_per_aisle=args.bays,
        levels_per_bay=args.levels,
        seed=args.seed,
    )
    controller = WarehouseController(config=config)

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    save_csv(controller.view(SlotFilter(status=args.status)).slots, str(out_path))

    stats = controller.stats()
    print(f"Slots: {stats.total}  occupied: {stats.occupied}  empty: {stats.empty}")
    for status, count in stats.by_status.items():
        print(f"  {status:<10} {count}")
    print(f"Wrote {out_path}")


if __name__ == "__main__":
    main()

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import List

from .config import DEFAULT_CONFIG, LayoutConfig
from .models import DEFAULT_DIMENSIONS, PALLET_STATUSES, Pallet, Product, Slot

logger = logging.getLogger(__name__)

SAMPLE_CATEGORIES = ["Electronics", "Clothing", "Food", "Tools", "Books"]
SAMPLE_SUPPLIERS = ["Supplier A", "Supplier B", "Supplier C"]

DAY_MS = 24 * 60 * 60 * 1000


class SeededRandom:
    """Linear-congruential generator shared with the reference data set.

    The sequence is fixed by the constants below, so the same seed yields the
    same draws on any platform:

        seed' = (seed * 9301 + 49297) mod 233280
        draw  = seed' / 233280
    """

    MULTIPLIER = 9301
    INCREMENT = 49297
    MODULUS = 233280

    def __init__(self, seed: int):
        self.seed = int(seed) % self.MODULUS

    def next(self) -> float:
        self.seed = (self.seed * self.MULTIPLIER + self.INCREMENT) % self.MODULUS
        return self.seed / self.MODULUS

    def next_int(self, n: int) -> int:
        """Uniform integer in [0, n)."""
        return math.floor(self.next() * n)

    def next_in_range(self, low: float, high: float) -> float:
        return low + self.next() * (high - low)


def _hex(n: int) -> str:
    return format(n, "X")


def _shift_date(now: datetime, offset_ms: int) -> date:
    """UTC calendar date of `now` shifted by `offset_ms` milliseconds."""
    return (now + timedelta(milliseconds=offset_ms)).astimezone(timezone.utc).date()


class LayoutGenerator:
    """Generates the slot grid and its sample pallets from a fixed seed.

    API:
        generate(seed=None, now=None) -> List[Slot]

    Slots are produced aisle-major, then by ascending bay, then by ascending
    level. That order fixes how the random sequence is consumed, so it is
    part of the output contract. `now` anchors the relative entry/expiry
    dates; pass it explicitly for reproducible output across calls.
    """

    def __init__(self, config: LayoutConfig = DEFAULT_CONFIG):
        self.config = config

    def generate(self, seed: int | None = None, now: datetime | None = None) -> List[Slot]:
        cfg = self.config
        rng = SeededRandom(cfg.seed if seed is None else seed)
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        slots: List[Slot] = []
        for aisle_index, aisle in enumerate(cfg.aisles):
            for bay in range(1, cfg.bays_per_aisle + 1):
                for level in range(1, cfg.levels_per_bay + 1):
                    bay_label = f"{bay:02d}"
                    slot_id = f"{aisle}{bay_label}{level}"
                    occupied = rng.next() > cfg.occupancy_threshold
                    pallet = self._make_pallet(rng, now) if occupied else None
                    slots.append(
                        Slot(
                            id=slot_id,
                            aisle=aisle,
                            bay=bay_label,
                            level=level,
                            x=aisle_index * cfg.aisle_spacing + cfg.aisle_offset,
                            y=level * cfg.level_spacing + cfg.level_offset,
                            z=bay * cfg.bay_spacing + cfg.bay_offset,
                            width=cfg.slot_size,
                            height=cfg.slot_size,
                            depth=cfg.slot_size,
                            occupied=occupied,
                            pallet=pallet,
                        )
                    )

        logger.debug(
            "Generated %d slots (%d occupied) from seed %s",
            len(slots),
            sum(1 for s in slots if s.occupied),
            cfg.seed if seed is None else seed,
        )
        return slots

    def _make_pallet(self, rng: SeededRandom, now: datetime) -> Pallet:
        # Draw order below is fixed; reordering changes every generated layout.
        status = PALLET_STATUSES[rng.next_int(len(PALLET_STATUSES))]
        pallet_id = f"P{_hex(rng.next_int(1_000_000))}"
        product_code = f"PROD-{_hex(rng.next_int(10_000))}"
        quantity = rng.next_int(100) + 1
        entry_date = _shift_date(now, -rng.next_int(30 * DAY_MS))
        expiry_date = _shift_date(now, rng.next_int(90 * DAY_MS))

        product_count = rng.next_int(3) + 1
        products = [self._make_product(rng, now, i) for i in range(product_count)]

        weight = rng.next_int(500) + 100
        supplier = SAMPLE_SUPPLIERS[rng.next_int(len(SAMPLE_SUPPLIERS))]

        return Pallet(
            id=pallet_id,
            product_code=product_code,
            quantity=quantity,
            entry_date=entry_date,
            expiry_date=expiry_date,
            status=status,
            products=tuple(products),
            weight=float(weight),
            dimensions=DEFAULT_DIMENSIONS,
            supplier=supplier,
            notes="Sample pallet notes",
        )

    def _make_product(self, rng: SeededRandom, now: datetime, index: int) -> Product:
        product_id = f"PROD-{_hex(rng.next_int(1_000_000))}"
        sku = f"SKU-{_hex(rng.next_int(1_000_000))}"
        quantity = rng.next_int(50) + 1
        unit_price = rng.next_int(100) + 10
        category = SAMPLE_CATEGORIES[rng.next_int(len(SAMPLE_CATEGORIES))]
        batch_number = f"BATCH-{_hex(rng.next_int(10_000))}"
        manufacturing_date = _shift_date(now, -rng.next_int(60 * DAY_MS))
        expiry_date = _shift_date(now, rng.next_int(180 * DAY_MS))
        return Product(
            id=product_id,
            name=f"Product {index + 1}",
            sku=sku,
            quantity=quantity,
            unit_price=float(unit_price),
            category=category,
            description=f"Description for product {index + 1}",
            batch_number=batch_number,
            manufacturing_date=manufacturing_date,
            expiry_date=expiry_date,
        )

from datetime import date, datetime, timezone

import pytest

from warehouse_inventory.generator import LayoutGenerator
from warehouse_inventory.models import Pallet, Product, Slot


NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_slot(slot_id, status=None, product_code="X1", products=()):
    aisle, bay, level = slot_id[0], slot_id[1:3], int(slot_id[3:])
    pallet = None
    if status is not None:
        pallet = Pallet(
            id=f"P-{slot_id}",
            product_code=product_code,
            quantity=1,
            entry_date=date(2024, 1, 1),
            status=status,
            products=products,
        )
    return Slot(id=slot_id, aisle=aisle, bay=bay, level=level, x=0, y=0, z=0,
                occupied=pallet is not None, pallet=pallet)


@pytest.fixture
def generated_slots():
    return LayoutGenerator().generate(seed=12345, now=NOW)


@pytest.fixture
def two_products():
    return (
        Product(id="a", name="A", sku="SKU-A", quantity=2, unit_price=10, category="Food"),
        Product(id="b", name="B", sku="SKU-B", quantity=3, unit_price=5, category="Tools"),
    )

import dataclasses
from datetime import date

import pytest

from warehouse_inventory.errors import InvalidState, ValidationError
from warehouse_inventory.models import (
    DEFAULT_DIMENSIONS,
    Dimensions,
    Pallet,
    PalletPatch,
    Product,
    ProductPatch,
    Slot,
    parse_date,
)


def make_product(pid, qty, price, category="Food", batch="B1"):
    return Product(id=pid, name=f"Item {pid}", sku=f"SKU-{pid}", quantity=qty, unit_price=price,
                   category=category, batch_number=batch)


def make_pallet(**overrides):
    fields = dict(id="P1", product_code="X1", quantity=5, entry_date=date(2024, 1, 1))
    fields.update(overrides)
    return Pallet(**fields)


def test_pallet_totals():
    pallet = make_pallet(products=[make_product("a", 2, 10), make_product("b", 3, 5)])
    assert pallet.total_value == 35
    assert pallet.total_quantity == 5
    assert isinstance(pallet.products, tuple)


def test_empty_pallet_totals():
    pallet = make_pallet()
    assert pallet.total_value == 0
    assert pallet.total_quantity == 0
    assert pallet.categories == []


def test_color_follows_status():
    assert make_pallet().color == "#4ade80"
    assert make_pallet(status="expired").color == "#ef4444"
    assert make_pallet(status="reserved").color == "#8b5cf6"


def test_unknown_status_rejected():
    with pytest.raises(ValidationError, match="Unknown pallet status"):
        make_pallet(status="lost")


def test_categories_and_batches_distinct_in_order():
    pallet = make_pallet(products=[
        make_product("a", 1, 1, "Tools", "B2"),
        make_product("b", 1, 1, "Food", "B1"),
        make_product("c", 1, 1, "Tools", "B2"),
    ])
    assert pallet.categories == ["Tools", "Food"]
    assert pallet.batch_numbers == ["B2", "B1"]


def test_volume():
    assert DEFAULT_DIMENSIONS.volume_m3 == pytest.approx(0.96)
    assert make_pallet(dimensions=Dimensions(100, 100, 100)).volume_m3 == pytest.approx(1.0)


def test_slot_invariant_enforced():
    with pytest.raises(InvalidState):
        Slot(id="A011", aisle="A", bay="01", level=1, x=0, y=0, z=0, occupied=True)
    with pytest.raises(InvalidState):
        Slot(id="A011", aisle="A", bay="01", level=1, x=0, y=0, z=0, occupied=False, pallet=make_pallet())


def test_slot_with_pallet_keeps_position():
    slot = Slot(id="A011", aisle="A", bay="01", level=1, x=1, y=2, z=3)
    filled = slot.with_pallet(make_pallet())
    assert filled.occupied and filled.pallet.id == "P1"
    assert (filled.id, filled.x, filled.y, filled.z) == ("A011", 1, 2, 3)
    emptied = filled.with_pallet(None)
    assert not emptied.occupied and emptied.pallet is None
    assert slot.to_dict()["pallet"] is None


def test_parse_date():
    assert parse_date("2024-01-01") == date(2024, 1, 1)
    assert parse_date("2024-01-01T10:00:00") == date(2024, 1, 1)
    assert parse_date("") is None
    assert parse_date(None) is None
    with pytest.raises(ValidationError, match="ISO date"):
        parse_date("01/02/2024", "entry_date")


# Patches

def test_pallet_patch_build_defaults():
    pallet = PalletPatch(product_code="X1", quantity=5, entry_date="2024-01-01", status="normal").build("P9")
    assert pallet.id == "P9"
    assert pallet.entry_date == date(2024, 1, 1)
    assert pallet.products == ()
    assert pallet.weight == 0
    assert pallet.dimensions == Dimensions(120, 100, 80)
    assert pallet.supplier == "" and pallet.notes == ""
    assert pallet.expiry_date is None


def test_pallet_patch_build_requires_fields():
    with pytest.raises(ValidationError, match="product_code, entry_date"):
        PalletPatch(quantity=1).build("P9")


def test_pallet_patch_apply_is_shallow_merge():
    products = (make_product("a", 2, 10),)
    pallet = make_pallet(products=products, supplier="Supplier A", notes="fragile")
    updated = PalletPatch(quantity=9, status="expiring").apply(pallet)
    assert updated.id == pallet.id
    assert updated.quantity == 9
    assert updated.status == "expiring"
    assert updated.color == "#fbbf24"
    assert updated.products == products
    assert updated.supplier == "Supplier A"
    assert updated.notes == "fragile"
    # original value untouched
    assert pallet.quantity == 5


def test_pallet_patch_replaces_products_only_when_given():
    pallet = make_pallet(products=(make_product("a", 2, 10),))
    assert PalletPatch(products=[]).apply(pallet).products == ()


def test_pallet_patch_validation():
    with pytest.raises(ValidationError, match="quantity must be an integer"):
        PalletPatch(quantity="5")
    with pytest.raises(ValidationError, match="must not be negative"):
        PalletPatch(quantity=-1)
    with pytest.raises(ValidationError, match="status must be one of"):
        PalletPatch(status="lost")
    with pytest.raises(ValidationError, match="product_code must not be blank"):
        PalletPatch(product_code="  ")


def test_pallet_patch_from_form():
    patch = PalletPatch.from_form({
        "product_code": " X1 ",
        "quantity": "12",
        "entry_date": "2024-02-03",
        "expiry_date": "",
        "status": "processing",
        "weight": "250.5",
        "length": "110",
        "supplier": "Supplier B",
    })
    assert patch.product_code == "X1"
    assert patch.quantity == 12
    assert patch.entry_date == date(2024, 2, 3)
    assert patch.expiry_date is None
    assert patch.weight == 250.5
    assert patch.dimensions == Dimensions(110, 100, 80)
    assert patch.notes is None
    assert set(patch.supplied()) == {
        "product_code", "quantity", "entry_date", "status", "weight", "dimensions", "supplier"
    }


def test_pallet_patch_from_form_rejects_non_numeric():
    with pytest.raises(ValidationError, match="quantity must be an integer"):
        PalletPatch.from_form({"quantity": "lots"})
    with pytest.raises(ValidationError, match="weight must be a number"):
        PalletPatch.from_form({"weight": "heavy"})
    with pytest.raises(ValidationError, match="weight must be a finite number"):
        PalletPatch.from_form({"weight": "inf"})
    with pytest.raises(ValidationError, match="length must be a finite number"):
        PalletPatch.from_form({"length": "nan"})
    with pytest.raises(ValidationError, match="unit_price must be a finite number"):
        ProductPatch.from_form({"name": "Drill", "unit_price": "nan"})


def test_product_patch_build_and_apply():
    product = ProductPatch(name="Drill", sku="SKU-1", quantity=4, unit_price=19.5, category="Tools").build("PROD-1")
    assert product.line_value == 78.0
    assert product.description == ""
    updated = ProductPatch(quantity=1).apply(product)
    assert updated.quantity == 1
    assert updated.name == "Drill"


def test_product_patch_requires_fields():
    with pytest.raises(ValidationError, match="Missing required product fields: sku, unit_price, category"):
        ProductPatch(name="Drill", quantity=1).build("PROD-1")


def test_product_patch_from_form():
    patch = ProductPatch.from_form({
        "name": "Drill",
        "sku": "SKU-1",
        "quantity": "3",
        "unit_price": "12.25",
        "category": "Home & Garden",
        "manufacturing_date": "2024-01-01",
    })
    assert patch.quantity == 3
    assert patch.unit_price == 12.25
    assert patch.manufacturing_date == date(2024, 1, 1)
    with pytest.raises(ValidationError, match="unit_price must be a number"):
        ProductPatch.from_form({"unit_price": "free"})


def test_patches_are_frozen():
    patch = PalletPatch(quantity=1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        patch.quantity = -5
    with pytest.raises(dataclasses.FrozenInstanceError):
        ProductPatch(name="Drill").unit_price = float("nan")


def test_patch_text_fields_must_be_strings():
    with pytest.raises(ValidationError, match="product_code must be text"):
        PalletPatch(product_code=123)
    with pytest.raises(ValidationError, match="sku must be text"):
        ProductPatch(sku=42)


def test_pallet_dates_are_parsed():
    pallet = make_pallet(entry_date="2024-03-04", expiry_date="2024-05-06")
    assert pallet.entry_date == date(2024, 3, 4)
    assert pallet.expiry_date == date(2024, 5, 6)
    assert pallet.to_dict()["entry_date"] == "2024-03-04"
    with pytest.raises(ValidationError, match="entry_date must be an ISO date"):
        make_pallet(entry_date="yesterday")
    with pytest.raises(ValidationError, match="needs an entry_date"):
        make_pallet(entry_date=None)


def test_product_dates_are_parsed():
    product = Product(id="a", name="A", sku="S", quantity=1, unit_price=1, category="Food",
                      manufacturing_date="2024-01-02")
    assert product.manufacturing_date == date(2024, 1, 2)
    assert product.expiry_date is None

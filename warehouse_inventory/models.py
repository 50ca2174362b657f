from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import InvalidState, ValidationError


PALLET_STATUSES: Tuple[str, ...] = ("normal", "expiring", "expired", "processing", "reserved")

STATUS_COLORS: Dict[str, str] = {
    "normal": "#4ade80",
    "expiring": "#fbbf24",
    "expired": "#ef4444",
    "processing": "#3b82f6",
    "reserved": "#8b5cf6",
}

# Suggested values for the product form; any non-empty category is accepted.
PRODUCT_CATEGORIES: Tuple[str, ...] = (
    "Electronics",
    "Clothing",
    "Food",
    "Tools",
    "Books",
    "Medical",
    "Automotive",
    "Home & Garden",
)


def parse_date(value: Any, field_name: str = "date") -> Optional[date]:
    """Parse a calendar date from an ISO string, date or datetime.

    Empty strings and None yield None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD), got {value!r}") from None
    raise ValidationError(f"{field_name} must be a date, got {type(value).__name__}")


def _format_date(value: Optional[date]) -> str:
    return value.isoformat() if value is not None else ""


def _check_count(value: Any, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"{field_name} must not be negative, got {value}")


def _check_amount(value: Any, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"{field_name} must be a finite number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{field_name} must not be negative, got {value}")


def _coerce_int(raw: Any, field_name: str) -> Optional[int]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        raise ValidationError(f"{field_name} must be an integer, got {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be an integer, got {raw!r}") from None


def _coerce_float(raw: Any, field_name: str) -> Optional[float]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        raise ValidationError(f"{field_name} must be a number, got {raw!r}")
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number, got {raw!r}") from None


def _check_text(value: Any, field_name: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text, got {type(value).__name__}")


def _coerce_text(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    return str(raw).strip()


@dataclass(frozen=True)
class Dimensions:
    """Pallet footprint and height in centimetres."""

    length: float = 120.0
    width: float = 100.0
    height: float = 80.0

    def __post_init__(self) -> None:
        for name in ("length", "width", "height"):
            _check_amount(getattr(self, name), name)

    @property
    def volume_m3(self) -> float:
        return self.length * self.width * self.height / 1_000_000

    def to_dict(self) -> Dict[str, float]:
        return {"length": self.length, "width": self.width, "height": self.height}


DEFAULT_DIMENSIONS = Dimensions()


@dataclass(frozen=True)
class Product:
    """A line item stored on a pallet."""

    id: str
    name: str
    sku: str
    quantity: int
    unit_price: float
    category: str
    description: str = ""
    batch_number: str = ""
    manufacturing_date: Optional[date] = None
    expiry_date: Optional[date] = None

    def __post_init__(self) -> None:
        for name in ("manufacturing_date", "expiry_date"):
            object.__setattr__(self, name, parse_date(getattr(self, name), name))

    @property
    def line_value(self) -> float:
        return self.quantity * self.unit_price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "category": self.category,
            "description": self.description,
            "batch_number": self.batch_number,
            "manufacturing_date": _format_date(self.manufacturing_date),
            "expiry_date": _format_date(self.expiry_date),
        }


@dataclass(frozen=True)
class Pallet:
    """A physical unit of goods held by exactly one slot.

    The display colour and the product totals are derived on access and are
    never stored.
    """

    id: str
    product_code: str
    quantity: int
    entry_date: date
    status: str = "normal"
    expiry_date: Optional[date] = None
    products: Tuple[Product, ...] = ()
    weight: float = 0.0
    dimensions: Dimensions = DEFAULT_DIMENSIONS
    supplier: str = ""
    notes: str = ""

    def __post_init__(self) -> None:
        if self.status not in STATUS_COLORS:
            raise ValidationError(f"Unknown pallet status '{self.status}'")
        entry_date = parse_date(self.entry_date, "entry_date")
        if entry_date is None:
            raise ValidationError(f"Pallet '{self.id}' needs an entry_date")
        object.__setattr__(self, "entry_date", entry_date)
        object.__setattr__(self, "expiry_date", parse_date(self.expiry_date, "expiry_date"))
        if not isinstance(self.products, tuple):
            object.__setattr__(self, "products", tuple(self.products))

    @property
    def color(self) -> str:
        return STATUS_COLORS[self.status]

    @property
    def total_quantity(self) -> int:
        return sum(p.quantity for p in self.products)

    @property
    def total_value(self) -> float:
        return sum(p.line_value for p in self.products)

    @property
    def volume_m3(self) -> float:
        return self.dimensions.volume_m3

    @property
    def categories(self) -> List[str]:
        return list(dict.fromkeys(p.category for p in self.products))

    @property
    def batch_numbers(self) -> List[str]:
        return list(dict.fromkeys(p.batch_number for p in self.products))

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_code": self.product_code,
            "quantity": self.quantity,
            "entry_date": _format_date(self.entry_date),
            "expiry_date": _format_date(self.expiry_date),
            "status": self.status,
            "color": self.color,
            "weight": self.weight,
            "dimensions": self.dimensions.to_dict(),
            "supplier": self.supplier,
            "notes": self.notes,
            "products": [p.to_dict() for p in self.products],
        }


@dataclass(frozen=True)
class Slot:
    """A fixed storage cell in the grid. Only `occupied` and `pallet` ever change."""

    id: str
    aisle: str
    bay: str
    level: int
    x: float
    y: float
    z: float
    width: float = 1.2
    height: float = 1.2
    depth: float = 1.2
    occupied: bool = False
    pallet: Optional[Pallet] = None

    def __post_init__(self) -> None:
        if self.occupied != (self.pallet is not None):
            raise InvalidState(
                f"Slot '{self.id}' has occupied={self.occupied} but pallet={'set' if self.pallet else 'None'}"
            )

    @property
    def location(self) -> str:
        return self.id

    def with_pallet(self, pallet: Optional[Pallet]) -> "Slot":
        """Return a copy of this slot holding `pallet` (or emptied when None)."""
        return replace(self, occupied=pallet is not None, pallet=pallet)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "location": self.location,
            "aisle": self.aisle,
            "bay": self.bay,
            "level": self.level,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "width": self.width,
            "height": self.height,
            "depth": self.depth,
            "occupied": self.occupied,
            "pallet": self.pallet.to_dict() if self.pallet is not None else None,
        }


@dataclass(frozen=True)
class PalletPatch:
    """Partial set of pallet fields.

    A field left as None is not supplied: `apply` keeps the existing value and
    `build` falls back to the default. `products` is only replaced when given.
    Patches are frozen so every field has passed validation.
    """

    product_code: Optional[str] = None
    quantity: Optional[int] = None
    entry_date: Optional[date] = None
    expiry_date: Optional[date] = None
    status: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None
    supplier: Optional[str] = None
    notes: Optional[str] = None
    products: Optional[Sequence[Product]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "entry_date", parse_date(self.entry_date, "entry_date"))
        object.__setattr__(self, "expiry_date", parse_date(self.expiry_date, "expiry_date"))
        if self.quantity is not None:
            _check_count(self.quantity, "quantity")
        if self.weight is not None:
            _check_amount(self.weight, "weight")
        for name in ("product_code", "status", "supplier", "notes"):
            if getattr(self, name) is not None:
                _check_text(getattr(self, name), name)
        if self.status is not None and self.status not in STATUS_COLORS:
            raise ValidationError(
                f"status must be one of {', '.join(PALLET_STATUSES)}, got '{self.status}'"
            )
        if self.product_code is not None and not self.product_code.strip():
            raise ValidationError("product_code must not be blank")
        if self.dimensions is not None and not isinstance(self.dimensions, Dimensions):
            raise ValidationError(f"dimensions must be Dimensions, got {type(self.dimensions).__name__}")
        if self.products is not None:
            object.__setattr__(self, "products", tuple(self.products))

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "PalletPatch":
        """Build a patch from raw form input; blank entries count as not supplied."""
        dimensions = None
        raw_dims = form.get("dimensions")
        if isinstance(raw_dims, Dimensions):
            dimensions = raw_dims
        else:
            source = raw_dims if isinstance(raw_dims, Mapping) else form
            sizes = {
                name: _coerce_float(source.get(name), name)
                for name in ("length", "width", "height")
            }
            if any(v is not None for v in sizes.values()):
                defaults = DEFAULT_DIMENSIONS.to_dict()
                dimensions = Dimensions(**{k: (v if v is not None else defaults[k]) for k, v in sizes.items()})

        product_code = _coerce_text(form.get("product_code"))
        status = _coerce_text(form.get("status"))
        return cls(
            product_code=product_code or None,
            quantity=_coerce_int(form.get("quantity"), "quantity"),
            entry_date=form.get("entry_date"),
            expiry_date=form.get("expiry_date"),
            status=status or None,
            weight=_coerce_float(form.get("weight"), "weight"),
            dimensions=dimensions,
            supplier=_coerce_text(form.get("supplier")),
            notes=_coerce_text(form.get("notes")),
        )

    def supplied(self) -> Dict[str, Any]:
        """Return only the fields that were supplied."""
        return {
            name: value
            for name, value in self.__dict__.items()
            if value is not None
        }

    def apply(self, pallet: Pallet) -> Pallet:
        """Merge the supplied fields over `pallet`, keeping its id."""
        return replace(pallet, **self.supplied())

    def build(self, pallet_id: str) -> Pallet:
        """Create a new pallet from this patch, filling unset fields with defaults."""
        missing = [
            name
            for name in ("product_code", "quantity", "entry_date")
            if getattr(self, name) is None
        ]
        if missing:
            raise ValidationError(f"Missing required pallet fields: {', '.join(missing)}")
        return Pallet(id=pallet_id, **self.supplied())


@dataclass(frozen=True)
class ProductPatch:
    """Partial set of product fields; None means not supplied."""

    name: Optional[str] = None
    sku: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None
    batch_number: Optional[str] = None
    manufacturing_date: Optional[date] = None
    expiry_date: Optional[date] = None

    def __post_init__(self) -> None:
        for name in ("manufacturing_date", "expiry_date"):
            object.__setattr__(self, name, parse_date(getattr(self, name), name))
        if self.quantity is not None:
            _check_count(self.quantity, "quantity")
        if self.unit_price is not None:
            _check_amount(self.unit_price, "unit_price")
        for name in ("name", "sku", "category", "description", "batch_number"):
            if getattr(self, name) is not None:
                _check_text(getattr(self, name), name)
        for name in ("name", "sku", "category"):
            value = getattr(self, name)
            if value is not None and not value.strip():
                raise ValidationError(f"{name} must not be blank")

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "ProductPatch":
        return cls(
            name=_coerce_text(form.get("name")) or None,
            sku=_coerce_text(form.get("sku")) or None,
            quantity=_coerce_int(form.get("quantity"), "quantity"),
            unit_price=_coerce_float(form.get("unit_price"), "unit_price"),
            category=_coerce_text(form.get("category")) or None,
            description=_coerce_text(form.get("description")),
            batch_number=_coerce_text(form.get("batch_number")),
            manufacturing_date=form.get("manufacturing_date"),
            expiry_date=form.get("expiry_date"),
        )

    def supplied(self) -> Dict[str, Any]:
        return {
            name: value
            for name, value in self.__dict__.items()
            if value is not None
        }

    def apply(self, product: Product) -> Product:
        return replace(product, **self.supplied())

    def build(self, product_id: str) -> Product:
        missing = [
            name
            for name in ("name", "sku", "quantity", "unit_price", "category")
            if getattr(self, name) is None
        ]
        if missing:
            raise ValidationError(f"Missing required product fields: {', '.join(missing)}")
        return Product(id=product_id, **self.supplied())

"""
Design Catalog Data Models

Pure definitions -- no side effects, no imports of external services.
"""
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from errors import ValidationError


def parse_number(value: Any, field_name: str, blank_as_zero: bool = True) -> float:
    """
    Parse a numeric form value into a finite float.

    Blank values read as 0 when `blank_as_zero` is set; anything else that
    is not a finite number raises ValidationError.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    if value is None or (isinstance(value, str) and not value.strip()):
        if blank_as_zero:
            return 0.0
        raise ValidationError(f"{field_name} is required", field=field_name)
    try:
        number = float(value.replace(',', '').strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number, got {value!r}", field=field_name)
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number", field=field_name)
    return number


@dataclass
class Fabric:
    """One fabric line: metres used (as entered) and the price per metre."""
    type: str = ""
    usage: str = ""
    price_per_meter: float = 0.0

    def cost(self) -> float:
        return self.price_per_meter * parse_number(self.usage, 'usage')

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'usage': self.usage, 'pricePerMeter': self.price_per_meter}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Fabric':
        return cls(
            type=str(data.get('type', '') or ''),
            usage=str(data.get('usage', '') or ''),
            price_per_meter=parse_number(
                data.get('pricePerMeter', data.get('price_per_meter')), 'pricePerMeter'
            ),
        )


@dataclass
class Material:
    """One trim/material line (buttons, lining, zips...)."""
    name: str = ""
    quantity: str = ""
    price: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'quantity': self.quantity, 'price': self.price}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Material':
        return cls(
            name=str(data.get('name', '') or ''),
            quantity=str(data.get('quantity', '') or ''),
            price=parse_number(data.get('price'), 'price'),
        )


def compute_total_price(fabrics: List[Fabric], materials: List[Material]) -> float:
    """Sum of fabric cost (price per metre x usage) plus material prices."""
    fabric_total = sum(fabric.cost() for fabric in fabrics)
    material_total = sum(material.price for material in materials)
    return fabric_total + material_total


@dataclass(frozen=True)
class Design:
    """
    A catalog record. Immutable once created; `total_price` is a snapshot
    taken at creation time and is never recomputed.
    """
    id: str
    design_number: str
    image: str
    fabrics: List[Fabric] = field(default_factory=list)
    materials: List[Material] = field(default_factory=list)
    cutting_size: str = ""
    total_price: float = 0.0
    created_at: str = ""
    notes: str = ""

    @classmethod
    def create(
        cls,
        design_number: str,
        image: str,
        fabrics: Optional[List[Fabric]] = None,
        materials: Optional[List[Material]] = None,
        cutting_size: str = "",
        notes: str = "",
    ) -> 'Design':
        """Build a new design, validating required fields and pricing it."""
        design_number = (design_number or "").strip()
        image = (image or "").strip()
        if not design_number:
            raise ValidationError("Design number is required", field='designNumber')
        if not image:
            raise ValidationError("Image is required", field='image')

        fabrics = list(fabrics or [])
        materials = list(materials or [])
        total_price = compute_total_price(fabrics, materials)
        if not math.isfinite(total_price):
            raise ValidationError("Fabric and material costs are too large", field='totalPrice')

        return cls(
            id=uuid.uuid4().hex,
            design_number=design_number,
            image=image,
            fabrics=fabrics,
            materials=materials,
            cutting_size=cutting_size or "",
            total_price=total_price,
            created_at=datetime.now(timezone.utc).isoformat(),
            notes=notes or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the stored (camelCase) field names."""
        return {
            'id': self.id,
            'designNumber': self.design_number,
            'image': self.image,
            'fabrics': [f.to_dict() for f in self.fabrics],
            'cuttingSize': self.cutting_size,
            'materials': [m.to_dict() for m in self.materials],
            'totalPrice': self.total_price,
            'createdAt': self.created_at,
            'notes': self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Design':
        """Restore a stored record as-is (the stored total is kept)."""
        return cls(
            id=str(data['id']),
            design_number=str(data.get('designNumber', '')),
            image=str(data.get('image', '')),
            fabrics=[Fabric.from_dict(f) for f in data.get('fabrics', [])],
            materials=[Material.from_dict(m) for m in data.get('materials', [])],
            cutting_size=str(data.get('cuttingSize', '') or ''),
            total_price=float(data.get('totalPrice', 0.0)),
            created_at=str(data.get('createdAt', '')),
            notes=str(data.get('notes', '') or ''),
        )

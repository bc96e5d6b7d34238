"""
Design Catalog

CRUD over Design records kept most-recent-first in the Record Store, plus
the price lookup the billing engine uses to auto-fill bill items.
"""
from typing import Any, Dict, List, Optional

import config
from catalog.models import Design, Fabric, Material
from errors import LookupMiss
from storage.record_store import RecordStore
from utils.logger import get_logger


class DesignCatalog:
    """Catalog of garment designs backed by a RecordStore key."""

    def __init__(self, store: Optional[RecordStore] = None,
                 storage_key: str = config.DESIGNS_STORAGE_KEY):
        self.store = store or RecordStore()
        self.storage_key = storage_key
        self.logger = get_logger()
        self._designs: List[Design] = self._load()

    def _load(self) -> List[Design]:
        raw = self.store.get(self.storage_key, default=[]) or []
        designs = []
        for entry in raw:
            try:
                designs.append(Design.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                self.logger.warning(f"Skipping unreadable design record: {e}", component="Catalog")
        return designs

    def _persist(self) -> None:
        self.store.set(self.storage_key, [d.to_dict() for d in self._designs])

    def add(
        self,
        design_number: str,
        image: str,
        fabrics: Optional[List[Dict[str, Any]]] = None,
        materials: Optional[List[Dict[str, Any]]] = None,
        cutting_size: str = "",
        notes: str = "",
    ) -> Design:
        """
        Create a design from submitted form values and prepend it.

        Raises:
            ValidationError: design number or image missing, or a fabric /
                material value is not numeric.
        """
        design = Design.create(
            design_number=design_number,
            image=image,
            fabrics=[Fabric.from_dict(f) for f in (fabrics or [])],
            materials=[Material.from_dict(m) for m in (materials or [])],
            cutting_size=cutting_size,
            notes=notes,
        )
        self._designs.insert(0, design)
        self._persist()
        self.logger.log_design_added(design.id, design.design_number, design.total_price)
        return design

    def remove(self, design_id: str) -> bool:
        """Delete by id. Bills that reference the design number are not touched."""
        remaining = [d for d in self._designs if d.id != design_id]
        if len(remaining) == len(self._designs):
            return False
        self._designs = remaining
        self._persist()
        self.logger.log_design_removed(design_id)
        return True

    def get(self, design_id: str) -> Optional[Design]:
        for design in self._designs:
            if design.id == design_id:
                return design
        return None

    def list(self) -> List[Design]:
        return list(self._designs)

    def search(self, term: str = "") -> List[Design]:
        """Case-insensitive substring match on design number, stored order kept."""
        needle = (term or "").strip().lower()
        if not needle:
            return list(self._designs)
        return [d for d in self._designs if needle in d.design_number.lower()]

    def lookup_price(self, design_number: str) -> float:
        """
        Exact-match price lookup. Returns the first match's total price.

        Raises:
            LookupMiss: no design has this number.
        """
        design_number = (design_number or "").strip()
        for design in self._designs:
            if design.design_number == design_number:
                return design.total_price
        raise LookupMiss(design_number)

    def design_numbers(self) -> List[str]:
        """Distinct design numbers in stored order."""
        seen = set()
        numbers = []
        for design in self._designs:
            if design.design_number not in seen:
                seen.add(design.design_number)
                numbers.append(design.design_number)
        return numbers

    def __len__(self) -> int:
        return len(self._designs)

"""
Billing Data Models

Bill and BillItem keep only source fields. `amount`, `subtotal`,
`gst_amount` and `total` are computed on read, so they cannot drift from
the items and rate they are derived from.
"""
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

import config
from billing.gst_calculation import GSTCalculation

_bill_number_lock = threading.Lock()
_last_bill_ms = 0


def generate_bill_number(prefix: str = config.BILL_NUMBER_PREFIX) -> str:
    """
    Time-based bill number, unique within the process.

    Format: {PREFIX}-{epoch milliseconds}
    Example: BILL-1760861234567
    """
    global _last_bill_ms
    with _bill_number_lock:
        now_ms = int(time.time() * 1000)
        if now_ms <= _last_bill_ms:
            now_ms = _last_bill_ms + 1
        _last_bill_ms = now_ms
    return f"{prefix}-{now_ms}"


@dataclass
class BillItem:
    """One line of a bill: a design reference, quantity and unit price."""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    design_number: str = ""
    quantity: int = 1
    price: float = 0.0

    @property
    def amount(self) -> float:
        return GSTCalculation.line_amount(self.quantity, self.price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'designNumber': self.design_number,
            'quantity': self.quantity,
            'price': self.price,
            'amount': self.amount,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BillItem':
        return cls(
            id=str(data.get('id') or uuid.uuid4().hex),
            design_number=str(data.get('designNumber', '')),
            quantity=int(data.get('quantity', 1)),
            price=float(data.get('price', 0.0)),
        )


@dataclass
class Bill:
    """An invoice draft or a finalized copy of one."""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    bill_number: str = field(default_factory=generate_bill_number)
    date: str = field(default_factory=lambda: date.today().isoformat())
    customer_name: str = ""
    items: List[BillItem] = field(default_factory=list)
    gst_percentage: float = config.DEFAULT_GST_PERCENTAGE

    @property
    def subtotal(self) -> float:
        return GSTCalculation.subtotal(item.amount for item in self.items)

    @property
    def gst_amount(self) -> float:
        return GSTCalculation.gst_amount(self.subtotal, self.gst_percentage)

    @property
    def total(self) -> float:
        subtotal = self.subtotal
        return subtotal + GSTCalculation.gst_amount(subtotal, self.gst_percentage)

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot including the derived totals."""
        return {
            'id': self.id,
            'billNumber': self.bill_number,
            'date': self.date,
            'customerName': self.customer_name,
            'items': [item.to_dict() for item in self.items],
            'gstPercentage': self.gst_percentage,
            'subtotal': self.subtotal,
            'gstAmount': self.gst_amount,
            'total': self.total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Bill':
        """Restore from a snapshot; stored totals are ignored and re-derived."""
        return cls(
            id=str(data.get('id') or uuid.uuid4().hex),
            bill_number=str(data['billNumber']),
            date=str(data.get('date', '')),
            customer_name=str(data.get('customerName', '')),
            items=[BillItem.from_dict(i) for i in data.get('items', [])],
            gst_percentage=float(data.get('gstPercentage', config.DEFAULT_GST_PERCENTAGE)),
        )

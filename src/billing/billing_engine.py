"""
Billing Computation Engine

Owns the single mutable draft bill and the session's saved bills.

Every mutating operation validates its input first and only then touches
the draft, so a rejected edit leaves the bill exactly as it was. Totals are
derived from the items on read (see billing.models), which keeps
subtotal / GST / total consistent after any sequence of edits.
"""
import copy
from datetime import date
from typing import Any, Awaitable, List, Optional

import config
from billing.gst_calculation import GSTCalculation
from billing.models import Bill, BillItem
from catalog.design_catalog import DesignCatalog
from errors import LookupMiss, ValidationError
from utils.logger import get_logger

# Accepted spellings for item fields (form field names and attribute names)
ITEM_FIELDS = {
    'designNumber': 'design_number',
    'design_number': 'design_number',
    'quantity': 'quantity',
    'price': 'price',
}


class BillingEngine:
    """Draft-bill state machine with catalog-backed price auto-fill."""

    def __init__(self, catalog: DesignCatalog, ledger=None,
                 default_gst_percentage: float = None):
        self.catalog = catalog
        self.ledger = ledger
        self.calc = GSTCalculation()
        self.default_gst_percentage = (
            config.DEFAULT_GST_PERCENTAGE if default_gst_percentage is None
            else self.calc.parse_percentage(default_gst_percentage)
        )
        self.logger = get_logger()
        self._saved: List[Bill] = []
        self.draft: Bill = self._fresh_bill()

    def _fresh_bill(self) -> Bill:
        return Bill(gst_percentage=self.default_gst_percentage)

    def _item_at(self, index: int) -> BillItem:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.draft.items):
            raise ValidationError(f"No bill item at index {index}", field='index')
        return self.draft.items[index]

    # ------------------------------------------------------------------
    # Draft lifecycle
    # ------------------------------------------------------------------

    def new_draft(self) -> Bill:
        """Discard the current draft and start an empty one."""
        self.draft = self._fresh_bill()
        return self.draft

    def add_item(self) -> BillItem:
        """Append a blank quantity-1, zero-priced line."""
        item = BillItem()
        self.draft.items.append(item)
        return item

    def remove_item(self, index: int) -> BillItem:
        item = self._item_at(index)
        del self.draft.items[index]
        return item

    def set_item_field(self, index: int, field: str, value: Any) -> BillItem:
        """
        Update one field of a line item.

        Selecting a design number copies that design's total price into the
        item before the amount is re-derived. A number with no matching
        design leaves the entered price alone.

        Raises:
            ValidationError: unknown field, bad index, or a quantity / price
                outside the numeric policy. The draft is left unchanged.
        """
        attr = ITEM_FIELDS.get(field)
        if attr is None:
            raise ValidationError(f"Unknown bill item field: {field!r}", field=field)
        item = self._item_at(index)

        if attr == 'design_number':
            design_number = "" if value is None else str(value).strip()
            try:
                item.price = self.calc.parse_price(self.catalog.lookup_price(design_number))
            except LookupMiss:
                self.logger.debug(f"No design '{design_number}', price kept", component="Billing")
            item.design_number = design_number
        elif attr == 'quantity':
            item.quantity = self.calc.parse_quantity(value)
        else:
            item.price = self.calc.parse_price(value)

        return item

    def set_gst_percentage(self, value: Any) -> float:
        """Change the bill-wide GST rate. Items and subtotal are untouched."""
        self.draft.gst_percentage = self.calc.parse_percentage(value)
        return self.draft.gst_percentage

    def set_customer_name(self, name: str) -> None:
        self.draft.customer_name = (name or "").strip()

    def set_date(self, value: str) -> None:
        """Set the bill date from an ISO yyyy-mm-dd string."""
        try:
            self.draft.date = date.fromisoformat(str(value)).isoformat()
        except ValueError:
            raise ValidationError(f"Invalid bill date: {value!r}", field='date')

    # ------------------------------------------------------------------
    # Finalizing
    # ------------------------------------------------------------------

    def save_draft(self) -> Bill:
        """
        Finalize the draft: store a deep copy and start a new draft.

        Raises:
            ValidationError: customer name is blank or there are no items.
        """
        if not self.draft.customer_name.strip():
            raise ValidationError("Customer name is required", field='customerName')
        if not self.draft.items:
            raise ValidationError("A bill needs at least one item", field='items')

        saved = copy.deepcopy(self.draft)
        if self.ledger is not None:
            self.ledger.append(saved)
        self._saved.append(saved)
        self.logger.log_bill_saved(saved.bill_number, saved.customer_name, len(saved.items), saved.total)

        self.new_draft()
        return copy.deepcopy(saved)

    @property
    def saved_bills(self) -> List[Bill]:
        """Copies of the bills saved this session, oldest first."""
        return copy.deepcopy(self._saved)

    def find_saved(self, bill_number: str) -> Optional[Bill]:
        for bill in self._saved:
            if bill.bill_number == bill_number:
                return copy.deepcopy(bill)
        return None

    def snapshot(self) -> dict:
        """Render-ready copy of the current draft."""
        return self.draft.to_dict()

    def export_draft(self, exporter, fmt: str = 'pdf') -> Awaitable[str]:
        """
        Hand a snapshot of the draft to the export adapter.

        The snapshot is taken when this is called, so edits made before the
        returned awaitable completes do not affect the exported file.

        Raises (when awaited):
            ExportError: the adapter failed or timed out.
        """
        return exporter.export(self.snapshot(), fmt=fmt)

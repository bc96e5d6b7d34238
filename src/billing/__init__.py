"""
Billing module for Stitchbook
Draft bills, GST arithmetic and the saved-bill ledger
"""

from .models import Bill, BillItem
from .billing_engine import BillingEngine
from .bill_ledger import BillLedger

__all__ = ['Bill', 'BillItem', 'BillingEngine', 'BillLedger']

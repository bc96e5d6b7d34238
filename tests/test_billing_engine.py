"""
Tests for the billing engine: draft editing, price auto-fill from the
catalog, GST arithmetic, numeric input policy and saving.
All test artifacts use temp directories and are cleaned up after.
"""
import math
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

# Ensure src/ is on path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))

from billing.billing_engine import BillingEngine
from billing.gst_calculation import GSTCalculation, format_money
from catalog.design_catalog import DesignCatalog
from errors import ValidationError
from storage.record_store import RecordStore


class BillingTestCase(unittest.TestCase):
    """Engine wired to a temp-dir catalog holding two designs."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp(prefix="stitchbook_test_billing_")
        self.catalog = DesignCatalog(store=RecordStore(data_dir=self.temp_dir))
        self.catalog.add("452", "img://452", materials=[{"name": "Silk", "price": "75.5"}])
        self.catalog.add("300", "img://300", fabrics=[{"type": "Cotton", "usage": "2", "pricePerMeter": "15"}])
        self.engine = BillingEngine(self.catalog, default_gst_percentage=18)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _fill_item(self, quantity, price):
        index = len(self.engine.draft.items)
        self.engine.add_item()
        self.engine.set_item_field(index, 'quantity', quantity)
        self.engine.set_item_field(index, 'price', price)
        return index


class TestBillTotals(BillingTestCase):

    def test_new_draft_defaults(self):
        draft = self.engine.draft
        self.assertEqual(draft.items, [])
        self.assertEqual(draft.gst_percentage, 18)
        self.assertEqual(draft.subtotal, 0)
        self.assertEqual(draft.total, 0)
        self.assertTrue(draft.bill_number.startswith("BILL-"))

    def test_added_item_is_blank(self):
        item = self.engine.add_item()
        self.assertEqual(item.quantity, 1)
        self.assertEqual(item.price, 0)
        self.assertEqual(item.amount, 0)
        self.assertEqual(item.design_number, "")

    def test_subtotal_gst_and_total(self):
        self._fill_item(2, 50)
        self._fill_item(1, 30)
        draft = self.engine.draft
        self.assertAlmostEqual(draft.subtotal, 130.0)
        self.assertAlmostEqual(draft.gst_amount, 23.4)
        self.assertAlmostEqual(draft.total, 153.4)

    def test_gst_change_keeps_subtotal(self):
        self._fill_item(2, 50)
        self._fill_item(1, 30)
        self.engine.set_gst_percentage("5")
        draft = self.engine.draft
        self.assertAlmostEqual(draft.subtotal, 130.0)
        self.assertAlmostEqual(draft.gst_amount, 6.5)
        self.assertAlmostEqual(draft.total, 136.5)

    def test_totals_follow_removal(self):
        self._fill_item(2, 50)
        self._fill_item(1, 30)
        self.engine.remove_item(0)
        self.assertAlmostEqual(self.engine.draft.subtotal, 30.0)
        self.assertAlmostEqual(self.engine.draft.total, 35.4)

    def test_snapshot_contains_derived_fields(self):
        self._fill_item(3, 10)
        snap = self.engine.snapshot()
        self.assertEqual(snap['items'][0]['amount'], 30)
        self.assertAlmostEqual(snap['subtotal'], 30)
        self.assertAlmostEqual(snap['gstAmount'], 5.4)
        self.assertIn('billNumber', snap)

    def test_format_money(self):
        self.assertEqual(format_money(153.4), "153.40")
        self.assertEqual(format_money(1234567.891), "1,234,567.89")


class TestPriceAutoFill(BillingTestCase):

    def test_design_number_fills_price(self):
        self.engine.add_item()
        self.engine.set_item_field(0, 'quantity', 2)
        item = self.engine.set_item_field(0, 'designNumber', "452")
        self.assertEqual(item.price, 75.5)
        self.assertEqual(item.design_number, "452")
        self.assertAlmostEqual(item.amount, 151.0)

    def test_fabric_priced_design(self):
        self.engine.add_item()
        item = self.engine.set_item_field(0, 'designNumber', "300")
        self.assertEqual(item.price, 30.0)

    def test_unknown_design_keeps_price(self):
        self.engine.add_item()
        self.engine.set_item_field(0, 'price', 42)
        item = self.engine.set_item_field(0, 'designNumber', "999")
        self.assertEqual(item.design_number, "999")
        self.assertEqual(item.price, 42)

    def test_price_can_be_overridden_after_fill(self):
        self.engine.add_item()
        self.engine.set_item_field(0, 'designNumber', "452")
        item = self.engine.set_item_field(0, 'price', "60")
        self.assertEqual(item.price, 60.0)

    def test_design_number_is_trimmed(self):
        self.engine.add_item()
        item = self.engine.set_item_field(0, 'designNumber', "  452 ")
        self.assertEqual(item.design_number, "452")
        self.assertEqual(item.price, 75.5)

    def test_overpriced_design_not_copied(self):
        self.catalog.add("900", "img://900", materials=[{"name": "Zari", "price": "20000000"}])
        self.engine.add_item()
        self.engine.set_item_field(0, 'price', 10)
        with self.assertRaises(ValidationError):
            self.engine.set_item_field(0, 'designNumber', "900")
        item = self.engine.draft.items[0]
        self.assertEqual(item.design_number, "")
        self.assertEqual(item.price, 10)


class TestInputPolicy(BillingTestCase):

    def test_rejected_quantity_leaves_draft_unchanged(self):
        self._fill_item(2, 50)
        before = self.engine.snapshot()
        for bad in ("abc", "", None, 0, -1, 1.5, float("nan"), True):
            with self.assertRaises(ValidationError):
                self.engine.set_item_field(0, 'quantity', bad)
        self.assertEqual(self.engine.snapshot(), before)

    def test_rejected_price(self):
        self._fill_item(1, 10)
        for bad in ("", "x", -5, float("inf")):
            with self.assertRaises(ValidationError) as ctx:
                self.engine.set_item_field(0, 'price', bad)
            self.assertEqual(ctx.exception.field, "price")
        self.assertEqual(self.engine.draft.items[0].price, 10)

    def test_numeric_strings_accepted(self):
        self.engine.add_item()
        self.engine.set_item_field(0, 'quantity', "3")
        self.engine.set_item_field(0, 'price', "1,250.50")
        self.assertAlmostEqual(self.engine.draft.items[0].amount, 3751.5)

    def test_oversized_values_rejected(self):
        self._fill_item(1, 10)
        before = self.engine.snapshot()
        for bad in ("1e308", 1e300, 10000000.01):
            with self.assertRaises(ValidationError) as ctx:
                self.engine.set_item_field(0, 'price', bad)
            self.assertEqual(ctx.exception.field, "price")
        with self.assertRaises(ValidationError):
            self.engine.set_item_field(0, 'quantity', 100001)
        self.assertEqual(self.engine.snapshot(), before)

    def test_largest_accepted_values_keep_totals_finite(self):
        self._fill_item(100000, 10000000)
        for pct in (0, 100):
            self.engine.set_gst_percentage(pct)
            snap = self.engine.snapshot()
            for key in ("subtotal", "gstAmount", "total"):
                self.assertTrue(math.isfinite(snap[key]), key)

    def test_gst_out_of_range(self):
        for bad in (-1, 101, "abc", ""):
            with self.assertRaises(ValidationError):
                self.engine.set_gst_percentage(bad)
        self.assertEqual(self.engine.draft.gst_percentage, 18)

    def test_unknown_field_and_bad_index(self):
        self.engine.add_item()
        with self.assertRaises(ValidationError):
            self.engine.set_item_field(0, 'colour', "red")
        with self.assertRaises(ValidationError):
            self.engine.set_item_field(5, 'quantity', 2)
        with self.assertRaises(ValidationError):
            self.engine.remove_item(-1)

    def test_invalid_date(self):
        with self.assertRaises(ValidationError):
            self.engine.set_date("19/10/2026")
        self.engine.set_date("2026-10-19")
        self.assertEqual(self.engine.draft.date, "2026-10-19")

    def test_calculation_percentage_bounds(self):
        calc = GSTCalculation()
        self.assertEqual(calc.parse_percentage(0), 0)
        self.assertEqual(calc.parse_percentage("100"), 100)


class TestSaveDraft(BillingTestCase):

    def test_save_requires_customer(self):
        self._fill_item(1, 10)
        with self.assertRaises(ValidationError) as ctx:
            self.engine.save_draft()
        self.assertEqual(ctx.exception.field, "customerName")
        self.assertEqual(self.engine.saved_bills, [])

    def test_save_requires_items(self):
        self.engine.set_customer_name("Asha")
        with self.assertRaises(ValidationError) as ctx:
            self.engine.save_draft()
        self.assertEqual(ctx.exception.field, "items")

    def test_whitespace_customer_rejected(self):
        self._fill_item(1, 10)
        self.engine.set_customer_name("   ")
        with self.assertRaises(ValidationError):
            self.engine.save_draft()

    def test_save_resets_draft(self):
        self._fill_item(2, 50)
        self.engine.set_customer_name("Asha")
        old_number = self.engine.draft.bill_number

        saved = self.engine.save_draft()

        self.assertEqual(saved.bill_number, old_number)
        self.assertAlmostEqual(saved.total, 118.0)
        self.assertEqual(self.engine.draft.items, [])
        self.assertEqual(self.engine.draft.customer_name, "")
        self.assertNotEqual(self.engine.draft.bill_number, old_number)
        self.assertEqual(len(self.engine.saved_bills), 1)

    def test_saved_bill_is_independent_of_draft(self):
        self._fill_item(1, 10)
        self.engine.set_customer_name("Asha")
        saved = self.engine.save_draft()
        saved.items[0].price = 999

        stored = self.engine.find_saved(saved.bill_number)
        self.assertEqual(stored.items[0].price, 10)

    def test_saved_bill_numbers_are_unique(self):
        numbers = set()
        for name in ("A", "B", "C"):
            self._fill_item(1, 10)
            self.engine.set_customer_name(name)
            numbers.add(self.engine.save_draft().bill_number)
        self.assertEqual(len(numbers), 3)

    def test_new_draft_discards_items(self):
        self._fill_item(1, 10)
        self.engine.new_draft()
        self.assertEqual(self.engine.draft.items, [])
        self.assertEqual(self.engine.draft.gst_percentage, 18)


if __name__ == "__main__":
    unittest.main()

"""
Tests for bill export to PDF and CSV.
All generated files go to temp directories and are cleaned up after.
"""
import asyncio
import csv
import os
import shutil
import sys
import tempfile
import time
import unittest
from pathlib import Path
from unittest.mock import patch

# Ensure src/ is on path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))

from billing.billing_engine import BillingEngine
from catalog.design_catalog import DesignCatalog
from errors import ExportError
from exports.bill_exporter import BillExporter
from storage.record_store import RecordStore


class TestBillExporter(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp(prefix="stitchbook_test_export_")
        self.output_dir = os.path.join(self.temp_dir, "exports")
        catalog = DesignCatalog(store=RecordStore(data_dir=os.path.join(self.temp_dir, "data")))
        catalog.add("452", "img://452", materials=[{"name": "Silk", "price": "50"}])

        self.engine = BillingEngine(catalog, default_gst_percentage=18)
        self.engine.set_customer_name("Asha <Tailors> & Co")
        for number, qty in (("452", 2), ("999", 1)):
            index = len(self.engine.draft.items)
            self.engine.add_item()
            self.engine.set_item_field(index, 'price', 30)
            self.engine.set_item_field(index, 'designNumber', number)
            self.engine.set_item_field(index, 'quantity', qty)

        self.exporter = BillExporter(output_dir=self.output_dir, timeout_seconds=10, shop_name="Test Shop")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    async def test_pdf_named_after_bill_number(self):
        snapshot = self.engine.snapshot()
        path = await self.engine.export_draft(self.exporter, fmt='pdf')

        self.assertTrue(os.path.exists(path))
        self.assertEqual(os.path.basename(path), f"{snapshot['billNumber']}.pdf")
        self.assertGreater(os.path.getsize(path), 500)
        with open(path, 'rb') as f:
            self.assertEqual(f.read(4), b'%PDF')

    async def test_csv_contents(self):
        path = await self.exporter.export(self.engine.snapshot(), fmt='csv')

        with open(path, newline='', encoding='utf-8-sig') as f:
            rows = list(csv.reader(f))

        self.assertEqual(rows[2], ['Customer', 'Asha <Tailors> & Co'])
        self.assertEqual(rows[5], ['1', '452', '2', '50.00', '100.00'])
        self.assertEqual(rows[6], ['2', '999', '1', '30.00', '30.00'])
        self.assertEqual(rows[-3][-1], '130.00')
        self.assertEqual(rows[-2][-2:], ['GST (18%)', '23.40'])
        self.assertEqual(rows[-1][-1], '153.40')

    async def test_export_does_not_touch_draft(self):
        before = self.engine.snapshot()
        await self.engine.export_draft(self.exporter, fmt='pdf')
        self.assertEqual(self.engine.snapshot(), before)

    async def test_unsupported_format(self):
        with self.assertRaises(ExportError):
            await self.exporter.export(self.engine.snapshot(), fmt='xlsx')

    async def test_render_failure_becomes_export_error(self):
        with patch.object(BillExporter, 'generate_pdf', side_effect=OSError("disk full")):
            with self.assertRaises(ExportError) as ctx:
                await self.exporter.export(self.engine.snapshot(), fmt='pdf')
        self.assertIn("disk full", str(ctx.exception))

    async def test_timeout_becomes_export_error(self):
        def slow_render(*args, **kwargs):
            time.sleep(0.5)

        exporter = BillExporter(output_dir=self.output_dir, timeout_seconds=0.01)
        with patch.object(BillExporter, 'generate_pdf', side_effect=slow_render):
            with self.assertRaises(ExportError) as ctx:
                await exporter.export(self.engine.snapshot(), fmt='pdf')
        self.assertIn("timed out", str(ctx.exception))

    async def test_edits_during_export_do_not_reach_file(self):
        pending = asyncio.ensure_future(self.engine.export_draft(self.exporter, fmt='csv'))
        self.engine.set_item_field(0, 'quantity', 7)
        self.engine.set_item_field(1, 'price', 999)
        path = await pending

        with open(path, newline='', encoding='utf-8-sig') as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[5][2], '2')
        self.assertEqual(rows[6][3], '30.00')
        self.assertEqual(rows[-1][-1], '153.40')

    async def test_currency_symbol_in_headers(self):
        exporter = BillExporter(output_dir=self.output_dir, currency_symbol="INR")
        path = await exporter.export(self.engine.snapshot(), fmt='csv')
        with open(path, newline='', encoding='utf-8-sig') as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[4], ['S.N', 'Design No.', 'Qty', 'Price (INR)', 'Amount (INR)'])

    def test_generate_pdf_custom_path(self):
        target = os.path.join(self.temp_dir, "custom.pdf")
        path = self.exporter.generate_pdf(self.engine.snapshot(), output_path=target)
        self.assertEqual(path, os.path.abspath(target))
        self.assertTrue(os.path.exists(target))


if __name__ == "__main__":
    unittest.main()

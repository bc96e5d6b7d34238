"""
Tests for the design catalog: add/remove/search, pricing snapshot,
price lookup and persistence through the record store.
"""
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

# Ensure src/ is on path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))

from catalog.design_catalog import DesignCatalog
from catalog.models import Design, Fabric, Material, compute_total_price
from errors import LookupMiss, ValidationError
from storage.record_store import RecordStore


class TestDesignModel(unittest.TestCase):

    def test_total_price_from_fabrics_and_materials(self):
        fabrics = [Fabric("Silk", "2.5", 100.0), Fabric("Lining", "", 40.0)]
        materials = [Material("Buttons", "12", 30.0), Material("Zip", "1", 15.5)]
        self.assertAlmostEqual(compute_total_price(fabrics, materials), 295.5)

    def test_empty_design_costs_nothing(self):
        design = Design.create("D1", "img://1")
        self.assertEqual(design.total_price, 0.0)
        self.assertTrue(design.id)
        self.assertTrue(design.created_at)

    def test_required_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            Design.create("  ", "img://1")
        self.assertEqual(ctx.exception.field, "designNumber")
        with self.assertRaises(ValidationError) as ctx:
            Design.create("452", "")
        self.assertEqual(ctx.exception.field, "image")

    def test_dict_uses_stored_field_names(self):
        design = Design.create("452", "img://452", fabrics=[Fabric("Silk", "2", 50.0)], cutting_size="M")
        data = design.to_dict()
        self.assertEqual(data['designNumber'], "452")
        self.assertEqual(data['cuttingSize'], "M")
        self.assertEqual(data['totalPrice'], 100.0)
        self.assertEqual(data['fabrics'][0]['pricePerMeter'], 50.0)
        self.assertEqual(Design.from_dict(data), design)


class TestDesignCatalog(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp(prefix="stitchbook_test_catalog_")
        self.store = RecordStore(data_dir=self.temp_dir)
        self.catalog = DesignCatalog(store=self.store)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_new_designs_are_prepended(self):
        self.catalog.add("101", "img://a")
        self.catalog.add("102", "img://b")
        self.assertEqual([d.design_number for d in self.catalog.list()], ["102", "101"])

    def test_add_computes_total(self):
        design = self.catalog.add(
            "452", "img://452",
            fabrics=[{"type": "Silk", "usage": "2", "pricePerMeter": "120"}],
            materials=[{"name": "Buttons", "quantity": "6", "price": "18"}],
        )
        self.assertAlmostEqual(design.total_price, 258.0)

    def test_invalid_numbers_rejected(self):
        with self.assertRaises(ValidationError):
            self.catalog.add("452", "img://452", fabrics=[{"type": "Silk", "usage": "two", "pricePerMeter": "10"}])
        with self.assertRaises(ValidationError):
            self.catalog.add("452", "img://452", materials=[{"name": "Zip", "price": "abc"}])
        self.assertEqual(len(self.catalog), 0)

    def test_missing_design_number_not_added(self):
        with self.assertRaises(ValidationError):
            self.catalog.add("", "img://a")
        self.assertEqual(self.catalog.list(), [])

    def test_search(self):
        self.catalog.add("A-452", "img://1")
        self.catalog.add("b-999", "img://2")
        self.catalog.add("a-453", "img://3")

        self.assertEqual(len(self.catalog.search("")), 3)
        self.assertEqual(len(self.catalog.search("   ")), 3)
        self.assertEqual([d.design_number for d in self.catalog.search("a-45")], ["a-453", "A-452"])
        self.assertEqual([d.design_number for d in self.catalog.search("B-9")], ["b-999"])
        self.assertEqual(self.catalog.search("777"), [])

    def test_remove(self):
        design = self.catalog.add("101", "img://a")
        self.assertTrue(self.catalog.remove(design.id))
        self.assertFalse(self.catalog.remove(design.id))
        self.assertIsNone(self.catalog.get(design.id))

    def test_lookup_price(self):
        self.catalog.add("452", "img://old", materials=[{"name": "Silk", "price": "50"}])
        self.catalog.add("452", "img://new", materials=[{"name": "Silk", "price": "80"}])
        # most recent design with the number wins
        self.assertEqual(self.catalog.lookup_price("452"), 80.0)

    def test_lookup_ignores_surrounding_whitespace(self):
        self.catalog.add(" 452 ", "img://a", materials=[{"name": "Silk", "price": "50"}])
        self.assertEqual(self.catalog.list()[0].design_number, "452")
        self.assertEqual(self.catalog.lookup_price(" 452"), 50.0)

    def test_overflowing_cost_rejected(self):
        with self.assertRaises(ValidationError):
            self.catalog.add("452", "img://a", fabrics=[{"type": "Silk", "usage": "1e200", "pricePerMeter": "1e200"}])
        self.assertEqual(len(self.catalog), 0)

    def test_lookup_is_exact(self):
        self.catalog.add("452", "img://a", materials=[{"name": "Silk", "price": "50"}])
        with self.assertRaises(LookupMiss):
            self.catalog.lookup_price("45")
        with self.assertRaises(LookupMiss):
            self.catalog.lookup_price("")

    def test_persists_across_instances(self):
        self.catalog.add("101", "img://a", cutting_size="L", notes="collar")
        self.catalog.add("102", "img://b")

        reloaded = DesignCatalog(store=RecordStore(data_dir=self.temp_dir))
        self.assertEqual([d.design_number for d in reloaded.list()], ["102", "101"])
        self.assertEqual(reloaded.list()[1].notes, "collar")

    def test_design_numbers_are_distinct(self):
        self.catalog.add("101", "img://a")
        self.catalog.add("101", "img://b")
        self.catalog.add("102", "img://c")
        self.assertEqual(self.catalog.design_numbers(), ["102", "101"])


if __name__ == "__main__":
    unittest.main()

"""
Tests for soft delete / reactivation rules.
"""
import unittest
from types import SimpleNamespace

from app.core.errors import ValidationError
from app.service.lifecycle_service import reactivate, soft_delete


class Rack(SimpleNamespace):
    pass


class TestSoftDelete(unittest.TestCase):
    def test_blocked_by_live_children(self):
        rack = Rack(is_deleted=False, deleted_at=None)
        with self.assertRaises(ValidationError) as ctx:
            soft_delete(rack, 1, "shelves", "u1")
        self.assertIn("active shelves", ctx.exception.message)
        self.assertEqual(ctx.exception.status_code, 400)
        # ничего не записали
        self.assertFalse(rack.is_deleted)
        self.assertIsNone(rack.deleted_at)

    def test_marks_deleted(self):
        rack = Rack(is_deleted=False, deleted_at=None, updated_by=None, updated_at=None)
        soft_delete(rack, 0, "shelves", "u1")
        self.assertTrue(rack.is_deleted)
        self.assertIsNotNone(rack.deleted_at)
        self.assertEqual(rack.updated_by, "u1")


class TestReactivate(unittest.TestCase):
    def test_overwrites_fields_and_resets_stats(self):
        rack = Rack(
            is_deleted=True,
            deleted_at="yesterday",
            name="Old",
            position=9,
            total_shelves=4,
            total_products=12,
        )
        reactivate(rack, {"name": "New", "position": 2}, ("total_shelves", "total_products"), "u2")
        self.assertFalse(rack.is_deleted)
        self.assertIsNone(rack.deleted_at)
        self.assertEqual(rack.name, "New")
        self.assertEqual(rack.position, 2)
        self.assertEqual((rack.total_shelves, rack.total_products), (0, 0))
        self.assertEqual(rack.updated_by, "u2")


if __name__ == "__main__":
    unittest.main()

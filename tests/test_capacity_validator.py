import unittest

from database.models import Warehouse
from enums.space_type import SpaceType
from exceptions import (
    ExceedsWarehouseCapacity,
    InsufficientSpace,
    InvalidArea,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from services.capacity_service import CapacityService, CapacityValidator
from tests.support import DatabaseTestCase, warehouse


class TestCapacityValidator(unittest.TestCase):
    def setUp(self):
        self.validator = CapacityValidator()

    def test_request_within_available_space(self):
        check = self.validator.validate_booking(warehouse(1000, 400), SpaceType.GROUND_FLOOR, 600)
        self.assertEqual(check.available, 600)
        self.assertEqual(check.remaining_after, 0)

    def test_insufficient_space_reports_excess(self):
        with self.assertRaises(InsufficientSpace) as ctx:
            self.validator.validate_booking(warehouse(1000, 900), SpaceType.GROUND_FLOOR, 150)

        error = ctx.exception
        self.assertEqual(error.available, 100)
        self.assertEqual(error.requested, 150)
        self.assertEqual(error.excess, 50)
        self.assertEqual(error.status_code, 409)
        self.assertEqual(error.details()["excess"], 50)

    def test_request_above_floor_total(self):
        # Negative occupancy leaves more available than the floor holds
        with self.assertRaises(ExceedsWarehouseCapacity):
            self.validator.validate_booking(warehouse(1000, -500), SpaceType.GROUND_FLOOR, 1200)

    def test_non_positive_area(self):
        for area in (0, -5, None):
            with self.assertRaises(InvalidArea):
                self.validator.validate_booking(warehouse(), SpaceType.GROUND_FLOOR, area)

    def test_mezzanine_figures(self):
        mezzanine = warehouse(has_mezzanine=True, mezzanine=300, mezzanine_occupied=100)
        check = self.validator.validate_booking(mezzanine, SpaceType.MEZZANINE, 200)
        self.assertEqual((check.total, check.occupied), (300, 100))

        with self.assertRaises(InsufficientSpace):
            self.validator.validate_booking(mezzanine, SpaceType.MEZZANINE, 201)

    def test_missing_figures_fail_closed(self):
        with self.assertRaises(ValidationError):
            self.validator.validate_booking(warehouse(total=None), SpaceType.GROUND_FLOOR, 10)
        with self.assertRaises(ValidationError):
            self.validator.validate_booking(
                warehouse(has_mezzanine=True, mezzanine=None, mezzanine_occupied=0),
                SpaceType.MEZZANINE,
                10,
            )

    def test_warehouse_without_mezzanine(self):
        with self.assertRaises(ValidationError):
            self.validator.validate_booking(warehouse(), SpaceType.MEZZANINE, 10)

    def test_office_is_not_capacity_checked(self):
        with self.assertRaises(ValidationError):
            self.validator.validate_booking(warehouse(), SpaceType.OFFICE, 10)

    def test_availability(self):
        availability = self.validator.availability(warehouse(1000, 250), SpaceType.GROUND_FLOOR)
        self.assertEqual(availability["available_space"], 750)
        self.assertEqual(availability["utilization_percentage"], 25.0)
        self.assertEqual(availability["space_type"], "Ground Floor")


class TestCapacityService(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.service = CapacityService()

    def test_reserve_and_release(self):
        warehouse_row = self.create_warehouse(total=1000, occupied=200)

        self.service.reserve(self.db, warehouse_row.id, SpaceType.GROUND_FLOOR, 300)
        self.db.commit()
        self.assertEqual(self.db.get(Warehouse, warehouse_row.id).occupied_space, 500)

        self.service.release(self.db, warehouse_row.id, SpaceType.GROUND_FLOOR, 500)
        self.db.commit()
        self.assertEqual(self.db.get(Warehouse, warehouse_row.id).occupied_space, 0)

    def test_reserve_rejects_overbooking(self):
        warehouse_row = self.create_warehouse(total=1000, occupied=900)
        with self.assertRaises(InsufficientSpace):
            self.service.reserve(self.db, warehouse_row.id, SpaceType.GROUND_FLOOR, 150)
        self.db.rollback()
        self.assertEqual(self.db.get(Warehouse, warehouse_row.id).occupied_space, 900)

    def test_release_never_goes_negative(self):
        warehouse_row = self.create_warehouse(total=1000, occupied=100)
        with self.assertRaises(PersistenceError):
            self.service.release(self.db, warehouse_row.id, SpaceType.GROUND_FLOOR, 150)

    def test_mezzanine_reservation(self):
        warehouse_row = self.create_warehouse(total=1000, has_mezzanine=True, mezzanine=200)
        self.service.reserve(self.db, warehouse_row.id, SpaceType.MEZZANINE, 200)
        self.db.commit()

        stored = self.db.get(Warehouse, warehouse_row.id)
        self.assertEqual(stored.mezzanine_occupied, 200)
        self.assertEqual(stored.occupied_space, 0)

    def test_unknown_warehouse(self):
        with self.assertRaises(NotFoundError):
            self.service.availability(self.db, 404, SpaceType.GROUND_FLOOR)

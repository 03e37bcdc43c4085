from database.init import SessionLocal
from database.models import User, Warehouse
from enums.space_type import SpaceType
from exceptions import InsufficientSpace, ValidationError
from schemas.warehouse_schema import WarehouseUpdate
from services.booking_service import BookingService
from services.warehouse_service import WarehouseService
from tests.support import DatabaseTestCase, booking_request


class TestWarehouseUpdates(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.service = WarehouseService()
        self.bookings = BookingService()
        self.user = self.create_user()
        self.warehouse = self.create_warehouse(total=1000)

    def stored(self):
        self.db.expire_all()
        return self.db.get(Warehouse, self.warehouse.id)

    def test_shrink_above_occupancy_is_applied(self):
        self.bookings.create(self.db, booking_request(self.warehouse.id, area=600), self.user)

        updated = self.service.update_warehouse(
            self.db, self.warehouse, WarehouseUpdate(total_space=700, name="Sitra A (east)")
        )

        self.assertEqual(updated.total_space, 700)
        self.assertEqual(updated.occupied_space, 600)
        self.assertEqual(updated.name, "Sitra A (east)")

    def test_shrink_below_occupancy_committed_elsewhere_is_refused(self):
        # self.warehouse was loaded before the other session booked
        other = SessionLocal()
        try:
            self.bookings.create(
                other, booking_request(self.warehouse.id, area=600), other.get(User, self.user.id)
            )
        finally:
            other.close()

        with self.assertRaises(ValidationError):
            self.service.update_warehouse(self.db, self.warehouse, WarehouseUpdate(total_space=500))

        stored = self.stored()
        self.assertEqual(stored.total_space, 1000)
        self.assertEqual(stored.occupied_space, 600)
        self.assertLessEqual(stored.occupied_space, stored.total_space)

    def test_occupancy_held_by_bookings_cannot_be_overwritten(self):
        self.bookings.create(self.db, booking_request(self.warehouse.id, area=600), self.user)

        with self.assertRaises(ValidationError):
            self.service.update_warehouse(self.db, self.warehouse, WarehouseUpdate(occupied_space=0))
        self.assertEqual(self.stored().occupied_space, 600)

        with self.assertRaises(InsufficientSpace):
            self.bookings.create(self.db, booking_request(self.warehouse.id, area=1000), self.user)
        self.assertEqual(self.stored().occupied_space, 600)

    def test_occupancy_can_be_set_without_bookings(self):
        updated = self.service.update_warehouse(self.db, self.warehouse, WarehouseUpdate(occupied_space=250))
        self.assertEqual(updated.occupied_space, 250)

        with self.assertRaises(InsufficientSpace):
            self.bookings.create(self.db, booking_request(self.warehouse.id, area=800), self.user)

    def test_mezzanine_shrink_below_occupancy_is_refused(self):
        split = self.create_warehouse(total=1000, has_mezzanine=True, mezzanine=300)
        self.bookings.create(
            self.db, booking_request(split.id, area=250, space_type=SpaceType.MEZZANINE), self.user
        )
        self.db.refresh(split)

        with self.assertRaises(ValidationError):
            self.service.update_warehouse(self.db, split, WarehouseUpdate(mezzanine_space=200))

        self.db.expire_all()
        self.assertEqual(self.db.get(Warehouse, split.id).mezzanine_space, 300)

import threading
from datetime import date, timedelta

from database.init import SessionLocal
from database.models import Booking, StockItem, User, Warehouse
from enums.booking_status import BookingStatus
from enums.space_type import SpaceType
from enums.stock_status import StockStatus
from enums.tenure import Tenure
from exceptions import (
    InsufficientSpace,
    InvalidArea,
    InvalidDateRange,
    InvalidStatusTransition,
    ValidationError,
)
from schemas.booking_schema import BookingUpdate
from schemas.stock_schema import StockCreate
from services.booking_service import BookingService
from services.stock_service import StockService
from tests.support import DatabaseTestCase, booking_request


class TestBookingService(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.service = BookingService()
        self.user = self.create_user()
        self.warehouse = self.create_warehouse(total=1000)

    def occupied(self, column="occupied_space"):
        self.db.expire_all()
        return getattr(self.db.get(Warehouse, self.warehouse.id), column)

    def test_booking_starting_today_is_active(self):
        booking = self.service.create(self.db, booking_request(self.warehouse.id), self.user)

        self.assertEqual(booking.status, BookingStatus.ACTIVE.value)
        self.assertEqual(booking.tenure, Tenure.SHORT)
        self.assertTrue(booking.reference.startswith("BK-"))
        self.assertEqual(self.occupied(), 400)
        actions = [entry["details"].get("to") for entry in booking.modification_history[1:]]
        self.assertEqual(actions, ["validated", "committed", "active"])
        self.assertEqual(booking.modification_history[0]["action"], "created")

    def test_future_booking_stays_committed(self):
        booking = self.service.create(
            self.db,
            booking_request(self.warehouse.id, entry_date=date.today() + timedelta(days=10)),
            self.user,
        )
        self.assertEqual(booking.status, BookingStatus.COMMITTED.value)
        self.assertEqual(self.occupied(), 400)

        activated = self.service.activate_due(self.db, today=date.today() + timedelta(days=10))
        self.assertEqual(activated, 1)
        self.db.refresh(booking)
        self.assertEqual(booking.status, BookingStatus.ACTIVE.value)

    def test_tenure_follows_duration(self):
        short_stay = self.service.create(
            self.db,
            booking_request(self.warehouse.id, area=10, expected_exit_date=date.today() + timedelta(days=5)),
            self.user,
        )
        long_stay = self.service.create(
            self.db,
            booking_request(self.warehouse.id, area=10, expected_exit_date=None, duration_months=24),
            self.user,
        )
        self.assertEqual(short_stay.tenure, Tenure.VERY_SHORT)
        self.assertEqual(long_stay.tenure, Tenure.LONG)

    def test_booking_needs_exit_date_or_duration(self):
        with self.assertRaises(ValidationError):
            self.service.create(
                self.db, booking_request(self.warehouse.id, expected_exit_date=None), self.user
            )

    def test_exit_before_entry_is_rejected(self):
        with self.assertRaises(InvalidDateRange):
            self.service.create(
                self.db,
                booking_request(self.warehouse.id, expected_exit_date=date.today() - timedelta(days=1)),
                self.user,
            )

    def test_insufficient_space_leaves_nothing_behind(self):
        self.service.create(self.db, booking_request(self.warehouse.id, area=900), self.user)

        with self.assertRaises(InsufficientSpace) as ctx:
            self.service.create(self.db, booking_request(self.warehouse.id, area=150), self.user)

        self.assertEqual(ctx.exception.excess, 50)
        self.assertEqual(self.db.query(Booking).count(), 1)
        self.assertEqual(self.occupied(), 900)

    def test_non_positive_area(self):
        with self.assertRaises(InvalidArea):
            self.service.create(self.db, booking_request(self.warehouse.id, area=0), self.user)
        self.assertEqual(self.db.query(Booking).count(), 0)

    def test_inactive_warehouse_rejects_bookings(self):
        closed = self.create_warehouse(total=500, status="maintenance")
        with self.assertRaises(ValidationError):
            self.service.create(self.db, booking_request(closed.id, area=10), self.user)

    def test_mezzanine_booking_uses_mezzanine_counter(self):
        split = self.create_warehouse(total=1000, has_mezzanine=True, mezzanine=300)
        self.service.create(
            self.db,
            booking_request(split.id, area=250, space_type=SpaceType.MEZZANINE),
            self.user,
        )
        self.db.expire_all()
        stored = self.db.get(Warehouse, split.id)
        self.assertEqual(stored.mezzanine_occupied, 250)
        self.assertEqual(stored.occupied_space, 0)

    def test_growing_and_shrinking_area(self):
        booking = self.service.create(self.db, booking_request(self.warehouse.id), self.user)

        booking = self.service.update(self.db, booking, BookingUpdate(area_requested=700))
        self.assertEqual(self.occupied(), 700)

        booking = self.service.update(self.db, booking, BookingUpdate(area_requested=250, notes="Reduced"))
        self.assertEqual(self.occupied(), 250)
        self.assertEqual(booking.notes, "Reduced")
        self.assertEqual(booking.modification_history[-1]["details"]["previous_area"], 700)

    def test_growing_beyond_capacity_keeps_old_area(self):
        booking = self.service.create(self.db, booking_request(self.warehouse.id), self.user)

        with self.assertRaises(InsufficientSpace):
            self.service.update(self.db, booking, BookingUpdate(area_requested=1200))

        self.db.refresh(booking)
        self.assertEqual(booking.area_requested, 400)
        self.assertEqual(self.occupied(), 400)

    def test_invalid_transition(self):
        booking = self.service.create(self.db, booking_request(self.warehouse.id), self.user)
        with self.assertRaises(InvalidStatusTransition):
            self.service.change_status(self.db, booking, BookingStatus.VALIDATED)
        self.assertEqual(self.occupied(), 400)

    def test_completion_releases_space(self):
        booking = self.service.create(self.db, booking_request(self.warehouse.id), self.user)
        booking = self.service.change_status(self.db, booking, BookingStatus.COMPLETED)

        self.assertEqual(booking.status, BookingStatus.COMPLETED.value)
        self.assertEqual(self.occupied(), 0)
        with self.assertRaises(ValidationError):
            self.service.update(self.db, booking, BookingUpdate(area_requested=10))

    def test_cancel_releases_space_and_cancels_stock(self):
        booking = self.service.create(self.db, booking_request(self.warehouse.id), self.user)
        StockService().create(
            self.db,
            StockCreate(booking_id=booking.id, product_name="Tiles", product_type="Ceramics", quantity=40),
            booking,
            self.user,
        )

        booking = self.service.cancel(self.db, booking)

        self.assertEqual(booking.status, BookingStatus.CANCELLED.value)
        self.assertEqual(self.occupied(), 0)
        self.assertEqual(booking.modification_history[-1]["action"], "cancelled")
        stock = self.db.query(StockItem).filter(StockItem.booking_id == booking.id).one()
        self.assertEqual(stock.status, StockStatus.CANCELLED.value)

        with self.assertRaises(InvalidStatusTransition):
            self.service.cancel(self.db, booking)
        self.assertEqual(self.occupied(), 0)

    def test_concurrent_bookings_never_overbook(self):
        other = self.create_user(email="second@example.com")
        warehouse_id = self.warehouse.id
        user_ids = (self.user.id, other.id)
        barrier = threading.Barrier(2)
        outcomes = []
        lock = threading.Lock()

        def book(user_id):
            session = SessionLocal()
            try:
                user = session.get(User, user_id)
                barrier.wait()
                self.service.create(session, booking_request(warehouse_id, area=600), user)
                result = "booked"
            except InsufficientSpace:
                result = "rejected"
            finally:
                session.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=book, args=(uid,)) for uid in user_ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        self.assertEqual(sorted(outcomes), ["booked", "rejected"])
        self.assertEqual(self.occupied(), 600)
        self.assertEqual(self.db.query(Booking).count(), 1)

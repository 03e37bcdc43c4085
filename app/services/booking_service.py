import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.models.booking_model import Booking
from database.models.stock_model import StockItem
from database.models.user_model import User
from enums.booking_status import BookingStatus
from enums.space_type import SpaceType
from enums.stock_status import StockStatus
from enums.tenure import Tenure
from enums.warehouse_status import WarehouseStatus
from exceptions import (
    InvalidArea,
    InvalidDateRange,
    InvalidStatusTransition,
    NotFoundError,
    PersistenceError,
    StockAreaExceeded,
    ValidationError,
    WarehouseError,
)
from schemas.booking_schema import BookingCreate, BookingUpdate
from services.capacity_service import CapacityService
from services.quote_calculator import lease_duration
from services.stock_service import stock_area_in_use
from utils.id_generator import generate_booking_reference

logger = logging.getLogger(__name__)


def _history_entry(action: str, **details) -> dict:
    return {
        "action": action,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "details": details,
    }


class BookingService:
    def __init__(self):
        self.capacity_service = CapacityService()

    def get(self, db: Session, booking_id: int) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    def get_or_404(self, db: Session, booking_id: int) -> Booking:
        booking = self.get(db, booking_id)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def get_all(
        self, db: Session, status: Optional[BookingStatus] = None, skip: int = 0, limit: int = 100
    ) -> List[Booking]:
        query = db.query(Booking)
        if status is not None:
            query = query.filter(Booking.status == status.value)
        return query.order_by(Booking.created_at.desc(), Booking.id.desc()).offset(skip).limit(limit).all()

    def get_by_user(self, db: Session, user_id: int) -> List[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

    def get_by_warehouse(self, db: Session, warehouse_id: int, occupying_only: bool = True) -> List[Booking]:
        query = db.query(Booking).filter(Booking.warehouse_id == warehouse_id)
        if occupying_only:
            query = query.filter(
                Booking.status.in_([BookingStatus.COMMITTED.value, BookingStatus.ACTIVE.value])
            )
        return query.order_by(Booking.entry_date).all()

    def can_access(self, booking: Booking, user: User, staff: bool) -> bool:
        return staff or booking.user_id == user.id

    def derive_tenure(self, booking_in: BookingCreate) -> Tenure:
        if booking_in.expected_exit_date is not None:
            if booking_in.expected_exit_date <= booking_in.entry_date:
                raise InvalidDateRange(booking_in.entry_date, booking_in.expected_exit_date)
            duration = lease_duration(booking_in.entry_date, booking_in.expected_exit_date)
            return Tenure.for_months(duration.total_months)
        if booking_in.duration_months is not None:
            return Tenure.for_months(booking_in.duration_months)
        raise ValidationError("Either expected_exit_date or duration_months is required")

    def create(self, db: Session, booking_in: BookingCreate, user: User) -> Booking:
        """
        Validate, reserve and record a booking in one transaction.

        The booking passes requested -> validated -> committed, and straight on
        to active when the entry date has arrived. Any failure rolls back the
        booking row and the occupancy change together.
        """
        space_type = SpaceType(booking_in.space_type)
        try:
            warehouse = self.capacity_service.get_warehouse(db, booking_in.warehouse_id)
            if warehouse.status != WarehouseStatus.ACTIVE.value:
                raise ValidationError(f"Warehouse '{warehouse.name}' is not accepting bookings ({warehouse.status})")
            if booking_in.area_requested is None or booking_in.area_requested <= 0:
                raise InvalidArea(booking_in.area_requested)
            tenure = self.derive_tenure(booking_in)

            booking = Booking(
                reference=generate_booking_reference(date.today()),
                user_id=user.id,
                warehouse_id=warehouse.id,
                space_type=space_type,
                tenure=tenure,
                area_requested=booking_in.area_requested,
                section=booking_in.section,
                entry_date=booking_in.entry_date,
                expected_exit_date=booking_in.expected_exit_date,
                duration_months=booking_in.duration_months,
                status=BookingStatus.REQUESTED.value,
                notes=booking_in.notes,
                modification_history=[
                    _history_entry(
                        "created",
                        area_requested=booking_in.area_requested,
                        space_type=space_type.value,
                        section=booking_in.section or "",
                        user_name=user.name,
                        user_email=user.email,
                    )
                ],
            )
            db.add(booking)
            db.flush()

            self.capacity_service.validator.validate_booking(warehouse, space_type, booking_in.area_requested)
            self._set_status(booking, BookingStatus.VALIDATED)

            self.capacity_service.reserve(db, warehouse.id, space_type, booking_in.area_requested)
            self._set_status(booking, BookingStatus.COMMITTED)

            if booking.entry_date <= date.today():
                self._set_status(booking, BookingStatus.ACTIVE)

            db.commit()
        except WarehouseError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to create booking: {str(e)}") from e

        db.refresh(booking)
        logger.info(
            "Booking %s created for user %s: %s m² %s in warehouse %s",
            booking.reference, user.id, booking.area_requested, space_type.value, booking.warehouse_id,
        )
        return booking

    def update(self, db: Session, booking: Booking, booking_in: BookingUpdate) -> Booking:
        """Change area, exit date, section or notes. Area changes reserve or release only the difference."""
        update_data = booking_in.model_dump(exclude_unset=True)
        status = booking.status_enum
        if status in (BookingStatus.COMPLETED, BookingStatus.CANCELLED):
            raise ValidationError(f"A {status.value} booking cannot be modified")

        try:
            changes = {}
            new_area = update_data.get("area_requested")
            if new_area is not None and new_area != booking.area_requested:
                if new_area <= 0:
                    raise InvalidArea(new_area)
                if new_area < booking.area_requested:
                    stock_area = stock_area_in_use(db, booking.id)
                    if stock_area > new_area:
                        raise StockAreaExceeded(new_area, stock_area)
                if status.holds_space:
                    delta = new_area - booking.area_requested
                    if delta > 0:
                        self.capacity_service.reserve(db, booking.warehouse_id, booking.space_type, delta)
                    else:
                        self.capacity_service.release(db, booking.warehouse_id, booking.space_type, -delta)
                changes["previous_area"] = booking.area_requested
                changes["new_area"] = new_area
                booking.area_requested = new_area

            if "expected_exit_date" in update_data:
                new_exit = update_data["expected_exit_date"]
                if new_exit is not None and new_exit <= booking.entry_date:
                    raise InvalidDateRange(booking.entry_date, new_exit)
                changes["previous_exit_date"] = _iso(booking.expected_exit_date)
                changes["new_exit_date"] = _iso(new_exit)
                booking.expected_exit_date = new_exit

            for field in ("section", "notes"):
                if field in update_data:
                    setattr(booking, field, update_data[field])

            booking.modification_history = [
                *(booking.modification_history or []),
                _history_entry("modified", **changes),
            ]
            db.commit()
        except WarehouseError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to update booking: {str(e)}") from e

        db.refresh(booking)
        return booking

    def change_status(
        self, db: Session, booking: Booking, target: BookingStatus, reason: Optional[str] = None
    ) -> Booking:
        """
        Move a booking along its lifecycle.

        Committing reserves the area; completing or cancelling a booking that
        holds space releases it. Cancelling also cancels the booking's open stock.
        """
        target = BookingStatus(target)
        current = booking.status_enum
        try:
            if target == BookingStatus.VALIDATED and current.can_transition_to(target):
                warehouse = self.capacity_service.get_warehouse(db, booking.warehouse_id)
                self.capacity_service.validator.validate_booking(
                    warehouse, booking.space_type, booking.area_requested
                )
            elif target == BookingStatus.COMMITTED and current.can_transition_to(target):
                self.capacity_service.reserve(
                    db, booking.warehouse_id, booking.space_type, booking.area_requested
                )
            elif target in (BookingStatus.COMPLETED, BookingStatus.CANCELLED) and current.holds_space:
                if current.can_transition_to(target):
                    self.capacity_service.release(
                        db, booking.warehouse_id, booking.space_type, booking.area_requested
                    )

            self._set_status(booking, target, reason=reason)

            if target == BookingStatus.CANCELLED:
                self._cancel_stock(db, booking)

            db.commit()
        except WarehouseError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to update booking status: {str(e)}") from e

        db.refresh(booking)
        logger.info("Booking %s moved from %s to %s", booking.reference, current.value, target.value)
        return booking

    def cancel(self, db: Session, booking: Booking, reason: str = "User cancelled booking") -> Booking:
        return self.change_status(db, booking, BookingStatus.CANCELLED, reason=reason)

    def activate_due(self, db: Session, today: Optional[date] = None) -> int:
        """Activate committed bookings whose entry date has arrived."""
        today = today or date.today()
        due = (
            db.query(Booking)
            .filter(
                Booking.status == BookingStatus.COMMITTED.value,
                Booking.entry_date <= today,
            )
            .all()
        )
        for booking in due:
            self._set_status(booking, BookingStatus.ACTIVE, reason="Entry date reached")
        db.commit()
        return len(due)

    def _set_status(self, booking: Booking, target: BookingStatus, reason: Optional[str] = None):
        current = booking.status_enum
        if not current.can_transition_to(target):
            raise InvalidStatusTransition("Booking", current, target)
        booking.status = target.value
        details = {"from": current.value, "to": target.value}
        if reason:
            details["reason"] = reason
        booking.modification_history = [
            *(booking.modification_history or []),
            _history_entry("cancelled" if target == BookingStatus.CANCELLED else "status_changed", **details),
        ]

    def _cancel_stock(self, db: Session, booking: Booking):
        open_stock = (
            db.query(StockItem)
            .filter(
                StockItem.booking_id == booking.id,
                StockItem.status.in_([StockStatus.PENDING.value, StockStatus.ACTIVE.value]),
            )
            .all()
        )
        for item in open_stock:
            item.status = StockStatus.CANCELLED.value


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None

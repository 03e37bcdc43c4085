import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.models.booking_model import Booking
from database.models.stock_model import StockItem, StockMovement
from database.models.user_model import User
from enums.stock_status import StockMovementType, StockStatus
from exceptions import (
    InvalidStatusTransition,
    NotFoundError,
    PersistenceError,
    StockAreaExceeded,
    ValidationError,
)
from schemas.stock_schema import StockCreate, StockQuantityChange, StockUpdate

logger = logging.getLogger(__name__)

OPEN_STATUSES = [StockStatus.PENDING.value, StockStatus.ACTIVE.value]


def stock_area_in_use(db: Session, booking_id: int, exclude_id: Optional[int] = None) -> float:
    """Floor area taken by a booking's pending and active stock."""
    query = db.query(func.coalesce(func.sum(StockItem.area_used), 0.0)).filter(
        StockItem.booking_id == booking_id,
        StockItem.status.in_(OPEN_STATUSES),
    )
    if exclude_id is not None:
        query = query.filter(StockItem.id != exclude_id)
    return float(query.scalar())


class StockService:
    def get(self, db: Session, stock_id: int) -> Optional[StockItem]:
        return db.query(StockItem).filter(StockItem.id == stock_id).first()

    def get_or_404(self, db: Session, stock_id: int) -> StockItem:
        item = self.get(db, stock_id)
        if item is None:
            raise NotFoundError(f"Stock item {stock_id} not found")
        return item

    def get_all(self, db: Session, status: Optional[StockStatus] = None) -> List[StockItem]:
        query = db.query(StockItem)
        if status is not None:
            query = query.filter(StockItem.status == StockStatus(status).value)
        return query.order_by(StockItem.id.desc()).all()

    def get_by_user(self, db: Session, user_id: int) -> List[StockItem]:
        return db.query(StockItem).filter(StockItem.user_id == user_id).order_by(StockItem.id.desc()).all()

    def get_by_booking(self, db: Session, booking_id: int) -> List[StockItem]:
        return (
            db.query(StockItem)
            .filter(StockItem.booking_id == booking_id)
            .order_by(StockItem.id.desc())
            .all()
        )

    def get_by_warehouse(self, db: Session, warehouse_id: int) -> List[StockItem]:
        return (
            db.query(StockItem)
            .join(Booking, StockItem.booking_id == Booking.id)
            .filter(Booking.warehouse_id == warehouse_id)
            .order_by(StockItem.id.desc())
            .all()
        )

    def dispatched(self, db: Session, user_id: Optional[int] = None) -> List[StockMovement]:
        """Delivery movements, newest first."""
        query = db.query(StockMovement).filter(StockMovement.movement_type == StockMovementType.DELIVER.value)
        if user_id is not None:
            query = query.join(StockItem, StockMovement.stock_id == StockItem.id).filter(
                StockItem.user_id == user_id
            )
        return query.order_by(StockMovement.movement_date.desc(), StockMovement.id.desc()).all()

    def movements(self, db: Session, stock_id: int) -> List[StockMovement]:
        return (
            db.query(StockMovement)
            .filter(StockMovement.stock_id == stock_id)
            .order_by(StockMovement.id)
            .all()
        )

    def create(self, db: Session, stock_in: StockCreate, booking: Booking, owner: User) -> StockItem:
        """Record goods arriving under a booking that currently holds space."""
        if not booking.status_enum.holds_space:
            raise ValidationError(
                f"Stock can only be added to a committed or active booking, booking {booking.reference} "
                f"is {booking.status}"
            )
        if stock_in.area_used is not None:
            self.check_area(db, booking, stock_in.area_used)

        entry_date = stock_in.entry_date or date.today()
        item = StockItem(
            booking_id=booking.id,
            user_id=owner.id,
            client_name=owner.name,
            client_email=owner.email,
            client_phone=stock_in.client_phone or owner.phone,
            product_name=stock_in.product_name,
            product_type=stock_in.product_type,
            description=stock_in.description,
            quantity=stock_in.quantity,
            current_quantity=stock_in.quantity,
            total_received_quantity=stock_in.quantity,
            total_delivered_quantity=0.0,
            unit=stock_in.unit,
            area_used=stock_in.area_used,
            space_type=booking.space_type,
            storage_location=stock_in.storage_location or booking.section,
            status=StockStatus.ACTIVE.value,
            entry_date=entry_date,
            expected_exit_date=stock_in.expected_exit_date or booking.expected_exit_date,
            notes=stock_in.notes,
        )
        item.movements.append(
            StockMovement(
                movement_type=StockMovementType.INITIAL.value,
                quantity=stock_in.quantity,
                previous_quantity=0.0,
                new_quantity=stock_in.quantity,
                movement_date=entry_date,
                notes="Initial stock",
            )
        )
        db.add(item)
        self._commit(db)
        db.refresh(item)
        return item

    def update(self, db: Session, item: StockItem, stock_in: StockUpdate) -> StockItem:
        values = stock_in.model_dump(exclude_unset=True)
        if values.get("area_used") is not None and item.status in OPEN_STATUSES:
            self.check_area(db, item.booking, values["area_used"], exclude_id=item.id)
        for key, value in values.items():
            setattr(item, key, value)
        self._commit(db)
        db.refresh(item)
        return item

    def check_area(self, db: Session, booking: Booking, area: float, exclude_id: Optional[int] = None) -> None:
        """The booking's open stock, with ``area`` added, must fit in the booked area."""
        in_use = stock_area_in_use(db, booking.id, exclude_id=exclude_id)
        if in_use + area > booking.area_requested:
            raise StockAreaExceeded(booking.area_requested, in_use, area)

    def receive(self, db: Session, item: StockItem, change: StockQuantityChange) -> StockItem:
        if change.quantity is None:
            raise ValidationError("Quantity to receive is required")
        self._require_open(item)
        previous = item.current_quantity
        item.current_quantity = previous + change.quantity
        item.total_received_quantity = item.total_received_quantity + change.quantity
        if item.status == StockStatus.PENDING.value:
            item.status = StockStatus.ACTIVE.value
        self._record(item, StockMovementType.RECEIVE, change, previous)
        self._commit(db)
        db.refresh(item)
        return item

    def deliver(self, db: Session, item: StockItem, change: StockQuantityChange) -> StockItem:
        """
        Send goods out of the warehouse.

        Without a quantity the whole remaining stock is delivered. The item is
        completed once nothing remains.
        """
        self._require_open(item)
        quantity = change.quantity if change.quantity is not None else item.current_quantity
        if quantity <= 0:
            raise ValidationError("Delivery quantity must be greater than 0")
        if quantity > item.current_quantity:
            raise ValidationError(
                f"Cannot deliver {quantity} {item.unit}: only {item.current_quantity} {item.unit} in stock"
            )

        previous = item.current_quantity
        item.current_quantity = previous - quantity
        item.total_delivered_quantity = item.total_delivered_quantity + quantity
        change = change.model_copy(update={"quantity": quantity})
        self._record(item, StockMovementType.DELIVER, change, previous)

        if item.current_quantity == 0:
            self._transition(item, StockStatus.COMPLETED)
        self._commit(db)
        db.refresh(item)
        logger.info("Delivered %s %s of stock item %s", quantity, item.unit, item.id)
        return item

    def change_status(self, db: Session, item: StockItem, target: StockStatus, notes: Optional[str] = None) -> StockItem:
        self._transition(item, StockStatus(target))
        if notes:
            item.notes = f"{item.notes}\n{notes}" if item.notes else notes
        self._commit(db)
        db.refresh(item)
        return item

    def mark_damaged(self, db: Session, item: StockItem, notes: Optional[str] = None) -> StockItem:
        return self.change_status(db, item, StockStatus.DAMAGED, notes)

    def _require_open(self, item: StockItem) -> None:
        if item.status not in (StockStatus.PENDING.value, StockStatus.ACTIVE.value):
            raise ValidationError(f"Stock item {item.id} is {item.status}; quantities can no longer change")

    def _transition(self, item: StockItem, target: StockStatus) -> None:
        current = StockStatus(item.status)
        if not current.can_transition_to(target):
            raise InvalidStatusTransition("Stock item", current, target)
        item.status = target.value

    def _record(self, item: StockItem, movement_type: StockMovementType, change: StockQuantityChange, previous: float):
        item.movements.append(
            StockMovement(
                movement_type=movement_type.value,
                quantity=change.quantity,
                previous_quantity=previous,
                new_quantity=item.current_quantity,
                movement_date=change.movement_date or date.today(),
                notes=change.notes,
            )
        )

    def _commit(self, db: Session) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to save stock: {str(e)}") from e

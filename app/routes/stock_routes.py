import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from enums.stock_status import StockStatus
from exceptions import WarehouseError
from schemas.stock_schema import (
    StockCreate,
    StockMovementResponse,
    StockQuantityChange,
    StockResponse,
    StockStatusUpdate,
    StockUpdate,
)
from services.booking_service import BookingService
from services.stock_service import StockService
from utils.dependencies import get_current_user, is_staff, staff_required
from responses.success import data_response
from responses.error import domain_error, forbidden_error, internal_server_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stock", tags=["Stock"])

stock_service = StockService()
booking_service = BookingService()


def _load_item(db: Session, stock_id: int, current_user):
    """Returns (item, error_response)"""
    item = stock_service.get(db, stock_id)
    if not item:
        return None, not_found_error(f"No stock item found with id {stock_id}")
    if not (is_staff(current_user) or item.user_id == current_user.id):
        return None, forbidden_error("You are not authorized to manage this stock item")
    return item, None


@router.post("")
def create_stock(
    stock_in: StockCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        booking = booking_service.get(db, stock_in.booking_id)
        if not booking:
            return not_found_error(f"No booking found with id {stock_in.booking_id}")
        if not booking_service.can_access(booking, current_user, is_staff(current_user)):
            return forbidden_error("You can only add stock to your own bookings")

        item = stock_service.create(db, stock_in, booking, booking.user)
        return data_response(StockResponse.model_validate(item))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Stock creation failed")
        return internal_server_error(str(e))


@router.get("/my-stock")
def get_my_stock(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    items = stock_service.get_by_user(db, current_user.id)
    return data_response([StockResponse.model_validate(item) for item in items])


@router.get("/dispatched")
def get_dispatched(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Delivery history; staff see every client's"""
    user_id = None if is_staff(current_user) else current_user.id
    movements = stock_service.dispatched(db, user_id)
    return data_response([StockMovementResponse.model_validate(m) for m in movements])


@router.get("")
def get_all_stock(
    status: Optional[StockStatus] = None,
    db: Session = Depends(get_db),
    current_user=Depends(staff_required),
):
    items = stock_service.get_all(db, status)
    return data_response([StockResponse.model_validate(item) for item in items])


@router.get("/{stock_id}")
def get_stock(
    stock_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    item, error = _load_item(db, stock_id, current_user)
    if error:
        return error
    return data_response(StockResponse.model_validate(item))


@router.patch("/{stock_id}")
def update_stock(
    stock_id: int,
    stock_in: StockUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        item, error = _load_item(db, stock_id, current_user)
        if error:
            return error
        item = stock_service.update(db, item, stock_in)
        return data_response(StockResponse.model_validate(item))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Stock update failed")
        return internal_server_error(str(e))


@router.post("/{stock_id}/receive")
def receive_stock(
    stock_id: int,
    change: StockQuantityChange,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        item, error = _load_item(db, stock_id, current_user)
        if error:
            return error
        item = stock_service.receive(db, item, change)
        return data_response(StockResponse.model_validate(item))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Stock receipt failed")
        return internal_server_error(str(e))


@router.post("/{stock_id}/deliver")
def deliver_stock(
    stock_id: int,
    change: StockQuantityChange,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        item, error = _load_item(db, stock_id, current_user)
        if error:
            return error
        item = stock_service.deliver(db, item, change)
        return data_response(StockResponse.model_validate(item))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Stock delivery failed")
        return internal_server_error(str(e))


@router.patch("/{stock_id}/status")
def update_stock_status(
    stock_id: int,
    payload: StockStatusUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(staff_required),
):
    try:
        item = stock_service.get(db, stock_id)
        if not item:
            return not_found_error(f"No stock item found with id {stock_id}")
        item = stock_service.change_status(db, item, payload.status, payload.notes)
        return data_response(StockResponse.model_validate(item))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Stock status update failed")
        return internal_server_error(str(e))


@router.post("/{stock_id}/damaged")
def mark_stock_damaged(
    stock_id: int,
    notes: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        item, error = _load_item(db, stock_id, current_user)
        if error:
            return error
        item = stock_service.mark_damaged(db, item, notes)
        return data_response(StockResponse.model_validate(item))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Marking stock damaged failed")
        return internal_server_error(str(e))


@router.get("/{stock_id}/movements")
def get_stock_movements(
    stock_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    item, error = _load_item(db, stock_id, current_user)
    if error:
        return error
    movements = stock_service.movements(db, item.id)
    return data_response([StockMovementResponse.model_validate(m) for m in movements])

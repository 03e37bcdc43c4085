import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from enums.booking_status import BookingStatus
from exceptions import WarehouseError
from schemas.booking_schema import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
)
from schemas.electricity_schema import ElectricityBillResponse
from schemas.stock_schema import StockResponse
from services.booking_service import BookingService
from services.electricity_service import ElectricityBillService
from services.email_service import EmailService
from services.stock_service import StockService
from utils.dependencies import get_current_user, is_staff, manager_required, staff_required
from responses.success import data_response
from responses.error import domain_error, forbidden_error, internal_server_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])

booking_service = BookingService()
stock_service = StockService()
bill_service = ElectricityBillService()
email_service = EmailService()


@router.post("")
async def create_booking(
    booking_in: BookingCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Validate capacity, reserve the area and record the booking in one step"""
    try:
        booking = booking_service.create(db, booking_in, current_user)
        response = BookingResponse.model_validate(booking)
        await email_service.send_booking_confirmation_email(
            current_user.email, booking, booking.warehouse.name
        )
        return data_response(response)
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Booking creation failed")
        return internal_server_error(str(e))


@router.get("/my-bookings")
def get_my_bookings(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        bookings = booking_service.get_by_user(db, current_user.id)
        return data_response([BookingResponse.model_validate(b) for b in bookings])
    except Exception as e:
        logger.exception("Listing own bookings failed")
        return internal_server_error(str(e))


@router.get("")
def get_all_bookings(
    status: Optional[BookingStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user=Depends(staff_required),
):
    try:
        bookings = booking_service.get_all(db, status, skip, limit)
        return data_response([BookingResponse.model_validate(b) for b in bookings])
    except Exception as e:
        logger.exception("Listing bookings failed")
        return internal_server_error(str(e))


@router.get("/{booking_id}")
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    booking = booking_service.get(db, booking_id)
    if not booking:
        return not_found_error(f"No booking found with id {booking_id}")
    if not booking_service.can_access(booking, current_user, is_staff(current_user)):
        return forbidden_error("You are not authorized to view this booking")
    return data_response(BookingResponse.model_validate(booking))


@router.patch("/{booking_id}")
def update_booking(
    booking_id: int,
    booking_in: BookingUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Change the booked area, exit date, section or notes"""
    try:
        booking = booking_service.get(db, booking_id)
        if not booking:
            return not_found_error(f"No booking found with id {booking_id}")
        if not booking_service.can_access(booking, current_user, is_staff(current_user)):
            return forbidden_error("You are not authorized to modify this booking")

        booking = booking_service.update(db, booking, booking_in)
        return data_response(BookingResponse.model_validate(booking))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Booking update failed")
        return internal_server_error(str(e))


@router.patch("/{booking_id}/status")
async def update_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(manager_required),
):
    try:
        booking = booking_service.get(db, booking_id)
        if not booking:
            return not_found_error(f"No booking found with id {booking_id}")

        booking = booking_service.change_status(db, booking, payload.status, payload.reason)
        response = BookingResponse.model_validate(booking)
        if booking.status == BookingStatus.CANCELLED.value:
            await email_service.send_booking_cancelled_email(booking.user.email, booking, payload.reason)
        return data_response(response)
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Booking status update failed")
        return internal_server_error(str(e))


@router.delete("/{booking_id}")
async def cancel_booking(
    booking_id: int,
    reason: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Cancel a booking and release its space; allowed to the owner and staff"""
    try:
        booking = booking_service.get(db, booking_id)
        if not booking:
            return not_found_error(f"No booking found with id {booking_id}")
        if not booking_service.can_access(booking, current_user, is_staff(current_user)):
            return forbidden_error("You are not authorized to cancel this booking")

        booking = booking_service.cancel(db, booking, reason or "User cancelled booking")
        response = BookingResponse.model_validate(booking)
        await email_service.send_booking_cancelled_email(booking.user.email, booking, reason)
        return data_response(response)
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Booking cancellation failed")
        return internal_server_error(str(e))


@router.get("/{booking_id}/stock")
def get_booking_stock(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    booking = booking_service.get(db, booking_id)
    if not booking:
        return not_found_error(f"No booking found with id {booking_id}")
    if not booking_service.can_access(booking, current_user, is_staff(current_user)):
        return forbidden_error("You are not authorized to view this booking")
    items = stock_service.get_by_booking(db, booking_id)
    return data_response([StockResponse.model_validate(item) for item in items])


@router.get("/{booking_id}/electricity-bills")
def get_booking_bills(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    booking = booking_service.get(db, booking_id)
    if not booking:
        return not_found_error(f"No booking found with id {booking_id}")
    if not booking_service.can_access(booking, current_user, is_staff(current_user)):
        return forbidden_error("You are not authorized to view this booking")
    bills = bill_service.get_bills(db, booking_id=booking_id)
    return data_response([ElectricityBillResponse.model_validate(bill) for bill in bills])

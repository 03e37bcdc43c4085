import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from enums.bill_status import BillStatus
from exceptions import WarehouseError
from schemas.electricity_schema import ElectricityBillCreate, ElectricityBillResponse
from services.booking_service import BookingService
from services.electricity_service import ElectricityBillService
from utils.dependencies import admin_required, get_current_user
from responses.success import data_response
from responses.error import domain_error, internal_server_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/electricity-bills", tags=["Electricity"])

bill_service = ElectricityBillService()
booking_service = BookingService()


@router.post("")
def create_bill(
    bill_in: ElectricityBillCreate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        booking = booking_service.get(db, bill_in.booking_id)
        if not booking:
            return not_found_error(f"No booking found with id {bill_in.booking_id}")
        bill = bill_service.create_bill(db, bill_in, booking)
        return data_response(ElectricityBillResponse.model_validate(bill))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Electricity bill creation failed")
        return internal_server_error(str(e))


@router.get("")
def get_bills(
    booking_id: Optional[int] = None,
    status: Optional[BillStatus] = None,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    bills = bill_service.get_bills(db, booking_id=booking_id, status=status)
    return data_response([ElectricityBillResponse.model_validate(bill) for bill in bills])


@router.get("/my-bills")
def get_my_bills(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    bills = bill_service.get_bills(db, user_id=current_user.id)
    return data_response([ElectricityBillResponse.model_validate(bill) for bill in bills])


@router.patch("/{bill_id}/paid")
def mark_bill_paid(
    bill_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    try:
        bill = bill_service.get(db, bill_id)
        if not bill:
            return not_found_error(f"No electricity bill found with id {bill_id}")
        bill = bill_service.mark_paid(db, bill)
        return data_response(ElectricityBillResponse.model_validate(bill))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Marking electricity bill paid failed")
        return internal_server_error(str(e))

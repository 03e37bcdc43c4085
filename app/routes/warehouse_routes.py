import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from enums.space_type import SpaceType
from enums.warehouse_status import WarehouseStatus
from exceptions import WarehouseError
from schemas.booking_schema import BookingResponse
from schemas.warehouse_schema import WarehouseCreate, WarehouseResponse, WarehouseUpdate
from services.booking_service import BookingService
from services.stock_service import StockService
from services.warehouse_service import WarehouseService
from schemas.stock_schema import StockResponse
from utils.dependencies import get_current_user, manager_required, staff_required
from responses.success import data_response
from responses.error import conflict_error, domain_error, internal_server_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/warehouses", tags=["Warehouses"])

warehouse_service = WarehouseService()
booking_service = BookingService()
stock_service = StockService()


@router.get("")
def get_warehouses(
    status: Optional[WarehouseStatus] = None,
    location: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        warehouses = warehouse_service.get_warehouses(db, skip, limit, status, location)
        return data_response([WarehouseResponse.model_validate(w) for w in warehouses])
    except Exception as e:
        logger.exception("Listing warehouses failed")
        return internal_server_error(str(e))


@router.post("")
def create_warehouse(
    warehouse_in: WarehouseCreate,
    db: Session = Depends(get_db),
    current_user=Depends(manager_required),
):
    try:
        warehouse = warehouse_service.create_warehouse(db, warehouse_in)
        return data_response(WarehouseResponse.model_validate(warehouse))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Warehouse creation failed")
        return internal_server_error(str(e))


@router.get("/{warehouse_id}")
def get_warehouse(
    warehouse_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    warehouse = warehouse_service.get(db, warehouse_id)
    if not warehouse:
        return not_found_error(f"No warehouse found with id {warehouse_id}")
    return data_response(WarehouseResponse.model_validate(warehouse))


@router.patch("/{warehouse_id}")
def update_warehouse(
    warehouse_id: int,
    warehouse_in: WarehouseUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(manager_required),
):
    try:
        warehouse = warehouse_service.get(db, warehouse_id)
        if not warehouse:
            return not_found_error(f"No warehouse found with id {warehouse_id}")
        warehouse = warehouse_service.update_warehouse(db, warehouse, warehouse_in)
        return data_response(WarehouseResponse.model_validate(warehouse))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Warehouse update failed")
        return internal_server_error(str(e))


@router.delete("/{warehouse_id}")
def delete_warehouse(
    warehouse_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(manager_required),
):
    try:
        warehouse = warehouse_service.get(db, warehouse_id)
        if not warehouse:
            return not_found_error(f"No warehouse found with id {warehouse_id}")
        if warehouse.bookings:
            return conflict_error("Warehouses with bookings cannot be deleted; mark them inactive instead")
        warehouse_service.delete(db, warehouse_id)
        return data_response({"message": f"Warehouse with id {warehouse_id} deleted successfully"})
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Warehouse deletion failed")
        return internal_server_error(str(e))


@router.get("/{warehouse_id}/availability")
def get_availability(
    warehouse_id: int,
    space_type: SpaceType = SpaceType.GROUND_FLOOR,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    try:
        warehouse = warehouse_service.get_or_404(db, warehouse_id)
        return data_response(warehouse_service.availability(warehouse, space_type))
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Availability lookup failed")
        return internal_server_error(str(e))


@router.get("/{warehouse_id}/occupants")
def get_occupants(
    warehouse_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(staff_required),
):
    try:
        warehouse_service.get_or_404(db, warehouse_id)
        bookings = booking_service.get_by_warehouse(db, warehouse_id)
        return data_response([BookingResponse.model_validate(b) for b in bookings])
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Occupant lookup failed")
        return internal_server_error(str(e))


@router.get("/{warehouse_id}/stock")
def get_warehouse_stock(
    warehouse_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(staff_required),
):
    try:
        warehouse_service.get_or_404(db, warehouse_id)
        items = stock_service.get_by_warehouse(db, warehouse_id)
        return data_response([StockResponse.model_validate(item) for item in items])
    except WarehouseError as e:
        return domain_error(e)
    except Exception as e:
        logger.exception("Warehouse stock lookup failed")
        return internal_server_error(str(e))

import logging
from dataclasses import dataclass
from typing import Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session

from database.models.warehouse_model import Warehouse
from enums.space_type import SpaceType
from exceptions import (
    ExceedsWarehouseCapacity,
    InsufficientSpace,
    InvalidArea,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass
class CapacityCheck:
    space_type: SpaceType
    total: float
    occupied: float
    available: float
    requested: float

    @property
    def remaining_after(self) -> float:
        return self.available - self.requested


class CapacityValidator:
    """Checks a requested area against a warehouse's floor figures. Pure, no I/O."""

    def floor_figures(self, warehouse, space_type: SpaceType) -> Tuple[float, float]:
        space_type = SpaceType(space_type)
        if space_type == SpaceType.GROUND_FLOOR:
            total, occupied = warehouse.total_space, warehouse.occupied_space
        elif space_type == SpaceType.MEZZANINE:
            if not warehouse.has_mezzanine:
                raise ValidationError(f"Warehouse '{warehouse.name}' has no mezzanine floor")
            total, occupied = warehouse.mezzanine_space, warehouse.mezzanine_occupied
        else:
            raise ValidationError(f"{space_type.value} space is not booked against warehouse capacity")

        # Missing figures fail closed; capacity is never assumed
        if total is None or occupied is None:
            raise ValidationError(
                f"Warehouse '{warehouse.name}' has no recorded {space_type.value} capacity"
            )
        return float(total), float(occupied)

    def availability(self, warehouse, space_type: SpaceType) -> dict:
        total, occupied = self.floor_figures(warehouse, space_type)
        return {
            "space_type": SpaceType(space_type).value,
            "total_space": total,
            "occupied_space": occupied,
            "available_space": max(0.0, total - occupied),
            "utilization_percentage": round(occupied / total * 100, 2) if total > 0 else 0.0,
        }

    def validate_booking(self, warehouse, space_type: SpaceType, requested_area: float) -> CapacityCheck:
        """
        Raises:
            InvalidArea: requested area is not positive
            InsufficientSpace: requested area exceeds what is currently free
            ExceedsWarehouseCapacity: requested area exceeds the floor's total
        """
        space_type = SpaceType(space_type)
        total, occupied = self.floor_figures(warehouse, space_type)
        available = total - occupied

        if requested_area is None or requested_area <= 0:
            raise InvalidArea(requested_area)
        if requested_area > available:
            raise InsufficientSpace(space_type.value, available, requested_area)
        if requested_area > total:
            raise ExceedsWarehouseCapacity(space_type.value, total, requested_area)

        return CapacityCheck(
            space_type=space_type,
            total=total,
            occupied=occupied,
            available=available,
            requested=requested_area,
        )


def _floor_columns(space_type: SpaceType):
    if SpaceType(space_type) == SpaceType.MEZZANINE:
        return Warehouse.mezzanine_space, Warehouse.mezzanine_occupied
    return Warehouse.total_space, Warehouse.occupied_space


class CapacityService:
    """
    Occupancy counter updates. Each change is one conditional UPDATE so that
    the availability check and the increment cannot interleave with another
    booking's. Callers own the transaction and commit or roll back.
    """

    def __init__(self):
        self.validator = CapacityValidator()

    def get_warehouse(self, db: Session, warehouse_id: int) -> Warehouse:
        warehouse = db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()
        if not warehouse:
            raise NotFoundError(f"Warehouse {warehouse_id} not found")
        return warehouse

    def availability(self, db: Session, warehouse_id: int, space_type: SpaceType) -> dict:
        return self.validator.availability(self.get_warehouse(db, warehouse_id), space_type)

    def reserve(self, db: Session, warehouse_id: int, space_type: SpaceType, area: float) -> CapacityCheck:
        warehouse = self.get_warehouse(db, warehouse_id)
        check = self.validator.validate_booking(warehouse, space_type, area)

        total_col, occupied_col = _floor_columns(space_type)
        stmt = (
            update(Warehouse)
            .where(
                Warehouse.id == warehouse_id,
                total_col.is_not(None),
                occupied_col.is_not(None),
                total_col - occupied_col >= area,
            )
            .values({occupied_col: occupied_col + area})
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)

        if result.rowcount != 1:
            # Another booking took the space between our read and the update
            db.refresh(warehouse)
            total, occupied = self.validator.floor_figures(warehouse, space_type)
            logger.info(
                "Reservation of %s m² %s in warehouse %s lost to a concurrent booking",
                area, SpaceType(space_type).value, warehouse_id,
            )
            raise InsufficientSpace(SpaceType(space_type).value, total - occupied, area)

        db.refresh(warehouse)
        logger.info(
            "Reserved %s m² %s in warehouse %s", area, SpaceType(space_type).value, warehouse_id
        )
        return check

    def release(self, db: Session, warehouse_id: int, space_type: SpaceType, area: float) -> None:
        if area is None or area <= 0:
            raise InvalidArea(area)

        _, occupied_col = _floor_columns(space_type)
        stmt = (
            update(Warehouse)
            .where(Warehouse.id == warehouse_id, occupied_col >= area)
            .values({occupied_col: occupied_col - area})
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)
        if result.rowcount != 1:
            raise PersistenceError(
                f"Cannot release {area} m² from warehouse {warehouse_id}: "
                "occupied space is lower than the released area"
            )

        warehouse = db.get(Warehouse, warehouse_id)
        if warehouse is not None:
            db.refresh(warehouse)
        logger.info(
            "Released %s m² %s in warehouse %s", area, SpaceType(space_type).value, warehouse_id
        )

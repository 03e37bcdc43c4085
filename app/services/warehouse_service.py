import logging
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from database.models.booking_model import Booking
from database.models.warehouse_model import Warehouse
from enums.booking_status import BookingStatus
from enums.space_type import SpaceType
from enums.warehouse_status import WarehouseStatus
from exceptions import ValidationError
from schemas.warehouse_schema import WarehouseCreate, WarehouseUpdate
from services.base_service import BaseService
from services.capacity_service import CapacityValidator

logger = logging.getLogger(__name__)

FLOOR_FIELDS = ("total_space", "occupied_space", "has_mezzanine", "mezzanine_space", "mezzanine_occupied")


def check_floor_figures(
    total_space: float,
    occupied_space: float,
    has_mezzanine: bool,
    mezzanine_space: Optional[float],
    mezzanine_occupied: Optional[float],
) -> None:
    if occupied_space < 0 or occupied_space > total_space:
        raise ValidationError("Occupied ground floor space must be between 0 and the total space")

    if not has_mezzanine:
        if mezzanine_space or mezzanine_occupied:
            raise ValidationError("Mezzanine figures can only be set on a warehouse with a mezzanine")
        return

    if mezzanine_space is None:
        raise ValidationError("A warehouse with a mezzanine needs its mezzanine space")
    occupied = mezzanine_occupied or 0.0
    if occupied < 0 or occupied > mezzanine_space:
        raise ValidationError("Occupied mezzanine space must be between 0 and the mezzanine space")


class WarehouseService(BaseService):
    entity_name = "Warehouse"

    def __init__(self):
        super().__init__(Warehouse)
        self.validator = CapacityValidator()

    def get_warehouses(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        status: Optional[WarehouseStatus] = None,
        location: Optional[str] = None,
    ) -> List[Warehouse]:
        query = db.query(self.model)
        if status is not None:
            query = query.filter(self.model.status == WarehouseStatus(status).value)
        if location:
            query = query.filter(func.lower(self.model.location).like(f"%{location.lower()}%"))
        return query.order_by(self.model.id).offset(skip).limit(limit).all()

    def create_warehouse(self, db: Session, warehouse_in: WarehouseCreate) -> Warehouse:
        values = warehouse_in.model_dump()
        if values["has_mezzanine"] and values["mezzanine_occupied"] is None:
            values["mezzanine_occupied"] = 0.0
        check_floor_figures(
            values["total_space"],
            values["occupied_space"],
            values["has_mezzanine"],
            values["mezzanine_space"],
            values["mezzanine_occupied"],
        )
        values["status"] = WarehouseStatus(values["status"]).value
        return self.create(db, Warehouse(**values))

    def update_warehouse(self, db: Session, warehouse: Warehouse, warehouse_in: WarehouseUpdate) -> Warehouse:
        """
        Edit a warehouse's details and floor figures.

        Floor figures are written with one conditional UPDATE, so a shrink
        below occupancy committed by a concurrent booking is refused rather
        than stored. Occupancy itself cannot be edited while bookings hold
        space; it is kept by reservations and releases.
        """
        values = warehouse_in.model_dump(exclude_unset=True)
        merged = {
            "total_space": values.get("total_space", warehouse.total_space),
            "occupied_space": values.get("occupied_space", warehouse.occupied_space),
            "has_mezzanine": values.get("has_mezzanine", warehouse.has_mezzanine),
            "mezzanine_space": values.get("mezzanine_space", warehouse.mezzanine_space),
            "mezzanine_occupied": values.get("mezzanine_occupied", warehouse.mezzanine_occupied),
        }
        if merged["has_mezzanine"] and merged["mezzanine_occupied"] is None:
            merged["mezzanine_occupied"] = 0.0
            values["mezzanine_occupied"] = 0.0
        check_floor_figures(**merged)
        if "status" in values and values["status"] is not None:
            values["status"] = WarehouseStatus(values["status"]).value

        floor_values = {key: values.pop(key) for key in FLOOR_FIELDS if key in values}
        if not floor_values:
            return self.update(db, warehouse, values)

        self._write_floor_figures(db, warehouse, floor_values, merged)
        return self.update(db, warehouse, values)

    def _write_floor_figures(self, db: Session, warehouse: Warehouse, floor_values: dict, merged: dict) -> None:
        conditions = [Warehouse.id == warehouse.id]
        for column, floor_total in (("occupied_space", "total_space"), ("mezzanine_occupied", "mezzanine_space")):
            stored = func.coalesce(getattr(Warehouse, column), 0.0)
            loaded = getattr(warehouse, column) or 0.0
            if column in floor_values and (floor_values[column] or 0.0) != loaded:
                if self.has_holding_bookings(db, warehouse.id):
                    raise ValidationError(
                        f"Occupied space of warehouse '{warehouse.name}' is held by committed or active "
                        "bookings and cannot be edited"
                    )
                # Only overwrite the figure that was read
                conditions.append(stored == loaded)
            else:
                conditions.append(stored <= (merged[floor_total] or 0.0))

        stmt = (
            update(Warehouse)
            .where(*conditions)
            .values(floor_values)
            .execution_options(synchronize_session=False)
        )
        if db.execute(stmt).rowcount != 1:
            db.rollback()
            db.refresh(warehouse)
            logger.info("Floor figures of warehouse %s changed under an edit", warehouse.id)
            raise ValidationError(
                f"Warehouse '{warehouse.name}' has {warehouse.occupied_space:,.2f} m² ground floor and "
                f"{warehouse.mezzanine_occupied or 0.0:,.2f} m² mezzanine occupied; floor space cannot drop "
                "below current occupancy"
            )

    def has_holding_bookings(self, db: Session, warehouse_id: int) -> bool:
        return (
            db.query(Booking.id)
            .filter(
                Booking.warehouse_id == warehouse_id,
                Booking.status.in_([status.value for status in BookingStatus if status.holds_space]),
            )
            .first()
            is not None
        )

    def availability(self, warehouse: Warehouse, space_type: SpaceType) -> dict:
        report = self.validator.availability(warehouse, space_type)
        report["warehouse_id"] = warehouse.id
        report["warehouse_name"] = warehouse.name
        return report

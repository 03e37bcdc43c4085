"""
Domain errors raised by the pricing, capacity and booking services.

Routes translate them into the failure envelope; ``details()`` carries the
structured fields a client needs to render actionable guidance.
"""

from typing import Any, Dict, Optional


class WarehouseError(Exception):
    error = "warehouse_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> Optional[Dict[str, Any]]:
        return None


class ValidationError(WarehouseError):
    error = "validation_error"


class InvalidArea(ValidationError):
    error = "invalid_area"

    def __init__(self, requested: float):
        super().__init__(f"Requested area must be greater than 0 m², got {requested}")
        self.requested = requested


class InvalidDateRange(ValidationError):
    error = "invalid_date_range"

    def __init__(self, start, end):
        super().__init__(f"Lease end ({end}) must be after lease start ({start})")
        self.start = start
        self.end = end

    def details(self):
        return {"start": str(self.start), "end": str(self.end)}


class InsufficientSpace(WarehouseError):
    error = "insufficient_space"
    status_code = 409

    def __init__(self, space_type: str, available: float, requested: float):
        self.space_type = space_type
        self.available = available
        self.requested = requested
        self.excess = requested - available
        super().__init__(
            f"{space_type} space exceeded! Available: {available:,.2f} m², "
            f"Requested: {requested:,.2f} m²"
        )

    def details(self):
        return {
            "space_type": str(self.space_type),
            "available": self.available,
            "requested": self.requested,
            "excess": self.excess,
        }


class ExceedsWarehouseCapacity(WarehouseError):
    error = "exceeds_warehouse_capacity"
    status_code = 409

    def __init__(self, space_type: str, total: float, requested: float):
        self.space_type = space_type
        self.total = total
        self.requested = requested
        super().__init__(
            f"Requested area ({requested:,.2f} m²) cannot exceed warehouse total "
            f"{space_type} space ({total:,.2f} m²)"
        )

    def details(self):
        return {"space_type": str(self.space_type), "total": self.total, "requested": self.requested}


class AmbiguousOrMissingRate(WarehouseError):
    error = "ambiguous_or_missing_rate"
    status_code = 422

    def __init__(self, space_type, tenure, area: float, match_count: int):
        self.space_type = space_type
        self.tenure = tenure
        self.area = area
        self.match_count = match_count
        if match_count == 0:
            reason = "No pricing band configured"
        else:
            reason = f"{match_count} overlapping pricing bands configured"
        super().__init__(f"{reason} for {area} m² {space_type} ({tenure} term)")

    def details(self):
        return {
            "space_type": str(self.space_type),
            "tenure": str(self.tenure),
            "area": self.area,
            "match_count": self.match_count,
        }


class InvalidStatusTransition(WarehouseError):
    error = "invalid_status_transition"
    status_code = 409

    def __init__(self, entity: str, current, target):
        self.current = current
        self.target = target
        super().__init__(f"{entity} cannot move from '{current.value}' to '{target.value}'")

    def details(self):
        return {"current": self.current.value, "target": self.target.value}


class NotFoundError(WarehouseError):
    error = "not_found"
    status_code = 404


class PersistenceError(WarehouseError):
    error = "persistence_error"
    status_code = 500


class StockAreaExceeded(ValidationError):
    error = "stock_area_exceeded"

    def __init__(self, booked_area: float, stock_area: float, requested: float = 0.0):
        self.booked_area = booked_area
        self.stock_area = stock_area
        self.requested = requested
        self.available = booked_area - stock_area
        super().__init__(
            f"Stock needs {stock_area + requested:,.2f} m² but the booking covers {booked_area:,.2f} m² "
            f"({max(0.0, self.available):,.2f} m² free)"
        )

    def details(self):
        return {
            "booked_area": self.booked_area,
            "stock_area": self.stock_area,
            "available": self.available,
            "requested": self.requested,
        }

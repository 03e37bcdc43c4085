from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from datetime import date, datetime

from enums.booking_status import BookingStatus
from enums.space_type import SpaceType
from enums.tenure import Tenure
from .auth_schema import UserMinimumResponse
from .warehouse_schema import WarehouseMinimumResponse


class BookingCreate(BaseModel):
    warehouse_id: int
    space_type: SpaceType
    area_requested: float
    duration_months: Optional[int] = Field(default=None, ge=0)
    entry_date: date
    expected_exit_date: Optional[date] = None
    section: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingUpdate(BaseModel):
    area_requested: Optional[float] = None
    expected_exit_date: Optional[date] = None
    section: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    reason: Optional[str] = None


class BookingResponse(BaseModel):
    id: int
    reference: str
    user_id: int
    warehouse_id: int
    space_type: SpaceType
    tenure: Tenure
    area_requested: float
    section: Optional[str] = None
    entry_date: date
    expected_exit_date: Optional[date] = None
    duration_months: Optional[int] = None
    status: BookingStatus
    notes: Optional[str] = None
    modification_history: List[Dict[str, Any]] = []
    user: Optional[UserMinimumResponse] = None
    warehouse: Optional[WarehouseMinimumResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookingMinimumResponse(BaseModel):
    id: int
    reference: str
    warehouse_id: int
    space_type: SpaceType
    area_requested: float
    status: BookingStatus

    model_config = ConfigDict(from_attributes=True)

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime

from enums.stock_status import StockStatus, StockMovementType
from enums.space_type import SpaceType


class StockCreate(BaseModel):
    booking_id: int
    product_name: str
    product_type: str
    description: Optional[str] = None
    quantity: float = Field(gt=0)
    unit: str = "items"
    area_used: Optional[float] = Field(default=None, ge=0)
    storage_location: Optional[str] = None
    entry_date: Optional[date] = None
    expected_exit_date: Optional[date] = None
    client_phone: Optional[str] = None
    notes: Optional[str] = None


class StockUpdate(BaseModel):
    product_name: Optional[str] = None
    product_type: Optional[str] = None
    description: Optional[str] = None
    area_used: Optional[float] = Field(default=None, ge=0)
    storage_location: Optional[str] = None
    expected_exit_date: Optional[date] = None
    notes: Optional[str] = None


class StockQuantityChange(BaseModel):
    quantity: Optional[float] = Field(default=None, gt=0)
    movement_date: Optional[date] = None
    notes: Optional[str] = None


class StockStatusUpdate(BaseModel):
    status: StockStatus
    notes: Optional[str] = None


class StockMovementResponse(BaseModel):
    id: int
    stock_id: int
    movement_type: StockMovementType
    quantity: float
    previous_quantity: float
    new_quantity: float
    movement_date: date
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class StockResponse(BaseModel):
    id: int
    booking_id: int
    user_id: int
    client_name: str
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    product_name: str
    product_type: str
    description: Optional[str] = None
    quantity: float
    current_quantity: float
    total_received_quantity: float
    total_delivered_quantity: float
    unit: str
    area_used: Optional[float] = None
    space_type: SpaceType
    storage_location: Optional[str] = None
    status: StockStatus
    entry_date: date
    expected_exit_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

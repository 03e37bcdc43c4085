from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date

from enums.bill_status import BillStatus


class ElectricityBillCreate(BaseModel):
    booking_id: int
    billing_period_start: date
    billing_period_end: date
    meter_reading_start: float = Field(ge=0)
    meter_reading_end: float = Field(ge=0)
    # Falls back to the configured EWA tariff when omitted
    rate_per_unit: Optional[float] = Field(default=None, ge=0)
    bill_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None


class ElectricityBillResponse(BaseModel):
    id: int
    booking_id: int
    billing_period_start: date
    billing_period_end: date
    meter_reading_start: float
    meter_reading_end: float
    units_consumed: float
    rate_per_unit: Optional[float] = None
    total_amount: float
    bill_date: date
    due_date: date
    status: BillStatus
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

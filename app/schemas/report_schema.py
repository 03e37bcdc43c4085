from pydantic import BaseModel
from datetime import datetime
from typing import Dict, List, Optional


class FloorStats(BaseModel):
    total_space: float = 0.0
    occupied_space: float = 0.0
    available_space: float = 0.0
    utilization_percentage: float = 0.0


class BookingStats(BaseModel):
    total: int = 0
    by_status: Dict[str, int] = {}


class QuoteStats(BaseModel):
    total: int = 0
    by_status: Dict[str, int] = {}
    accepted_value: float = 0.0


class BillStats(BaseModel):
    outstanding_count: int = 0
    outstanding_amount: float = 0.0


class AdminOverviewResponse(BaseModel):
    """Response model for the admin overview"""

    warehouse_count: int = 0
    ground_floor: FloorStats
    mezzanine: FloorStats
    booking_stats: BookingStats
    quote_stats: QuoteStats
    bill_stats: BillStats
    generated_at: datetime


class UserDashboardResponse(BaseModel):
    """Response model for a client's own dashboard"""

    booking_stats: BookingStats
    occupied_area: float = 0.0
    active_stock_count: int = 0
    quote_stats: QuoteStats
    generated_at: datetime


class UserSpaceRow(BaseModel):
    user_id: int
    name: str
    email: str
    company_name: Optional[str] = None
    ground_floor_area: float = 0.0
    mezzanine_area: float = 0.0
    total_area: float = 0.0
    active_bookings: int = 0


class OccupantCostRow(BaseModel):
    booking_id: int
    reference: str
    user_id: int
    user_name: str
    warehouse_id: int
    space_type: str
    tenure: str
    area_requested: float
    area_band_name: Optional[str] = None
    chargeable_area: Optional[float] = None
    monthly_rate_per_sqm: Optional[float] = None
    monthly_rent: Optional[float] = None
    ewa_fixed_monthly: float = 0.0
    # Set instead of a zero rent when no pricing band applies
    error: Optional[str] = None


class StockWarehouseRow(BaseModel):
    warehouse_id: int
    warehouse_name: str
    item_count: int = 0
    current_quantity: float = 0.0
    area_used: float = 0.0


class StockReportResponse(BaseModel):
    total_items: int = 0
    by_status: Dict[str, int] = {}
    current_quantity: float = 0.0
    total_received_quantity: float = 0.0
    total_delivered_quantity: float = 0.0
    per_warehouse: List[StockWarehouseRow] = []
    generated_at: datetime

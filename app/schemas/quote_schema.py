from pydantic import BaseModel, ConfigDict, Field, EmailStr
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional
from datetime import date, datetime

from enums.ewa_mode import EwaMode
from enums.quote_status import QuoteStatus
from enums.service_category import ServicePricingType
from enums.space_type import SpaceType
from enums.tenure import Tenure


class CamelModel(BaseModel):
    """Accepts both snake_case and camelCase keys from the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Device(CamelModel):
    name: str
    watts: float = Field(ge=0)
    hours_per_day: float = Field(ge=0, le=24)
    quantity: int = Field(default=1, ge=1)


class ServiceSelection(CamelModel):
    quantity: float = Field(default=1, ge=0)
    # Overrides the configured service rate when present
    rate: Optional[float] = Field(default=None, ge=0)


class CalculationInputs(CamelModel):
    area: float
    tenure: Tenure
    space_type: SpaceType = SpaceType.GROUND_FLOOR
    lease_start: date
    lease_end: date
    ewa_mode: EwaMode = EwaMode.HOUSE_LOAD
    devices: List[Device] = []
    estimated_kwh: Optional[float] = Field(default=None, ge=0)
    optional_services: Dict[int, ServiceSelection] = {}
    include_office: bool = False
    discount_percent: Optional[float] = None
    discount_fixed: Optional[float] = None
    vat_rate: Optional[float] = None


class EwaBreakdown(BaseModel):
    mode: EwaMode
    description: Optional[str] = None
    estimated_kw: float = 0.0
    monthly_kwh: float = 0.0
    monthly_estimate: float = 0.0
    term_estimate: float = 0.0
    one_off_costs: float = 0.0
    exceeds_house_load_cap: bool = False


class ServiceLine(BaseModel):
    service_id: int
    name: str
    pricing_type: ServicePricingType
    quantity: float
    rate: Optional[float] = None
    unit: Optional[str] = None
    total: float
    is_free: bool = False
    quote_pending: bool = False


class Suggestion(BaseModel):
    type: str
    message: str
    current_cost: float
    suggested_cost: float
    savings: float


class PaymentPeriod(BaseModel):
    period: int
    label: str
    rent: float
    office: float
    ewa: float
    total: float


class CalculationResult(BaseModel):
    space_type: SpaceType
    tenure: Tenure
    area_requested: float
    chargeable_area: float
    area_band_name: str
    monthly_rate_per_sqm: float
    daily_rate_per_sqm: float

    lease_start: date
    lease_end: date
    lease_duration_months: float
    months_full: int
    days_extra: int
    total_days: int
    pro_rata_fraction: float

    monthly_base_rent: float
    total_base_rent: float
    minimum_charge_applied: bool = False

    office_included: bool = False
    office_total: float = 0.0

    ewa_breakdown: EwaBreakdown

    optional_services_total: float
    optional_services_breakdown: List[ServiceLine] = []

    subtotal: float
    discount_amount: float
    vat_rate: float
    vat_amount: float
    grand_total: float

    currency: str
    package_starting: Optional[float] = None
    payment_terms: str
    warnings: List[str] = []
    suggestions: List[Suggestion] = []
    payment_schedule: List[PaymentPeriod] = []


class QuoteCreate(CalculationInputs):
    client_name: str
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = None
    warehouse_location: Optional[str] = None
    notes: Optional[str] = None


class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus


class QuoteResponse(BaseModel):
    id: int
    quote_number: str
    user_id: Optional[int] = None
    client_name: str
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    warehouse_location: Optional[str] = None
    space_type: SpaceType
    tenure: Tenure
    area_requested: float
    area_chargeable: float
    area_band_name: str
    lease_start: date
    lease_end: date
    lease_duration_months: float
    monthly_rate_per_sqm: float
    daily_rate_per_sqm: float
    total_base_rent: float
    ewa_type: EwaMode
    ewa_monthly_estimate: float
    ewa_total_estimate: float
    ewa_one_off_costs: float
    office_total: float
    optional_services_total: float
    optional_services_details: Optional[List[dict]] = None
    subtotal: float
    discount_percentage: float
    discount_fixed: float
    discount_amount: float
    vat_percentage: float
    vat_amount: float
    grand_total: float
    payment_terms: Optional[str] = None
    valid_until: Optional[date] = None
    status: QuoteStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

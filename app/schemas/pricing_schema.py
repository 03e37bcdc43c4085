from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from enums.space_type import SpaceType
from enums.tenure import Tenure
from enums.service_category import ServiceCategory, ServicePricingType


class PricingRateBase(BaseModel):
    space_type: SpaceType
    tenure: Tenure
    tenure_description: Optional[str] = None
    area_band_name: str
    area_band_min: float = Field(ge=0)
    area_band_max: Optional[float] = None
    monthly_rate_per_sqm: float = Field(ge=0)
    daily_rate_per_sqm: Optional[float] = Field(default=None, ge=0)
    min_chargeable_area: float = Field(default=0.0, ge=0)
    package_starting_price: Optional[float] = None
    active: bool = True


class PricingRateCreate(PricingRateBase):
    pass


class PricingRateUpdate(BaseModel):
    space_type: Optional[SpaceType] = None
    tenure: Optional[Tenure] = None
    tenure_description: Optional[str] = None
    area_band_name: Optional[str] = None
    area_band_min: Optional[float] = Field(default=None, ge=0)
    area_band_max: Optional[float] = None
    monthly_rate_per_sqm: Optional[float] = Field(default=None, ge=0)
    daily_rate_per_sqm: Optional[float] = Field(default=None, ge=0)
    min_chargeable_area: Optional[float] = Field(default=None, ge=0)
    package_starting_price: Optional[float] = None
    active: Optional[bool] = None


class PricingRateResponse(PricingRateBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class TariffTier(BaseModel):
    up_to_kwh: Optional[float] = Field(default=None, gt=0)
    rate: float = Field(ge=0)


class EwaSettingsUpdate(BaseModel):
    included_kw_cap: float = Field(ge=0)
    included_kwh_cap: float = Field(ge=0)
    tariff_per_kwh: float = Field(ge=0)
    tariff_tiers: Optional[List[TariffTier]] = None
    fixed_monthly_charges: float = Field(default=0.0, ge=0)
    meter_deposit: float = Field(default=0.0, ge=0)
    installation_fee: float = Field(default=0.0, ge=0)
    house_load_description: Optional[str] = None
    dedicated_meter_description: Optional[str] = None


class EwaSettingsResponse(EwaSettingsUpdate):
    id: int
    active: bool

    model_config = ConfigDict(from_attributes=True)


class OptionalServiceBase(BaseModel):
    name: str
    description: Optional[str] = None
    category: ServiceCategory
    pricing_type: ServicePricingType
    rate: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    time_restriction: Optional[str] = None
    is_free: bool = False
    active: bool = True


class OptionalServiceCreate(OptionalServiceBase):
    pass


class OptionalServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ServiceCategory] = None
    pricing_type: Optional[ServicePricingType] = None
    rate: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    time_restriction: Optional[str] = None
    is_free: Optional[bool] = None
    active: Optional[bool] = None


class OptionalServiceResponse(OptionalServiceBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class SystemSettingUpsert(BaseModel):
    setting_value: str
    description: Optional[str] = None


class SystemSettingResponse(BaseModel):
    id: int
    setting_key: str
    setting_value: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

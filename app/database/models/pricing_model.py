from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Enum, JSON
from sqlalchemy.sql import func

from database.init import Base
from enums.space_type import SpaceType
from enums.tenure import Tenure
from enums.service_category import ServiceCategory, ServicePricingType


class PricingRate(Base):
    __tablename__ = "pricing_rates"

    id = Column(Integer, primary_key=True, index=True)
    space_type = Column(Enum(SpaceType), nullable=False, index=True)
    tenure = Column(Enum(Tenure), nullable=False, index=True)
    tenure_description = Column(String(100), nullable=True)
    area_band_name = Column(String(100), nullable=False)
    area_band_min = Column(Float, nullable=False)
    # NULL means the band has no upper bound
    area_band_max = Column(Float, nullable=True)
    monthly_rate_per_sqm = Column(Float, nullable=False)
    daily_rate_per_sqm = Column(Float, nullable=True)
    min_chargeable_area = Column(Float, nullable=False, default=0.0)
    package_starting_price = Column(Float, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class EwaSettings(Base):
    __tablename__ = "ewa_settings"

    id = Column(Integer, primary_key=True, index=True)
    included_kw_cap = Column(Float, nullable=False)
    included_kwh_cap = Column(Float, nullable=False)
    tariff_per_kwh = Column(Float, nullable=False)
    # [{"up_to_kwh": 3000, "rate": 0.003}, {"up_to_kwh": null, "rate": 0.016}]
    tariff_tiers = Column(JSON, nullable=True)
    fixed_monthly_charges = Column(Float, nullable=False, default=0.0)
    meter_deposit = Column(Float, nullable=False, default=0.0)
    installation_fee = Column(Float, nullable=False, default=0.0)
    house_load_description = Column(String(500), nullable=True)
    dedicated_meter_description = Column(String(500), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class OptionalService(Base):
    __tablename__ = "optional_services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(1000), nullable=True)
    category = Column(Enum(ServiceCategory), nullable=False)
    pricing_type = Column(Enum(ServicePricingType), nullable=False)
    rate = Column(Float, nullable=True)
    unit = Column(String(50), nullable=True)
    time_restriction = Column(String(100), nullable=True)
    is_free = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class SystemSetting(Base):
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, index=True)
    setting_key = Column(String(100), unique=True, index=True, nullable=False)
    setting_value = Column(String(500), nullable=False)
    description = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

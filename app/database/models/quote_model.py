from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Float, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..init import Base
from enums.ewa_mode import EwaMode
from enums.quote_status import QuoteStatus
from enums.space_type import SpaceType
from enums.tenure import Tenure


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    quote_number = Column(String(20), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    client_name = Column(String(100), nullable=False)
    client_email = Column(String(100), nullable=True)
    client_phone = Column(String(20), nullable=True)
    warehouse_location = Column(String(255), nullable=True)

    space_type = Column(Enum(SpaceType), nullable=False)
    tenure = Column(Enum(Tenure), nullable=False)
    area_requested = Column(Float, nullable=False)
    area_chargeable = Column(Float, nullable=False)
    area_band_name = Column(String(100), nullable=False)
    lease_start = Column(Date, nullable=False)
    lease_end = Column(Date, nullable=False)
    lease_duration_months = Column(Float, nullable=False)
    monthly_rate_per_sqm = Column(Float, nullable=False)
    daily_rate_per_sqm = Column(Float, nullable=False)
    total_base_rent = Column(Float, nullable=False)

    ewa_type = Column(Enum(EwaMode), nullable=False)
    ewa_monthly_estimate = Column(Float, nullable=False, default=0.0)
    ewa_total_estimate = Column(Float, nullable=False, default=0.0)
    ewa_one_off_costs = Column(Float, nullable=False, default=0.0)

    office_total = Column(Float, nullable=False, default=0.0)
    optional_services_total = Column(Float, nullable=False, default=0.0)
    optional_services_details = Column(JSON, nullable=True)

    subtotal = Column(Float, nullable=False)
    discount_percentage = Column(Float, nullable=False, default=0.0)
    discount_fixed = Column(Float, nullable=False, default=0.0)
    discount_amount = Column(Float, nullable=False, default=0.0)
    vat_percentage = Column(Float, nullable=False, default=0.0)
    vat_amount = Column(Float, nullable=False, default=0.0)
    grand_total = Column(Float, nullable=False)
    payment_terms = Column(String(500), nullable=True)

    valid_until = Column(Date, nullable=True)
    status = Column(String(20), default=QuoteStatus.DRAFT.value, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="quotes")

from sqlalchemy import Column, Integer, Text, Date, DateTime, ForeignKey, Float, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..init import Base
from enums.bill_status import BillStatus


class ElectricityBill(Base):
    __tablename__ = "electricity_bills"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    billing_period_start = Column(Date, nullable=False)
    billing_period_end = Column(Date, nullable=False)
    meter_reading_start = Column(Float, nullable=False)
    meter_reading_end = Column(Float, nullable=False)
    units_consumed = Column(Float, nullable=False)
    rate_per_unit = Column(Float, nullable=True)
    total_amount = Column(Float, nullable=False)
    bill_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(20), default=BillStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    booking = relationship("Booking", back_populates="electricity_bills")

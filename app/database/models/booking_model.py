from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Float, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..init import Base
from enums.booking_status import BookingStatus
from enums.space_type import SpaceType
from enums.tenure import Tenure


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(32), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)

    space_type = Column(Enum(SpaceType), nullable=False)
    tenure = Column(Enum(Tenure), nullable=False)
    area_requested = Column(Float, nullable=False)
    section = Column(String(50), nullable=True)
    entry_date = Column(Date, nullable=False)
    expected_exit_date = Column(Date, nullable=True)
    duration_months = Column(Integer, nullable=True)
    status = Column(String(20), default=BookingStatus.REQUESTED.value, nullable=False)
    notes = Column(Text, nullable=True)
    modification_history = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="bookings")
    warehouse = relationship("Warehouse", back_populates="bookings")
    stock_items = relationship("StockItem", back_populates="booking")
    electricity_bills = relationship("ElectricityBill", back_populates="booking")

    @property
    def status_enum(self) -> BookingStatus:
        return BookingStatus(self.status)

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.init import Base
from enums.warehouse_status import WarehouseStatus


class Warehouse(Base):
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), index=True, nullable=False)
    location = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    total_space = Column(Float, nullable=False)
    occupied_space = Column(Float, nullable=False, default=0.0)
    has_mezzanine = Column(Boolean, default=False, nullable=False)
    mezzanine_space = Column(Float, nullable=True)
    mezzanine_occupied = Column(Float, nullable=True)
    status = Column(String(20), default=WarehouseStatus.ACTIVE.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    bookings = relationship("Booking", back_populates="warehouse")

    def __repr__(self):
        return f"<Warehouse(id={self.id}, name={self.name!r})>"

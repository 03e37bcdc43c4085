from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Float, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..init import Base
from enums.space_type import SpaceType
from enums.stock_status import StockStatus


class StockItem(Base):
    __tablename__ = "client_stock"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    client_name = Column(String(100), nullable=False)
    client_email = Column(String(100), nullable=True)
    client_phone = Column(String(20), nullable=True)
    product_name = Column(String(150), nullable=False)
    product_type = Column(String(100), nullable=False)
    description = Column(String(2000), nullable=True)

    # quantity is the originally received amount and never changes
    quantity = Column(Float, nullable=False)
    current_quantity = Column(Float, nullable=False)
    total_received_quantity = Column(Float, nullable=False)
    total_delivered_quantity = Column(Float, nullable=False, default=0.0)
    unit = Column(String(30), nullable=False, default="items")

    area_used = Column(Float, nullable=True)
    space_type = Column(Enum(SpaceType), nullable=False)
    storage_location = Column(String(100), nullable=True)
    status = Column(String(20), default=StockStatus.ACTIVE.value, nullable=False)
    entry_date = Column(Date, nullable=False)
    expected_exit_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    booking = relationship("Booking", back_populates="stock_items")
    movements = relationship(
        "StockMovement", back_populates="stock_item", cascade="all, delete-orphan"
    )


class StockMovement(Base):
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    stock_id = Column(Integer, ForeignKey("client_stock.id"), nullable=False, index=True)
    movement_type = Column(String(20), nullable=False)
    quantity = Column(Float, nullable=False)
    previous_quantity = Column(Float, nullable=False)
    new_quantity = Column(Float, nullable=False)
    movement_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    stock_item = relationship("StockItem", back_populates="movements")

from .user_model import User
from .warehouse_model import Warehouse
from .booking_model import Booking
from .stock_model import StockItem, StockMovement
from .pricing_model import PricingRate, EwaSettings, OptionalService, SystemSetting
from .quote_model import Quote
from .electricity_bill_model import ElectricityBill

__all__ = [
    "User",
    "Warehouse",
    "Booking",
    "StockItem",
    "StockMovement",
    "PricingRate",
    "EwaSettings",
    "OptionalService",
    "SystemSetting",
    "Quote",
    "ElectricityBill",
]

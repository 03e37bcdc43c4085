from enum import Enum


class ServiceCategory(str, Enum):
    MOVEMENT = "movement"
    TRANSPORTATION = "transportation"
    CUSTOMS = "customs"
    HANDLING = "handling"
    SECURITY = "security"


class ServicePricingType(str, Enum):
    FIXED = "fixed"
    HOURLY = "hourly"
    PER_EVENT = "per_event"
    ON_REQUEST = "on_request"

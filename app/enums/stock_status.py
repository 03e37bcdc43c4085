from enum import Enum


class StockStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"
    DAMAGED = "damaged"
    CANCELLED = "cancelled"

    def can_transition_to(self, target: "StockStatus") -> bool:
        return target in STOCK_TRANSITIONS[self]


STOCK_TRANSITIONS = {
    StockStatus.PENDING: {StockStatus.ACTIVE, StockStatus.CANCELLED},
    StockStatus.ACTIVE: {
        StockStatus.COMPLETED,
        StockStatus.EXPIRED,
        StockStatus.DAMAGED,
        StockStatus.CANCELLED,
    },
    StockStatus.EXPIRED: {StockStatus.COMPLETED, StockStatus.DAMAGED},
    StockStatus.DAMAGED: {StockStatus.COMPLETED},
    StockStatus.COMPLETED: set(),
    StockStatus.CANCELLED: set(),
}


class StockMovementType(str, Enum):
    INITIAL = "initial"
    RECEIVE = "receive"
    DELIVER = "deliver"
    ADJUSTMENT = "adjustment"

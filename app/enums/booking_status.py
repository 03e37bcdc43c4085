from enum import Enum


class BookingStatus(str, Enum):
    REQUESTED = "requested"
    VALIDATED = "validated"
    COMMITTED = "committed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def can_transition_to(self, target: "BookingStatus") -> bool:
        return target in BOOKING_TRANSITIONS[self]

    @property
    def holds_space(self) -> bool:
        """Committed and active bookings have their area counted as occupied."""
        return self in (BookingStatus.COMMITTED, BookingStatus.ACTIVE)


BOOKING_TRANSITIONS = {
    BookingStatus.REQUESTED: {BookingStatus.VALIDATED, BookingStatus.CANCELLED},
    BookingStatus.VALIDATED: {BookingStatus.COMMITTED, BookingStatus.CANCELLED},
    BookingStatus.COMMITTED: {BookingStatus.ACTIVE, BookingStatus.CANCELLED},
    BookingStatus.ACTIVE: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

from enum import Enum


class Tenure(str, Enum):
    """Contract duration category that selects the applicable rate"""

    VERY_SHORT = "Very Short"
    SHORT = "Short"
    LONG = "Long"

    def __str__(self):
        return self.value

    @classmethod
    def for_months(cls, months: float) -> "Tenure":
        if months < 1:
            return cls.VERY_SHORT
        if months < 12:
            return cls.SHORT
        return cls.LONG

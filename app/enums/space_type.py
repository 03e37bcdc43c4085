from enum import Enum


class SpaceType(str, Enum):
    """Floor types that can be priced and booked"""

    GROUND_FLOOR = "Ground Floor"
    MEZZANINE = "Mezzanine"
    OFFICE = "Office"

    def __str__(self):
        return self.value

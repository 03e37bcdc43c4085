from enum import Enum


class EwaMode(str, Enum):
    HOUSE_LOAD = "house_load"
    DEDICATED_METER = "dedicated_meter"

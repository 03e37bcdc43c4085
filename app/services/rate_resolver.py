from dataclasses import dataclass
from typing import Iterable, List, Optional

from enums.space_type import SpaceType
from enums.tenure import Tenure
from exceptions import AmbiguousOrMissingRate, InvalidArea, ValidationError


@dataclass
class DerivedRate:
    """A pricing band computed from another band rather than stored."""

    space_type: SpaceType
    tenure: Tenure
    area_band_name: str
    area_band_min: float
    area_band_max: Optional[float]
    monthly_rate_per_sqm: float
    daily_rate_per_sqm: Optional[float]
    min_chargeable_area: float
    package_starting_price: Optional[float] = None
    active: bool = True
    id: Optional[int] = None


def band_contains(rate, area: float) -> bool:
    """Bands include their minimum and exclude their maximum; a missing maximum is unbounded."""
    if area < rate.area_band_min:
        return False
    return rate.area_band_max is None or area < rate.area_band_max


def bands_overlap(first, second) -> bool:
    first_max = float("inf") if first.area_band_max is None else first.area_band_max
    second_max = float("inf") if second.area_band_max is None else second.area_band_max
    return first.area_band_min < second_max and second.area_band_min < first_max


class RateResolver:
    def __init__(self, mezzanine_very_short_discount_percent: float = 20.0):
        self.mezzanine_discount = mezzanine_very_short_discount_percent

    def matching(
        self, rates: Iterable, space_type: SpaceType, tenure: Tenure, area: float
    ) -> List:
        space_type = SpaceType(space_type)
        tenure = Tenure(tenure)
        return [
            rate
            for rate in rates
            if rate.active
            and SpaceType(rate.space_type) == space_type
            and Tenure(rate.tenure) == tenure
            and band_contains(rate, area)
        ]

    def resolve(self, rates: Iterable, space_type: SpaceType, tenure: Tenure, area: float):
        """
        Select the single active band for the space type, tenure and area.

        Raises:
            InvalidArea: area is not positive
            AmbiguousOrMissingRate: zero bands or more than one band match
        """
        if area is None or area <= 0:
            raise InvalidArea(area)

        rates = list(rates)
        space_type = SpaceType(space_type)
        tenure = Tenure(tenure)
        matches = self.matching(rates, space_type, tenure, area)

        if (
            not matches
            and space_type == SpaceType.MEZZANINE
            and tenure == Tenure.VERY_SHORT
        ):
            ground_matches = self.matching(rates, SpaceType.GROUND_FLOOR, tenure, area)
            if len(ground_matches) == 1:
                return self.derive_mezzanine(ground_matches[0])
            matches = ground_matches

        if len(matches) != 1:
            raise AmbiguousOrMissingRate(space_type, tenure, area, len(matches))
        return matches[0]

    def try_resolve(self, rates: Iterable, space_type: SpaceType, tenure: Tenure, area: float):
        try:
            return self.resolve(rates, space_type, tenure, area)
        except AmbiguousOrMissingRate:
            return None

    def derive_mezzanine(self, ground_rate) -> DerivedRate:
        factor = 1 - self.mezzanine_discount / 100
        daily = ground_rate.daily_rate_per_sqm
        return DerivedRate(
            space_type=SpaceType.MEZZANINE,
            tenure=Tenure(ground_rate.tenure),
            area_band_name=f"{ground_rate.area_band_name} (Mezzanine)",
            area_band_min=ground_rate.area_band_min,
            area_band_max=ground_rate.area_band_max,
            monthly_rate_per_sqm=ground_rate.monthly_rate_per_sqm * factor,
            daily_rate_per_sqm=daily * factor if daily is not None else None,
            min_chargeable_area=ground_rate.min_chargeable_area,
            package_starting_price=ground_rate.package_starting_price,
        )

    @staticmethod
    def find_overlaps(rates: Iterable, candidate) -> List:
        """Active bands of the same space type and tenure whose range intersects the candidate's."""
        return [
            rate
            for rate in rates
            if rate is not candidate
            and rate.active
            and (candidate.id is None or rate.id != candidate.id)
            and SpaceType(rate.space_type) == SpaceType(candidate.space_type)
            and Tenure(rate.tenure) == Tenure(candidate.tenure)
            and bands_overlap(rate, candidate)
        ]

    @staticmethod
    def check_band(candidate) -> None:
        if candidate.area_band_min < 0:
            raise ValidationError("Area band minimum cannot be negative")
        if candidate.area_band_max is not None and candidate.area_band_max <= candidate.area_band_min:
            raise ValidationError("Area band maximum must be greater than its minimum")
        if candidate.monthly_rate_per_sqm < 0:
            raise ValidationError("Monthly rate cannot be negative")
        if candidate.daily_rate_per_sqm is not None and candidate.daily_rate_per_sqm < 0:
            raise ValidationError("Daily rate cannot be negative")

import unittest

from enums.space_type import SpaceType
from enums.tenure import Tenure
from exceptions import AmbiguousOrMissingRate, InvalidArea, ValidationError
from services.rate_resolver import RateResolver, band_contains
from tests.support import rate


class TestRateResolver(unittest.TestCase):
    def setUp(self):
        self.resolver = RateResolver(mezzanine_very_short_discount_percent=20.0)
        self.rates = [
            rate(band_min=0, band_max=100, monthly=3.0, name="Small"),
            rate(band_min=100, band_max=500, monthly=2.5, name="Medium"),
            rate(band_min=500, band_max=None, monthly=2.0, name="Large"),
            rate(tenure=Tenure.LONG, band_min=0, band_max=None, monthly=1.8, name="Long"),
        ]

    def test_area_at_band_minimum_selects_that_band(self):
        result = self.resolver.resolve(self.rates, SpaceType.GROUND_FLOOR, Tenure.SHORT, 100)
        self.assertEqual(result.area_band_name, "Medium")

    def test_area_one_unit_below_minimum_selects_prior_band(self):
        result = self.resolver.resolve(self.rates, SpaceType.GROUND_FLOOR, Tenure.SHORT, 99)
        self.assertEqual(result.area_band_name, "Small")

    def test_unbounded_band_covers_large_areas(self):
        result = self.resolver.resolve(self.rates, SpaceType.GROUND_FLOOR, Tenure.SHORT, 25000)
        self.assertEqual(result.area_band_name, "Large")

    def test_tenure_filters_bands(self):
        result = self.resolver.resolve(self.rates, SpaceType.GROUND_FLOOR, Tenure.LONG, 250)
        self.assertEqual(result.area_band_name, "Long")

    def test_area_below_first_band_is_missing(self):
        rates = [rate(band_min=100, band_max=None)]
        with self.assertRaises(AmbiguousOrMissingRate) as ctx:
            self.resolver.resolve(rates, SpaceType.GROUND_FLOOR, Tenure.SHORT, 99)
        self.assertEqual(ctx.exception.match_count, 0)

    def test_overlapping_bands_are_ambiguous(self):
        rates = self.rates + [rate(band_min=50, band_max=150, name="Overlap")]
        with self.assertRaises(AmbiguousOrMissingRate) as ctx:
            self.resolver.resolve(rates, SpaceType.GROUND_FLOOR, Tenure.SHORT, 120)
        self.assertEqual(ctx.exception.match_count, 2)
        self.assertEqual(ctx.exception.details()["match_count"], 2)

    def test_inactive_bands_are_ignored(self):
        rates = [
            rate(band_min=0, band_max=None, name="Old", active=False),
            rate(band_min=0, band_max=None, name="Current"),
        ]
        result = self.resolver.resolve(rates, SpaceType.GROUND_FLOOR, Tenure.SHORT, 10)
        self.assertEqual(result.area_band_name, "Current")

    def test_non_positive_area_is_rejected(self):
        for area in (0, -5):
            with self.assertRaises(InvalidArea):
                self.resolver.resolve(self.rates, SpaceType.GROUND_FLOOR, Tenure.SHORT, area)

    def test_every_area_resolves_to_one_band_or_fails(self):
        for area in (0.5, 1, 50, 99.99, 100, 100.01, 499, 500, 501, 10000):
            matches = self.resolver.matching(self.rates, SpaceType.GROUND_FLOOR, Tenure.SHORT, area)
            self.assertEqual(len(matches), 1, area)

    def test_mezzanine_very_short_is_derived_from_ground_floor(self):
        rates = [rate(tenure=Tenure.VERY_SHORT, monthly=3.0, daily=0.2, min_area=50, name="Daily")]
        result = self.resolver.resolve(rates, SpaceType.MEZZANINE, Tenure.VERY_SHORT, 80)

        self.assertEqual(result.space_type, SpaceType.MEZZANINE)
        self.assertEqual(result.area_band_name, "Daily (Mezzanine)")
        self.assertAlmostEqual(result.monthly_rate_per_sqm, 2.4)
        self.assertAlmostEqual(result.daily_rate_per_sqm, 0.16)
        self.assertEqual(result.min_chargeable_area, 50)

    def test_explicit_mezzanine_band_wins_over_derivation(self):
        rates = [
            rate(tenure=Tenure.VERY_SHORT, monthly=3.0, daily=0.2, name="Daily"),
            rate(space_type=SpaceType.MEZZANINE, tenure=Tenure.VERY_SHORT, monthly=1.0, daily=0.05, name="Mezz"),
        ]
        result = self.resolver.resolve(rates, SpaceType.MEZZANINE, Tenure.VERY_SHORT, 80)
        self.assertEqual(result.area_band_name, "Mezz")

    def test_mezzanine_short_is_not_derived(self):
        with self.assertRaises(AmbiguousOrMissingRate):
            self.resolver.resolve(self.rates, SpaceType.MEZZANINE, Tenure.SHORT, 80)

    def test_try_resolve_returns_none_when_missing(self):
        self.assertIsNone(self.resolver.try_resolve(self.rates, SpaceType.OFFICE, Tenure.SHORT, 10))


class TestBandConfiguration(unittest.TestCase):
    def test_band_bounds(self):
        band = rate(band_min=100, band_max=500)
        self.assertTrue(band_contains(band, 100))
        self.assertTrue(band_contains(band, 499.999))
        self.assertFalse(band_contains(band, 500))
        self.assertFalse(band_contains(band, 99.999))

    def test_find_overlaps(self):
        existing = [
            rate(band_min=0, band_max=100, id=1),
            rate(band_min=100, band_max=None, id=2),
            rate(tenure=Tenure.LONG, band_min=0, band_max=None, id=3),
        ]
        touching = rate(band_min=0, band_max=100)
        overlapping = rate(band_min=90, band_max=200)

        self.assertEqual([r.id for r in RateResolver.find_overlaps(existing, touching)], [1])
        self.assertEqual([r.id for r in RateResolver.find_overlaps(existing, overlapping)], [1, 2])

    def test_find_overlaps_ignores_the_band_being_edited(self):
        existing = [rate(band_min=0, band_max=100, id=1)]
        edited = rate(band_min=0, band_max=120, id=1)
        self.assertEqual(RateResolver.find_overlaps(existing, edited), [])

    def test_check_band_rejects_inverted_range(self):
        with self.assertRaises(ValidationError):
            RateResolver.check_band(rate(band_min=100, band_max=100))
        with self.assertRaises(ValidationError):
            RateResolver.check_band(rate(band_min=100, band_max=50))
        RateResolver.check_band(rate(band_min=0, band_max=None))

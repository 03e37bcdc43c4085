import unittest
from datetime import date
from decimal import Decimal

from config import BusinessSettings
from enums.ewa_mode import EwaMode
from enums.service_category import ServicePricingType
from enums.space_type import SpaceType
from enums.tenure import Tenure
from exceptions import InvalidDateRange, ValidationError
from schemas.quote_schema import CalculationInputs, Device, ServiceSelection
from services.quote_calculator import QuoteCalculator, lease_duration, tariff_cost
from tests.support import ewa_settings, rate, service


def inputs(**overrides):
    values = dict(
        area=500,
        tenure=Tenure.SHORT,
        space_type=SpaceType.GROUND_FLOOR,
        lease_start=date(2024, 1, 1),
        lease_end=date(2024, 4, 1),
    )
    values.update(overrides)
    return CalculationInputs(**values)


def exact(value) -> Decimal:
    return Decimal(str(value))


class TestLeaseDuration(unittest.TestCase):
    def test_whole_calendar_months(self):
        duration = lease_duration(date(2024, 1, 1), date(2024, 4, 1))
        self.assertEqual((duration.months_full, duration.days_extra), (3, 0))
        self.assertEqual(duration.total_days, 91)

    def test_leftover_days(self):
        duration = lease_duration(date(2024, 1, 1), date(2024, 2, 16))
        self.assertEqual((duration.months_full, duration.days_extra), (1, 15))
        self.assertEqual(duration.total_months, Decimal("1.5"))

    def test_month_end_start(self):
        duration = lease_duration(date(2024, 1, 31), date(2024, 3, 1))
        self.assertEqual((duration.months_full, duration.days_extra), (1, 1))

    def test_calendar_month_boundary(self):
        # 30 days, but one calendar month and a day
        duration = lease_duration(date(2024, 2, 1), date(2024, 3, 2))
        self.assertEqual((duration.months_full, duration.days_extra), (1, 1))
        self.assertEqual(duration.total_days, 30)
        self.assertEqual(duration.total_months, Decimal(1) + Decimal(1) / Decimal(30))

    def test_end_not_after_start_is_rejected(self):
        with self.assertRaises(InvalidDateRange):
            lease_duration(date(2024, 1, 1), date(2024, 1, 1))
        with self.assertRaises(InvalidDateRange):
            lease_duration(date(2024, 2, 1), date(2024, 1, 1))


class TestTariff(unittest.TestCase):
    def test_flat_tariff(self):
        self.assertEqual(tariff_cost(ewa_settings(tariff_per_kwh=0.016), 1000), Decimal("16.000"))

    def test_progressive_tiers(self):
        settings = ewa_settings(
            tariff_tiers=[{"up_to_kwh": 3000, "rate": 0.003}, {"up_to_kwh": None, "rate": 0.016}]
        )
        self.assertEqual(tariff_cost(settings, 2000), Decimal("6.000"))
        self.assertEqual(tariff_cost(settings, 4000), Decimal("9.000") + Decimal("16.000"))


class TestQuoteCalculator(unittest.TestCase):
    def setUp(self):
        self.settings = BusinessSettings(office_monthly_rate=150.0)
        self.calculator = QuoteCalculator(self.settings)
        self.short_rate = rate(monthly=2.5, min_area=600, name="Standard")

    def test_minimum_chargeable_area_and_monthly_rent(self):
        result = self.calculator.calculate(inputs(), self.short_rate, None, [])

        self.assertEqual(result.chargeable_area, 600)
        self.assertEqual(result.months_full, 3)
        self.assertEqual(result.days_extra, 0)
        self.assertEqual(result.total_base_rent, 4500.0)
        self.assertEqual(result.monthly_base_rent, 1500.0)
        self.assertEqual(result.area_band_name, "Standard")
        self.assertEqual(result.currency, "BHD")

    def test_leftover_days_use_daily_proration(self):
        result = self.calculator.calculate(
            inputs(area=100, lease_end=date(2024, 2, 16)), rate(monthly=2.5), None, []
        )
        self.assertEqual(result.total_base_rent, 375.0)
        self.assertEqual(result.pro_rata_fraction, 0.5)
        self.assertEqual([p.rent for p in result.payment_schedule], [250.0, 125.0])

    def test_very_short_uses_daily_rate_only(self):
        result = self.calculator.calculate(
            inputs(area=100, tenure=Tenure.VERY_SHORT, lease_end=date(2024, 1, 11)),
            rate(tenure=Tenure.VERY_SHORT, monthly=3.0, daily=0.1),
            None,
            [],
        )
        self.assertEqual(result.total_days, 10)
        self.assertEqual(result.total_base_rent, 100.0)
        self.assertEqual(len(result.payment_schedule), 1)

    def test_house_load_over_cap_warns_without_cost(self):
        devices = [Device(name="Chiller", watts=3000, hours_per_day=1, quantity=2)]
        result = self.calculator.calculate(
            inputs(ewa_mode=EwaMode.HOUSE_LOAD, devices=devices),
            self.short_rate,
            ewa_settings(included_kw_cap=5.0),
            [],
        )

        ewa = result.ewa_breakdown
        self.assertEqual(ewa.estimated_kw, 6.0)
        self.assertTrue(ewa.exceeds_house_load_cap)
        self.assertEqual(ewa.term_estimate, 0.0)
        self.assertEqual(ewa.one_off_costs, 0.0)
        self.assertEqual(result.subtotal, 4500.0)
        self.assertEqual(len(result.warnings), 1)

    def test_house_load_within_cap(self):
        devices = [Device(name="Lights", watts=500, hours_per_day=8)]
        result = self.calculator.calculate(
            inputs(devices=devices), self.short_rate, ewa_settings(), []
        )
        self.assertFalse(result.ewa_breakdown.exceeds_house_load_cap)
        self.assertEqual(result.warnings, [])

    def test_dedicated_meter_with_explicit_kwh(self):
        result = self.calculator.calculate(
            inputs(ewa_mode=EwaMode.DEDICATED_METER, estimated_kwh=1000),
            self.short_rate,
            ewa_settings(),
            [],
        )

        ewa = result.ewa_breakdown
        self.assertEqual(ewa.monthly_estimate, 18.0)
        self.assertEqual(ewa.term_estimate, 54.0)
        self.assertEqual(ewa.one_off_costs, 75.0)
        self.assertEqual(result.subtotal, 4500.0 + 54.0 + 75.0)

    def test_dedicated_meter_from_devices(self):
        devices = [Device(name="Freezer", watts=1000, hours_per_day=10, quantity=2)]
        result = self.calculator.calculate(
            inputs(ewa_mode=EwaMode.DEDICATED_METER, devices=devices),
            self.short_rate,
            ewa_settings(),
            [],
        )
        self.assertEqual(result.ewa_breakdown.monthly_kwh, 600.0)
        self.assertEqual(result.ewa_breakdown.monthly_estimate, 11.6)

    def test_dedicated_meter_needs_consumption(self):
        with self.assertRaises(ValidationError):
            self.calculator.calculate(
                inputs(ewa_mode=EwaMode.DEDICATED_METER), self.short_rate, ewa_settings(), []
            )

    def test_on_request_service_is_pending_and_free(self):
        services = [service(7, "Customs clearance", ServicePricingType.ON_REQUEST)]
        result = self.calculator.calculate(
            inputs(optional_services={7: ServiceSelection(quantity=3)}), self.short_rate, None, services
        )

        line = result.optional_services_breakdown[0]
        self.assertTrue(line.quote_pending)
        self.assertEqual(line.total, 0.0)
        self.assertEqual(result.optional_services_total, 0.0)
        self.assertEqual(result.subtotal, 4500.0)

    def test_priced_services(self):
        services = [
            service(1, "Forklift", ServicePricingType.HOURLY, rate=12.5),
            service(2, "Security escort", ServicePricingType.PER_EVENT, rate=40.0),
            service(3, "Loading bay", ServicePricingType.FIXED, rate=30.0, is_free=True),
        ]
        selections = {
            1: ServiceSelection(quantity=4),
            2: ServiceSelection(quantity=1, rate=35.0),
            3: ServiceSelection(quantity=1),
        }
        result = self.calculator.calculate(
            inputs(optional_services=selections), self.short_rate, None, services
        )
        self.assertEqual(result.optional_services_total, 85.0)
        self.assertEqual([line.total for line in result.optional_services_breakdown], [50.0, 35.0, 0.0])

    def test_unknown_service_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.calculator.calculate(
                inputs(optional_services={99: ServiceSelection()}), self.short_rate, None, []
            )

    def test_discount_then_vat(self):
        result = self.calculator.calculate(
            inputs(discount_percent=10, discount_fixed=50, vat_rate=10), self.short_rate, None, []
        )
        self.assertEqual(result.discount_amount, 500.0)
        self.assertEqual(result.vat_amount, 400.0)
        self.assertEqual(result.grand_total, 4400.0)

    def test_discount_is_clamped_to_subtotal(self):
        result = self.calculator.calculate(
            inputs(discount_percent=150, discount_fixed=999999, vat_rate=10), self.short_rate, None, []
        )
        self.assertEqual(result.discount_amount, result.subtotal)
        self.assertEqual(result.vat_amount, 0.0)
        self.assertEqual(result.grand_total, 0.0)

    def test_negative_discount_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.calculator.calculate(inputs(discount_fixed=-1), self.short_rate, None, [])

    def test_grand_total_identity_holds_exactly(self):
        cases = [
            inputs(area=123.4, discount_percent=7.5, vat_rate=10, lease_end=date(2024, 3, 17)),
            inputs(area=77.7, discount_fixed=13.333, vat_rate=5, lease_end=date(2025, 1, 9)),
            inputs(area=640, tenure=Tenure.SHORT, vat_rate=12.5, ewa_mode=EwaMode.DEDICATED_METER, estimated_kwh=333),
        ]
        for case in cases:
            result = self.calculator.calculate(case, rate(monthly=2.345, daily=0.0789), ewa_settings(), [])
            self.assertEqual(
                exact(result.grand_total),
                exact(result.subtotal) - exact(result.discount_amount) + exact(result.vat_amount),
            )

    def test_calculation_is_deterministic(self):
        case = inputs(area=321, discount_percent=3, vat_rate=10, lease_end=date(2024, 7, 20))
        first = self.calculator.calculate(case, self.short_rate, ewa_settings(), [])
        second = self.calculator.calculate(case, self.short_rate, ewa_settings(), [])
        self.assertEqual(first, second)

    def test_office_add_on(self):
        result = self.calculator.calculate(inputs(include_office=True), self.short_rate, None, [])
        self.assertEqual(result.office_total, 450.0)
        self.assertEqual(result.subtotal, 4950.0)

    def test_office_requires_configured_rate(self):
        calculator = QuoteCalculator(BusinessSettings(office_monthly_rate=0))
        with self.assertRaises(ValidationError):
            calculator.calculate(inputs(include_office=True), self.short_rate, None, [])

    def test_minimum_charge_floor(self):
        calculator = QuoteCalculator(BusinessSettings(minimum_charge=100))
        result = calculator.calculate(
            inputs(area=10, tenure=Tenure.VERY_SHORT, lease_end=date(2024, 1, 3)),
            rate(tenure=Tenure.VERY_SHORT, monthly=3.0, daily=0.1),
            None,
            [],
        )
        self.assertTrue(result.minimum_charge_applied)
        self.assertEqual(result.total_base_rent, 100.0)

    def test_short_long_tenure_warns(self):
        result = self.calculator.calculate(
            inputs(tenure=Tenure.LONG), rate(tenure=Tenure.LONG, monthly=2.0), None, []
        )
        self.assertEqual(len(result.warnings), 1)

    def test_monthly_payment_schedule(self):
        result = self.calculator.calculate(inputs(include_office=True), self.short_rate, None, [])
        self.assertEqual(len(result.payment_schedule), 3)
        self.assertEqual(result.payment_schedule[0].total, 1650.0)


class TestQuoteSuggestions(unittest.TestCase):
    def setUp(self):
        self.calculator = QuoteCalculator(BusinessSettings())
        self.rates = [
            rate(monthly=2.5, min_area=600, name="Short"),
            rate(tenure=Tenure.LONG, monthly=2.0, min_area=600, name="Long"),
            rate(space_type=SpaceType.MEZZANINE, monthly=1.5, name="Mezzanine"),
        ]

    def test_quote_resolves_and_suggests(self):
        result = self.calculator.quote(
            inputs(lease_end=date(2025, 1, 1)), self.rates, None, []
        )
        kinds = [s.type for s in result.suggestions]
        self.assertEqual(result.area_band_name, "Short")
        self.assertEqual(kinds, ["area_optimization", "tenure_savings", "space_alternative"])

        tenure = result.suggestions[1]
        self.assertEqual(tenure.savings, 300.0)
        mezzanine = result.suggestions[2]
        self.assertEqual(mezzanine.suggested_cost, 750.0)

    def test_no_suggestions_when_nothing_is_cheaper(self):
        result = self.calculator.quote(inputs(area=700), self.rates[:1], None, [])
        self.assertEqual(result.suggestions, [])

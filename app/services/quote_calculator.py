import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from config import BusinessSettings, business_settings
from enums.ewa_mode import EwaMode
from enums.service_category import ServicePricingType
from enums.space_type import SpaceType
from enums.tenure import Tenure
from exceptions import InvalidArea, InvalidDateRange, ValidationError
from schemas.quote_schema import (
    CalculationInputs,
    CalculationResult,
    EwaBreakdown,
    PaymentPeriod,
    ServiceLine,
    Suggestion,
)
from services.rate_resolver import RateResolver

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _d(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value))


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


@dataclass
class LeaseDuration:
    months_full: int
    days_extra: int
    total_days: int
    days_per_month: int

    @property
    def pro_rata_fraction(self) -> Decimal:
        return Decimal(self.days_extra) / Decimal(self.days_per_month)

    @property
    def total_months(self) -> Decimal:
        return Decimal(self.months_full) + self.pro_rata_fraction


def lease_duration(start: date, end: date, days_per_month: int = 30) -> LeaseDuration:
    """
    Whole calendar months from the start date, then the leftover days.

    Leftover days are prorated against a fixed-length month elsewhere.
    """
    if end <= start:
        raise InvalidDateRange(start, end)

    months = (end.year - start.year) * 12 + end.month - start.month
    if add_months(start, months) > end:
        months -= 1
    anchor = add_months(start, months)
    return LeaseDuration(
        months_full=months,
        days_extra=(end - anchor).days,
        total_days=(end - start).days,
        days_per_month=days_per_month,
    )


def tariff_cost(ewa_settings, kwh) -> Decimal:
    """Energy charge for a month's consumption, progressive when tiers are configured."""
    kwh = _d(kwh)
    tiers = ewa_settings.tariff_tiers or []
    if not tiers:
        return kwh * _d(ewa_settings.tariff_per_kwh)

    cost = ZERO
    lower = ZERO
    for tier in tiers:
        upper = tier.get("up_to_kwh")
        rate = _d(tier["rate"])
        if upper is None:
            return cost + (kwh - lower) * rate
        upper = _d(upper)
        if kwh <= upper:
            return cost + (kwh - lower) * rate
        cost += (upper - lower) * rate
        lower = upper
    # Consumption beyond the last bounded tier uses the flat tariff
    return cost + (kwh - lower) * _d(ewa_settings.tariff_per_kwh)


class QuoteCalculator:
    """Rental quote arithmetic over already-fetched pricing data. No I/O."""

    def __init__(self, settings: Optional[BusinessSettings] = None, resolver: Optional[RateResolver] = None):
        self.settings = settings or business_settings
        self.resolver = resolver or RateResolver(self.settings.mezzanine_very_short_discount_percent)
        self.quantum = Decimal(1).scaleb(-self.settings.currency_decimals)

    def money(self, value: Decimal) -> float:
        return float(_d(value).quantize(self.quantum, rounding=ROUND_HALF_UP))

    def quote(self, inputs: CalculationInputs, rates: Iterable, ewa_settings, services: Iterable) -> CalculationResult:
        """Resolve the band for the inputs, then calculate with suggestions against the same rate table."""
        rates = list(rates)
        rate = self.resolver.resolve(rates, inputs.space_type, inputs.tenure, inputs.area)
        return self.calculate(inputs, rate, ewa_settings, services, alternative_rates=rates)

    def calculate(
        self,
        inputs: CalculationInputs,
        rate,
        ewa_settings,
        services: Iterable,
        alternative_rates: Optional[List] = None,
    ) -> CalculationResult:
        if inputs.area is None or inputs.area <= 0:
            raise InvalidArea(inputs.area)

        duration = lease_duration(inputs.lease_start, inputs.lease_end, self.settings.days_per_month)
        days_per_month = Decimal(self.settings.days_per_month)
        tenure = Tenure(inputs.tenure)
        warnings: List[str] = []

        area = _d(inputs.area)
        chargeable_area = max(area, _d(rate.min_chargeable_area))
        monthly_rate = _d(rate.monthly_rate_per_sqm)
        if rate.daily_rate_per_sqm is None:
            daily_rate = monthly_rate / days_per_month
        else:
            daily_rate = _d(rate.daily_rate_per_sqm)

        monthly_base_rent = monthly_rate * chargeable_area
        if tenure == Tenure.VERY_SHORT:
            total_base_rent = daily_rate * chargeable_area * duration.total_days
        else:
            total_base_rent = (
                monthly_base_rent * duration.months_full
                + daily_rate * chargeable_area * duration.days_extra
            )

        minimum_charge = _d(self.settings.minimum_charge)
        minimum_charge_applied = minimum_charge > 0 and total_base_rent < minimum_charge
        if minimum_charge_applied:
            total_base_rent = minimum_charge
            warnings.append(
                f"Minimum charge of {self.money(minimum_charge):.3f} {self.settings.currency} applied to rent"
            )

        if tenure == Tenure.LONG and duration.total_months < self.settings.long_tenure_min_months:
            warnings.append(
                f"Long term leases normally run at least {self.settings.long_tenure_min_months} months"
            )

        office_monthly, office_total = self._office(inputs, tenure, duration, days_per_month)
        ewa, ewa_monthly, ewa_term, ewa_one_off = self._ewa(inputs, ewa_settings, duration)
        if ewa.exceeds_house_load_cap:
            warnings.append(
                "Estimated device load exceeds the house-load allowance; a dedicated meter may be required"
            )
        service_lines, services_total = self._services(inputs.optional_services, services)

        subtotal = total_base_rent + office_total + ewa_term + ewa_one_off + services_total

        discount_percent = _d(inputs.discount_percent)
        discount_fixed = _d(inputs.discount_fixed)
        if discount_percent < 0 or discount_fixed < 0:
            raise ValidationError("Discounts cannot be negative")
        discount_amount = subtotal * discount_percent / HUNDRED + discount_fixed
        discount_amount = min(discount_amount, subtotal)

        vat_rate = _d(inputs.vat_rate)
        if vat_rate < 0:
            raise ValidationError("VAT rate cannot be negative")
        vat_amount = (subtotal - discount_amount) * vat_rate / HUNDRED

        subtotal_out = self.money(subtotal)
        discount_out = self.money(discount_amount)
        vat_out = self.money(vat_amount)
        grand_total = _d(subtotal_out) - _d(discount_out) + _d(vat_out)

        schedule = self._payment_schedule(
            tenure,
            duration,
            monthly_base_rent,
            daily_rate * chargeable_area,
            total_base_rent,
            office_monthly,
            office_total,
            ewa_monthly,
            ewa_term,
            minimum_charge_applied,
        )

        suggestions: List[Suggestion] = []
        if alternative_rates is not None:
            suggestions = self.suggestions(inputs, rate, duration, monthly_base_rent, alternative_rates)

        return CalculationResult(
            space_type=inputs.space_type,
            tenure=tenure,
            area_requested=inputs.area,
            chargeable_area=float(chargeable_area),
            area_band_name=rate.area_band_name,
            monthly_rate_per_sqm=float(monthly_rate),
            daily_rate_per_sqm=float(daily_rate.quantize(Decimal("0.000001"), rounding=ROUND_HALF_UP)),
            lease_start=inputs.lease_start,
            lease_end=inputs.lease_end,
            lease_duration_months=float(duration.total_months.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)),
            months_full=duration.months_full,
            days_extra=duration.days_extra,
            total_days=duration.total_days,
            pro_rata_fraction=float(duration.pro_rata_fraction.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)),
            monthly_base_rent=self.money(monthly_base_rent),
            total_base_rent=self.money(total_base_rent),
            minimum_charge_applied=minimum_charge_applied,
            office_included=inputs.include_office,
            office_total=self.money(office_total),
            ewa_breakdown=ewa,
            optional_services_total=self.money(services_total),
            optional_services_breakdown=service_lines,
            subtotal=subtotal_out,
            discount_amount=discount_out,
            vat_rate=float(vat_rate),
            vat_amount=vat_out,
            grand_total=float(grand_total),
            currency=self.settings.currency,
            package_starting=rate.package_starting_price,
            payment_terms=self.settings.payment_terms,
            warnings=warnings,
            suggestions=suggestions,
            payment_schedule=schedule,
        )

    def _office(self, inputs, tenure, duration: LeaseDuration, days_per_month: Decimal):
        if not inputs.include_office:
            return ZERO, ZERO
        office_monthly = _d(self.settings.office_monthly_rate)
        if office_monthly <= 0:
            raise ValidationError("Office monthly rate is not configured")
        office_daily = office_monthly / days_per_month
        if tenure == Tenure.VERY_SHORT:
            return office_monthly, office_daily * duration.total_days
        return office_monthly, office_monthly * duration.months_full + office_daily * duration.days_extra

    def _ewa(self, inputs: CalculationInputs, ewa_settings, duration: LeaseDuration):
        days = Decimal(self.settings.days_per_month)
        device_kw = sum((_d(d.watts) * d.quantity for d in inputs.devices), ZERO) / 1000
        device_kwh = sum(
            (_d(d.watts) * _d(d.hours_per_day) * days * d.quantity for d in inputs.devices), ZERO
        ) / 1000

        if inputs.ewa_mode == EwaMode.HOUSE_LOAD:
            exceeds = False
            description = None
            if ewa_settings is not None:
                description = ewa_settings.house_load_description
                if inputs.devices:
                    exceeds = (
                        device_kw > _d(ewa_settings.included_kw_cap)
                        or device_kwh > _d(ewa_settings.included_kwh_cap)
                    )
            elif inputs.devices:
                raise ValidationError("EWA settings are not configured; cannot check house-load allowance")
            breakdown = EwaBreakdown(
                mode=EwaMode.HOUSE_LOAD,
                description=description,
                estimated_kw=float(device_kw),
                monthly_kwh=float(device_kwh),
                exceeds_house_load_cap=exceeds,
            )
            return breakdown, ZERO, ZERO, ZERO

        if ewa_settings is None:
            raise ValidationError("EWA settings are not configured; cannot price a dedicated meter")
        if inputs.estimated_kwh is not None:
            monthly_kwh = _d(inputs.estimated_kwh)
        elif inputs.devices:
            monthly_kwh = device_kwh
        else:
            raise ValidationError("Dedicated meter quotes need an estimated kWh figure or a device list")

        monthly_estimate = tariff_cost(ewa_settings, monthly_kwh) + _d(ewa_settings.fixed_monthly_charges)
        term_estimate = monthly_estimate * duration.total_months
        one_off = _d(ewa_settings.meter_deposit) + _d(ewa_settings.installation_fee)
        breakdown = EwaBreakdown(
            mode=EwaMode.DEDICATED_METER,
            description=ewa_settings.dedicated_meter_description,
            estimated_kw=float(device_kw),
            monthly_kwh=float(monthly_kwh),
            monthly_estimate=self.money(monthly_estimate),
            term_estimate=self.money(term_estimate),
            one_off_costs=self.money(one_off),
        )
        return breakdown, monthly_estimate, term_estimate, one_off

    def _services(self, selections: Dict, services: Iterable):
        catalogue = {service.id: service for service in services}
        lines: List[ServiceLine] = []
        total = ZERO

        for service_id, selection in selections.items():
            service = catalogue.get(service_id)
            if service is None or not service.active:
                raise ValidationError(f"Optional service {service_id} is not available")

            pricing_type = ServicePricingType(service.pricing_type)
            rate = selection.rate if selection.rate is not None else service.rate
            quote_pending = pricing_type == ServicePricingType.ON_REQUEST
            is_free = bool(service.is_free) and not quote_pending

            if quote_pending or is_free:
                line_total = ZERO
            elif rate is None:
                raise ValidationError(f"Optional service '{service.name}' has no rate")
            else:
                line_total = _d(selection.quantity) * _d(rate)

            lines.append(
                ServiceLine(
                    service_id=service_id,
                    name=service.name,
                    pricing_type=pricing_type,
                    quantity=selection.quantity,
                    rate=rate,
                    unit=service.unit,
                    total=self.money(line_total),
                    is_free=is_free,
                    quote_pending=quote_pending,
                )
            )
            total += line_total

        return lines, total

    def _payment_schedule(
        self,
        tenure,
        duration: LeaseDuration,
        monthly_rent: Decimal,
        daily_rent: Decimal,
        total_rent: Decimal,
        office_monthly: Decimal,
        office_total: Decimal,
        ewa_monthly: Decimal,
        ewa_term: Decimal,
        minimum_charge_applied: bool,
    ) -> List[PaymentPeriod]:
        if tenure == Tenure.VERY_SHORT or minimum_charge_applied or duration.months_full == 0:
            return [self._period(1, "Full term", total_rent, office_total, ewa_term)]

        periods = []
        for month in range(1, duration.months_full + 1):
            periods.append(self._period(month, f"Month {month}", monthly_rent, office_monthly, ewa_monthly))

        if duration.days_extra:
            fraction = duration.pro_rata_fraction
            periods.append(
                self._period(
                    duration.months_full + 1,
                    f"{duration.days_extra} days (pro rata)",
                    daily_rent * duration.days_extra,
                    office_monthly * fraction,
                    ewa_monthly * fraction,
                )
            )
        return periods

    def _period(self, number: int, label: str, rent: Decimal, office: Decimal, ewa: Decimal) -> PaymentPeriod:
        return PaymentPeriod(
            period=number,
            label=label,
            rent=self.money(rent),
            office=self.money(office),
            ewa=self.money(ewa),
            total=self.money(rent + office + ewa),
        )

    def suggestions(self, inputs, rate, duration: LeaseDuration, monthly_rent: Decimal, rates: List) -> List[Suggestion]:
        """Cheaper or better-value alternatives for the same request."""
        suggestions = []
        area = _d(inputs.area)
        min_area = _d(rate.min_chargeable_area)

        if area < min_area:
            suggestions.append(
                Suggestion(
                    type="area_optimization",
                    message=(
                        f"Consider {float(min_area):g} m² for the same price - "
                        f"you get {float(min_area - area):g} m² more space!"
                    ),
                    current_cost=self.money(monthly_rent),
                    suggested_cost=self.money(monthly_rent),
                    savings=0.0,
                )
            )

        if Tenure(inputs.tenure) == Tenure.SHORT and duration.total_months >= self.settings.long_tenure_min_months:
            long_rate = self.resolver.try_resolve(rates, inputs.space_type, Tenure.LONG, inputs.area)
            if long_rate is not None:
                long_rent = _d(long_rate.monthly_rate_per_sqm) * max(area, _d(long_rate.min_chargeable_area))
                savings = monthly_rent - long_rent
                if savings > 0:
                    suggestions.append(
                        Suggestion(
                            type="tenure_savings",
                            message=(
                                f"Switch to Long term for {self.money(savings):.3f} "
                                f"{self.settings.currency}/month savings"
                            ),
                            current_cost=self.money(monthly_rent),
                            suggested_cost=self.money(long_rent),
                            savings=self.money(savings),
                        )
                    )

        if SpaceType(inputs.space_type) == SpaceType.GROUND_FLOOR:
            mezzanine_rate = self.resolver.try_resolve(rates, SpaceType.MEZZANINE, inputs.tenure, inputs.area)
            if mezzanine_rate is not None:
                mezzanine_rent = _d(mezzanine_rate.monthly_rate_per_sqm) * max(
                    area, _d(mezzanine_rate.min_chargeable_area)
                )
                savings = monthly_rent - mezzanine_rent
                if savings > 0:
                    suggestions.append(
                        Suggestion(
                            type="space_alternative",
                            message=(
                                f"Consider Mezzanine space for {self.money(savings):.3f} "
                                f"{self.settings.currency}/month savings"
                            ),
                            current_cost=self.money(monthly_rent),
                            suggested_cost=self.money(mezzanine_rent),
                            savings=self.money(savings),
                        )
                    )

        return suggestions

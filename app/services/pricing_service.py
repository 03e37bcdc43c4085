import logging
from types import SimpleNamespace
from typing import List, Optional

from pydantic import ValidationError as SettingsError
from sqlalchemy.orm import Session

from config import BusinessSettings
from database.models.pricing_model import EwaSettings, OptionalService, PricingRate, SystemSetting
from enums.service_category import ServicePricingType
from enums.space_type import SpaceType
from enums.tenure import Tenure
from exceptions import NotFoundError, ValidationError
from schemas.pricing_schema import (
    EwaSettingsUpdate,
    OptionalServiceCreate,
    OptionalServiceUpdate,
    PricingRateCreate,
    PricingRateUpdate,
    SystemSettingUpsert,
)
from services.base_service import BaseService
from services.rate_resolver import RateResolver

logger = logging.getLogger(__name__)


class PricingRateService(BaseService):
    entity_name = "Pricing rate"

    def __init__(self):
        super().__init__(PricingRate)

    def get_rates(
        self,
        db: Session,
        space_type: Optional[SpaceType] = None,
        tenure: Optional[Tenure] = None,
        active_only: bool = False,
    ) -> List[PricingRate]:
        query = db.query(PricingRate)
        if space_type is not None:
            query = query.filter(PricingRate.space_type == SpaceType(space_type))
        if tenure is not None:
            query = query.filter(PricingRate.tenure == Tenure(tenure))
        if active_only:
            query = query.filter(PricingRate.active.is_(True))
        return query.order_by(PricingRate.space_type, PricingRate.tenure, PricingRate.area_band_min).all()

    def active_rates(self, db: Session) -> List[PricingRate]:
        return self.get_rates(db, active_only=True)

    def create_rate(self, db: Session, rate_in: PricingRateCreate) -> PricingRate:
        candidate = SimpleNamespace(id=None, **rate_in.model_dump())
        self._check(db, candidate)
        rate = self.create(db, rate_in)
        logger.info(
            "Pricing band '%s' created for %s / %s", rate.area_band_name, rate.space_type, rate.tenure
        )
        return rate

    def update_rate(self, db: Session, rate: PricingRate, rate_in: PricingRateUpdate) -> PricingRate:
        values = rate_in.model_dump(exclude_unset=True)
        merged = {
            column: getattr(rate, column)
            for column in (
                "space_type",
                "tenure",
                "area_band_min",
                "area_band_max",
                "monthly_rate_per_sqm",
                "daily_rate_per_sqm",
                "active",
            )
        }
        merged.update({key: value for key, value in values.items() if key in merged})
        self._check(db, SimpleNamespace(id=rate.id, **merged))
        return self.update(db, rate, values)

    def _check(self, db: Session, candidate) -> None:
        """Reject malformed bands and bands overlapping another active band of the same kind."""
        RateResolver.check_band(candidate)
        if not candidate.active:
            return
        existing = self.get_rates(db, candidate.space_type, candidate.tenure, active_only=True)
        overlaps = RateResolver.find_overlaps(existing, candidate)
        if overlaps:
            names = ", ".join(f"'{rate.area_band_name}'" for rate in overlaps)
            raise ValidationError(
                f"Area band {candidate.area_band_min}-{candidate.area_band_max or '∞'} m² overlaps "
                f"existing {SpaceType(candidate.space_type).value} / {Tenure(candidate.tenure).value} band {names}"
            )


class EwaSettingsService:
    def current(self, db: Session) -> Optional[EwaSettings]:
        return (
            db.query(EwaSettings)
            .filter(EwaSettings.active.is_(True))
            .order_by(EwaSettings.id.desc())
            .first()
        )

    def require(self, db: Session) -> EwaSettings:
        settings = self.current(db)
        if settings is None:
            raise ValidationError("EWA settings are not configured")
        return settings

    def update(self, db: Session, settings_in: EwaSettingsUpdate) -> EwaSettings:
        """Replace the values of the single active row, creating it on first use."""
        values = settings_in.model_dump()
        tiers = values.get("tariff_tiers")
        if tiers:
            self._check_tiers(tiers)
        settings = self.current(db)
        if settings is None:
            settings = EwaSettings(active=True, **values)
            db.add(settings)
        else:
            for key, value in values.items():
                setattr(settings, key, value)
        BaseService(EwaSettings).commit(db)
        db.refresh(settings)
        return settings

    @staticmethod
    def _check_tiers(tiers: List[dict]) -> None:
        previous = 0.0
        for index, tier in enumerate(tiers):
            upper = tier.get("up_to_kwh")
            if upper is None:
                if index != len(tiers) - 1:
                    raise ValidationError("Only the last tariff tier may be unbounded")
                continue
            if upper <= previous:
                raise ValidationError("Tariff tier limits must increase")
            previous = upper


class OptionalServiceService(BaseService):
    entity_name = "Optional service"

    def __init__(self):
        super().__init__(OptionalService)

    def get_services(self, db: Session, active_only: bool = False) -> List[OptionalService]:
        query = db.query(OptionalService)
        if active_only:
            query = query.filter(OptionalService.active.is_(True))
        return query.order_by(OptionalService.category, OptionalService.name).all()

    def create_service(self, db: Session, service_in: OptionalServiceCreate) -> OptionalService:
        self._check(service_in.pricing_type, service_in.rate, service_in.is_free)
        return self.create(db, service_in)

    def update_service(
        self, db: Session, service: OptionalService, service_in: OptionalServiceUpdate
    ) -> OptionalService:
        values = service_in.model_dump(exclude_unset=True)
        self._check(
            values.get("pricing_type", service.pricing_type),
            values.get("rate", service.rate),
            values.get("is_free", service.is_free),
        )
        return self.update(db, service, values)

    @staticmethod
    def _check(pricing_type, rate, is_free) -> None:
        if ServicePricingType(pricing_type) == ServicePricingType.ON_REQUEST or is_free:
            return
        if rate is None:
            raise ValidationError("A rate is required unless the service is free or priced on request")


class SystemSettingService:
    def get_all(self, db: Session) -> List[SystemSetting]:
        return db.query(SystemSetting).order_by(SystemSetting.setting_key).all()

    def get(self, db: Session, key: str) -> Optional[SystemSetting]:
        return db.query(SystemSetting).filter(SystemSetting.setting_key == key).first()

    def upsert(self, db: Session, key: str, setting_in: SystemSettingUpsert) -> SystemSetting:
        if key in BusinessSettings.model_fields:
            try:
                BusinessSettings(**{key: setting_in.setting_value})
            except SettingsError as e:
                raise ValidationError(
                    f"Invalid value '{setting_in.setting_value}' for setting '{key}': {e.errors()[0]['msg']}"
                ) from e
        setting = self.get(db, key)
        if setting is None:
            setting = SystemSetting(setting_key=key)
            db.add(setting)
        setting.setting_value = setting_in.setting_value
        if setting_in.description is not None:
            setting.description = setting_in.description
        BaseService(SystemSetting).commit(db)
        db.refresh(setting)
        return setting

    def delete(self, db: Session, key: str) -> None:
        setting = self.get(db, key)
        if setting is None:
            raise NotFoundError(f"System setting '{key}' not found")
        db.delete(setting)
        BaseService(SystemSetting).commit(db)

    def business_settings(self, db: Session, base: BusinessSettings) -> BusinessSettings:
        """``base`` with every stored setting that names one of its fields laid over it."""
        overrides = {
            setting.setting_key: setting.setting_value
            for setting in self.get_all(db)
            if setting.setting_key in BusinessSettings.model_fields
        }
        if not overrides:
            return base
        return BusinessSettings(**{**base.model_dump(), **overrides})

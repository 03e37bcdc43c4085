import unittest
from datetime import date, timedelta
from types import SimpleNamespace

from database.init import Base, SessionLocal, engine
from database.models import EwaSettings, OptionalService, PricingRate, User, Warehouse
from enums.service_category import ServiceCategory, ServicePricingType
from enums.space_type import SpaceType
from enums.tenure import Tenure
from enums.user_role import UserRole
from schemas.booking_schema import BookingCreate
from utils.dependencies import create_access_token, hash_password

PASSWORD = "secret-pass-123"
# Hashed once for every fixture user
PASSWORD_HASH = hash_password(PASSWORD)


def rate(
    space_type=SpaceType.GROUND_FLOOR,
    tenure=Tenure.SHORT,
    band_min=0.0,
    band_max=None,
    monthly=2.5,
    daily=None,
    min_area=0.0,
    name=None,
    active=True,
    id=None,
    package=None,
):
    """An in-memory pricing band for the pure components."""
    return SimpleNamespace(
        id=id,
        space_type=space_type,
        tenure=tenure,
        area_band_name=name or f"{band_min:g}-{band_max if band_max is not None else '+'}",
        area_band_min=band_min,
        area_band_max=band_max,
        monthly_rate_per_sqm=monthly,
        daily_rate_per_sqm=daily,
        min_chargeable_area=min_area,
        package_starting_price=package,
        active=active,
    )


def ewa_settings(**overrides):
    values = dict(
        included_kw_cap=5.0,
        included_kwh_cap=1000.0,
        tariff_per_kwh=0.016,
        tariff_tiers=None,
        fixed_monthly_charges=2.0,
        meter_deposit=50.0,
        installation_fee=25.0,
        house_load_description="Included up to the house-load allowance",
        dedicated_meter_description="Billed on actual consumption",
        active=True,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def service(id, name, pricing_type, rate=None, is_free=False, active=True, unit=None):
    return SimpleNamespace(
        id=id,
        name=name,
        pricing_type=pricing_type,
        rate=rate,
        unit=unit,
        is_free=is_free,
        active=active,
    )


def warehouse(total=1000.0, occupied=0.0, has_mezzanine=False, mezzanine=None, mezzanine_occupied=None):
    return SimpleNamespace(
        name="Sitra A",
        total_space=total,
        occupied_space=occupied,
        has_mezzanine=has_mezzanine,
        mezzanine_space=mezzanine,
        mezzanine_occupied=mezzanine_occupied,
    )


def booking_request(warehouse_id, area=400.0, entry_date=None, **overrides):
    entry_date = entry_date or date.today()
    values = dict(
        warehouse_id=warehouse_id,
        space_type=SpaceType.GROUND_FLOOR,
        area_requested=area,
        entry_date=entry_date,
        expected_exit_date=entry_date + timedelta(days=90),
    )
    values.update(overrides)
    return BookingCreate(**values)


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema per test with a session and fixture builders."""

    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()

    def tearDown(self):
        self.db.close()

    def create_user(self, email="client@example.com", role=UserRole.USER, name="Client User"):
        user = User(
            name=name,
            email=email,
            phone="+97333000000",
            company_name="Client Co",
            hashed_password=PASSWORD_HASH,
            role=UserRole(role).value,
            is_active=True,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def create_warehouse(self, total=1000.0, occupied=0.0, has_mezzanine=False, mezzanine=None, status="active"):
        warehouse = Warehouse(
            name="Sitra A",
            location="Sitra, Bahrain",
            total_space=total,
            occupied_space=occupied,
            has_mezzanine=has_mezzanine,
            mezzanine_space=mezzanine,
            mezzanine_occupied=0.0 if has_mezzanine else None,
            status=status,
        )
        self.db.add(warehouse)
        self.db.commit()
        self.db.refresh(warehouse)
        return warehouse

    def create_rate(self, **kwargs):
        values = vars(rate(**kwargs)).copy()
        values.pop("id")
        pricing_rate = PricingRate(**values)
        self.db.add(pricing_rate)
        self.db.commit()
        self.db.refresh(pricing_rate)
        return pricing_rate

    def create_ewa_settings(self, **overrides):
        settings = EwaSettings(**vars(ewa_settings(**overrides)))
        self.db.add(settings)
        self.db.commit()
        self.db.refresh(settings)
        return settings

    def create_service(self, name="Forklift", pricing_type=ServicePricingType.HOURLY, rate=10.0, **kwargs):
        optional_service = OptionalService(
            name=name,
            category=kwargs.pop("category", ServiceCategory.HANDLING),
            pricing_type=pricing_type,
            rate=rate,
            **kwargs,
        )
        self.db.add(optional_service)
        self.db.commit()
        self.db.refresh(optional_service)
        return optional_service

    def auth_headers(self, user):
        return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}
from datetime import date, timedelta

from config import BusinessSettings
from database.models import Quote
from enums.space_type import SpaceType
from enums.tenure import Tenure
from exceptions import ValidationError
from schemas.pricing_schema import SystemSettingUpsert
from schemas.quote_schema import CalculationInputs, QuoteCreate
from services.pricing_service import SystemSettingService
from services.quote_service import QuoteService
from tests.support import DatabaseTestCase
from utils.id_generator import quote_number_prefix


def small_lease(**overrides):
    values = dict(
        area=10,
        tenure=Tenure.SHORT,
        space_type=SpaceType.GROUND_FLOOR,
        lease_start=date(2024, 1, 1),
        lease_end=date(2024, 2, 1),
    )
    values.update(overrides)
    return CalculationInputs(**values)


class TestStoredSettings(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.create_rate(monthly=2.5, name="Standard")
        self.service = QuoteService(BusinessSettings(minimum_charge=0.0, default_vat_rate=10.0))
        self.settings = SystemSettingService()

    def store(self, key, value):
        return self.settings.upsert(self.db, key, SystemSettingUpsert(setting_value=value))

    def test_without_stored_settings_the_configured_values_apply(self):
        result = self.service.calculate(self.db, small_lease())
        self.assertEqual(result.total_base_rent, 25.0)
        self.assertFalse(result.minimum_charge_applied)
        self.assertEqual(result.vat_rate, 10.0)

    def test_stored_minimum_charge_raises_base_rent(self):
        self.store("minimum_charge", "100")

        result = self.service.calculate(self.db, small_lease())

        self.assertTrue(result.minimum_charge_applied)
        self.assertEqual(result.total_base_rent, 100.0)

    def test_stored_vat_rate_is_the_default(self):
        self.store("default_vat_rate", "5")

        result = self.service.calculate(self.db, small_lease())
        self.assertEqual(result.vat_rate, 5.0)
        self.assertEqual(result.vat_amount, 1.25)

        explicit = self.service.calculate(self.db, small_lease(vat_rate=0))
        self.assertEqual(explicit.vat_amount, 0.0)

    def test_stored_validity_sets_quote_expiry(self):
        self.store("quote_validity_days", "7")
        quote = self.service.create(
            self.db, QuoteCreate(client_name="Gulf Traders", **small_lease().model_dump())
        )
        self.assertEqual(quote.valid_until, date.today() + timedelta(days=7))

    def test_invalid_value_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.store("minimum_charge", "a lot")
        self.assertIsNone(self.settings.get(self.db, "minimum_charge"))

    def test_unrelated_keys_are_stored_as_is(self):
        self.store("support_phone", "+973 1700 0000")
        result = self.service.calculate(self.db, small_lease())
        self.assertEqual(result.total_base_rent, 25.0)


class TestQuoteNumbers(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.create_rate(monthly=2.5, name="Standard")
        self.service = QuoteService()
        self.today = date.today()

    def create_quote(self):
        return self.service.create(
            self.db, QuoteCreate(client_name="Gulf Traders", **small_lease().model_dump())
        )

    def test_sequence_continues_past_999(self):
        prefix = quote_number_prefix(self.today)
        first, second = self.create_quote(), self.create_quote()
        first.quote_number = f"{prefix}999"
        second.quote_number = f"{prefix}1000"
        self.db.commit()

        self.assertEqual(self.service.next_quote_number(self.db, self.today), f"{prefix}1001")
        self.assertEqual(self.create_quote().quote_number, f"{prefix}1001")
        self.assertEqual(self.db.query(Quote).count(), 3)

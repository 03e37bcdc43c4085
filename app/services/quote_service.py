import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config import BusinessSettings, business_settings
from database.models.quote_model import Quote
from database.models.user_model import User
from enums.quote_status import QuoteStatus
from exceptions import InvalidStatusTransition, NotFoundError, PersistenceError
from schemas.quote_schema import CalculationInputs, CalculationResult, QuoteCreate
from services.pricing_service import (
    EwaSettingsService,
    OptionalServiceService,
    PricingRateService,
    SystemSettingService,
)
from services.quote_calculator import QuoteCalculator
from utils.id_generator import generate_quote_number, quote_number_prefix

logger = logging.getLogger(__name__)

# Attempts at a free per-day sequence number before giving up
NUMBER_ATTEMPTS = 5


class QuoteService:
    def __init__(self, settings: Optional[BusinessSettings] = None):
        self.settings = settings or business_settings
        self.rate_service = PricingRateService()
        self.ewa_service = EwaSettingsService()
        self.optional_service_service = OptionalServiceService()
        self.setting_service = SystemSettingService()

    def current_settings(self, db: Session) -> BusinessSettings:
        """Configured settings with the operator's stored overrides applied."""
        return self.setting_service.business_settings(db, self.settings)

    def with_defaults(self, inputs: CalculationInputs, settings: BusinessSettings) -> CalculationInputs:
        if inputs.vat_rate is None:
            return inputs.model_copy(update={"vat_rate": settings.default_vat_rate})
        return inputs

    def calculate(
        self, db: Session, inputs: CalculationInputs, settings: Optional[BusinessSettings] = None
    ) -> CalculationResult:
        """Fetch the current pricing configuration and price the inputs. Nothing is written."""
        settings = settings or self.current_settings(db)
        return QuoteCalculator(settings).quote(
            self.with_defaults(inputs, settings),
            self.rate_service.active_rates(db),
            self.ewa_service.current(db),
            self.optional_service_service.get_services(db),
        )

    def next_quote_number(self, db: Session, quote_date: date) -> str:
        prefix = quote_number_prefix(quote_date)
        # Sequences past 999 are longer, so order by length before text
        latest = (
            db.query(Quote.quote_number)
            .filter(Quote.quote_number.like(f"{prefix}%"))
            .order_by(func.length(Quote.quote_number).desc(), Quote.quote_number.desc())
            .first()
        )
        sequence = int(latest[0][len(prefix):]) + 1 if latest else 1
        return generate_quote_number(quote_date, sequence)

    def create(self, db: Session, quote_in: QuoteCreate, user: Optional[User] = None) -> Quote:
        settings = self.current_settings(db)
        quote_in = self.with_defaults(quote_in, settings)
        result = self.calculate(db, quote_in, settings)
        today = date.today()

        for _ in range(NUMBER_ATTEMPTS):
            quote = self._build(quote_in, result, user, today, settings)
            quote.quote_number = self.next_quote_number(db, today)
            db.add(quote)
            try:
                db.commit()
                break
            except IntegrityError:
                # Another quote took the number first
                db.rollback()
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError(f"Failed to save quote: {str(e)}") from e
        else:
            raise PersistenceError("Could not allocate a quote number")

        db.refresh(quote)
        logger.info("Quote %s saved: grand total %.3f %s", quote.quote_number, quote.grand_total, result.currency)
        return quote

    def _build(
        self,
        quote_in: QuoteCreate,
        result: CalculationResult,
        user: Optional[User],
        today: date,
        settings: BusinessSettings,
    ) -> Quote:
        ewa = result.ewa_breakdown
        return Quote(
            user_id=user.id if user else None,
            client_name=quote_in.client_name,
            client_email=quote_in.client_email,
            client_phone=quote_in.client_phone,
            warehouse_location=quote_in.warehouse_location,
            space_type=result.space_type,
            tenure=result.tenure,
            area_requested=result.area_requested,
            area_chargeable=result.chargeable_area,
            area_band_name=result.area_band_name,
            lease_start=result.lease_start,
            lease_end=result.lease_end,
            lease_duration_months=result.lease_duration_months,
            monthly_rate_per_sqm=result.monthly_rate_per_sqm,
            daily_rate_per_sqm=result.daily_rate_per_sqm,
            total_base_rent=result.total_base_rent,
            ewa_type=ewa.mode,
            ewa_monthly_estimate=ewa.monthly_estimate,
            ewa_total_estimate=ewa.term_estimate,
            ewa_one_off_costs=ewa.one_off_costs,
            office_total=result.office_total,
            optional_services_total=result.optional_services_total,
            optional_services_details=[
                line.model_dump(mode="json") for line in result.optional_services_breakdown
            ],
            subtotal=result.subtotal,
            discount_percentage=quote_in.discount_percent or 0.0,
            discount_fixed=quote_in.discount_fixed or 0.0,
            discount_amount=result.discount_amount,
            vat_percentage=result.vat_rate,
            vat_amount=result.vat_amount,
            grand_total=result.grand_total,
            payment_terms=result.payment_terms,
            valid_until=today + timedelta(days=settings.quote_validity_days),
            status=QuoteStatus.DRAFT.value,
            notes=quote_in.notes,
        )

    def get(self, db: Session, quote_id: int) -> Optional[Quote]:
        return db.query(Quote).filter(Quote.id == quote_id).first()

    def get_or_404(self, db: Session, quote_id: int) -> Quote:
        quote = self.get(db, quote_id)
        if quote is None:
            raise NotFoundError(f"Quote {quote_id} not found")
        return quote

    def get_by_number(self, db: Session, quote_number: str) -> Optional[Quote]:
        return db.query(Quote).filter(Quote.quote_number == quote_number).first()

    def get_all(
        self,
        db: Session,
        user_id: Optional[int] = None,
        status: Optional[QuoteStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Quote]:
        query = db.query(Quote)
        if user_id is not None:
            query = query.filter(Quote.user_id == user_id)
        if status is not None:
            query = query.filter(Quote.status == QuoteStatus(status).value)
        return query.order_by(Quote.id.desc()).offset(skip).limit(limit).all()

    def change_status(self, db: Session, quote: Quote, target: QuoteStatus) -> Quote:
        current = QuoteStatus(quote.status)
        target = QuoteStatus(target)
        if not current.can_transition_to(target):
            raise InvalidStatusTransition("Quote", current, target)
        if target == QuoteStatus.ACCEPTED and quote.valid_until and quote.valid_until < date.today():
            raise InvalidStatusTransition("Quote", current, target)
        quote.status = target.value
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to update quote: {str(e)}") from e
        db.refresh(quote)
        return quote

    def expire_stale(self, db: Session, today: Optional[date] = None) -> int:
        """Expire draft and sent quotes whose validity has lapsed."""
        today = today or date.today()
        stale = (
            db.query(Quote)
            .filter(
                Quote.status.in_([QuoteStatus.DRAFT.value, QuoteStatus.SENT.value]),
                Quote.valid_until.is_not(None),
                Quote.valid_until < today,
            )
            .all()
        )
        for quote in stale:
            quote.status = QuoteStatus.EXPIRED.value
        db.commit()
        return len(stale)

import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from config import business_settings
from database.models.booking_model import Booking
from database.models.electricity_bill_model import ElectricityBill
from enums.bill_status import BillStatus
from exceptions import InvalidDateRange, ValidationError
from schemas.electricity_schema import ElectricityBillCreate
from services.base_service import BaseService
from services.pricing_service import EwaSettingsService
from services.quote_calculator import QuoteCalculator, tariff_cost

logger = logging.getLogger(__name__)

PAYMENT_DAYS = 30


class ElectricityBillService(BaseService):
    entity_name = "Electricity bill"

    def __init__(self):
        super().__init__(ElectricityBill)
        self.ewa_service = EwaSettingsService()
        self.calculator = QuoteCalculator(business_settings)

    def get_bills(
        self,
        db: Session,
        booking_id: Optional[int] = None,
        user_id: Optional[int] = None,
        status: Optional[BillStatus] = None,
    ) -> List[ElectricityBill]:
        query = db.query(ElectricityBill)
        if user_id is not None:
            query = query.join(Booking, ElectricityBill.booking_id == Booking.id).filter(
                Booking.user_id == user_id
            )
        if booking_id is not None:
            query = query.filter(ElectricityBill.booking_id == booking_id)
        if status is not None:
            query = query.filter(ElectricityBill.status == BillStatus(status).value)
        return query.order_by(ElectricityBill.bill_date.desc(), ElectricityBill.id.desc()).all()

    def create_bill(self, db: Session, bill_in: ElectricityBillCreate, booking: Booking) -> ElectricityBill:
        """
        Bill a booking for metered consumption over a period.

        With an explicit rate the charge is flat; otherwise the configured EWA
        tariff is applied, including its progressive tiers.
        """
        if bill_in.billing_period_end <= bill_in.billing_period_start:
            raise InvalidDateRange(bill_in.billing_period_start, bill_in.billing_period_end)
        units = Decimal(str(bill_in.meter_reading_end)) - Decimal(str(bill_in.meter_reading_start))
        if units < 0:
            raise ValidationError("Closing meter reading cannot be lower than the opening reading")

        if bill_in.rate_per_unit is not None:
            rate = bill_in.rate_per_unit
            amount = units * Decimal(str(rate))
        else:
            ewa_settings = self.ewa_service.require(db)
            amount = tariff_cost(ewa_settings, units)
            rate = None if ewa_settings.tariff_tiers else ewa_settings.tariff_per_kwh

        bill_date = bill_in.bill_date or date.today()
        bill = ElectricityBill(
            booking_id=booking.id,
            billing_period_start=bill_in.billing_period_start,
            billing_period_end=bill_in.billing_period_end,
            meter_reading_start=bill_in.meter_reading_start,
            meter_reading_end=bill_in.meter_reading_end,
            units_consumed=float(units),
            rate_per_unit=rate,
            total_amount=self.calculator.money(amount),
            bill_date=bill_date,
            due_date=bill_in.due_date or bill_date + timedelta(days=PAYMENT_DAYS),
            status=BillStatus.PENDING.value,
            notes=bill_in.notes,
        )
        bill = self.create(db, bill)
        logger.info("Electricity bill %s issued for booking %s: %.3f", bill.id, booking.id, bill.total_amount)
        return bill

    def mark_paid(self, db: Session, bill: ElectricityBill) -> ElectricityBill:
        if bill.status == BillStatus.PAID.value:
            raise ValidationError(f"Electricity bill {bill.id} is already paid")
        return self.update(
            db, bill, {"status": BillStatus.PAID.value, "paid_at": datetime.now(timezone.utc)}
        )

    def mark_overdue(self, db: Session, today: Optional[date] = None) -> int:
        today = today or date.today()
        overdue = (
            db.query(ElectricityBill)
            .filter(
                ElectricityBill.status == BillStatus.PENDING.value,
                ElectricityBill.due_date < today,
            )
            .all()
        )
        for bill in overdue:
            bill.status = BillStatus.OVERDUE.value
        self.commit(db)
        return len(overdue)

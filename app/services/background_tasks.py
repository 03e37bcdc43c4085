import logging
from datetime import date
from typing import Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config import SCHEDULER_INTERVAL_MINUTES
from database.init import SessionLocal
from services.booking_service import BookingService
from services.electricity_service import ElectricityBillService
from services.quote_service import QuoteService

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Periodic housekeeping: quote expiry, booking activation and overdue bills."""

    def __init__(self, interval_minutes: int = SCHEDULER_INTERVAL_MINUTES):
        self.scheduler = AsyncIOScheduler()
        self.interval_minutes = interval_minutes
        self.booking_service = BookingService()
        self.quote_service = QuoteService()
        self.bill_service = ElectricityBillService()

    def start(self):
        self.scheduler.add_job(
            self.run_sweep,
            "interval",
            minutes=self.interval_minutes,
            id="warehouse_sweep",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("Background sweep scheduled every %s minutes", self.interval_minutes)

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    async def run_sweep(self):
        try:
            self.sweep()
        except Exception:
            logger.exception("Background sweep failed")

    def sweep(self, db=None, today: Optional[date] = None) -> Dict[str, int]:
        owns_session = db is None
        db = db or SessionLocal()
        try:
            result = {
                "expired_quotes": self.quote_service.expire_stale(db, today),
                "activated_bookings": self.booking_service.activate_due(db, today),
                "overdue_bills": self.bill_service.mark_overdue(db, today),
            }
        finally:
            if owns_session:
                db.close()
        logger.info(
            "Sweep finished: %(expired_quotes)s quotes expired, %(activated_bookings)s bookings "
            "activated, %(overdue_bills)s bills overdue",
            result,
        )
        return result

from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from config import business_settings
from database.models.booking_model import Booking
from database.models.electricity_bill_model import ElectricityBill
from database.models.quote_model import Quote
from database.models.stock_model import StockItem
from database.models.user_model import User
from database.models.warehouse_model import Warehouse
from enums.bill_status import BillStatus
from enums.booking_status import BookingStatus
from enums.quote_status import QuoteStatus
from enums.space_type import SpaceType
from enums.stock_status import StockStatus
from exceptions import AmbiguousOrMissingRate
from services.pricing_service import EwaSettingsService, PricingRateService, SystemSettingService
from services.quote_calculator import QuoteCalculator

OCCUPYING = [BookingStatus.COMMITTED.value, BookingStatus.ACTIVE.value]


def _floor_stats(total: float, occupied: float) -> Dict[str, float]:
    return {
        "total_space": round(total, 2),
        "occupied_space": round(occupied, 2),
        "available_space": round(max(0.0, total - occupied), 2),
        "utilization_percentage": round(occupied / total * 100, 2) if total > 0 else 0.0,
    }


class ReportService:
    def __init__(self, db: Session):
        self.db = db
        self.calculator = QuoteCalculator(SystemSettingService().business_settings(db, business_settings))

    def get_admin_overview(self) -> Dict[str, Any]:
        """
        Occupancy across all warehouses with booking, quote and billing totals.

        Returns:
            Dict matching AdminOverviewResponse
        """
        warehouses = self.db.query(Warehouse).all()
        ground_total = sum(w.total_space or 0.0 for w in warehouses)
        ground_occupied = sum(w.occupied_space or 0.0 for w in warehouses)
        mezzanine_total = sum(w.mezzanine_space or 0.0 for w in warehouses if w.has_mezzanine)
        mezzanine_occupied = sum(w.mezzanine_occupied or 0.0 for w in warehouses if w.has_mezzanine)

        outstanding = (
            self.db.query(func.count(ElectricityBill.id), func.sum(ElectricityBill.total_amount))
            .filter(ElectricityBill.status.in_([BillStatus.PENDING.value, BillStatus.OVERDUE.value]))
            .first()
        )

        return {
            "warehouse_count": len(warehouses),
            "ground_floor": _floor_stats(ground_total, ground_occupied),
            "mezzanine": _floor_stats(mezzanine_total, mezzanine_occupied),
            "booking_stats": self._booking_stats(),
            "quote_stats": self._quote_stats(),
            "bill_stats": {
                "outstanding_count": outstanding[0] or 0,
                "outstanding_amount": round(float(outstanding[1] or 0.0), 3),
            },
            "generated_at": datetime.now(timezone.utc),
        }

    def get_user_dashboard(self, user_id: int) -> Dict[str, Any]:
        occupied_area = (
            self.db.query(func.sum(Booking.area_requested))
            .filter(Booking.user_id == user_id, Booking.status.in_(OCCUPYING))
            .scalar()
        )
        active_stock = (
            self.db.query(func.count(StockItem.id))
            .filter(StockItem.user_id == user_id, StockItem.status == StockStatus.ACTIVE.value)
            .scalar()
        )
        return {
            "booking_stats": self._booking_stats(user_id=user_id),
            "occupied_area": round(float(occupied_area or 0.0), 2),
            "active_stock_count": active_stock or 0,
            "quote_stats": self._quote_stats(user_id=user_id),
            "generated_at": datetime.now(timezone.utc),
        }

    def get_users_space(self) -> List[Dict[str, Any]]:
        """Occupied area per user and floor, counting only bookings that hold space."""
        rows = (
            self.db.query(User, Booking.space_type, func.sum(Booking.area_requested), func.count(Booking.id))
            .join(Booking, Booking.user_id == User.id)
            .filter(Booking.status.in_(OCCUPYING))
            .group_by(User.id, Booking.space_type)
            .all()
        )

        per_user: Dict[int, Dict[str, Any]] = {}
        for user, space_type, area, count in rows:
            entry = per_user.setdefault(
                user.id,
                {
                    "user_id": user.id,
                    "name": user.name,
                    "email": user.email,
                    "company_name": user.company_name,
                    "ground_floor_area": 0.0,
                    "mezzanine_area": 0.0,
                    "total_area": 0.0,
                    "active_bookings": 0,
                },
            )
            area = float(area or 0.0)
            if SpaceType(space_type) == SpaceType.MEZZANINE:
                entry["mezzanine_area"] += area
            else:
                entry["ground_floor_area"] += area
            entry["total_area"] += area
            entry["active_bookings"] += count

        return sorted(per_user.values(), key=lambda row: row["total_area"], reverse=True)

    def get_occupant_costs(self, user_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Current monthly cost of every booking holding space.

        A booking whose area has no single pricing band gets an ``error`` and
        no rent figure.
        """
        rates = PricingRateService().active_rates(self.db)
        ewa_settings = EwaSettingsService().current(self.db)
        ewa_fixed = float(ewa_settings.fixed_monthly_charges) if ewa_settings else 0.0

        query = (
            self.db.query(Booking)
            .options(joinedload(Booking.user))
            .filter(Booking.status.in_(OCCUPYING))
        )
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)

        rows = []
        for booking in query.order_by(Booking.id).all():
            row = {
                "booking_id": booking.id,
                "reference": booking.reference,
                "user_id": booking.user_id,
                "user_name": booking.user.name if booking.user else "",
                "warehouse_id": booking.warehouse_id,
                "space_type": SpaceType(booking.space_type).value,
                "tenure": str(booking.tenure),
                "area_requested": booking.area_requested,
                "ewa_fixed_monthly": ewa_fixed,
            }
            try:
                rate = self.calculator.resolver.resolve(
                    rates, booking.space_type, booking.tenure, booking.area_requested
                )
            except AmbiguousOrMissingRate as e:
                row["error"] = e.message
                rows.append(row)
                continue

            chargeable = max(Decimal(str(booking.area_requested)), Decimal(str(rate.min_chargeable_area)))
            monthly_rent = Decimal(str(rate.monthly_rate_per_sqm)) * chargeable
            row.update(
                {
                    "area_band_name": rate.area_band_name,
                    "chargeable_area": float(chargeable),
                    "monthly_rate_per_sqm": rate.monthly_rate_per_sqm,
                    "monthly_rent": self.calculator.money(monthly_rent),
                }
            )
            rows.append(row)
        return rows

    def get_stock_report(self, user_id: Optional[int] = None) -> Dict[str, Any]:
        query = self.db.query(StockItem).options(joinedload(StockItem.booking).joinedload(Booking.warehouse))
        if user_id is not None:
            query = query.filter(StockItem.user_id == user_id)
        items = query.all()

        by_status: Dict[str, int] = defaultdict(int)
        per_warehouse: Dict[int, Dict[str, Any]] = {}
        for item in items:
            by_status[item.status] += 1
            warehouse = item.booking.warehouse
            row = per_warehouse.setdefault(
                warehouse.id,
                {
                    "warehouse_id": warehouse.id,
                    "warehouse_name": warehouse.name,
                    "item_count": 0,
                    "current_quantity": 0.0,
                    "area_used": 0.0,
                },
            )
            row["item_count"] += 1
            row["current_quantity"] += item.current_quantity
            row["area_used"] += item.area_used or 0.0

        return {
            "total_items": len(items),
            "by_status": dict(by_status),
            "current_quantity": sum(item.current_quantity for item in items),
            "total_received_quantity": sum(item.total_received_quantity for item in items),
            "total_delivered_quantity": sum(item.total_delivered_quantity for item in items),
            "per_warehouse": sorted(per_warehouse.values(), key=lambda row: row["warehouse_id"]),
            "generated_at": datetime.now(timezone.utc),
        }

    def _booking_stats(self, user_id: Optional[int] = None) -> Dict[str, Any]:
        query = self.db.query(Booking.status, func.count(Booking.id))
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)
        by_status = {status: count for status, count in query.group_by(Booking.status).all()}
        return {"total": sum(by_status.values()), "by_status": by_status}

    def _quote_stats(self, user_id: Optional[int] = None) -> Dict[str, Any]:
        query = self.db.query(Quote.status, func.count(Quote.id))
        value_query = self.db.query(func.sum(Quote.grand_total)).filter(
            Quote.status == QuoteStatus.ACCEPTED.value
        )
        if user_id is not None:
            query = query.filter(Quote.user_id == user_id)
            value_query = value_query.filter(Quote.user_id == user_id)
        by_status = {status: count for status, count in query.group_by(Quote.status).all()}
        accepted_value = value_query.scalar()
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "accepted_value": round(float(accepted_value or 0.0), 3),
        }

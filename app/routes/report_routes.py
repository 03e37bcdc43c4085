from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from services.report_service import ReportService
from schemas.report_schema import (
    AdminOverviewResponse,
    OccupantCostRow,
    StockReportResponse,
    UserDashboardResponse,
    UserSpaceRow,
)
from database.init import get_db
from database.models.user_model import User
from utils.dependencies import get_current_user, is_staff, manager_required, staff_required
from responses.success import data_response

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    responses={404: {"description": "Not found"}},
)


@router.get("/admin-overview")
def get_admin_overview(
    db: Session = Depends(get_db), current_user: User = Depends(manager_required)
):
    """
    Occupancy, bookings, quotes and outstanding bills across all warehouses.
    Restricted to admins and managers.
    """
    report_data = ReportService(db).get_admin_overview()
    return data_response(AdminOverviewResponse(**report_data))


@router.get("/dashboard")
def get_user_dashboard(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    """Bookings, occupied area, stock and quotes of the current user."""
    report_data = ReportService(db).get_user_dashboard(current_user.id)
    return data_response(UserDashboardResponse(**report_data))


@router.get("/users-space")
def get_users_space(
    db: Session = Depends(get_db), current_user: User = Depends(staff_required)
):
    rows = ReportService(db).get_users_space()
    return data_response([UserSpaceRow(**row) for row in rows])


@router.get("/users-costs")
def get_users_costs(
    db: Session = Depends(get_db), current_user: User = Depends(staff_required)
):
    rows = ReportService(db).get_occupant_costs()
    return data_response([OccupantCostRow(**row) for row in rows])


@router.get("/my-costs")
def get_my_costs(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    rows = ReportService(db).get_occupant_costs(user_id=current_user.id)
    return data_response([OccupantCostRow(**row) for row in rows])


@router.get("/stock")
def get_stock_report(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    """Staff see stock across all warehouses, clients only their own."""
    user_id = None if is_staff(current_user) else current_user.id
    report_data = ReportService(db).get_stock_report(user_id=user_id)
    return data_response(StockReportResponse(**report_data))

import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from datetime import date
from typing import Literal, Optional
from agroshop.db.session import get_db
from agroshop.models.account import CustomerAccount
from agroshop.models.bill import Bill, BillItem
from agroshop.models.farmer import Farmer
from agroshop.models.product import Product
from agroshop.models.user import User
from agroshop.schemas.report import DashboardStats, ReportFilter, RevenueReport
from agroshop.services.reporting import aggregate, dashboard_summary
from agroshop.auth.security import get_current_active_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _fetch_bills(db: Session):
    return db.query(Bill).options(
        selectinload(Bill.farmer),
        selectinload(Bill.bill_items).selectinload(BillItem.product),
    ).order_by(Bill.created_at.desc(), Bill.id.desc()).all()


@router.get("/revenue", response_model=RevenueReport)
def get_revenue_report(
    date_from: Optional[date] = Query(None, description="First day included (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Last day included (YYYY-MM-DD)"),
    status: Literal["all", "paid", "pending"] = Query("all", description="all | paid | pending (pending or partial)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    report_filter = ReportFilter(date_from=date_from, date_to=date_to, status=status)
    try:
        summary = aggregate(_fetch_bills(db), report_filter)
        return RevenueReport(
            **summary.model_dump(),
            total_bills=db.query(Bill).count(),
            total_products=db.query(Product).count(),
            total_farmers=db.query(Farmer).count(),
        )
    except SQLAlchemyError:
        # reports are display-only, an empty report beats an error page
        logger.exception("Error fetching revenue data")
        return RevenueReport()


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    try:
        return dashboard_summary(
            products=db.query(Product).all(),
            farmer_count=db.query(Farmer).count(),
            bills=db.query(Bill).all(),
            accounts=db.query(CustomerAccount).all(),
            today=date.today(),
        )
    except SQLAlchemyError:
        logger.exception("Error fetching dashboard stats")
        return DashboardStats()

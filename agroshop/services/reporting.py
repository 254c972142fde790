"""Revenue and dashboard figures computed from an already-fetched snapshot.

Nothing here touches the database: callers fetch the rows, these functions
reduce them. Bills are any objects exposing ``created_at``,
``payment_status``, ``final_amount``, ``farmer`` and ``bill_items``.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from agroshop.schemas.report import (
    CustomerPurchases,
    DashboardStats,
    MonthlyRevenue,
    ProductSales,
    ReportFilter,
    RevenueAggregate,
)
from agroshop.services.ledger import to_decimal

TOP_N = 10
UNKNOWN = "Unknown"
PENDING_STATUSES = ("pending", "partial")


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value))


def _name_of(related) -> str:
    name = getattr(related, "name", None) if related is not None else None
    return name or UNKNOWN


def matches(bill, report_filter: ReportFilter) -> bool:
    created = _as_date(bill.created_at)
    if report_filter.date_from and (created is None or created < report_filter.date_from):
        return False
    # date_to covers the whole day
    if report_filter.date_to and (created is None or created > report_filter.date_to):
        return False

    if report_filter.status == "paid":
        return bill.payment_status == "paid"
    if report_filter.status == "pending":
        return bill.payment_status in PENDING_STATUSES
    return True


def month_label(value) -> str:
    return _as_datetime(value).strftime("%b %Y")


def aggregate(bills: Iterable, report_filter: Optional[ReportFilter] = None) -> RevenueAggregate:
    report_filter = report_filter or ReportFilter()
    selected = [bill for bill in bills if matches(bill, report_filter)]
    paid = [bill for bill in selected if bill.payment_status == "paid"]

    total_revenue = sum((to_decimal(bill.final_amount) for bill in paid), Decimal("0"))

    # dicts keep first-seen order, which is the order buckets are reported in
    monthly = {}
    for bill in paid:
        label = month_label(bill.created_at)
        monthly[label] = monthly.get(label, Decimal("0")) + to_decimal(bill.final_amount)

    product_sales = {}
    for bill in paid:
        for item in bill.bill_items or []:
            name = _name_of(getattr(item, "product", None))
            sales = product_sales.setdefault(name, [Decimal("0"), Decimal("0")])
            sales[0] += to_decimal(item.quantity)
            sales[1] += to_decimal(item.total_price)

    purchases = {}
    for bill in selected:
        name = _name_of(getattr(bill, "farmer", None))
        purchases[name] = purchases.get(name, 0) + 1

    # sorted() is stable, so equal figures keep encounter order
    top_products = sorted(product_sales.items(), key=lambda kv: kv[1][1], reverse=True)[:TOP_N]
    top_farmers = sorted(purchases.items(), key=lambda kv: kv[1], reverse=True)[:TOP_N]

    return RevenueAggregate(
        total_revenue=float(total_revenue),
        filtered_bills=len(selected),
        monthly_revenue=[
            MonthlyRevenue(month=month, revenue=float(revenue))
            for month, revenue in monthly.items()
        ],
        top_products=[
            ProductSales(product_name=name, total_sold=float(sold), revenue=float(revenue))
            for name, (sold, revenue) in top_products
        ],
        top_farmers=[
            CustomerPurchases(farmer_name=name, total_purchases=count)
            for name, count in top_farmers
        ],
    )


def dashboard_summary(products, farmer_count: int, bills, accounts, today: Optional[date] = None) -> DashboardStats:
    today = today or date.today()
    products = list(products)
    bills = list(bills)

    low_stock = sum(
        1 for p in products
        if (p.stock_quantity or 0) <= (p.reorder_level or 0)
    )
    revenue = sum(
        (to_decimal(b.final_amount) for b in bills if b.payment_status == "paid"),
        Decimal("0"),
    )
    pending = sum((to_decimal(a.current_balance) for a in accounts), Decimal("0"))
    overdue = sum(
        1 for b in bills
        if b.due_date is not None and _as_date(b.due_date) < today and b.payment_status != "paid"
    )

    return DashboardStats(
        total_products=len(products),
        total_farmers=farmer_count,
        total_revenue=float(revenue),
        pending_payments=float(pending),
        low_stock_items=low_stock,
        overdue_payments=overdue,
    )

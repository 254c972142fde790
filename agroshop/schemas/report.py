from datetime import date
from typing import Optional, List, Literal
from pydantic import BaseModel

class ReportFilter(BaseModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    # "pending" covers both pending and partial bills
    status: Literal['all', 'paid', 'pending'] = 'all'

class MonthlyRevenue(BaseModel):
    month: str
    revenue: float

class ProductSales(BaseModel):
    product_name: str
    total_sold: float
    revenue: float

class CustomerPurchases(BaseModel):
    farmer_name: str
    total_purchases: int

class RevenueAggregate(BaseModel):
    total_revenue: float = 0
    filtered_bills: int = 0
    monthly_revenue: List[MonthlyRevenue] = []
    top_products: List[ProductSales] = []
    top_farmers: List[CustomerPurchases] = []

class RevenueReport(RevenueAggregate):
    # every bill on record, whatever the filter
    total_bills: int = 0
    total_products: int = 0
    total_farmers: int = 0

class DashboardStats(BaseModel):
    total_products: int = 0
    total_farmers: int = 0
    total_revenue: float = 0
    pending_payments: float = 0
    low_stock_items: int = 0
    overdue_payments: int = 0

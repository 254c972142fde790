import logging
import secrets
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from agroshop.db.session import commit
from agroshop.errors import NotFound, ValidationError
from agroshop.models.bill import Bill, BillItem, PAYMENT_STATUSES
from agroshop.models.farmer import Farmer
from agroshop.models.payment import Payment
from agroshop.models.product import Product
from agroshop.services.ledger import CENTS, to_decimal

logger = logging.getLogger(__name__)


def generate_bill_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"BILL-{now:%Y%m%d%H%M%S}-{secrets.token_hex(3).upper()}"


def create_bill(
    db: Session,
    farmer_id: int,
    items: List[dict],
    discount_amount=0,
    payment_status: str = "pending",
    due_date=None,
    bill_number: Optional[str] = None,
    created_by: Optional[int] = None,
) -> Bill:
    """Record a sale: the bill and all its items are saved together.

    Item totals and the bill amounts are always computed here; stock levels
    are not touched.
    """
    farmer = db.query(Farmer).filter(Farmer.id == farmer_id).first()
    if farmer is None:
        raise NotFound(f"Farmer {farmer_id} not found")
    if not items:
        raise ValidationError("A bill needs at least one item")
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError(
            f"Invalid payment status. Must be one of: {', '.join(PAYMENT_STATUSES)}"
        )

    bill_number = (bill_number or "").strip() or generate_bill_number()
    if db.query(Bill).filter(Bill.bill_number == bill_number).first():
        raise ValidationError(f"Bill number {bill_number} already exists")

    total_amount = Decimal("0")
    bill_items = []
    for item in items:
        product = db.query(Product).filter(Product.id == item["product_id"]).first()
        if product is None:
            raise NotFound(f"Product with ID {item['product_id']} not found")

        quantity = to_decimal(item.get("quantity"))
        if not quantity.is_finite():
            raise ValidationError(f"Quantity for {product.name} must be a number")
        quantity = quantity.quantize(CENTS)
        if quantity <= 0:
            raise ValidationError(f"Quantity for {product.name} must be positive")

        # Use the provided unit_price or fall back to product price
        if item.get("unit_price") is not None:
            unit_price = to_decimal(item["unit_price"])
        else:
            unit_price = to_decimal(product.price_per_unit)
        if not unit_price.is_finite() or unit_price < 0:
            raise ValidationError(f"Unit price for {product.name} must be a non-negative number")
        unit_price = unit_price.quantize(CENTS)

        total_price = (quantity * unit_price).quantize(CENTS)
        total_amount += total_price
        bill_items.append(BillItem(
            product_id=product.id,
            quantity=quantity,
            unit_price=unit_price,
            total_price=total_price,
        ))

    discount = to_decimal(discount_amount)
    if not discount.is_finite() or discount < 0:
        raise ValidationError("Discount cannot be negative")
    if discount > total_amount:
        raise ValidationError("Discount cannot exceed the bill total")

    bill = Bill(
        bill_number=bill_number,
        farmer_id=farmer.id,
        total_amount=total_amount,
        discount_amount=discount,
        final_amount=total_amount - discount,
        payment_status=payment_status,
        due_date=due_date,
        created_by=created_by,
        bill_items=bill_items,
    )
    db.add(bill)
    commit(db)
    db.refresh(bill)

    logger.info(
        "Created bill %s for farmer %s: total %s, final %s",
        bill.bill_number, farmer.id, bill.total_amount, bill.final_amount
    )
    return bill


def get_bill(db: Session, bill_id: int) -> Bill:
    bill = db.query(Bill).filter(Bill.id == bill_id).first()
    if bill is None:
        raise NotFound("Bill not found")
    return bill


def update_bill(db: Session, bill_id: int, changes: dict) -> Bill:
    bill = get_bill(db, bill_id)

    if "payment_status" in changes and changes["payment_status"] is not None:
        if changes["payment_status"] not in PAYMENT_STATUSES:
            raise ValidationError("Invalid payment status")
        bill.payment_status = changes["payment_status"]

    if "due_date" in changes:
        bill.due_date = changes["due_date"]

    if changes.get("discount_amount") is not None:
        discount = to_decimal(changes["discount_amount"])
        total = to_decimal(bill.total_amount)
        if not discount.is_finite() or discount < 0 or discount > total:
            raise ValidationError("Discount must be between 0 and the bill total")
        bill.discount_amount = discount
        bill.final_amount = total - discount

    db.add(bill)
    commit(db)
    db.refresh(bill)
    return bill


def delete_bill(db: Session, bill_id: int) -> None:
    bill = get_bill(db, bill_id)
    if db.query(Payment).filter(Payment.bill_id == bill_id).count():
        raise ValidationError("Bill has recorded payments and cannot be deleted")
    bill_number = bill.bill_number
    db.delete(bill)
    commit(db)
    logger.info("Deleted bill %s", bill_number)


def check_bill_integrity(bill) -> List[str]:
    """Recompute the derived amounts of a bill and report every mismatch."""
    issues = []
    total = to_decimal(bill.total_amount)
    discount = to_decimal(bill.discount_amount)
    final = to_decimal(bill.final_amount)

    if final != total - discount:
        issues.append(
            f"final_amount {final} != total_amount {total} - discount_amount {discount}"
        )
    if final < 0:
        issues.append(f"final_amount {final} is negative")

    items_total = Decimal("0")
    for item in bill.bill_items or []:
        expected = (to_decimal(item.quantity) * to_decimal(item.unit_price)).quantize(CENTS)
        stored = to_decimal(item.total_price)
        if stored != expected:
            issues.append(
                f"item {item.id}: total_price {stored} != quantity {item.quantity} x unit_price {item.unit_price}"
            )
        items_total += stored

    if items_total != total:
        issues.append(f"items sum {items_total} != total_amount {total}")
    return issues

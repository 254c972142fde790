"""Credit ledger: interest accrual and payment recording for farmers.

Every operation takes the request's SQLAlchemy session; the session's
transaction is what makes a multi-row write all-or-nothing.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from agroshop.db.session import commit
from agroshop.errors import NotFound, ValidationError
from agroshop.models.account import CustomerAccount, InterestCharge
from agroshop.models.bill import Bill
from agroshop.models.farmer import Farmer
from agroshop.models.payment import Payment, PAYMENT_METHODS

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
HIGH_BALANCE = Decimal("1000")
NO_BALANCE_MESSAGE = "No outstanding balance for interest calculation"


@dataclass
class AccrualResult:
    farmer_id: int
    applied: bool
    message: str
    new_balance: Decimal
    interest_amount: Decimal = Decimal("0")
    charge: Optional[InterestCharge] = None


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def balance_status(balance) -> str:
    balance = to_decimal(balance)
    if balance > HIGH_BALANCE:
        return "high"
    if balance > 0:
        return "pending"
    return "clear"


def get_account(db: Session, farmer_id: int, for_update: bool = False) -> CustomerAccount:
    query = db.query(CustomerAccount).filter(CustomerAccount.farmer_id == farmer_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    account = query.first()
    if account is None:
        raise NotFound(f"Customer account for farmer {farmer_id} not found")
    return account


def monthly_interest(balance, rate) -> Decimal:
    """Simple interest for one month, rounded to cents."""
    interest = to_decimal(balance) * to_decimal(rate) / Decimal("100")
    return interest.quantize(CENTS, rounding=ROUND_HALF_UP)


def accrue_interest(db: Session, farmer_id: int) -> AccrualResult:
    # the row lock makes concurrent accruals read the balance one at a time
    account = get_account(db, farmer_id, for_update=True)
    principal = to_decimal(account.current_balance)

    if principal <= 0:
        return AccrualResult(
            farmer_id=farmer_id,
            applied=False,
            message=NO_BALANCE_MESSAGE,
            new_balance=principal,
        )

    rate = to_decimal(account.interest_rate)
    interest = monthly_interest(principal, rate)

    charge = InterestCharge(
        farmer_id=farmer_id,
        principal_amount=principal,
        interest_amount=interest,
        interest_rate=rate,
        charge_date=datetime.utcnow(),
    )
    db.add(charge)
    account.current_balance = principal + interest
    db.add(account)

    # charge and balance land in the same transaction
    commit(db)
    db.refresh(charge)
    db.refresh(account)

    logger.info(
        "Accrued interest %s on balance %s at %s%% for farmer %s",
        interest, principal, rate, farmer_id
    )
    return AccrualResult(
        farmer_id=farmer_id,
        applied=True,
        message=f"Interest of {interest} calculated and added",
        new_balance=to_decimal(account.current_balance),
        interest_amount=interest,
        charge=charge,
    )


def record_payment(
    db: Session,
    farmer_id: Optional[int],
    amount,
    method: str = "cash",
    bill_id: Optional[int] = None,
    notes: Optional[str] = None,
    payment_date: Optional[datetime] = None,
    recorded_by: Optional[int] = None,
) -> Payment:
    """Append a payment row.

    The account balance and the bill's payment status are left as they are;
    staff adjust those separately.
    """
    if not farmer_id:
        raise ValidationError("Please select a farmer")
    amount = to_decimal(amount)
    if not amount.is_finite():
        raise ValidationError("Payment amount must be a number")
    # stored in cents, so anything that rounds to 0.00 is no payment
    amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise ValidationError("Payment amount must be positive")
    if method not in PAYMENT_METHODS:
        raise ValidationError(
            f"Invalid payment method. Must be one of: {', '.join(PAYMENT_METHODS)}"
        )

    farmer = db.query(Farmer).filter(Farmer.id == farmer_id).first()
    if farmer is None:
        raise NotFound(f"Farmer {farmer_id} not found")

    if bill_id is not None:
        bill = db.query(Bill).filter(Bill.id == bill_id).first()
        if bill is None:
            raise NotFound(f"Bill {bill_id} not found")
        if bill.farmer_id != farmer_id:
            raise ValidationError("Bill does not belong to this farmer")

    payment = Payment(
        farmer_id=farmer_id,
        bill_id=bill_id,
        amount_paid=amount,
        payment_method=method,
        payment_date=payment_date or datetime.utcnow(),
        notes=notes or None,
        recorded_by=recorded_by,
    )
    db.add(payment)
    commit(db)
    db.refresh(payment)

    logger.info("Recorded %s payment of %s for farmer %s", method, amount, farmer_id)
    return payment


def interest_history(db: Session, farmer_id: int):
    return db.query(InterestCharge).filter(
        InterestCharge.farmer_id == farmer_id
    ).order_by(InterestCharge.charge_date.desc(), InterestCharge.id.desc()).all()

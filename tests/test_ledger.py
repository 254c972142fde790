from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from agroshop.errors import NotFound, StoreError, ValidationError
from agroshop.models.account import CustomerAccount, InterestCharge
from agroshop.models.bill import Bill
from agroshop.models.payment import Payment
from agroshop.services import ledger


def test_accrue_interest_adds_monthly_interest(db, farmer_with_account):
    farmer = farmer_with_account(balance=1000, rate=2)

    result = ledger.accrue_interest(db, farmer.id)

    assert result.applied is True
    assert result.interest_amount == Decimal("20.00")
    assert result.new_balance == Decimal("1020.00")

    charges = db.query(InterestCharge).filter(InterestCharge.farmer_id == farmer.id).all()
    assert len(charges) == 1
    assert charges[0].principal_amount == Decimal("1000")
    assert charges[0].interest_amount == Decimal("20")
    assert charges[0].interest_rate == Decimal("2")

    account = db.query(CustomerAccount).filter(CustomerAccount.farmer_id == farmer.id).one()
    assert account.current_balance == Decimal("1020.00")


@pytest.mark.parametrize("balance", [0, -250])
def test_accrue_interest_without_balance_is_a_no_op(db, farmer_with_account, balance):
    farmer = farmer_with_account(balance=balance, rate=5)

    result = ledger.accrue_interest(db, farmer.id)

    assert result.applied is False
    assert result.message == ledger.NO_BALANCE_MESSAGE
    assert result.charge is None
    assert db.query(InterestCharge).count() == 0
    account = db.query(CustomerAccount).filter(CustomerAccount.farmer_id == farmer.id).one()
    assert account.current_balance == Decimal(balance)


def test_accrue_interest_rounds_to_cents(db, farmer_with_account):
    farmer = farmer_with_account(balance=Decimal("333.33"), rate=Decimal("1.5"))

    result = ledger.accrue_interest(db, farmer.id)

    # 333.33 * 1.5% = 4.99995
    assert result.interest_amount == Decimal("5.00")
    assert result.new_balance == Decimal("338.33")


def test_accrue_interest_twice_uses_the_new_balance(db, farmer_with_account):
    farmer = farmer_with_account(balance=1000, rate=2)

    ledger.accrue_interest(db, farmer.id)
    second = ledger.accrue_interest(db, farmer.id)

    assert second.interest_amount == Decimal("20.40")
    assert second.new_balance == Decimal("1040.40")
    assert db.query(InterestCharge).count() == 2


def test_accrue_interest_for_unknown_account(db):
    with pytest.raises(NotFound):
        ledger.accrue_interest(db, 999)


def test_accrue_interest_rolls_back_on_store_failure(db, farmer_with_account, monkeypatch):
    farmer = farmer_with_account(balance=1000, rate=2)

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(StoreError):
        ledger.accrue_interest(db, farmer.id)
    monkeypatch.undo()

    assert db.query(InterestCharge).count() == 0
    account = db.query(CustomerAccount).filter(CustomerAccount.farmer_id == farmer.id).one()
    assert account.current_balance == Decimal("1000")


def test_record_payment_leaves_balance_alone(db, farmer_with_account):
    farmer = farmer_with_account(balance=1500, rate=2)

    payment = ledger.record_payment(db, farmer.id, 500, method="upi", notes="part payment")

    assert payment.id is not None
    assert payment.amount_paid == Decimal("500")
    assert payment.bill_id is None
    account = db.query(CustomerAccount).filter(CustomerAccount.farmer_id == farmer.id).one()
    assert account.current_balance == Decimal("1500")


def test_record_payment_against_a_bill(db, farmer_with_account):
    farmer = farmer_with_account()
    bill = Bill(
        bill_number="B-1", farmer_id=farmer.id, total_amount=800,
        discount_amount=0, final_amount=800, payment_status="pending",
    )
    db.add(bill)
    db.commit()

    payment = ledger.record_payment(db, farmer.id, 800, bill_id=bill.id)

    assert payment.bill_id == bill.id
    db.refresh(bill)
    assert bill.payment_status == "pending"


@pytest.mark.parametrize("amount", [0, -10])
def test_record_payment_requires_positive_amount(db, farmer_with_account, amount):
    farmer = farmer_with_account()
    with pytest.raises(ValidationError):
        ledger.record_payment(db, farmer.id, amount)
    assert db.query(Payment).count() == 0


def test_record_payment_requires_farmer(db):
    with pytest.raises(ValidationError):
        ledger.record_payment(db, None, 100)
    with pytest.raises(NotFound):
        ledger.record_payment(db, 42, 100)


def test_record_payment_rejects_unknown_method(db, farmer_with_account):
    farmer = farmer_with_account()
    with pytest.raises(ValidationError):
        ledger.record_payment(db, farmer.id, 100, method="barter")


def test_record_payment_rejects_bill_of_another_farmer(db, farmer_with_account):
    owner = farmer_with_account(name="Suresh")
    other = farmer_with_account(name="Lakshmi")
    bill = Bill(
        bill_number="B-2", farmer_id=owner.id, total_amount=100,
        discount_amount=0, final_amount=100,
    )
    db.add(bill)
    db.commit()

    with pytest.raises(ValidationError):
        ledger.record_payment(db, other.id, 100, bill_id=bill.id)
    with pytest.raises(NotFound):
        ledger.record_payment(db, other.id, 100, bill_id=bill.id + 100)


@pytest.mark.parametrize("balance,expected", [
    (1500, "high"),
    (1000, "pending"),
    (0.01, "pending"),
    (0, "clear"),
    (-20, "clear"),
])
def test_balance_status(balance, expected):
    assert ledger.balance_status(balance) == expected


def test_record_payment_rejects_amounts_below_a_cent(db, farmer_with_account):
    farmer = farmer_with_account()

    with pytest.raises(ValidationError):
        ledger.record_payment(db, farmer.id, 0.004)
    assert db.query(Payment).count() == 0

    payment = ledger.record_payment(db, farmer.id, 0.005)
    assert payment.amount_paid == Decimal("0.01")


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
def test_record_payment_rejects_non_numbers(db, farmer_with_account, amount):
    farmer = farmer_with_account()
    with pytest.raises(ValidationError):
        ledger.record_payment(db, farmer.id, amount)
    assert db.query(Payment).count() == 0


def test_accrue_interest_locks_the_account_row(db, farmer_with_account):
    farmer = farmer_with_account(balance=1000, rate=2)
    statements = []

    def capture(state):
        if state.is_select:
            statements.append(str(state.statement.compile(dialect=postgresql.dialect())))

    event.listen(db, "do_orm_execute", capture)
    try:
        ledger.accrue_interest(db, farmer.id)
    finally:
        event.remove(db, "do_orm_execute", capture)

    account_reads = [s for s in statements if "FROM customer_accounts" in s]
    assert account_reads
    assert account_reads[0].rstrip().endswith("FOR UPDATE")

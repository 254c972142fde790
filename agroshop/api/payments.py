from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from agroshop.db.session import get_db
from agroshop.models.payment import Payment
from agroshop.models.user import User
from agroshop.schemas.payment import Payment as PaymentSchema, PaymentCreate
from agroshop.services import ledger
from agroshop.auth.security import get_current_active_user

router = APIRouter()

@router.post("/", response_model=PaymentSchema, status_code=status.HTTP_201_CREATED)
def record_payment(
    payment: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return ledger.record_payment(
        db,
        farmer_id=payment.farmer_id,
        amount=payment.amount_paid,
        method=payment.payment_method,
        bill_id=payment.bill_id,
        notes=payment.notes,
        payment_date=payment.payment_date,
        recorded_by=current_user.id,
    )

@router.get("/", response_model=List[PaymentSchema])
def read_payments(
    skip: int = 0,
    limit: int = 100,
    farmer_id: Optional[int] = None,
    bill_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    query = db.query(Payment)
    if farmer_id:
        query = query.filter(Payment.farmer_id == farmer_id)
    if bill_id:
        query = query.filter(Payment.bill_id == bill_id)
    return query.order_by(Payment.created_at.desc(), Payment.id.desc()).offset(skip).limit(limit).all()

@router.get("/{payment_id}", response_model=PaymentSchema)
def read_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    db_payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if db_payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return db_payment

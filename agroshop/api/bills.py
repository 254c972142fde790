from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
from datetime import date, datetime, time
from agroshop.db.session import get_db
from agroshop.models.bill import Bill, BillItem
from agroshop.models.user import User
from agroshop.schemas.bill import (
    Bill as BillSchema, BillCreate, BillUpdate, BillIntegrity
)
from agroshop.services import billing
from agroshop.auth.security import get_current_active_user, is_admin

router = APIRouter()

@router.post("/", response_model=BillSchema, status_code=status.HTTP_201_CREATED)
def create_bill(
    bill: BillCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return billing.create_bill(
        db,
        farmer_id=bill.farmer_id,
        items=[item.model_dump() for item in bill.items],
        discount_amount=bill.discount_amount,
        payment_status=bill.payment_status,
        due_date=bill.due_date,
        bill_number=bill.bill_number,
        created_by=current_user.id,
    )

@router.get("/", response_model=List[BillSchema])
def read_bills(
    skip: int = 0,
    limit: int = 100,
    farmer_id: Optional[int] = None,
    payment_status: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    query = db.query(Bill).options(
        selectinload(Bill.farmer),
        selectinload(Bill.bill_items).selectinload(BillItem.product),
    )
    
    if farmer_id:
        query = query.filter(Bill.farmer_id == farmer_id)
    if payment_status == "outstanding":
        query = query.filter(Bill.payment_status.in_(["pending", "partial"]))
    elif payment_status:
        query = query.filter(Bill.payment_status == payment_status)
    if start_date:
        query = query.filter(Bill.created_at >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(Bill.created_at <= datetime.combine(end_date, time.max))
    
    return query.order_by(Bill.created_at.desc(), Bill.id.desc()).offset(skip).limit(limit).all()

@router.get("/{bill_id}", response_model=BillSchema)
def read_bill(
    bill_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return billing.get_bill(db, bill_id)

@router.get("/{bill_id}/integrity", response_model=BillIntegrity)
def check_bill(
    bill_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    issues = billing.check_bill_integrity(billing.get_bill(db, bill_id))
    return BillIntegrity(bill_id=bill_id, consistent=not issues, issues=issues)

@router.put("/{bill_id}", response_model=BillSchema)
def update_bill(
    bill_id: int,
    bill: BillUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return billing.update_bill(db, bill_id, bill.model_dump(exclude_unset=True))

@router.delete("/{bill_id}")
def delete_bill(
    bill_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(is_admin)
):
    billing.delete_bill(db, bill_id)
    return {"ok": True}

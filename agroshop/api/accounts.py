from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, selectinload
from typing import List
from agroshop.db.session import get_db, commit
from agroshop.models.account import CustomerAccount
from agroshop.models.user import User
from agroshop.schemas.account import (
    CustomerAccount as CustomerAccountSchema,
    CustomerAccountUpdate,
    InterestAccrual,
    InterestCharge,
    Ledger,
)
from agroshop.services import ledger
from agroshop.auth.security import get_current_active_user, is_admin

router = APIRouter()

@router.get("/", response_model=List[CustomerAccountSchema])
def read_accounts(
    skip: int = 0,
    limit: int = 100,
    outstanding_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    query = db.query(CustomerAccount).options(selectinload(CustomerAccount.farmer))
    if outstanding_only:
        query = query.filter(CustomerAccount.current_balance > 0)
    return query.order_by(
        CustomerAccount.current_balance.desc(), CustomerAccount.id
    ).offset(skip).limit(limit).all()

@router.get("/{farmer_id}", response_model=CustomerAccountSchema)
def read_account(
    farmer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return ledger.get_account(db, farmer_id)

@router.put("/{farmer_id}", response_model=CustomerAccountSchema)
def update_account(
    farmer_id: int,
    account: CustomerAccountUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(is_admin)
):
    db_account = ledger.get_account(db, farmer_id)
    
    update_data = account.model_dump(exclude_unset=True, exclude_none=True)
    for field in update_data:
        setattr(db_account, field, update_data[field])
    
    db.add(db_account)
    commit(db)
    db.refresh(db_account)
    return db_account

@router.post("/{farmer_id}/interest", response_model=InterestAccrual)
def accrue_interest(
    farmer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    result = ledger.accrue_interest(db, farmer_id)
    return InterestAccrual(
        farmer_id=result.farmer_id,
        applied=result.applied,
        message=result.message,
        interest_amount=float(result.interest_amount),
        new_balance=float(result.new_balance),
        charge=InterestCharge.model_validate(result.charge) if result.charge else None,
    )

@router.get("/{farmer_id}/ledger", response_model=Ledger)
def read_ledger(
    farmer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    account = ledger.get_account(db, farmer_id)
    return Ledger(
        account=CustomerAccountSchema.model_validate(account),
        interest_charges=[
            InterestCharge.model_validate(charge)
            for charge in ledger.interest_history(db, farmer_id)
        ],
    )

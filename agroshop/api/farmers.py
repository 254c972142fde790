import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional
from agroshop.config import Config
from agroshop.db.session import get_db, commit
from agroshop.models.account import CustomerAccount
from agroshop.models.bill import Bill
from agroshop.models.farmer import Farmer
from agroshop.models.payment import Payment
from agroshop.models.user import User
from agroshop.schemas.farmer import Farmer as FarmerSchema, FarmerCreate, FarmerUpdate
from agroshop.auth.security import get_current_active_user, is_admin

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/", response_model=FarmerSchema, status_code=status.HTTP_201_CREATED)
def create_farmer(
    farmer: FarmerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    db_farmer = Farmer(**farmer.model_dump(), created_by=current_user.id)
    # every farmer gets a credit account from the start
    db_farmer.account = CustomerAccount(
        current_balance=0,
        total_credit_limit=0,
        interest_rate=Config.DEFAULT_INTEREST_RATE,
    )
    db.add(db_farmer)
    commit(db)
    db.refresh(db_farmer)
    logger.info("Added farmer %s (%s)", db_farmer.id, db_farmer.name)
    return db_farmer

@router.get("/", response_model=List[FarmerSchema])
def read_farmers(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    query = db.query(Farmer)
    if search:
        query = query.filter(or_(
            Farmer.name.ilike(f"%{search}%"),
            Farmer.phone.ilike(f"%{search}%"),
            Farmer.village.ilike(f"%{search}%")
        ))
    return query.order_by(Farmer.created_at.desc(), Farmer.id.desc()).offset(skip).limit(limit).all()

@router.get("/{farmer_id}", response_model=FarmerSchema)
def read_farmer(
    farmer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    db_farmer = db.query(Farmer).filter(Farmer.id == farmer_id).first()
    if db_farmer is None:
        raise HTTPException(status_code=404, detail="Farmer not found")
    return db_farmer

@router.put("/{farmer_id}", response_model=FarmerSchema)
def update_farmer(
    farmer_id: int,
    farmer: FarmerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    db_farmer = db.query(Farmer).filter(Farmer.id == farmer_id).first()
    if db_farmer is None:
        raise HTTPException(status_code=404, detail="Farmer not found")
    
    update_data = farmer.model_dump(exclude_unset=True)
    if "name" in update_data and update_data["name"] is None:
        raise HTTPException(status_code=400, detail="Farmer name is required")
    for field, value in update_data.items():
        setattr(db_farmer, field, value)
    
    db.add(db_farmer)
    commit(db)
    db.refresh(db_farmer)
    return db_farmer

@router.delete("/{farmer_id}")
def delete_farmer(
    farmer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(is_admin)
):
    db_farmer = db.query(Farmer).filter(Farmer.id == farmer_id).first()
    if db_farmer is None:
        raise HTTPException(status_code=404, detail="Farmer not found")
    
    has_bills = db.query(Bill).filter(Bill.farmer_id == farmer_id).first()
    has_payments = db.query(Payment).filter(Payment.farmer_id == farmer_id).first()
    if has_bills or has_payments:
        raise HTTPException(
            status_code=400,
            detail="Farmer has bills or payments and cannot be deleted"
        )
    
    db.delete(db_farmer)
    commit(db)
    return {"ok": True}

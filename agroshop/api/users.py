from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from agroshop.db.session import get_db, commit
from agroshop.models.user import User
from agroshop.schemas.user import (
    StaffAccessUpdate,
    StaffCreate,
    StaffProfileUpdate,
    StaffRegistration,
    StaffUser,
)
from agroshop.auth.security import (
    get_current_active_user,
    is_admin,
    get_password_hash,
)

router = APIRouter()


def add_staff_user(db: Session, data: StaffRegistration, role: str) -> User:
    """Create a login for a shop employee; usernames and emails are unique."""
    taken = db.query(User).filter(
        (User.username == data.username) | (User.email == data.email)
    ).first()
    if taken:
        raise HTTPException(status_code=400, detail="Username or email already registered")

    user = User(
        username=data.username,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name,
        phone_number=data.phone_number,
        role=role,
    )
    db.add(user)
    commit(db)
    db.refresh(user)
    return user


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/", response_model=List[StaffUser])
def list_staff(
    db: Session = Depends(get_db),
    current_user: User = Depends(is_admin)
):
    return db.query(User).order_by(User.username).all()


@router.post("/", response_model=StaffUser, status_code=201)
def create_staff(
    data: StaffCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(is_admin)
):
    return add_staff_user(db, data, data.role)


@router.get("/me", response_model=StaffUser)
def read_me(current_user: User = Depends(get_current_active_user)):
    return current_user


# Staff edit their own profile; role and activation belong to the admin
@router.put("/me", response_model=StaffUser)
def update_me(
    changes: StaffProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    user = _get_user(db, current_user.id)
    data = changes.model_dump(exclude_unset=True)
    if data.get("password"):
        user.hashed_password = get_password_hash(data.pop("password"))
    data.pop("password", None)
    for field, value in data.items():
        setattr(user, field, value)
    commit(db)
    db.refresh(user)
    return user


@router.put("/{user_id}/access", response_model=StaffUser)
def update_access(
    user_id: int,
    changes: StaffAccessUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(is_admin)
):
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Admins cannot change their own access")
    user = _get_user(db, user_id)
    for field, value in changes.model_dump(exclude_none=True).items():
        setattr(user, field, value)
    commit(db)
    db.refresh(user)
    return user


@router.delete("/{user_id}")
def delete_staff(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(is_admin)
):
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Admins cannot delete themselves")
    db.delete(_get_user(db, user_id))
    commit(db)
    return {"ok": True}

from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from agroshop.api.users import add_staff_user
from agroshop.db.session import get_db
from agroshop.models.user import User
from agroshop.schemas.user import StaffRegistration, StaffSession, StaffUser, Token
from agroshop.auth.security import (
    verify_password,
    create_access_token,
    ACCESS_TOKEN_EXPIRE_MINUTES,
)

router = APIRouter(tags=["auth"])


def _authenticate(db: Session, form_data: OAuth2PasswordRequestForm) -> User:
    user = db.query(User).filter(User.username == form_data.username).first()
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def _token_for(user: User) -> str:
    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return create_access_token(data={"sub": user.username}, expires_delta=access_token_expires)


# LOGIN: returns user + token (frontend-friendly)
@router.post("/login", response_model=StaffSession)
def login_with_user(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    user = _authenticate(db, form_data)
    return StaffSession(user=StaffUser.model_validate(user), access_token=_token_for(user))

# TOKEN-ONLY: OAuth2 compatibility (for Swagger/OAuth2PasswordBearer)
@router.post("/token", response_model=Token)
def login_token_only(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    user = _authenticate(db, form_data)
    return {"access_token": _token_for(user), "token_type": "bearer"}

# REGISTER: the first account becomes the shop admin, later ones are staff
@router.post("/register", response_model=StaffSession)
def register_user(
    user_data: StaffRegistration,
    db: Session = Depends(get_db)
):
    is_first_user = db.query(User).count() == 0
    db_user = add_staff_user(db, user_data, "admin" if is_first_user else "staff")
    return StaffSession(user=StaffUser.model_validate(db_user), access_token=_token_for(db_user))

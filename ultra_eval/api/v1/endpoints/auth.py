# ultra_eval/api/v1/endpoints/auth.py
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ultra_eval.core.config import settings
from ultra_eval.core.security import (
    authenticate_user,
    create_access_token,
    get_password_hash,
)
from ultra_eval.db.session import get_db
from ultra_eval.schemas.auth import LoginRequest, RegisterRequest, Token
from ultra_eval.schemas.student import StudentPublic
from ultra_eval.services import student_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_token(email: str) -> Token:
    access_token = create_access_token(
        data={"sub": email},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return Token(access_token=access_token)


@router.post("/register", response_model=StudentPublic, status_code=status.HTTP_201_CREATED)
def register_student(payload: RegisterRequest, db: Session = Depends(get_db)):
    if student_service.get_student_by_email(db, payload.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    return student_service.create_student(
        db, obj_in=payload, password_hash=get_password_hash(payload.password)
    )


# JSON body login for the frontend
@router.post("/login", response_model=Token)
def login_for_access_token(payload: LoginRequest, db: Session = Depends(get_db)):
    student = authenticate_user(db, payload.email, payload.password)
    if not student:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _issue_token(student.email)


# OAuth2 form login, used by the docs "Authorize" button; username is the email
@router.post("/token", response_model=Token)
def login_for_access_token_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    student = authenticate_user(db, form_data.username, form_data.password)
    if not student:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _issue_token(student.email)

"""
Authentication endpoints for user registration and login.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from knowledge_scout.core.dependencies import get_current_user, get_db
from knowledge_scout.core.security import create_access_token, get_password_hash, verify_password
from knowledge_scout.db.init_db import default_avatar, ensure_demo_user
from knowledge_scout.core.config import settings
from knowledge_scout.models.user import User
from knowledge_scout.schemas.user import (
    AuthResponse,
    DemoUserResponse,
    LoginRequest,
    Token,
    User as UserSchema,
    UserCreate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(user: User) -> str:
    return create_access_token(subject=str(user.id), extra_claims={"email": user.email})


def _authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.hashed_password):  # type: ignore
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)) -> Any:
    """
    Register a new user.

    Args:
        user_in: User registration data
        db: Database session

    Returns:
        Created user and an access token

    Raises:
        HTTPException: If the email is already registered
    """
    user = db.query(User).filter(User.email == user_in.email).first()
    if user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists",
        )

    user = User(
        email=user_in.email,
        name=user_in.name,
        hashed_password=get_password_hash(user_in.password),
        avatar=default_avatar(user_in.name),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.email})")

    return {
        "message": "User created successfully",
        "user": user,
        "access_token": _issue_token(user),
        "token_type": "bearer",
    }


@router.post("/login", response_model=AuthResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)) -> Any:
    """
    Login with email and password and return a JWT token.

    Raises:
        HTTPException: If credentials are invalid
    """
    user = _authenticate(db, credentials.email, credentials.password)
    return {
        "message": "Login successful",
        "user": user,
        "access_token": _issue_token(user),
        "token_type": "bearer",
    }


@router.post("/token", response_model=Token)
def login_for_access_token(
    db: Session = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()
) -> Any:
    """
    OAuth2 password flow used by the interactive docs. ``username`` is the email.
    """
    user = _authenticate(db, form_data.username, form_data.password)
    return {"access_token": _issue_token(user), "token_type": "bearer"}


@router.get("/me", response_model=UserSchema)
def read_current_user(current_user: User = Depends(get_current_user)) -> Any:
    """
    Get current authenticated user.
    """
    return current_user


@router.post("/init-demo", response_model=DemoUserResponse)
def init_demo_user(db: Session = Depends(get_db)) -> Any:
    """
    Create the demo account if it is missing.
    """
    existing = db.query(User).filter(User.email == settings.DEMO_USER_EMAIL).first()
    if existing:
        return {"message": "Demo user already exists", "user": existing}

    user = ensure_demo_user(db)
    return {"message": "Demo user created successfully", "user": user}

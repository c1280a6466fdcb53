"""Authentication router for user registration and login."""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from personal_blog.database import get_db
from personal_blog.models import User
from personal_blog.schemas import UserRegister, UserLogin, LoginResponse, MessageResponse
from personal_blog.auth import DUMMY_PASSWORD_HASH, hash_password, verify_password, create_access_token

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

EMAIL_TAKEN = "Email is already registered."
INVALID_CREDENTIALS = "Invalid credentials."


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user.

    No token is issued; the client logs in separately.

    Args:
        user_data: User registration data (username, email, password)
        db: Database session

    Returns:
        MessageResponse: Confirmation message

    Raises:
        HTTPException: If the email is already registered
    """
    logger.info(f"Registration attempt for email: {user_data.email}")

    # Check if user already exists
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        logger.warning(f"Registration failed: Email already exists - {user_data.email}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=EMAIL_TAKEN
        )

    new_user = User(
        username=user_data.username,
        email=user_data.email,
        password_hash=hash_password(user_data.password)
    )

    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent registration won the race past the existence check
        db.rollback()
        logger.warning(f"Registration failed: unique email constraint - {user_data.email}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=EMAIL_TAKEN
        )

    logger.info(f"User registered successfully: {user_data.email}")
    return {"message": "User registered successfully."}


@router.post("/login", response_model=LoginResponse)
def login(user_data: UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate user and return JWT token.

    Unknown email and wrong password produce the same response.

    Args:
        user_data: User login data (email, password)
        db: Database session

    Returns:
        LoginResponse: JWT token and the user's display name

    Raises:
        HTTPException: If credentials are invalid
    """
    logger.info(f"Login attempt for email: {user_data.email}")

    user = db.query(User).filter(User.email == user_data.email).first()
    password_hash = user.password_hash if user else DUMMY_PASSWORD_HASH
    password_ok = verify_password(user_data.password, password_hash)
    if not user or not password_ok:
        logger.warning(f"Login failed for email: {user_data.email}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=INVALID_CREDENTIALS
        )

    token = create_access_token(user.id)

    logger.info(f"User logged in successfully: {user_data.email}")
    return {"token": token, "username": user.username}

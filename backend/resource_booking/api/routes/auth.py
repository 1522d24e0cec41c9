"""
Authentication endpoints: register and login.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_booking.core.security import get_current_user
from resource_booking.db.session import get_db
from resource_booking.models.user import User
from resource_booking.schemas.user import UserCreate, UserResponse, UserLogin, Token
from resource_booking.services.auth_service import register_user, authenticate_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register an organizer or participant account."""
    return await register_user(db, user_data)


@router.post("/login", response_model=Token)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    token = await authenticate_user(db, login_data)
    return Token(access_token=token)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return user

"""
Account registration and login.

Identity is a collaborator of the booking engine: all it needs is a user id
and a role on every request. Passwords are bcrypt hashes; tokens are JWTs
whose subject is the user id.
"""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from resource_booking.models.user import User
from resource_booking.schemas.user import UserCreate, UserLogin
from resource_booking.core.security import hash_password, verify_password, create_access_token
from resource_booking.core.logging import get_logger

logger = get_logger(__name__)


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """Create an organizer or participant account. 409 on a taken email or username."""
    result = await db.execute(
        select(User).where(
            or_(User.email == user_data.email, User.username == user_data.username)
        )
    )
    existing = result.scalars().first()
    if existing is not None:
        field = "email" if existing.email == user_data.email else "username"
        logger.warning("registration_failed", reason=f"{field}_exists")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered" if field == "email" else "Username already taken",
        )

    user = User(
        email=user_data.email,
        username=user_data.username,
        hashed_password=hash_password(user_data.password),
        role=user_data.role.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, role=user.role)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> str:
    """Return a bearer token for valid credentials; 401 otherwise, 403 if deactivated."""
    result = await db.execute(select(User).where(User.email == login_data.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    logger.info("user_logged_in", user_id=user.id, role=user.role)
    return token

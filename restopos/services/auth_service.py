import uuid
from fastapi import HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from passlib.context import CryptContext
import logfire

from restopos.auth.auth import (
    create_tokens,
    revoke_refresh_token,
    verify_refresh_token,
)
from restopos.config.config import settings
from restopos.models.models import User
from restopos.schemas.user_schema import (
    TokenResponse,
    UpdateUserRole,
    UserCreate,
    UserResponse,
    UserRole,
)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


async def create_user(db: AsyncSession, user_data: UserCreate) -> UserResponse:
    """
    Register a new staff user.

    Emails listed in ``ADMIN_EMAILS`` get the admin role, everyone else
    starts as a waiter.

    Args:
        db: Database session
        user_data: User data from request

    Returns:
        The newly created user
    """
    email = user_data.email.lower()
    email_exists = await db.execute(select(User).where(User.email == email))
    if email_exists.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Email already registered"
        )

    role = UserRole.ADMIN if email in settings.admin_emails else UserRole.WAITER
    user = User(
        email=email,
        full_name=user_data.full_name,
        password=hash_password(user_data.password),
        role=role,
        is_active=True,
    )

    try:
        db.add(user)
        await db.commit()
        await db.refresh(user)
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        )

    logfire.info("registered user {email} as {role}", email=email, role=role.value)
    return user


async def login_user(
    db: AsyncSession, login_data: OAuth2PasswordRequestForm
) -> TokenResponse:
    """
    Args:
            db: Database session
            login_data: Login credentials (username is the email)

    Returns:
            A fresh access/refresh token pair
    """
    stmt = select(User).where(User.email == login_data.username.lower())
    result = await db.execute(stmt)
    user = result.scalar_one_or_none()

    if (
        not user
        or not verify_password(login_data.password, user.password)
        or not user.is_active
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid email or password",
        )

    return await create_tokens(user=user, db=db)


async def refresh_tokens(db: AsyncSession, refresh_token: str) -> TokenResponse:
    """Rotate a refresh token: the old one is revoked, a new pair is issued."""
    user_id = await verify_refresh_token(refresh_token, db)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    await revoke_refresh_token(refresh_token, db)
    return await create_tokens(user=user, db=db)


async def logout_user(db: AsyncSession, refresh_token: str) -> bool:
    return await revoke_refresh_token(refresh_token, db)


async def get_users(db: AsyncSession) -> list[UserResponse]:
    result = await db.execute(select(User).order_by(User.created_at))
    return result.scalars().all()


async def update_user_role(
    db: AsyncSession, user_id: uuid.UUID, data: UpdateUserRole
) -> UserResponse:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )

    user.role = data.role
    try:
        await db.commit()
        await db.refresh(user)
    except Exception:
        await db.rollback()
        raise

    logfire.info("user {email} is now {role}", email=user.email, role=data.role.value)
    return user

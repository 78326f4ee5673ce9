from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.database.database import get_db
from restopos.schemas.user_schema import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from restopos.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate, db: AsyncSession = Depends(get_db)
) -> UserResponse:
    try:
        return await auth_service.create_user(user_data=user_data, db=db)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/login", status_code=status.HTTP_200_OK)
async def login_user(
    user_credentials: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    try:
        return await auth_service.login_user(login_data=user_credentials, db=db)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/refresh", status_code=status.HTTP_200_OK)
async def refresh_token(
    data: RefreshTokenRequest, db: AsyncSession = Depends(get_db)
) -> TokenResponse:
    """Get a new token pair using a refresh token"""
    try:
        return await auth_service.refresh_tokens(
            db=db, refresh_token=data.refresh_token
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(data: RefreshTokenRequest, db: AsyncSession = Depends(get_db)) -> dict:
    """Logout user by revoking their refresh token"""
    if not await auth_service.logout_user(db=db, refresh_token=data.refresh_token):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token"
        )
    return {"message": "Successfully logged out"}

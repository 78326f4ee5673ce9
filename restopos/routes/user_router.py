from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.auth.auth import get_current_admin, get_current_user
from restopos.database.database import get_db
from restopos.models.models import User
from restopos.schemas.user_schema import UpdateUserRole, UserResponse
from restopos.services import auth_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/me", status_code=status.HTTP_200_OK)
async def current_user_details(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    return current_user


@router.get("", status_code=status.HTTP_200_OK)
async def get_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> list[UserResponse]:
    try:
        return await auth_service.get_users(db=db)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{user_id}/role", status_code=status.HTTP_202_ACCEPTED)
async def update_user_role(
    user_id: UUID,
    data: UpdateUserRole,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> UserResponse:
    try:
        return await auth_service.update_user_role(db=db, user_id=user_id, data=data)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

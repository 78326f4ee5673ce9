from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.auth.auth import get_current_user
from restopos.database.database import get_db
from restopos.models.models import User
from restopos.schemas.cart_schema import AddToCart, CartResponse
from restopos.services import cart_service


router = APIRouter(prefix="/api/cart", tags=["Cart"])


@router.get("", status_code=status.HTTP_200_OK)
async def get_cart(current_user: User = Depends(get_current_user)) -> CartResponse:
    """Retrieve the current user's cart.

    Returns:
        CartResponse: cart lines in insertion order, item count and total.
    """
    try:
        return await cart_service.get_cart(current_user=current_user)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    data: AddToCart,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    """Add one unit of a menu item to the cart.

    Args:
        data (AddToCart): the menu item to add.
        current_user (User, optional): Current user. Defaults to Depends(get_current_user).
        db (AsyncSession, optional): Database session. Defaults to Depends(get_db).

    Returns:
        CartResponse: The updated cart.
    """
    try:
        return await cart_service.add_to_cart(
            db=db, item_id=data.item_id, current_user=current_user
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("", status_code=status.HTTP_200_OK)
async def clear_cart(current_user: User = Depends(get_current_user)) -> CartResponse:
    try:
        return await cart_service.clear_cart(current_user=current_user)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

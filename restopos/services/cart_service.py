import json
from uuid import UUID
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import logfire

from restopos.config.config import redis_client, settings
from restopos.models.models import MenuItem, User
from restopos.schemas.cart_schema import CartLine, CartResponse
from restopos.services import cart_aggregator
from restopos.services.cart_aggregator import Cart


def cart_key(user_id: UUID) -> str:
    return f"cart:{user_id}"


def load_cart(user_id: UUID) -> Cart:
    cached_cart = redis_client.get(cart_key(user_id))
    if not cached_cart:
        return cart_aggregator.EMPTY_CART
    return tuple(CartLine.model_validate(line) for line in json.loads(cached_cart))


def save_cart(user_id: UUID, cart: Cart) -> None:
    if cart_aggregator.is_empty(cart):
        redis_client.delete(cart_key(user_id))
        return
    redis_client.set(
        cart_key(user_id),
        json.dumps([line.model_dump(mode="json") for line in cart]),
        ex=settings.CART_TTL_SECONDS,
    )


def cart_response(cart: Cart) -> CartResponse:
    return CartResponse(
        lines=list(cart),
        item_count=cart_aggregator.item_count(cart),
        total=cart_aggregator.total(cart),
    )


async def get_cart(current_user: User) -> CartResponse:
    return cart_response(load_cart(current_user.id))


async def add_to_cart(
    db: AsyncSession, item_id: int, current_user: User
) -> CartResponse:
    """
    Add one unit of a menu item to the current user's cart.
    """
    item = await db.get(MenuItem, item_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Menu item with ID {item_id} not found",
        )
    if not item.is_available:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{item.name} is not available",
        )

    cart = cart_aggregator.add(load_cart(current_user.id), item)
    save_cart(current_user.id, cart)
    return cart_response(cart)


async def clear_cart(current_user: User) -> CartResponse:
    cart = cart_aggregator.clear(load_cart(current_user.id))
    save_cart(current_user.id, cart)
    logfire.info("cleared cart for {email}", email=current_user.email)
    return cart_response(cart)

"""
Cart transitions.

A cart is an ordered tuple of ``CartLine`` with one line per item id. Every
transition returns a new cart; lines keep the order of first insertion.
"""
from decimal import Decimal

from restopos.schemas.cart_schema import CartLine

Cart = tuple[CartLine, ...]

EMPTY_CART: Cart = ()


class CartError(ValueError):
    pass


def add(cart: Cart, item) -> Cart:
    """
    Add one unit of ``item`` to the cart.

    ``item`` needs ``id``, ``name`` and ``base_price`` (a menu item).
    """
    if item.id is None:
        raise CartError("Cannot add an item without an id")

    for index, line in enumerate(cart):
        if line.item_id == item.id:
            bumped = line.model_copy(update={"quantity": line.quantity + 1})
            return cart[:index] + (bumped,) + cart[index + 1 :]

    new_line = CartLine(
        item_id=item.id, name=item.name, unit_price=item.base_price, quantity=1
    )
    return cart + (new_line,)


def total(cart: Cart) -> Decimal:
    return sum((line.unit_price * line.quantity for line in cart), Decimal(0))


def item_count(cart: Cart) -> int:
    return sum(line.quantity for line in cart)


def clear(cart: Cart) -> Cart:
    return EMPTY_CART


def is_empty(cart: Cart) -> bool:
    return not cart

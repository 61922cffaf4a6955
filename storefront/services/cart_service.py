import logging
from typing import Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.models.cart import CartItem

logger = logging.getLogger(__name__)


def _slot(db: Session, user_id: str, item_id: int):
    return db.query(CartItem).filter(
        CartItem.user_id == str(user_id),
        CartItem.product_id == item_id
    )


def _quantity(db: Session, user_id: str, item_id: int) -> int:
    quantity = _slot(db, user_id, item_id).with_entities(CartItem.quantity).scalar()
    return quantity or 0


def get_cart(db: Session, user_id: str) -> Dict[int, int]:
    """Sparse mapping of product id to quantity"""
    rows = (
        db.query(CartItem.product_id, CartItem.quantity)
        .filter(CartItem.user_id == str(user_id), CartItem.quantity > 0)
        .order_by(CartItem.product_id.asc())
        .all()
    )
    return {product_id: quantity for product_id, quantity in rows}


def add_to_cart(db: Session, user_id: str, item_id: int) -> int:
    """Increment one slot by 1 and return its new quantity"""
    for attempt in range(3):
        try:
            updated = _slot(db, user_id, item_id).update(
                {CartItem.quantity: CartItem.quantity + 1}, synchronize_session=False
            )
            if updated:
                # Read inside the transaction so a later concurrent add is not reported
                quantity = _quantity(db, user_id, item_id)
            else:
                db.add(CartItem(user_id=str(user_id), product_id=item_id, quantity=1))
                quantity = 1
            db.commit()
        except IntegrityError:
            # A concurrent add created the slot first; increment it instead
            db.rollback()
            logger.debug("Cart slot %d for user %s created concurrently, retrying", item_id, user_id)
            continue
        return quantity
    raise RuntimeError("Could not update cart")


def remove_from_cart(db: Session, user_id: str, item_id: int) -> int:
    """Decrement one slot by 1, never below zero, and return its new quantity"""
    _slot(db, user_id, item_id).filter(CartItem.quantity > 0).update(
        {CartItem.quantity: CartItem.quantity - 1}, synchronize_session=False
    )
    quantity = _quantity(db, user_id, item_id)
    if quantity <= 0:
        _slot(db, user_id, item_id).delete(synchronize_session=False)
    db.commit()
    return max(quantity, 0)

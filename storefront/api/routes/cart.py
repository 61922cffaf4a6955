from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user
from storefront.database import get_db
from storefront.models.user import User
from storefront.schemas.cart import CartItemRequest, CartItemState
from storefront.schemas.common import ResponseModel
from storefront.services import cart_service

router = APIRouter()


@router.post("/addtocart", response_model=ResponseModel)
def add_to_cart(
    item: CartItemRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add one unit of an item to the user's cart"""
    quantity = cart_service.add_to_cart(db, current_user.id, item.item_id)
    return ResponseModel(
        success=True,
        data=CartItemState(itemId=item.item_id, quantity=quantity),
        message="Added to cart"
    )


@router.post("/removefromcart", response_model=ResponseModel)
def remove_from_cart(
    item: CartItemRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove one unit of an item from the user's cart"""
    quantity = cart_service.remove_from_cart(db, current_user.id, item.item_id)
    return ResponseModel(
        success=True,
        data=CartItemState(itemId=item.item_id, quantity=quantity),
        message="Removed from cart"
    )


@router.post("/getcart", response_model=Dict[int, int])
def get_cart(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return cart_service.get_cart(db, current_user.id)

from storefront.models.user import User
from storefront.models.product import Product
from storefront.models.cart import CartItem
from storefront.models.counter import IdCounter

__all__ = [
    "User",
    "Product",
    "CartItem",
    "IdCounter"
]

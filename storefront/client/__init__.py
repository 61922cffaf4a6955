from storefront.client.shop_context import ShopContext

__all__ = ["ShopContext"]

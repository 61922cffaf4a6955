"""Storefront API: product catalog, accounts and carts."""

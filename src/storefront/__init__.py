"""Storefront: catalog, cart, checkout and order history for a single shop."""

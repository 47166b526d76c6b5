"""Storefront REST API: routers in ``routes``, exception handlers in ``errors``."""

"""Python client for the storefront API, including the anonymous cart.

The domain auto-discovers every module under ``storefront/``, so this package
imports nothing on load. Import from the submodules directly, e.g.
``from storefront.client.carts import LocalCart``.
"""

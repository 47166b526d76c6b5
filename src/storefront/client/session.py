"""A shopper's session: decides which cart is active.

Anonymous shoppers get a LocalCart. ``login`` (or ``register``) switches to
the server cart and reconciles the local one into it, once per sign-in.
``logout`` goes back to a fresh local cart. If the server cannot be
reached during the merge, the session stays anonymous with the unmerged
lines still in the local cart.
"""

import httpx
import structlog

from storefront.client.carts import ClientCart, LocalCart, RemoteCart
from storefront.client.catalog import RemoteCatalog
from storefront.client.reconciliation import ReconciliationReport, reconcile
from storefront.client.storage import KeyValueStore, MemoryStore

logger = structlog.get_logger(__name__)


class ShopperSession:
    def __init__(self, http: httpx.Client, store: KeyValueStore | None = None):
        self.http = http
        self.store = store if store is not None else MemoryStore()
        self.catalog = RemoteCatalog(http)
        self.token: str | None = None
        self.last_reconciliation: ReconciliationReport | None = None
        self._cart: ClientCart = LocalCart(self.store)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def cart(self) -> ClientCart:
        return self._cart

    def login(self, token: str) -> ReconciliationReport | None:
        """Switch to the server cart. Returns the report when a merge ran."""
        if self.is_authenticated:
            logger.info("Session already authenticated, skipping reconciliation")
            return None

        local = self._cart
        remote = RemoteCart(self.http, token)
        self.token = token
        self._cart = remote

        report = reconcile(local, remote) if isinstance(local, LocalCart) else None
        self.last_reconciliation = report
        if report is not None and not report.complete:
            # Stay anonymous so the kept lines merge on the next sign-in
            logger.warning("Sign-in merge incomplete, staying on the local cart", kept=len(report.kept))
            self.token = None
            self._cart = local
        return report

    def register(self, token: str) -> ReconciliationReport | None:
        return self.login(token)

    def logout(self) -> None:
        self.token = None
        self._cart = LocalCart(self.store)

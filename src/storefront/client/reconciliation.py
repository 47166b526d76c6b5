"""Merge an anonymous shopper's local cart into their server cart.

Runs once, when the shopper signs in or registers. Each local line is
replayed as an add on the server cart, so the server's merge rules apply
and quantities of matching lines add up. A line the server refuses (product
gone, not enough stock, invalid options) is logged and skipped; the rest
still go through.

A rejected token or a transport failure is not a refusal: the merge stops
there, and that line and every line not yet tried stay in the local cart
for the next sign-in. The local cart is discarded only once every line has
either merged or been refused.
"""

from dataclasses import dataclass, field

import httpx
import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.client.carts import CartLine, LocalCart, RemoteCart
from storefront.client.catalog import ProductSnapshot
from storefront.errors import Unauthorized

logger = structlog.get_logger(__name__)


@dataclass
class ReconciliationReport:
    merged: list[CartLine] = field(default_factory=list)
    failed: list[tuple[CartLine, str]] = field(default_factory=list)
    # Lines left in the local cart because the server could not be reached
    kept: list[CartLine] = field(default_factory=list)
    interrupted_by: str | None = None

    @property
    def ok(self) -> bool:
        return not self.failed and not self.kept

    @property
    def complete(self) -> bool:
        return not self.kept


def _product_for(line: CartLine) -> ProductSnapshot:
    if line.product is not None:
        return line.product
    return ProductSnapshot(id=line.product_id, name="", price=line.price)


def reconcile(local: LocalCart, remote: RemoteCart) -> ReconciliationReport:
    report = ReconciliationReport()
    pending = local.lines()

    for position, line in enumerate(pending):
        try:
            remote.add_item(_product_for(line), line.quantity, line.customization)
        except (Unauthorized, httpx.HTTPError) as exc:
            logger.warning(
                "Cart merge interrupted, keeping remaining lines locally",
                product_id=line.product_id,
                remaining=len(pending) - position,
                error=str(exc),
            )
            report.kept = pending[position:]
            report.interrupted_by = str(exc) or type(exc).__name__
            break
        except (ValidationError, ObjectNotFoundError) as exc:
            logger.warning(
                "Could not merge local cart line",
                product_id=line.product_id,
                quantity=line.quantity,
                error=str(exc),
            )
            report.failed.append((line, str(exc)))
        else:
            report.merged.append(line)

    if report.kept:
        for line in report.merged:
            local.remove_item(line.id)
        for line, _ in report.failed:
            local.remove_item(line.id)
    else:
        local.discard()

    logger.info(
        "Cart reconciled",
        merged=len(report.merged),
        failed=len(report.failed),
        kept=len(report.kept),
    )
    return report

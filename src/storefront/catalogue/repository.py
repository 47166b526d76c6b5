"""Repository for the Product aggregate."""

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.repository(part_of=Product)
class ProductRepository:
    """Adds catalog browsing on top of the standard CRUD operations."""

    def search(self, keyword=None, category=None, featured=None, page=1, limit=12):
        """Return ``(total, products)`` for one page, newest first.

        ``keyword`` is a case-insensitive substring match on the name.
        """
        criteria = {}
        if keyword:
            criteria["name__icontains"] = keyword
        if category:
            criteria["category"] = category
        if featured is not None:
            criteria["featured"] = featured

        page = max(int(page), 1)
        limit = max(int(limit), 1)

        query = self._dao.query
        if criteria:
            query = query.filter(**criteria)
        result = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return result.total, result.items

    def find_many(self, product_ids) -> dict:
        """Load products by id; ids with no product are left out."""
        ids = sorted({str(pid) for pid in product_ids})
        if not ids:
            return {}
        result = self._dao.query.filter(id__in=ids).limit(len(ids)).all()
        return {str(product.id): product for product in result.items}

"""FastAPI routes for the storefront: products, the cart, orders and the wishlist."""

import json

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.dependencies import admin_user, current_user
from storefront.api.schemas import (
    AddProductRequest,
    AddReviewRequest,
    AddToCartRequest,
    AdjustStockRequest,
    PaymentResultRequest,
    PlaceOrderRequest,
    SetOrderStatusRequest,
    UpdateCartItemRequest,
)
from storefront.api.serializers import serialize_cart, serialize_order, serialize_product, serialize_wishlist
from storefront.cart.cart import Cart
from storefront.cart.management import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from storefront.catalogue.management import AddProduct, AddReview, AdjustStock
from storefront.catalogue.product import Product
from storefront.checkout.placement import PlaceOrder
from storefront.identity import CurrentUser
from storefront.order.administration import MarkOrderDelivered, MarkOrderPaid, SetOrderStatus
from storefront.order.order import Order
from storefront.wishlist.management import AddToWishlist, RemoveFromWishlist
from storefront.wishlist.wishlist import Wishlist


def _pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if total else 0


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("")
async def list_products(
    keyword: str | None = None,
    category: str | None = None,
    featured: bool | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1, le=100),
):
    total, products = current_domain.repository_for(Product).search(
        keyword=keyword, category=category, featured=featured, page=page, limit=limit
    )
    return {
        "count": total,
        "total_pages": _pages(total, limit),
        "current_page": page,
        "products": [serialize_product(product) for product in products],
    }


@product_router.get("/{product_id}")
async def get_product(product_id: str):
    product = current_domain.repository_for(Product).get(product_id)
    return {"product": serialize_product(product, detail=True)}


@product_router.post("", status_code=201)
async def add_product(body: AddProductRequest, user: CurrentUser = Depends(admin_user)):
    command = AddProduct(
        name=body.name,
        description=body.description,
        category=body.category,
        price=body.price,
        discount_price=body.discount_price,
        stock=body.stock,
        featured=body.featured,
        images=json.dumps([image.model_dump() for image in body.images]),
        customization_options=json.dumps([option.model_dump() for option in body.customization_options]),
    )
    product_id = current_domain.process(command, asynchronous=False)
    product = current_domain.repository_for(Product).get(product_id)
    return {"product": serialize_product(product, detail=True)}


@product_router.put("/{product_id}/stock")
async def adjust_stock(product_id: str, body: AdjustStockRequest, user: CurrentUser = Depends(admin_user)):
    command = AdjustStock(product_id=product_id, delta=body.delta, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    product = current_domain.repository_for(Product).get(product_id)
    return {"product": serialize_product(product)}


@product_router.post("/{product_id}/reviews", status_code=201)
async def add_review(product_id: str, body: AddReviewRequest, user: CurrentUser = Depends(current_user)):
    command = AddReview(
        product_id=product_id,
        user_id=user.user_id,
        name=user.name,
        rating=body.rating,
        comment=body.comment,
    )
    current_domain.process(command, asynchronous=False)
    product = current_domain.repository_for(Product).get(product_id)
    return {"product": serialize_product(product, detail=True)}


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_payload(user: CurrentUser) -> dict:
    cart = current_domain.repository_for(Cart).for_customer(user.user_id)
    return {"cart": serialize_cart(cart)}


@cart_router.get("")
async def get_cart(user: CurrentUser = Depends(current_user)):
    return _cart_payload(user)


@cart_router.post("", status_code=201)
async def add_to_cart(body: AddToCartRequest, user: CurrentUser = Depends(current_user)):
    command = AddToCart(
        customer_id=user.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
        customization=json.dumps(body.customization),
    )
    current_domain.process(command, asynchronous=False)
    return _cart_payload(user)


@cart_router.put("/{item_id}")
async def update_cart_item(item_id: str, body: UpdateCartItemRequest, user: CurrentUser = Depends(current_user)):
    command = UpdateCartItem(customer_id=user.user_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_payload(user)


@cart_router.delete("/{item_id}")
async def remove_from_cart(item_id: str, user: CurrentUser = Depends(current_user)):
    command = RemoveFromCart(customer_id=user.user_id, item_id=item_id)
    current_domain.process(command, asynchronous=False)
    return _cart_payload(user)


@cart_router.delete("")
async def clear_cart(user: CurrentUser = Depends(current_user)):
    current_domain.process(ClearCart(customer_id=user.user_id), asynchronous=False)
    return _cart_payload(user)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _order_payload(order_id) -> dict:
    order = current_domain.repository_for(Order).get(order_id)
    return {"order": serialize_order(order)}


@order_router.post("", status_code=201)
async def place_order(body: PlaceOrderRequest, user: CurrentUser = Depends(current_user)):
    command = PlaceOrder(
        customer_id=user.user_id,
        customer_email=user.email,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_payload(order_id)


# Declared before /{order_id} so "myorders" is not taken for an id.
@order_router.get("/myorders")
async def my_orders(user: CurrentUser = Depends(current_user)):
    orders = current_domain.repository_for(Order).for_customer(user.user_id)
    return {"orders": [serialize_order(order) for order in orders]}


@order_router.get("")
async def list_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: str | None = None,
    user: CurrentUser = Depends(admin_user),
):
    total, orders = current_domain.repository_for(Order).list_orders(page=page, limit=limit, status=status)
    return {
        "count": total,
        "total_pages": _pages(total, limit),
        "current_page": page,
        "orders": [serialize_order(order) for order in orders],
    }


@order_router.get("/{order_id}")
async def get_order(order_id: str, user: CurrentUser = Depends(current_user)):
    order = current_domain.repository_for(Order).get(order_id)
    # Someone else's order is reported exactly like a missing one.
    if not (user.is_admin or order.belongs_to(user.user_id)):
        raise ObjectNotFoundError({"order": ["Order not found"]})
    return {"order": serialize_order(order)}


@order_router.put("/{order_id}/pay")
async def mark_paid(order_id: str, body: PaymentResultRequest, user: CurrentUser = Depends(admin_user)):
    command = MarkOrderPaid(
        order_id=order_id,
        payment_id=body.payment_id,
        payment_status=body.status,
        update_time=body.update_time,
        email_address=body.email_address,
    )
    current_domain.process(command, asynchronous=False)
    return _order_payload(order_id)


@order_router.put("/{order_id}/deliver")
async def mark_delivered(order_id: str, user: CurrentUser = Depends(admin_user)):
    current_domain.process(MarkOrderDelivered(order_id=order_id), asynchronous=False)
    return _order_payload(order_id)


@order_router.put("/{order_id}/status")
async def set_status(order_id: str, body: SetOrderStatusRequest, user: CurrentUser = Depends(admin_user)):
    command = SetOrderStatus(order_id=order_id, status=body.status, note=body.note)
    current_domain.process(command, asynchronous=False)
    return _order_payload(order_id)


# ---------------------------------------------------------------------------
# Wishlist Router
# ---------------------------------------------------------------------------
wishlist_router = APIRouter(prefix="/wishlist", tags=["wishlist"])


def _wishlist_payload(user: CurrentUser) -> dict:
    wishlist = current_domain.repository_for(Wishlist).find_for_customer(user.user_id)
    return {"wishlist": serialize_wishlist(wishlist)}


@wishlist_router.get("")
async def get_wishlist(user: CurrentUser = Depends(current_user)):
    return _wishlist_payload(user)


@wishlist_router.post("/{product_id}", status_code=201)
async def add_to_wishlist(product_id: str, user: CurrentUser = Depends(current_user)):
    current_domain.process(AddToWishlist(customer_id=user.user_id, product_id=product_id), asynchronous=False)
    return _wishlist_payload(user)


@wishlist_router.delete("/{product_id}")
async def remove_from_wishlist(product_id: str, user: CurrentUser = Depends(current_user)):
    current_domain.process(RemoveFromWishlist(customer_id=user.user_id, product_id=product_id), asynchronous=False)
    return _wishlist_payload(user)

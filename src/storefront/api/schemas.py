"""Pydantic request schemas for the storefront API.

These are external contracts, kept separate from the internal Protean
commands. Quantities are deliberately unconstrained here: the domain decides
what a valid quantity is so the API and the client carts agree.
"""

from pydantic import BaseModel, Field

CustomizationValue = str | int | float | bool


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    full_name: str
    address: str
    city: str
    state: str
    postal_code: str
    country: str
    phone: str


class ImageSchema(BaseModel):
    url: str
    alt_text: str | None = None


class CustomizationOptionSchema(BaseModel):
    name: str
    options: list[str] = Field(default_factory=list)
    required: bool = False


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1
    customization: dict[str, CustomizationValue] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "8d0f...",
                    "quantity": 2,
                    "customization": {"size": "M", "color": "red"},
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    shipping_address: ShippingAddressSchema
    payment_method: str


class PaymentResultRequest(BaseModel):
    payment_id: str | None = None
    status: str | None = None
    update_time: str | None = None
    email_address: str | None = None


class SetOrderStatusRequest(BaseModel):
    status: str
    note: str | None = None


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str
    price: float
    description: str | None = None
    category: str | None = None
    discount_price: float | None = None
    stock: int = 0
    featured: bool = False
    images: list[ImageSchema] = Field(default_factory=list)
    customization_options: list[CustomizationOptionSchema] = Field(default_factory=list)


class AdjustStockRequest(BaseModel):
    delta: int
    reason: str = "adjustment"


class AddReviewRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = None

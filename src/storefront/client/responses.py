"""Translate storefront API error responses back into domain exceptions.

Client code catches the same exception types whether a cart lives locally
or on the server.
"""

import httpx
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.errors import EmptyCart, Forbidden, InsufficientStock, Unauthorized


def _body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _messages(error) -> dict:
    if isinstance(error, dict):
        return error
    return {"error": [str(error) if error else "Request failed"]}


def raise_for_response(response: httpx.Response) -> None:
    if response.is_success:
        return

    body = _body(response)
    error = body.get("error")
    code = body.get("code")

    if response.status_code == 401:
        raise Unauthorized(error or "Not authorized")
    if response.status_code == 403:
        raise Forbidden(error or "Forbidden")
    if response.status_code == 404:
        raise ObjectNotFoundError(_messages(error))
    if response.status_code == 400:
        if code == InsufficientStock.code:
            raise InsufficientStock(body.get("product_id"), body.get("product_name"))
        if code == EmptyCart.code:
            raise EmptyCart()
        raise ValidationError(_messages(error))

    response.raise_for_status()

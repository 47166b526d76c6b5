"""FastAPI dependencies resolving the caller from the bearer token."""

from fastapi import Depends, Header

from storefront.errors import Forbidden, Unauthorized
from storefront.identity import CurrentUser, InvalidToken, get_verifier
from storefront.utils.logging import add_context


async def current_user(authorization: str | None = Header(default=None)) -> CurrentUser:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("Not authorized, no token")

    try:
        user = get_verifier().verify(token.strip())
    except InvalidToken as exc:
        raise Unauthorized(f"Not authorized, {exc}") from None

    add_context(customer_id=user.user_id)
    return user


async def admin_user(user: CurrentUser = Depends(current_user)) -> CurrentUser:
    if not user.is_admin:
        raise Forbidden()
    return user

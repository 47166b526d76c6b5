"""Exception -> HTTP response mapping for the storefront API.

Protean's own handlers cover ValidationError (400) and ObjectNotFoundError
(404). The handlers registered here add the storefront-specific codes and
keep request-schema failures on 400 like every other validation failure.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import EmptyCart, Forbidden, InsufficientStock, OrderCommitFailed, Unauthorized

logger = structlog.get_logger(__name__)


async def _insufficient_stock(request: Request, exc: InsufficientStock):
    return JSONResponse(
        status_code=400,
        content={
            "error": exc.messages,
            "code": exc.code,
            "product_id": exc.product_id,
            "product_name": exc.product_name,
        },
    )


async def _empty_cart(request: Request, exc: EmptyCart):
    return JSONResponse(status_code=400, content={"error": exc.messages, "code": exc.code})


async def _validation(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": exc.messages, "code": "validation"})


async def _request_validation(request: Request, exc: RequestValidationError):
    fields = {}
    for error in exc.errors():
        name = ".".join(str(part) for part in error["loc"] if part != "body")
        fields.setdefault(name or "body", []).append(error["msg"])
    return JSONResponse(status_code=400, content={"error": fields, "code": "validation"})


async def _not_found(request: Request, exc: ObjectNotFoundError):
    # ObjectNotFoundError carries its payload in args; it has no .messages
    detail = exc.args[0] if exc.args else str(exc)
    return JSONResponse(status_code=404, content={"error": detail, "code": "not_found"})


async def _unauthorized(request: Request, exc: Unauthorized):
    return JSONResponse(status_code=401, content={"error": exc.message, "code": "unauthorized"})


async def _forbidden(request: Request, exc: Forbidden):
    return JSONResponse(status_code=403, content={"error": exc.message, "code": "forbidden"})


async def _commit_failed(request: Request, exc: OrderCommitFailed):
    logger.error(
        "Order placement failed",
        order_id=exc.order_id,
        step=exc.step,
        product_ids=exc.product_ids,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Your order could not be completed. No payment was taken; please contact support.",
            "code": "order_commit_failed",
            "order_id": exc.order_id,
        },
    )


def register_storefront_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, _validation)
    app.add_exception_handler(InsufficientStock, _insufficient_stock)
    app.add_exception_handler(EmptyCart, _empty_cart)
    app.add_exception_handler(RequestValidationError, _request_validation)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(Unauthorized, _unauthorized)
    app.add_exception_handler(Forbidden, _forbidden)
    app.add_exception_handler(OrderCommitFailed, _commit_failed)

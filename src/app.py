"""Storefront FastAPI application.

Processes commands synchronously via HTTP. Every request runs inside the
storefront domain context with its own request id bound to the logs.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.errors import register_storefront_exception_handlers
from storefront.api.routes import cart_router, order_router, product_router, wishlist_router
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context

# PROTEAN_ENV selects the config overlay (memory stores by default,
# PostgreSQL under "production").
storefront.init()

app = FastAPI(
    title="Storefront API",
    description="Catalog, cart and checkout for a single shop",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and a request id for each request."""
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    clear_context()
    add_context(request_id=request_id, path=request.url.path)
    with storefront.domain_context():
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(product_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(wishlist_router)
register_storefront_exception_handlers(app)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})

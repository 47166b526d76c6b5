import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain module is first imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("LOG_TO_FILE", "0")
    os.environ.setdefault("STOREFRONT_TOKEN_SECRET", "test-secret")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path or "/bdd/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Reset stores and swappable adapters after every test."""
    from storefront.identity import reset_verifier
    from storefront.notification.channel import reset_email_channel

    reset_email_channel()
    reset_verifier()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()

    reset_email_channel()
    reset_verifier()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    """Persist a product and return it as reloaded from the repository."""
    from protean import current_domain

    from storefront.catalogue.product import Product

    def _make(name="Desk Lamp", price=500.0, stock=10, **kwargs):
        product = Product.create(name=name, price=price, stock=stock, **kwargs)
        repo = current_domain.repository_for(Product)
        repo.add(product)
        return repo.get(product.id)

    return _make


@pytest.fixture()
def address():
    return {
        "full_name": "Asha Rao",
        "address": "12 MG Road",
        "city": "Bengaluru",
        "state": "KA",
        "postal_code": "560001",
        "country": "IN",
        "phone": "+91-9800000000",
    }


@pytest.fixture()
def token_for():
    """Issue a bearer token for a user id (admin when asked)."""
    from storefront.identity import CurrentUser, get_verifier

    def _issue(user_id="cust-001", is_admin=False, email=None, name=None):
        user = CurrentUser(
            user_id=user_id,
            email=email if email is not None else f"{user_id}@example.com",
            name=name or user_id,
            is_admin=is_admin,
        )
        return get_verifier().issue(user)

    return _issue


@pytest.fixture()
def outbox():
    """The in-memory email adapter, installed fresh for the test."""
    from storefront.notification.channel import set_email_channel
    from storefront.notification.channel.fake_email import FakeEmailAdapter

    adapter = FakeEmailAdapter()
    set_email_channel(adapter)
    return adapter


@pytest.fixture()
def api_client():
    """A TestClient over the storefront routers, without the production app's init."""
    from fastapi import FastAPI
    from fastapi.testclient import TestClient

    from storefront.api.errors import register_storefront_exception_handlers
    from storefront.api.routes import cart_router, order_router, product_router, wishlist_router
    from storefront.domain import storefront

    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request, call_next):
        with storefront.domain_context():
            return await call_next(request)

    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(wishlist_router)
    register_storefront_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def auth_header(token_for):
    def _header(user_id="cust-001", is_admin=False, email=None):
        return {"Authorization": f"Bearer {token_for(user_id, is_admin=is_admin, email=email)}"}

    return _header

import os
from decimal import Decimal
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Selects the test environment before any application module is imported,
    so ``app`` builds against an in-memory database and logging writes no files.
    """
    os.environ["STOREFRONT_ENV"] = session.config.option.env
    os.environ["DATABASE_URL"] = "sqlite://"
    # Cheap hashes keep the suite fast
    os.environ.setdefault("BCRYPT_ROUNDS", "4")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture()
def config():
    from shared.config import Config

    return Config(environment="test", database_url="sqlite://", jwt_secret="test-secret")


@pytest.fixture()
def store():
    """A fresh in-memory database for every test."""
    from shared.store import Store, drop_db, setup_db

    store = Store("sqlite://")
    setup_db(store)

    yield store

    drop_db(store)
    store.dispose()


@pytest.fixture()
def verifier(config):
    from identity.tokens import IdentityVerifier

    return IdentityVerifier.from_config(config)


@pytest.fixture()
def make_user(store):
    """Factory: register a user and return it."""
    from identity.user.registration import RegisterUser, RegisterUserHandler

    counter = {"n": 0}

    def _make_user(name="Jane Doe", mobile=None, email=None, password="s3cret-pass", address=None, is_admin=False):
        counter["n"] += 1
        n = counter["n"]
        command = RegisterUser(
            name=name,
            mobile=mobile or f"98765{n:05d}",
            email=email or f"user{n}@example.com",
            password=password,
            address=address,
        )
        return RegisterUserHandler(store).register_user(command, is_admin=is_admin)

    return _make_user


@pytest.fixture()
def make_product(store):
    """Factory: create a product and return it."""
    from catalogue.product.management import CreateProduct, ProductHandler

    def _make_product(name="Widget", price="100.00", stock=10, **kwargs):
        command = CreateProduct(name=name, price=Decimal(price), stock=stock, **kwargs)
        return ProductHandler(store).create_product(command)

    return _make_product


@pytest.fixture()
def client(config, store):
    from fastapi.testclient import TestClient

    from app import create_app

    return TestClient(create_app(config=config, store=store))


@pytest.fixture()
def auth_headers(verifier):
    """Build an Authorization header for a user."""

    def _auth_headers(user):
        return {"Authorization": f"Bearer {verifier.issue(user.id, user.roles)}"}

    return _auth_headers

"""
Shared fixtures.

Every test gets a fresh app backed by in-memory SQLite, already seeded with
the default categories and the admin user.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime
from decimal import Decimal

import pytest

from app import create_app
from models import db, Category, Transaction, User


ADMIN_USER = "admin"
ADMIN_PASS = "s3cret"


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "ADMIN_USER": ADMIN_USER,
        "ADMIN_PASS": ADMIN_PASS,
        "PUBLIC_DIR": os.path.join(os.path.dirname(__file__), "public"),
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    resp = client.post("/api/login", json={"username": ADMIN_USER, "password": ADMIN_PASS})
    assert resp.status_code == 200
    return client


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def admin_id(ctx):
    return User.query.filter_by(username=ADMIN_USER).one().id


@pytest.fixture
def category_id(ctx):
    def lookup(name):
        return Category.query.filter_by(name=name).one().id
    return lookup


@pytest.fixture
def add_tx(ctx, admin_id, category_id):
    """Insert a transaction for the admin directly through the session."""
    def add(category, amount, created_at, classification=None, note="note", user_id=None):
        tx = Transaction(
            user_id=user_id or admin_id,
            category_id=category_id(category),
            amount=Decimal(str(amount)),
            classification=classification,
            note=note,
            created_at=created_at if isinstance(created_at, datetime) else datetime.fromisoformat(created_at),
        )
        db.session.add(tx)
        db.session.commit()
        return tx.id
    return add

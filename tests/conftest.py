import os

# must be set before quotedesk.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test_secret_for_pytest_only_0123456789abcdef")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quotedesk import models  # noqa: F401 (register tables)
from quotedesk.auth.jwt import create_access_token
from quotedesk.db import Base, get_db
from quotedesk.domain.auth import CurrentUser
from quotedesk.repositories.catalog import customers, products, users


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 10, 12, 0, 0)


# --- DB: fresh in-memory SQLite per test ---
@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def admin(db):
    return users.create(
        db,
        {
            "name": "Marcos Admin",
            "email": "admin@mastergreen.test",
            "role": "admin",
            "branch": "Matriz",
            "commission_percent": Decimal("0"),
        },
    )


@pytest.fixture
def seller(db):
    return users.create(
        db,
        {
            "name": "Ana Vendas",
            "email": "ana@mastergreen.test",
            "role": "salesperson",
            "branch": "Matriz",
            "commission_percent": Decimal("5"),
        },
    )


@pytest.fixture
def other_seller(db):
    return users.create(
        db,
        {
            "name": "Bruno Filial",
            "email": "bruno@mastergreen.test",
            "role": "vendedor",
            "branch": "Filial Sul",
            "commission_percent": Decimal("3"),
        },
    )


@pytest.fixture
def customer(db, seller):
    return customers.create(
        db,
        {
            "name": "Condomínio Jardim Verde",
            "email": "sindico@jardimverde.test",
            "phone": "(11) 99999-0000",
            "cpf_cnpj": "12.345.678/0001-90",
            "address": "Rua das Palmeiras",
            "number": "120",
            "neighborhood": "Centro",
            "city": "São Paulo",
            "zip_code": "01000-000",
            "created_by_id": seller.id,
        },
    )


@pytest.fixture
def grass(db):
    return products.create(
        db,
        {
            "name": "Grama Sintética 32mm",
            "category": "Grama",
            "has_installation": True,
            "price_per_m2": Decimal("25"),
            "cost_per_m2": Decimal("10"),
        },
    )


@pytest.fixture
def mat(db):
    return products.create(
        db,
        {
            "name": "Capacho de Vinil",
            "category": "Capacho",
            "price_per_m2": Decimal("12"),
            "cost_per_m2": Decimal("8"),
        },
    )


@pytest.fixture
def scenario_payload(customer, grass, mat):
    """Two lines (20 m² @25/10, 5 m² @12/8) and one fixed cost 50 x 2."""
    return {
        "customerId": customer.id,
        "items": [
            {"productId": grass.id, "quantity": "20"},
            {"productId": mat.id, "quantity": 5},
        ],
        "costs": [
            {"name": "Frete", "calculationType": "fixed", "unitValue": "50", "quantity": 2},
        ],
        "discountPercent": "0",
    }


@pytest.fixture
def as_current():
    def _as_current(user) -> CurrentUser:
        return CurrentUser.from_orm(user)

    return _as_current


@pytest.fixture
def auth_headers():
    def _headers(user) -> dict:
        token = create_access_token(user_id=user.id, role=user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(db):
    from quotedesk.main import app

    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

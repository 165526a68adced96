"""
Pytest fixtures for the test suite.

Every test gets a fresh in-memory SQLite database (StaticPool, so all sessions
share one connection) and its own tables; gateways commit normally and
nothing leaks between tests.

API tests use a FastAPI app whose state is wired by hand instead of running
the lifespan, so no file database is touched.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import estatehub.models  # noqa: F401  (register tables)
from estatehub.db.base import Base
from estatehub.db.session import enable_sqlite_foreign_keys, get_db
from estatehub.models import Payment, Property, Unit, User
from estatehub.models.enums import PaymentMethod, PaymentStatus, PaymentType, Role
from estatehub.policy import ScopingPolicy
from estatehub.security.context import Actor
from estatehub.security.passwords import hash_password
from estatehub.security.tokens import TokenConfig, TokenService
from estatehub.settings import Settings

TEST_DB_URL = "sqlite:///:memory:"
POLICY_PATH = Path(__file__).resolve().parents[1] / "config" / "scoping_policy.yaml"
STRONG_PASSWORD = "Sup3r-secret!"


@lru_cache
def _password_hash() -> str:
    # bcrypt is slow on purpose; hash the shared fixture password once.
    return hash_password(STRONG_PASSWORD)


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine with all tables for each test."""
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="session")
def policy() -> ScopingPolicy:
    return ScopingPolicy.from_yaml(POLICY_PATH)


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret="test-secret-0123456789abcdef0123456789", db_url=TEST_DB_URL)


@pytest.fixture
def token_service(settings) -> TokenService:
    return TokenService(TokenConfig.from_settings(settings))


# ---- Factories -----------------------------------------------------------------------


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(role: Role = Role.TENANT, *, name: str | None = None, email: str | None = None, active: bool = True):
        counter["n"] += 1
        user = User(
            name=name or f"{role.value} {counter['n']}",
            email=email or f"{role.value.lower()}{counter['n']}@example.com",
            role=role,
            password_hash=_password_hash(),
            is_active=active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_property(db_session) -> Callable[..., Property]:
    def _make(admin: User, *, name: str = "Harbor View", active: bool = True) -> Property:
        prop = Property(name=name, address="1 Main St", admin_id=admin.id, amenities=["pool"], is_active=active)
        db_session.add(prop)
        db_session.commit()
        return prop

    return _make


@pytest.fixture
def make_unit(db_session) -> Callable[..., Unit]:
    def _make(
        prop: Property,
        *,
        number: str = "101",
        tenant: User | None = None,
        owner: User | None = None,
        rent: str = "1200.00",
    ) -> Unit:
        unit = Unit(
            property_id=prop.id,
            unit_number=number,
            tenant_id=tenant.id if tenant else None,
            is_occupied=tenant is not None,
            owner_id=owner.id if owner else None,
            rent_amount=Decimal(rent),
            maintenance_fee=Decimal("50.00"),
            features=[],
        )
        db_session.add(unit)
        db_session.commit()
        return unit

    return _make


@pytest.fixture
def make_payment(db_session) -> Callable[..., Payment]:
    def _make(
        payer: User,
        unit: Unit,
        *,
        amount: str = "500.00",
        status: PaymentStatus = PaymentStatus.PENDING,
        due: date | None = None,
    ) -> Payment:
        payment = Payment(
            user_id=payer.id,
            property_id=unit.property_id,
            unit_id=unit.id,
            amount=Decimal(amount),
            payment_type=PaymentType.RENT,
            payment_method=PaymentMethod.TRANSFER,
            status=status,
            due_date=due or date.today() + timedelta(days=10),
        )
        db_session.add(payment)
        db_session.commit()
        return payment

    return _make


@pytest.fixture
def actor_for() -> Callable[[User], Actor]:
    def _actor(user: User) -> Actor:
        return Actor(id=user.id, role=user.role)

    return _actor


# ---- API -----------------------------------------------------------------------------


@pytest.fixture
def app(session_factory, policy, token_service):
    from estatehub.main import create_app

    app = create_app(init_database=False)
    app.state.policy = policy
    app.state.token_service = token_service

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    return app


@pytest.fixture
def client(app):
    # Not used as a context manager: the lifespan (file DB, real settings) stays off.
    return TestClient(app)


@pytest.fixture
def auth_headers(token_service) -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_service.issue(user).token}"}

    return _headers

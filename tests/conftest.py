import os
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'bistro-test-secret-key-0123456789abcdef')

from bistro.auth import jwt_handler  # noqa: E402
from bistro.database import Base, get_db  # noqa: E402
from bistro.models.cart import CartItem  # noqa: E402
from bistro.models.menu import MenuItem  # noqa: E402
from bistro.models.payment import Payment  # noqa: E402
from bistro.models.review import Review  # noqa: E402
from bistro.models.user import User, UserRole  # noqa: E402
from bistro.payments.gateway import PaymentGatewayError, get_payment_gateway  # noqa: E402


class FakePaymentGateway:
    def __init__(self, client_secret: str = 'pi_test_secret_123', error: PaymentGatewayError | None = None):
        self.client_secret = client_secret
        self.error = error
        self.calls: list[dict] = []

    def create_payment_intent(self, amount, currency, payment_method_types, metadata=None):
        self.calls.append({
            'amount': amount,
            'currency': currency,
            'payment_method_types': payment_method_types,
        })
        if self.error is not None:
            raise self.error
        return self.client_secret


@pytest.fixture
def db_session() -> Generator:
    # One shared connection so the TestClient threadpool sees the same in-memory database.
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(
        bind=engine,
        tables=[User.__table__, MenuItem.__table__, Review.__table__, CartItem.__table__, Payment.__table__],
    )

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def fake_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def client(db_session, fake_gateway):
    from fastapi.testclient import TestClient

    from bistro.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make_user(email: str, role: UserRole = UserRole.MEMBER, name: str | None = None) -> User:
        user = User(email=email, name=name, role=role.value, profile={})
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(email: str) -> dict[str, str]:
        token = jwt_handler.issue_token({'email': email})
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers

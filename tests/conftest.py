import itertools
import os
from datetime import timedelta

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ecofreight.api.deps import get_verifier
from ecofreight.auth_local import create_access_token
from ecofreight.domain.actors import Actor, Role
from ecofreight.domain.models import Base, Shipment
from ecofreight.infrastructure.db import get_db
from ecofreight.infrastructure.verification import VerificationClient
from ecofreight.main import app
from tests.support import CUSTOMER_ID, DRIVER_ID, FIXED_NOW, MANAGER_ID, VerificationEndpoint

_tracking_numbers = itertools.count(1)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def verification_endpoint():
    return VerificationEndpoint()


@pytest.fixture
def verifier(verification_endpoint):
    return VerificationClient(
        url="http://verifier.test/functions/v1/blockchain-verify",
        api_key="service-key",
        timeout=1.0,
        transport=httpx.MockTransport(verification_endpoint),
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def driver():
    return Actor(user_id=DRIVER_ID, role=Role.DRIVER)


@pytest.fixture
def manager():
    return Actor(user_id=MANAGER_ID, role=Role.MANAGER)


@pytest.fixture
def customer():
    return Actor(user_id=CUSTOMER_ID, role=Role.CUSTOMER)


@pytest.fixture
def make_shipment(db):
    def _make(status="processing", customer_id=CUSTOMER_ID, driver_id=DRIVER_ID, **overrides):
        values = dict(
            tracking_id=f"ECO-T{next(_tracking_numbers):07d}",
            title="Medical Supplies to Toronto",
            origin="New York, USA",
            destination="Toronto, Canada",
            transport_type="truck",
            product_type="Medical Supplies",
            quantity=250,
            weight=1200.0,
            distance_km=500.0,
            carbon_footprint=37.2,
            status=status,
            planned_departure_date=FIXED_NOW - timedelta(days=2),
            estimated_arrival_date=FIXED_NOW + timedelta(days=1),
            actual_arrival_date=FIXED_NOW if status == "delivered" else None,
            customer_id=customer_id,
            assigned_driver_id=driver_id,
        )
        values.update(overrides)
        shipment = Shipment(**values)
        db.add(shipment)
        db.commit()
        return shipment
    return _make


@pytest.fixture
def client(session_factory, verifier):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_verifier] = lambda: verifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id: str, role: Role) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}
    return _headers

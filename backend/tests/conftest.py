"""Shared pytest fixtures for test suite"""
import hashlib
import hmac
import json
import os
import sys
import time
from pathlib import Path
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

TEST_WEBHOOK_SECRET = "whsec_test_secret"

# Must be in place before the application settings are first imported
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["STRIPE_WEBHOOK_SECRET"] = TEST_WEBHOOK_SECRET
os.environ["STRIPE_SECRET_KEY"] = "sk_test_123"
os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"] = ""

from webhook_ledger.main import app
from webhook_ledger.db.session import get_db, get_session_factory
from webhook_ledger.models import Base, WebhookEvent


# SQLite in-memory database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"

# Create test engine with StaticPool for in-memory database
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def sign_payload(payload: bytes, secret: str = TEST_WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header value for ``payload`` (HMAC-SHA256 over "t.payload")"""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode("utf-8") + payload
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def make_event_payload(
    event_id: str = "evt_1",
    event_type: str = "payment_intent.succeeded",
    data_object: Optional[dict] = None
) -> bytes:
    """Provider-style event body, pretty-printed like real deliveries"""
    body = {
        "id": event_id,
        "object": "event",
        "api_version": "2024-06-20",
        "created": 1718000000,
        "type": event_type,
        "data": {"object": data_object or {"id": "pi_123", "object": "payment_intent", "amount": 2000}},
    }
    return json.dumps(body, indent=2).encode("utf-8")


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh SQLite in-memory database session for each test"""
    # Create all tables
    Base.metadata.create_all(bind=test_engine)

    # Create session
    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """FastAPI test client bound to the test database"""

    # Override get_db dependency to use test database
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close session here, handled by fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestSessionLocal

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        # Cleanup - always clear overrides
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def post_webhook(client: TestClient):
    """Deliver a payload to /webhook, signing it unless a header is given"""
    def _post(payload: bytes, signature: Optional[str] = "sign"):
        headers = {"Content-Type": "application/json"}
        if signature == "sign":
            signature = sign_payload(payload)
        if signature is not None:
            headers["Stripe-Signature"] = signature
        return client.post("/webhook", content=payload, headers=headers)
    return _post


def count_rows(db_session: Session, external_event_id: Optional[str] = None) -> int:
    query = db_session.query(WebhookEvent)
    if external_event_id is not None:
        query = query.filter(WebhookEvent.external_event_id == external_event_id)
    return query.count()

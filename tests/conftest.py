"""
Pytest configuration and fixtures for the rent bot.
"""
import json
import os
import tempfile
import uuid
from datetime import datetime, timezone
from typing import Dict, Generator, List, Optional
from unittest.mock import AsyncMock, MagicMock

# Required settings must exist before any rentbot module reads them
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-supabase-key")
os.environ.setdefault("GROQ_API_KEY", "test-groq-key")
os.environ.setdefault("WHATSAPP_ACCESS_TOKEN", "test-whatsapp-token")
os.environ.setdefault("WHATSAPP_PHONE_NUMBER_ID", "1234567890")
os.environ.setdefault("WHATSAPP_VERIFY_TOKEN", "test-verify-token")
os.environ.setdefault("RECEIPT_TMP_DIR", tempfile.mkdtemp(prefix="rentbot-test-"))

import pytest
from fastapi.testclient import TestClient

from rentbot.channel.base import ChannelSession, DisconnectReason, PresenceState
from rentbot.core.config import get_settings
from rentbot.core.dependencies import ServiceContainer, build_container
from rentbot.core.exceptions import DatabaseError
from rentbot.main import create_app
from rentbot.models import Landlord, NewPayment, Payment, PaymentDetails, Tenant
from rentbot.services.database import DatabaseService
from rentbot.services.intent_extractor import IntentExtractor
from rentbot.services.receipt_service import PdfRenderer

LANDLORD_PHONE = "256700111222"
OTHER_LANDLORD_PHONE = "256700999888"


class FakeChannel(ChannelSession):
    """Channel session that records everything it is asked to send."""

    service_name = "fake"

    def __init__(self):
        self.texts: List[Dict] = []
        self.documents: List[Dict] = []
        self.presence: List[Dict] = []
        self.fail_text = False
        self.fail_document = False
        self.disconnect_reasons: List[DisconnectReason] = []
        self.connect_errors: List[Exception] = []
        self.connect_calls = 0
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_errors:
            raise self.connect_errors.pop(0)
        self._connected = True

    async def wait_closed(self) -> DisconnectReason:
        self._connected = False
        if self.disconnect_reasons:
            return self.disconnect_reasons.pop(0)
        return DisconnectReason.CLOSED

    async def send_text(self, to: str, text: str) -> None:
        if self.fail_text:
            raise RuntimeError("send failed")
        self.texts.append({"to": to, "text": text})

    async def send_document(self, to, data, filename, mimetype, caption=None) -> None:
        if self.fail_document:
            raise RuntimeError("document send failed")
        self.documents.append(
            {"to": to, "data": data, "filename": filename, "mimetype": mimetype, "caption": caption}
        )

    async def send_presence(self, to: str, state: PresenceState, message_id: Optional[str] = None) -> None:
        self.presence.append({"to": to, "state": state, "message_id": message_id})

    async def close(self) -> None:
        self._connected = False


class FakeDatabase(DatabaseService):
    """In-memory stand-in for the Supabase tables."""

    def __init__(self):
        self.landlords: List[Dict] = []
        self.properties: List[Dict] = []
        self.tenants: List[Dict] = []
        self.payments: List[Dict] = []
        self.fail: set = set()
        self.healthy = True

    def _check(self, operation: str) -> None:
        if operation in self.fail:
            raise DatabaseError("simulated failure", operation=operation)

    async def test_connection(self) -> bool:
        return self.healthy

    async def health_check(self) -> bool:
        return self.healthy

    async def find_landlord_by_phone(self, phone: str) -> Optional[Landlord]:
        self._check("find_landlord")
        for row in self.landlords:
            if row["phone"] == phone:
                return Landlord.model_validate(row)
        return None

    async def find_tenants(self, landlord_id: str, name: str) -> List[Tenant]:
        self._check("find_tenants")
        owned = {p["id"]: p for p in self.properties if p["landlord_id"] == landlord_id}
        return [
            Tenant.model_validate({**t, "properties": owned[t["property_id"]]})
            for t in self.tenants
            if t["property_id"] in owned and name.lower() in t["name"].lower()
        ]

    async def insert_payment(self, payment: NewPayment) -> Payment:
        self._check("insert_payment")
        row = {"id": str(uuid.uuid4()), **payment.to_row()}
        self.payments.append(row)
        return Payment.model_validate(row)

    async def find_payment_for_period(self, tenant_id: str, period: str) -> Optional[Payment]:
        self._check("find_payment")
        rows = [r for r in self.payments if r["tenant_id"] == tenant_id and r["period"] == period]
        if not rows:
            return None
        return Payment.model_validate(max(rows, key=lambda r: r["recorded_at"]))

    async def get_payment_details(self, payment_id: str) -> Optional[PaymentDetails]:
        self._check("get_payment_details")
        for row in self.payments:
            if row["id"] != payment_id:
                continue
            tenant = next(t for t in self.tenants if t["id"] == row["tenant_id"])
            prop = next(p for p in self.properties if p["id"] == tenant["property_id"])
            landlord = next(l for l in self.landlords if l["id"] == prop["landlord_id"])
            return PaymentDetails.model_validate(
                {
                    **row,
                    "tenants": {
                        "name": tenant["name"],
                        "phone": tenant["phone"],
                        "properties": {"address": prop["address"], "landlords": landlord},
                    },
                }
            )
        return None


class FakePdfRenderer(PdfRenderer):
    """Writes a placeholder PDF instead of launching Chromium."""

    def __init__(self):
        self.rendered: List[str] = []
        self.fail = False

    async def render_to_file(self, html: str, path: str) -> None:
        if self.fail:
            raise RuntimeError("chromium crashed")
        self.rendered.append(html)
        with open(path, "wb") as f:
            f.write(b"%PDF-1.4 test receipt")


def make_completion(content: str) -> MagicMock:
    """Chat completion response carrying ``content``."""
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = content
    return completion


def make_llm_client(payload=None, raw: Optional[str] = None) -> MagicMock:
    """OpenAI client mock whose completions return ``payload`` as JSON."""
    client = MagicMock()
    content = raw if raw is not None else json.dumps(payload)
    client.chat.completions.create = AsyncMock(return_value=make_completion(content))
    return client


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def fake_db() -> FakeDatabase:
    db = FakeDatabase()
    db.landlords = [
        {"id": "landlord-1", "name": "Grace Nakato", "phone": LANDLORD_PHONE, "email": "grace@example.com"},
        {"id": "landlord-2", "name": "Peter Okello", "phone": OTHER_LANDLORD_PHONE, "email": None},
    ]
    db.properties = [
        {"id": "prop-1", "address": "Plot 12, Ntinda Road, Kampala", "landlord_id": "landlord-1"},
        {"id": "prop-2", "address": "Kira Road Flats", "landlord_id": "landlord-2"},
    ]
    db.tenants = [
        {"id": "tenant-kamau", "name": "Kamau Njoroge", "phone": "+256711000001", "property_id": "prop-1"},
        {"id": "tenant-sarah", "name": "Sarah Auma", "phone": "256711000002", "property_id": "prop-1"},
        {"id": "tenant-john", "name": "John Mugisha", "phone": "256711000003", "property_id": "prop-1"},
        {"id": "tenant-johnny", "name": "Johnny Ssali", "phone": "256711000004", "property_id": "prop-1"},
        {"id": "tenant-other", "name": "Kamau Otieno", "phone": "256711000009", "property_id": "prop-2"},
    ]
    return db


@pytest.fixture
def fake_channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def fake_pdf() -> FakePdfRenderer:
    return FakePdfRenderer()


@pytest.fixture
def llm_client() -> MagicMock:
    return make_llm_client({"action": "unknown", "tenant_name": None, "amount": None, "period": None})


@pytest.fixture
def set_intent(llm_client):
    """Set what the extraction service returns for the next calls."""

    def _set(payload: Optional[dict] = None, raw: Optional[str] = None):
        content = raw if raw is not None else json.dumps(payload)
        llm_client.chat.completions.create.return_value = make_completion(content)

    return _set


@pytest.fixture
def container(settings, fake_db, fake_channel, fake_pdf, llm_client) -> ServiceContainer:
    return build_container(
        settings=settings,
        database=fake_db,
        channel=fake_channel,
        extractor=IntentExtractor(client=llm_client),
        pdf_renderer=fake_pdf,
    )


@pytest.fixture
def handler(container):
    return container.message_handler


@pytest.fixture
def landlord_address() -> str:
    return f"{LANDLORD_PHONE}@s.whatsapp.net"


@pytest.fixture
def client(container) -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.

    The channel supervisor is not started; routes use the fake services.
    """
    app = create_app(container=container, supervise=False)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_headers() -> dict:
    """Sample request headers with correlation ID."""
    return {
        "X-Correlation-ID": "test-correlation-123",
        "Content-Type": "application/json",
    }


@pytest.fixture
def api_prefix(settings) -> str:
    """Get the API prefix from settings."""
    return settings.api_prefix


@pytest.fixture
def recorded_at() -> datetime:
    return datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)

"""Shared pytest fixtures."""

import pytest
from starlette.testclient import TestClient

from crisiscommand import realtime
from crisiscommand.audit.store import AuditStore
from crisiscommand.categories.store import CategoryStore
from crisiscommand.chat.store import MessageStore
from crisiscommand.core.models import Location
from crisiscommand.incidents.models import NewIncident
from crisiscommand.incidents.store import AssignmentStore, IncidentStore
from crisiscommand.notifications.store import NotificationStore
from crisiscommand.server import app
from crisiscommand.services.store import ServiceStore
from crisiscommand.units.store import UnitStore
from crisiscommand.users.store import UserStore

ALL_STORES = (
    AuditStore,
    AssignmentStore,
    CategoryStore,
    IncidentStore,
    MessageStore,
    NotificationStore,
    ServiceStore,
    UnitStore,
    UserStore,
)


@pytest.fixture(autouse=True)
def _clear_memory_and_env(monkeypatch):
    """Reset in-memory stores and ensure Cosmos env vars are unset."""
    for store in ALL_STORES:
        store._memory.clear()
    monkeypatch.delenv("COSMOS_ENDPOINT", raising=False)
    monkeypatch.delenv("COSMOS_KEY", raising=False)
    monkeypatch.delenv("COSMOS_DATABASE", raising=False)
    monkeypatch.setattr("crisiscommand.core.cosmos.load_dotenv", lambda: None)
    yield
    for store in ALL_STORES:
        store._memory.clear()


@pytest.fixture(autouse=True)
def _fresh_realtime(monkeypatch):
    """Give every test its own connection manager and topic hub."""
    manager = realtime.ConnectionManager(presence_ttl=60)
    hub = realtime.TopicHub()
    monkeypatch.setattr(realtime, "manager", manager)
    monkeypatch.setattr(realtime, "hub", hub)
    return manager, hub


@pytest.fixture
def accra_location() -> Location:
    return Location(
        latitude=5.6037,
        longitude=-0.187,
        address="Independence Ave, Accra",
        ghana_post_gps="GA-183-8164",
    )


@pytest.fixture
def make_report(accra_location):
    """Factory for incident reports with sensible defaults."""

    def _make(**overrides) -> NewIncident:
        defaults = {
            "reporter_id": "citizen-1",
            "service_id": "svc-police",
            "type": "police",
            "category": "robbery",
            "priority": "high",
            "title": "Armed robbery at market",
            "description": "Two men with a weapon near the east gate",
            "location": accra_location,
            "service_number": "191",
        }
        defaults.update(overrides)
        return NewIncident(**defaults)

    return _make


class FakeWebSocket:
    """Records JSON sent to it; optionally fails on send."""

    def __init__(self, *, fail: bool = False):
        self.accepted = False
        self.sent: list[dict] = []
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


@pytest.fixture
def fake_socket():
    """Factory for fake WebSocket connections."""
    return FakeWebSocket


@pytest.fixture
def client():
    """Test client with the lifespan run (services seeded)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def report_body() -> dict:
    """JSON body of an incident report, as a client sends it."""
    return {
        "serviceId": "svc-fire",
        "type": "fire",
        "category": "building_fire",
        "priority": "critical",
        "title": "Kitchen fire in flat",
        "location": {
            "latitude": 5.556,
            "longitude": -0.1969,
            "address": "Osu Oxford St, Accra",
            "ghanaPostGPS": "GA-016-5757",
        },
        "serviceNumber": "192",
    }

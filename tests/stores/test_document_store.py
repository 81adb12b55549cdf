"""Tests for the generic DocumentStore in in-memory mode."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError

from crisiscommand.core.models import utcnow
from crisiscommand.incidents.models import Incident
from crisiscommand.incidents.store import IncidentStore
from crisiscommand.services.models import EmergencyService
from crisiscommand.services.store import ServiceStore
from crisiscommand.users.store import UserStore


def _incident(accra_location, **overrides) -> Incident:
    defaults = {
        "service_id": "svc-fire",
        "type": "fire",
        "category": "building_fire",
        "title": "Smoke from warehouse",
        "location": accra_location,
        "service_number": "192",
    }
    defaults.update(overrides)
    return Incident(**defaults)


class TestCrud:
    async def test_create_and_get_back(self, accra_location):
        doc = _incident(accra_location)
        async with IncidentStore() as store:
            await store.create(doc)
            fetched = await store.get(doc.id)
        assert fetched is not None
        assert fetched.title == "Smoke from warehouse"
        assert fetched.location.ghana_post_gps == "GA-183-8164"

    async def test_get_nonexistent_returns_none(self):
        async with IncidentStore() as store:
            assert await store.get("missing") is None

    async def test_update_merges_changes(self, accra_location):
        doc = _incident(accra_location)
        async with IncidentStore() as store:
            await store.create(doc)
            updated = await store.update(doc, {"priority": "critical"})
            fetched = await store.get(doc.id)
        assert updated.priority == "critical"
        assert fetched.priority == "critical"
        assert fetched.title == doc.title

    async def test_update_touches_updated_at(self, accra_location):
        old = utcnow() - timedelta(hours=1)
        doc = _incident(accra_location, updated_at=old)
        async with IncidentStore() as store:
            await store.create(doc)
            updated = await store.update(doc, {"priority": "low"})
        assert updated.updated_at > old

    async def test_update_rejects_unknown_status(self, accra_location):
        doc = _incident(accra_location)
        async with IncidentStore() as store:
            await store.create(doc)
            with pytest.raises(ValidationError):
                await store.update(doc, {"status": "teleported"})
            fetched = await store.get(doc.id)
        assert fetched.status == "new"

    async def test_patch_missing_returns_none(self):
        async with IncidentStore() as store:
            assert await store.patch("missing", {"priority": "low"}) is None

    async def test_delete(self, accra_location):
        doc = _incident(accra_location)
        async with IncidentStore() as store:
            await store.create(doc)
            assert await store.delete(doc.id) is True
            assert await store.delete(doc.id) is False
            assert await store.get(doc.id) is None


class TestQuery:
    async def test_equality_filter(self, accra_location):
        async with IncidentStore() as store:
            await store.create(_incident(accra_location, service_id="a"))
            await store.create(_incident(accra_location, service_id="b"))
            results = await store.query({"service_id": "a"})
        assert [r.service_id for r in results] == ["a"]

    async def test_membership_filter(self, accra_location):
        async with IncidentStore() as store:
            await store.create(_incident(accra_location, status="new"))
            await store.create(_incident(accra_location, status="on_scene"))
            await store.create(_incident(accra_location, status="closed"))
            results = await store.query({"status": ("new", "on_scene")})
        assert sorted(r.status for r in results) == ["new", "on_scene"]

    async def test_order_and_limit(self, accra_location):
        now = utcnow()
        async with IncidentStore() as store:
            for minutes in (5, 1, 3):
                await store.create(
                    _incident(
                        accra_location,
                        title=f"{minutes}m ago",
                        created_at=now - timedelta(minutes=minutes),
                    )
                )
            newest = await store.query(order_by="created_at", descending=True, max_items=2)
        assert [i.title for i in newest] == ["1m ago", "3m ago"]

    async def test_missing_sort_field_goes_last(self, accra_location):
        now = utcnow()
        async with IncidentStore() as store:
            await store.create(_incident(accra_location, title="assigned", assigned_at=now))
            await store.create(_incident(accra_location, title="unassigned"))
            ascending = await store.query(order_by="assigned_at")
            descending = await store.query(order_by="assigned_at", descending=True)
        assert ascending[-1].title == "unassigned"
        assert descending[-1].title == "unassigned"


class TestIsolation:
    async def test_each_store_has_its_own_memory(self):
        async with ServiceStore() as store:
            await store.create(EmergencyService(name="Police", code="POLICE"))
        assert ServiceStore._memory
        assert not UserStore._memory
        assert not IncidentStore._memory


class TestCosmosMode:
    async def test_key_auth_builds_sql_query(self, monkeypatch):
        monkeypatch.setenv("COSMOS_ENDPOINT", "https://example.documents.azure.com")
        monkeypatch.setenv("COSMOS_KEY", "secret")

        async def _items(*args, **kwargs):
            for item in ():
                yield item

        container = MagicMock()
        container.query_items = MagicMock(side_effect=_items)
        client = MagicMock()
        client.get_database_client.return_value.get_container_client.return_value = container
        client.close = AsyncMock()

        with patch("azure.cosmos.aio.CosmosClient", return_value=client) as client_cls:
            async with IncidentStore() as store:
                results = await store.query(
                    {"service_id": "svc-1", "status": ("new", "assigned")},
                    order_by="created_at",
                    descending=True,
                )

        assert results == []
        client_cls.assert_called_once_with(
            "https://example.documents.azure.com", credential="secret"
        )
        kwargs = container.query_items.call_args.kwargs
        assert kwargs["query"] == (
            "SELECT * FROM c WHERE c.service_id = @p0 AND ARRAY_CONTAINS(@p1, c.status)"
            " ORDER BY c.created_at DESC"
        )
        assert kwargs["parameters"] == [
            {"name": "@p0", "value": "svc-1"},
            {"name": "@p1", "value": ["new", "assigned"]},
        ]
        client.close.assert_awaited_once()

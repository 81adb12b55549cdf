"""Tests for the WebSocket connection manager and topic hub."""

from crisiscommand.realtime import (
    ANONYMOUS_PREFIX,
    ConnectionManager,
    TopicHub,
    incidents_topic,
    messages_topic,
    notifications_topic,
)


class TestTopics:
    def test_topic_names(self):
        assert incidents_topic("svc") == "incidents:svc"
        assert messages_topic("inc") == "messages:inc"
        assert notifications_topic("u1") == "notifications:u1"


class TestConnectionManager:
    async def test_connect_accepts_and_tracks_presence(self, fake_socket):
        manager = ConnectionManager()
        ws = fake_socket()
        key = await manager.connect(ws, "u1")
        assert key == "u1"
        assert ws.accepted
        assert manager.is_connected("u1")
        assert "u1" in manager.online_users()

    async def test_anonymous_connections_get_unique_keys(self, fake_socket):
        manager = ConnectionManager()
        first = await manager.connect(fake_socket())
        second = await manager.connect(fake_socket())
        assert first.startswith(ANONYMOUS_PREFIX)
        assert first != second
        assert manager.connection_count == 2
        assert manager.online_users() == {}

    async def test_reconnect_replaces_socket(self, fake_socket):
        manager = ConnectionManager()
        old, new = fake_socket(), fake_socket()
        await manager.connect(old, "u1")
        await manager.connect(new, "u1")

        # The stale socket closing must not drop the new one
        manager.disconnect("u1", old)
        assert manager.is_connected("u1")

        await manager.send_to("u1", {"type": "ping"})
        assert old.sent == []
        assert new.sent == [{"type": "ping"}]

    async def test_send_to_unknown_user(self):
        assert await ConnectionManager().send_to("ghost", {"type": "x"}) is False

    async def test_broadcast_drops_dead_sockets(self, fake_socket):
        manager = ConnectionManager()
        alive, dead = fake_socket(), fake_socket(fail=True)
        await manager.connect(alive, "alive")
        await manager.connect(dead, "dead")

        delivered = await manager.broadcast({"type": "new_message"})

        assert delivered == 1
        assert manager.is_connected("alive")
        assert not manager.is_connected("dead")
        assert "dead" not in manager.online_users()

    async def test_disconnect_unknown_is_noop(self):
        ConnectionManager().disconnect("nobody")


class TestTopicHub:
    async def test_publish_without_subscribers_skips_loader(self):
        hub = TopicHub()
        calls = []

        async def load():
            calls.append(1)
            return []

        assert await hub.publish("messages:x", load) == 0
        assert calls == []

    async def test_sync_and_async_callbacks(self):
        hub = TopicHub()
        received = []

        async def on_async(snapshot):
            received.append(("async", snapshot))

        hub.subscribe("t", lambda snapshot: received.append(("sync", snapshot)))
        hub.subscribe("t", on_async)

        async def load():
            return [{"id": "1"}]

        assert await hub.publish("t", load) == 2
        assert received == [("sync", [{"id": "1"}]), ("async", [{"id": "1"}])]

    async def test_unsubscribe(self):
        hub = TopicHub()
        unsubscribe = hub.subscribe("t", lambda s: None)
        assert hub.has_subscribers("t")
        unsubscribe()
        unsubscribe()
        assert not hub.has_subscribers("t")

    async def test_failing_callback_does_not_block_others(self):
        hub = TopicHub()
        received = []

        def broken(snapshot):
            raise ValueError("boom")

        hub.subscribe("t", broken)
        hub.subscribe("t", received.append)

        async def load():
            return [{"id": "1"}]

        assert await hub.publish("t", load) == 1
        assert received == [[{"id": "1"}]]

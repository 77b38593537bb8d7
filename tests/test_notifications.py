"""Tests for realtime rooms and the notification gateway."""

import asyncio
from datetime import timedelta

from fastapi import BackgroundTasks
from sqlmodel import Session, select

from app.models import Notification
from app.notifications.gateway import BackgroundNotifier, NotificationGateway
from app.notifications.hub import RealtimeHub, user_room


class FakeSocket:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(message)


class TestRealtimeHub:
    def test_publish_to_room(self):
        hub = RealtimeHub()
        alice, admin = FakeSocket(), FakeSocket()
        hub.join(user_room("alice"), alice)
        hub.join("admin", admin)

        delivered = asyncio.run(hub.publish("admin", "stats:updated", {"action": "approved"}))

        assert delivered == 1
        assert admin.sent == [{"event": "stats:updated", "data": {"action": "approved"}}]
        assert alice.sent == []

    def test_publish_to_empty_room(self):
        assert asyncio.run(RealtimeHub().publish("user:nobody", "x", {})) == 0

    def test_dead_socket_dropped(self):
        hub = RealtimeHub()
        hub.join("admin", FakeSocket(fail=True))

        assert asyncio.run(hub.publish("admin", "stats:updated", {})) == 0
        assert hub.has_listeners("admin") is False

    def test_leave(self):
        hub = RealtimeHub()
        socket = FakeSocket()
        hub.join("admin", socket)
        hub.leave("admin", socket)
        hub.leave("admin", socket)

        assert hub.has_listeners("admin") is False


class TestNotificationGateway:
    def test_notify_persists_and_pushes(self, engine, session: Session):
        hub = RealtimeHub()
        socket = FakeSocket()
        hub.join(user_room("alice"), socket)
        gateway = NotificationGateway(engine, hub)

        asyncio.run(gateway.notify("alice", "approval", "Registration Approved", "All set", {"url": "/workshops"}))

        stored = session.exec(select(Notification)).one()
        assert stored.subject_id == "alice"
        assert stored.meta == {"url": "/workshops"}
        assert stored.delivered_at is not None
        assert socket.sent[0]["event"] == "notification:new"
        assert socket.sent[0]["data"]["title"] == "Registration Approved"

    def test_offline_subject_redelivered_later(self, engine, session: Session):
        hub = RealtimeHub()
        gateway = NotificationGateway(engine, hub)
        asyncio.run(gateway.notify("alice", "rejection", "Registration Rejected", "Bad proof"))

        assert session.exec(select(Notification)).one().delivered_at is None

        socket = FakeSocket()
        hub.join(user_room("alice"), socket)
        delivered = asyncio.run(gateway.redeliver_pending(timedelta(hours=1)))

        assert delivered == 1
        assert len(socket.sent) == 1
        session.expire_all()
        assert session.exec(select(Notification)).one().delivered_at is not None
        assert asyncio.run(gateway.redeliver_pending(timedelta(hours=1))) == 0

    def test_broadcast_failure_swallowed(self, engine):
        class BrokenHub(RealtimeHub):
            async def publish(self, room, event, payload):
                raise RuntimeError("boom")

        gateway = NotificationGateway(engine, BrokenHub())

        assert asyncio.run(gateway.broadcast("admin", "stats:updated", {})) == 0


class TestBackgroundNotifier:
    def test_defers_delivery(self, engine):
        tasks = BackgroundTasks()
        gateway = NotificationGateway(engine, RealtimeHub())
        notifier = BackgroundNotifier(tasks, gateway)

        notifier.notify("alice", "approval", "t", "b", {})
        notifier.broadcast("admin", "stats:updated", {})

        assert [t.func for t in tasks.tasks] == [gateway.notify, gateway.broadcast]

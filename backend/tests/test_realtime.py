import asyncio
import uuid

import pytest
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from circle.authentication.services import issue_jwt_for_user
from circle.config.jwt_auth_middleware import JwtAuthMiddlewareStack
from circle.events.types import FRIEND_REQUEST, DomainEvent
from circle.realtime.consumers import NotificationConsumer
from circle.realtime.dispatcher import RealtimeDispatcher, room_name
from circle.realtime.handlers import NotificationPusher
from circle.realtime.registry import LocalConnectionRegistry, RedisConnectionRegistry
from circle.realtime.routing import websocket_urlpatterns
from circle.users.models import User


def unsaved_user(name="zoe"):
    return User(id=uuid.uuid4(), username=name, email=f"{name}@example.com")


class ScopeUser:
    """테스트용: DB / JWT 없이 scope['user'] 를 바로 넣는다."""

    def __init__(self, inner, user):
        self.inner = inner
        self.user = user

    async def __call__(self, scope, receive, send):
        scope["user"] = self.user
        return await self.inner(scope, receive, send)


def app_for(user, dispatcher):
    return ScopeUser(NotificationConsumer.as_asgi(dispatcher=dispatcher), user)


@pytest.fixture
def dispatcher():
    return RealtimeDispatcher(LocalConnectionRegistry(), channel_layer=get_channel_layer())


class TestLocalRegistry:
    def test_bind_moves_connection(self):
        registry = LocalConnectionRegistry()
        assert registry.bind("c1", "u1") is None
        assert registry.bind("c1", "u2") == "u1"
        assert registry.connections("u1") == frozenset()
        assert registry.connections("u2") == {"c1"}

    def test_unbind(self):
        registry = LocalConnectionRegistry()
        registry.bind("c1", "u1")
        registry.bind("c2", "u1")
        assert registry.unbind("c1") == "u1"
        assert registry.unbind("c1") is None
        assert registry.user_of("c2") == "u1"
        assert registry.connections("u1") == {"c2"}


class FakeRedis:
    def __init__(self):
        self.strings = {}
        self.sets = {}

    def getset(self, key, value):
        old = self.strings.get(key)
        self.strings[key] = value
        return old

    def getdel(self, key):
        return self.strings.pop(key, None)

    def get(self, key):
        return self.strings.get(key)

    def sadd(self, key, member):
        self.sets.setdefault(key, set()).add(member)

    def srem(self, key, member):
        self.sets.get(key, set()).discard(member)

    def smembers(self, key):
        return set(self.sets.get(key, set()))

    def expire(self, key, ttl):
        return True

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, client):
        self.client = client
        self.calls = []

    def __getattr__(self, name):
        def queue(*args):
            self.calls.append((name, args))

        return queue

    def execute(self):
        return [getattr(self.client, name)(*args) for name, args in self.calls]


class TestRedisRegistry:
    def test_bind_unbind(self):
        registry = RedisConnectionRegistry(client=FakeRedis())
        registry.bind("c1", "u1")
        assert registry.bind("c1", "u2") == "u1"
        assert registry.connections("u1") == frozenset()
        assert registry.connections("u2") == {"c1"}
        assert registry.unbind("c1") == "u2"
        assert registry.user_of("c1") is None
        assert registry.connections("u2") == frozenset()


class TestDispatcher:
    @pytest.mark.asyncio
    async def test_push_without_connection_is_noop(self, dispatcher):
        assert await dispatcher.push("nobody", "notification", {}) is True

    @pytest.mark.asyncio
    async def test_push_reaches_room(self, dispatcher):
        layer = dispatcher.channel_layer
        channel = await layer.new_channel()
        await dispatcher.join(channel, "u1")

        assert await dispatcher.push("u1", "notification", {"n": 1}) is True
        message = await layer.receive(channel)
        assert message == {"type": "realtime.event", "event": "notification", "payload": {"n": 1}}

        await dispatcher.leave(channel)
        await dispatcher.push("u1", "notification", {})
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(layer.receive(channel), timeout=0.2)

    @pytest.mark.asyncio
    async def test_push_from_another_worker(self):
        # worker 마다 registry 는 따로, channel layer 는 공유
        layer = get_channel_layer()
        joined_here = RealtimeDispatcher(LocalConnectionRegistry(), channel_layer=layer)
        other_worker = RealtimeDispatcher(LocalConnectionRegistry(), channel_layer=layer)
        channel = await layer.new_channel()
        await joined_here.join(channel, "u7")

        assert await other_worker.push("u7", "notification", {"n": 7}) is True

        message = await asyncio.wait_for(layer.receive(channel), timeout=1)
        assert message["payload"] == {"n": 7}
        await joined_here.leave(channel)

    @pytest.mark.asyncio
    async def test_layer_failure_is_logged(self, caplog):
        class BrokenLayer:
            async def group_send(self, group, message):
                raise ConnectionError("redis down")

        dispatcher = RealtimeDispatcher(LocalConnectionRegistry(), channel_layer=BrokenLayer())

        assert await dispatcher.push("u1", "notification", {}) is False
        assert "push notification to u1 failed" in caplog.text

    def test_room_name(self):
        assert room_name("abc") == "user.abc"


class TestNotificationPusher:
    @pytest.mark.django_db
    def test_sends_sender_profile(self, alice, bob):
        pushed = []

        class Recorder:
            def push_to_user(self, user_id, event, payload):
                pushed.append((user_id, event, payload))

        NotificationPusher(Recorder())(
            DomainEvent(FRIEND_REQUEST, from_id=alice.id, to_id=bob.id)
        )

        assert pushed == [
            (
                bob.id,
                "notification",
                {
                    "type": FRIEND_REQUEST,
                    "from": {
                        "id": str(alice.id),
                        "username": "alice",
                        "email": "alice@example.com",
                    },
                },
            )
        ]


class TestNotificationConsumer:
    # consumer dispatch 가 DB 연결 정리를 하므로 DB 접근 허용 필요
    pytestmark = pytest.mark.django_db

    @pytest.mark.asyncio
    async def test_rejects_anonymous(self, dispatcher):
        communicator = WebsocketCommunicator(app_for(AnonymousUser(), dispatcher), "/ws/notifications/")
        connected, code = await communicator.connect()
        assert not connected
        assert code == 4401

    @pytest.mark.asyncio
    async def test_join_and_receive_push(self, dispatcher):
        user = unsaved_user()
        communicator = WebsocketCommunicator(app_for(user, dispatcher), "/ws/notifications/")
        connected, _ = await communicator.connect()
        assert connected

        await communicator.send_json_to({"type": "join", "userId": str(user.id)})
        assert await communicator.receive_json_from() == {
            "type": "joined",
            "payload": {"userId": str(user.id)},
        }

        await dispatcher.push(user.id, "notification", {"type": "friend_request"})
        assert await communicator.receive_json_from() == {
            "type": "notification",
            "payload": {"type": "friend_request"},
        }

        await communicator.disconnect()
        assert dispatcher.registry.connections(str(user.id)) == frozenset()

    @pytest.mark.asyncio
    async def test_cannot_join_other_room(self, dispatcher):
        user = unsaved_user()
        communicator = WebsocketCommunicator(app_for(user, dispatcher), "/ws/notifications/")
        await communicator.connect()

        await communicator.send_json_to({"type": "join", "userId": str(uuid.uuid4())})
        response = await communicator.receive_json_from()

        assert response["type"] == "error"
        assert response["payload"]["code"] == "FORBIDDEN"
        assert dispatcher.registry.connections(str(user.id)) == frozenset()
        await communicator.disconnect()

    @pytest.mark.asyncio
    async def test_join_token_for_another_user(self, dispatcher, monkeypatch):
        owner, intruder = unsaved_user("owen"), unsaved_user("ivy")

        async def token_user(token):
            return intruder

        monkeypatch.setattr("circle.realtime.consumers.get_user_from_token", token_user)
        communicator = WebsocketCommunicator(app_for(owner, dispatcher), "/ws/notifications/")
        await communicator.connect()

        await communicator.send_json_to({"type": "join", "token": "ivy-token"})
        response = await communicator.receive_json_from()

        assert response == {
            "type": "error",
            "payload": {"code": "FORBIDDEN", "message": "token does not match this connection"},
        }
        assert dispatcher.registry.connections(str(intruder.id)) == frozenset()
        assert dispatcher.registry.connections(str(owner.id)) == frozenset()
        await communicator.disconnect()

    @pytest.mark.asyncio
    async def test_relay_requires_join(self, dispatcher):
        communicator = WebsocketCommunicator(app_for(unsaved_user(), dispatcher), "/ws/notifications/")
        await communicator.connect()

        await communicator.send_json_to({"type": "message", "receiverId": "x"})
        response = await communicator.receive_json_from()

        assert response["payload"]["code"] == "NOT_JOINED"
        await communicator.disconnect()

    @pytest.mark.asyncio
    async def test_relay_message_between_users(self, dispatcher):
        sender, receiver = unsaved_user("sam"), unsaved_user("rae")
        a = WebsocketCommunicator(app_for(sender, dispatcher), "/ws/notifications/")
        b = WebsocketCommunicator(app_for(receiver, dispatcher), "/ws/notifications/")
        await a.connect()
        await b.connect()
        for comm in (a, b):
            await comm.send_json_to({"type": "join"})
            assert (await comm.receive_json_from())["type"] == "joined"

        await a.send_json_to(
            {"type": "message", "receiverId": str(receiver.id), "content": "yo"}
        )
        frame = await b.receive_json_from()

        assert frame == {
            "type": "receive_message",
            "payload": {
                "receiverId": str(receiver.id),
                "content": "yo",
                "senderId": str(sender.id),
            },
        }
        await a.disconnect()
        await b.disconnect()

    @pytest.mark.asyncio
    async def test_unknown_type(self, dispatcher):
        communicator = WebsocketCommunicator(app_for(unsaved_user(), dispatcher), "/ws/notifications/")
        await communicator.connect()

        await communicator.send_json_to({"type": "dance"})
        response = await communicator.receive_json_from()

        assert response["payload"]["code"] == "UNKNOWN_TYPE"
        await communicator.disconnect()


class TestJwtHandshake:
    @pytest.mark.asyncio
    @pytest.mark.django_db(transaction=True)
    async def test_token_in_query_string(self):
        user = await database_sync_to_async(User.objects.create_user)(
            email="ws@example.com", username="ws", password="secret123"
        )
        token = await database_sync_to_async(issue_jwt_for_user)(user)
        app = JwtAuthMiddlewareStack(URLRouter(websocket_urlpatterns))

        communicator = WebsocketCommunicator(app, f"/ws/notifications/?token={token}")
        connected, _ = await communicator.connect()
        assert connected

        await communicator.send_json_to({"type": "join", "token": token})
        assert await communicator.receive_json_from() == {
            "type": "joined",
            "payload": {"userId": str(user.id)},
        }
        await communicator.disconnect()

    @pytest.mark.asyncio
    @pytest.mark.django_db
    async def test_bad_token_is_refused(self):
        app = JwtAuthMiddlewareStack(URLRouter(websocket_urlpatterns))
        communicator = WebsocketCommunicator(app, "/ws/notifications/?token=garbage")
        connected, code = await communicator.connect()
        assert not connected
        assert code == 4401


class TestFriendRequestPush:
    @pytest.mark.asyncio
    @pytest.mark.django_db(transaction=True)
    async def test_recipient_gets_notification_frame(self):
        from circle.friends.apps import get_friendship_service

        create = database_sync_to_async(User.objects.create_user)
        amy = await create(email="amy@example.com", username="amy", password="secret123")
        ben = await create(email="ben@example.com", username="ben", password="secret123")

        communicator = WebsocketCommunicator(
            ScopeUser(NotificationConsumer.as_asgi(), ben), "/ws/notifications/"
        )
        await communicator.connect()
        await communicator.send_json_to({"type": "join"})
        assert (await communicator.receive_json_from())["type"] == "joined"

        await database_sync_to_async(get_friendship_service().send_request)(amy.id, ben.id)

        frame = await communicator.receive_json_from()
        assert frame["type"] == "notification"
        assert frame["payload"]["type"] == "friend_request"
        assert frame["payload"]["from"] == {
            "id": str(amy.id),
            "username": "amy",
            "email": "amy@example.com",
        }
        await communicator.disconnect()

# circle/realtime/registry.py
"""
connection -> user_id 소유 관계와 user_id -> {connection} room 멤버십.

connection 하나는 room 하나에만 속한다. 다른 user 로 bind 하면 이전 room 에서
빠진다.
"""
import threading
from collections import defaultdict
from typing import FrozenSet, Optional

from circle.common.redis_client import get_redis

CONN_KEY = "rt:conn:{connection}"
ROOM_KEY = "rt:room:{user_id}"


class LocalConnectionRegistry:
    """Single process. Safe to use from the event loop and worker threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self._owner = {}
        self._rooms = defaultdict(set)

    def bind(self, connection: str, user_id: str) -> Optional[str]:
        with self._lock:
            previous = self._owner.get(connection)
            if previous is not None and previous != user_id:
                self._discard(previous, connection)
            self._owner[connection] = user_id
            self._rooms[user_id].add(connection)
            return previous

    def unbind(self, connection: str) -> Optional[str]:
        with self._lock:
            user_id = self._owner.pop(connection, None)
            if user_id is not None:
                self._discard(user_id, connection)
            return user_id

    def user_of(self, connection: str) -> Optional[str]:
        with self._lock:
            return self._owner.get(connection)

    def connections(self, user_id: str) -> FrozenSet[str]:
        # 복사본 반환: 순회 중에 join/leave 가 일어나도 안전
        with self._lock:
            return frozenset(self._rooms.get(user_id, ()))

    def _discard(self, user_id, connection):
        room = self._rooms.get(user_id)
        if room is None:
            return
        room.discard(connection)
        if not room:
            del self._rooms[user_id]


class RedisConnectionRegistry:
    """Shared by every ASGI worker process through Redis."""

    def __init__(self, client=None, ttl_sec: int = 60 * 60 * 24):
        self._client = client
        self.ttl_sec = ttl_sec

    @property
    def client(self):
        return self._client or get_redis()

    def bind(self, connection: str, user_id: str) -> Optional[str]:
        r = self.client
        previous = r.getset(CONN_KEY.format(connection=connection), user_id)
        pipe = r.pipeline()
        if previous is not None and previous != user_id:
            pipe.srem(ROOM_KEY.format(user_id=previous), connection)
        room_key = ROOM_KEY.format(user_id=user_id)
        pipe.sadd(room_key, connection)
        pipe.expire(CONN_KEY.format(connection=connection), self.ttl_sec)
        pipe.expire(room_key, self.ttl_sec)
        pipe.execute()
        return previous

    def unbind(self, connection: str) -> Optional[str]:
        r = self.client
        user_id = r.getdel(CONN_KEY.format(connection=connection))
        if user_id is not None:
            r.srem(ROOM_KEY.format(user_id=user_id), connection)
        return user_id

    def user_of(self, connection: str) -> Optional[str]:
        return self.client.get(CONN_KEY.format(connection=connection))

    def connections(self, user_id: str) -> FrozenSet[str]:
        return frozenset(self.client.smembers(ROOM_KEY.format(user_id=user_id)))


def build_registry(kind: str):
    if kind == "redis":
        return RedisConnectionRegistry()
    if kind == "local":
        return LocalConnectionRegistry()
    raise ValueError(f"unknown REALTIME_REGISTRY: {kind}")

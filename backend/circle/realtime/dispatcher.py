# circle/realtime/dispatcher.py
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

EVENT_MESSAGE_TYPE = "realtime.event"  # handler: NotificationConsumer.realtime_event


def room_name(user_id) -> str:
    return f"user.{user_id}"


class RealtimeDispatcher:
    """
    user_id 별 room 으로 이벤트 push.

    push 는 best effort: 연결이 없으면 조용히 no-op, 큐잉/재시도 없음.
    room 멤버 여부는 channel layer 가 판단한다. registry 는 프로세스마다 따로라서
    (local) 다른 worker 에 붙은 연결을 모른다.
    영구 보관은 NotificationSink 쪽 책임.
    """

    def __init__(self, registry, channel_layer=None):
        self.registry = registry
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    async def join(self, connection: str, user_id) -> None:
        user_id = str(user_id)
        previous = self.registry.bind(connection, user_id)
        if previous is not None and previous != user_id:
            await self.channel_layer.group_discard(room_name(previous), connection)
            logger.info("connection %s moved from %s to %s", connection, previous, user_id)
        await self.channel_layer.group_add(room_name(user_id), connection)

    async def leave(self, connection: str) -> None:
        user_id = self.registry.unbind(connection)
        if user_id is None:
            return
        try:
            await self.channel_layer.group_discard(room_name(user_id), connection)
        except Exception:
            logger.exception("group_discard failed for %s", connection)

    async def push(self, user_id, event: str, payload: dict) -> bool:
        """False only when the channel layer refused the message."""
        user_id = str(user_id)
        try:
            await self.channel_layer.group_send(
                room_name(user_id),
                {"type": EVENT_MESSAGE_TYPE, "event": event, "payload": payload},
            )
        except Exception:
            logger.exception("push %s to %s failed", event, user_id)
            return False
        logger.debug("pushed %s to %s", event, room_name(user_id))
        return True

    def push_to_user(self, user_id, event: str, payload: dict) -> bool:
        """Sync entry point for views and event bus handlers."""
        return async_to_sync(self.push)(user_id, event, payload)

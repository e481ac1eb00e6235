# circle/realtime/consumers.py
import logging

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from circle.config.jwt_auth_middleware import get_user_from_token

logger = logging.getLogger(__name__)


class NotificationConsumer(AsyncJsonWebsocketConsumer):
    """
    WS Protocol
      - URL: ws://<host>/ws/notifications/?token=<jwt>
      - client -> server
        {"type": "join", "userId": "<uuid>", "token": "<jwt, optional>"}
        {"type": "leave"}
        {"type": "message", "receiverId": "<uuid>", ...}
        {"type": "notification", "userId": "<uuid>", ...}
      - server -> client
        {"type": "joined" | "left" | "error" | <event name>, "payload": {...}}

    join 은 클라가 보낸 userId 를 그대로 믿지 않는다. token (없으면 연결 시
    인증된 유저) 으로 다시 확인하고, 그 유저의 room 에만 넣는다.
    """

    def __init__(self, *args, dispatcher=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.dispatcher = dispatcher
        self.joined_user_id = None

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            # 4401 Unauthorized (앱에서 처리하기 쉬움)
            await self.close(code=4401)
            return

        if self.dispatcher is None:
            from circle.events import get_dispatcher

            self.dispatcher = get_dispatcher()

        await self.accept()

    async def disconnect(self, close_code):
        # connect 실패한 케이스 방어
        if self.dispatcher is None:
            return
        await self.dispatcher.leave(self.channel_name)
        self.joined_user_id = None

    async def receive_json(self, content, **kwargs):
        if not isinstance(content, dict):
            await self._error("VALIDATION_ERROR", "frame must be a JSON object")
            return

        msg_type = content.get("type")
        if msg_type == "join":
            await self._join(content)
        elif msg_type == "leave":
            await self.dispatcher.leave(self.channel_name)
            self.joined_user_id = None
            await self.send_json({"type": "left", "payload": {}})
        elif msg_type == "message":
            await self._relay(content, "receiverId", "receive_message")
        elif msg_type == "notification":
            await self._relay(content, "userId", "receive_notification")
        else:
            await self._error("UNKNOWN_TYPE", f"unknown type: {msg_type}")

    # ---- group handlers ----

    async def realtime_event(self, event):
        await self.send_json(
            {"type": event.get("event"), "payload": event.get("payload") or {}}
        )

    # ---- helpers ----

    async def _join(self, content):
        token = content.get("token")
        user = await get_user_from_token(token) if token else self.scope.get("user")
        if user is None or not user.is_authenticated:
            await self._error("UNAUTHORIZED", "invalid token")
            return

        # 연결은 connect 시점의 유저 것. frame token 으로 다른 유저가 될 수 없음
        scope_user = self.scope.get("user")
        if scope_user is not None and scope_user.is_authenticated and scope_user.pk != user.pk:
            logger.warning(
                "connection %s (user %s) sent a join token for user %s",
                self.channel_name,
                scope_user.pk,
                user.pk,
            )
            await self._error("FORBIDDEN", "token does not match this connection")
            return

        user_id = str(user.pk)
        requested = content.get("userId")
        if requested is not None and str(requested) != user_id:
            logger.warning(
                "connection %s (user %s) tried to join room %s",
                self.channel_name,
                user_id,
                requested,
            )
            await self._error("FORBIDDEN", "cannot join another user's room")
            return

        await self.dispatcher.join(self.channel_name, user_id)
        self.joined_user_id = user_id
        await self.send_json({"type": "joined", "payload": {"userId": user_id}})

    async def _relay(self, content, target_key: str, event: str):
        if self.joined_user_id is None:
            await self._error("NOT_JOINED", "join first")
            return

        target = content.get(target_key)
        if not target:
            logger.info("relay %s without %s", event, target_key)
            await self._error("VALIDATION_ERROR", f"{target_key} is required")
            return

        payload = {k: v for k, v in content.items() if k not in ("type", "token")}
        payload["senderId"] = self.joined_user_id
        await self.dispatcher.push(target, event, payload)

    async def _error(self, code: str, message: str):
        await self.send_json(
            {"type": "error", "payload": {"code": code, "message": message}}
        )

# circle/events/apps.py
import functools
import logging

from django.apps import AppConfig
from django.conf import settings
from django.db import close_old_connections

logger = logging.getLogger(__name__)


def _with_db_cleanup(handler):
    """bus worker thread 에서 도는 handler 용: 끊긴/오래된 DB 연결 정리."""

    @functools.wraps(handler)
    def wrapper(payload):
        close_old_connections()
        try:
            return handler(payload)
        finally:
            close_old_connections()

    return wrapper


class EventsConfig(AppConfig):
    """
    Composition root: event bus, notification sink, realtime dispatcher 를
    만들고 구독 관계를 연결한다. (프로세스 시작 시 1회)
    """

    name = "circle.events"
    label = "events"

    bus = None
    sink = None
    dispatcher = None

    def ready(self):
        from circle.events.bus import EventBus
        from circle.events.types import FRIEND_REQUEST, MESSAGE, REQUEST_ACCEPTED
        from circle.notifications.sink import NotificationSink
        from circle.realtime.dispatcher import RealtimeDispatcher
        from circle.realtime.handlers import MessagePusher, NotificationPusher
        from circle.realtime.registry import build_registry

        asynchronous = getattr(settings, "EVENT_BUS_ASYNC", True)
        self.bus = EventBus(asynchronous=asynchronous)
        self.sink = NotificationSink()
        self.dispatcher = RealtimeDispatcher(
            build_registry(getattr(settings, "REALTIME_REGISTRY", "local"))
        )

        wrap = _with_db_cleanup if asynchronous else (lambda fn: fn)
        record = wrap(self.sink.record)
        push = wrap(NotificationPusher(self.dispatcher))

        # 같은 이벤트 안에서는 등록 순서대로 실행: 저장 먼저, push 나중
        for name in (FRIEND_REQUEST, REQUEST_ACCEPTED):
            self.bus.subscribe(name, record)
            self.bus.subscribe(name, push)
        self.bus.subscribe(MESSAGE, record)
        self.bus.subscribe(MESSAGE, wrap(MessagePusher(self.dispatcher)))

        logger.info(
            "event bus ready (async=%s, registry=%s)",
            asynchronous,
            getattr(settings, "REALTIME_REGISTRY", "local"),
        )

# circle/notifications/sink.py
import logging
from datetime import datetime
from typing import List, Optional

from django.db import DatabaseError, transaction

from circle.common.errors import NotFoundError
from circle.events.types import (
    FRIEND_REQUEST,
    LIKE,
    MESSAGE,
    REQUEST_ACCEPTED,
    DomainEvent,
)
from circle.notifications.models import Notification
from circle.users.models import User

logger = logging.getLogger(__name__)

CONTENT_TEMPLATES = {
    FRIEND_REQUEST: "New friend request from {from_username}",
    REQUEST_ACCEPTED: "Your friend request to {from_username} has been accepted.",
    MESSAGE: "New message from {from_username}",
    LIKE: "{from_username} liked your post",
}


class NotificationSink:
    """
    domain event -> Notification row.

    record() 는 절대 예외를 올리지 않음. 이미 commit 된 친구/메시지 변경을
    알림 저장 실패 때문에 되돌리면 안 되므로 실패는 로그만 남긴다.
    """

    def record(self, event: DomainEvent) -> Optional[Notification]:
        try:
            template = CONTENT_TEMPLATES.get(event.name)
            if template is None:
                logger.warning("no notification type for event %s", event.name)
                return None

            users = {
                u.pk: u
                for u in User.objects.filter(pk__in=[event.from_id, event.to_id])
            }
            from_user = users.get(event.from_id)
            to_user = users.get(event.to_id)
            if from_user is None or to_user is None:
                logger.warning(
                    "skip %s notification: user missing (%s -> %s)",
                    event.name,
                    event.from_id,
                    event.to_id,
                )
                return None

            # savepoint: 실패해도 바깥 transaction 은 깨지지 않게
            with transaction.atomic():
                notification = Notification.objects.create(
                    from_user=from_user,
                    to_user=to_user,
                    type=event.name,
                    content=template.format(
                        from_username=from_user.username,
                        to_username=to_user.username,
                    ),
                )
        except Exception:
            logger.exception(
                "failed to record %s notification (%s -> %s)",
                event.name,
                event.from_id,
                event.to_id,
            )
            return None

        logger.info(
            "notification %s recorded: %s -> %s",
            event.name,
            from_user.username,
            to_user.username,
        )
        return notification

    def list_by_recipient(self, user_id) -> List[Notification]:
        return list(
            Notification.objects.filter(to_user_id=user_id)
            .select_related("from_user", "to_user")
            .order_by("-created_at")
        )

    def mark_seen(self, notification_id, recipient_id=None) -> Notification:
        qs = Notification.objects.filter(pk=notification_id)
        if recipient_id is not None:
            qs = qs.filter(to_user_id=recipient_id)
        notification = qs.first()
        if notification is None:
            raise NotFoundError("notification not found")

        if not notification.seen:
            Notification.objects.filter(pk=notification.pk).update(seen=True)
            notification.seen = True
        return notification

    def delete(self, notification_id, recipient_id=None) -> int:
        qs = Notification.objects.filter(pk=notification_id)
        if recipient_id is not None:
            qs = qs.filter(to_user_id=recipient_id)
        deleted, _ = qs.delete()
        return deleted

    def delete_older_than(self, cutoff: datetime) -> int:
        try:
            deleted, _ = Notification.objects.filter(created_at__lt=cutoff).delete()
        except DatabaseError:
            logger.exception("failed to purge notifications older than %s", cutoff)
            raise
        logger.info("purged %d notifications older than %s", deleted, cutoff)
        return deleted

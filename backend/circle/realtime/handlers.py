# circle/realtime/handlers.py
import logging

from circle.users.models import User

logger = logging.getLogger(__name__)


class NotificationPusher:
    """Event bus subscriber: domain event -> "notification" push to the recipient."""

    def __init__(self, dispatcher):
        self.dispatcher = dispatcher

    def __call__(self, event):
        sender = (
            User.objects.filter(pk=event.from_id)
            .values("id", "username", "email")
            .first()
        )
        if sender is None:
            logger.warning("skip %s push: sender %s missing", event.name, event.from_id)
            return

        self.dispatcher.push_to_user(
            event.to_id,
            "notification",
            {
                "type": event.name,
                "from": {
                    "id": str(sender["id"]),
                    "username": sender["username"],
                    "email": sender["email"],
                },
            },
        )


class MessagePusher:
    """Event bus subscriber: sent message -> "message" push to the receiver."""

    def __init__(self, dispatcher):
        self.dispatcher = dispatcher

    def __call__(self, event):
        message = event.data.get("message")
        if not message:
            return
        self.dispatcher.push_to_user(event.to_id, "message", message)

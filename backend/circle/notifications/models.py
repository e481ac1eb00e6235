# circle/notifications/models.py
import uuid

from django.db import models

from circle.events.types import EVENT_NAMES
from circle.users.models import User


class Notification(models.Model):
    TYPE_CHOICES = tuple((name, name) for name in EVENT_NAMES)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    from_user = models.ForeignKey(
        User, related_name="sent_notifications", on_delete=models.CASCADE
    )
    to_user = models.ForeignKey(
        User, related_name="notifications", on_delete=models.CASCADE
    )
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    content = models.TextField()
    seen = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["to_user", "-created_at"], name="notif_to_user_created_idx")
        ]

    def __str__(self):
        return f"{self.type} {self.from_user_id} -> {self.to_user_id}"

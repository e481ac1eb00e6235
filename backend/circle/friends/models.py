# circle/friends/models.py
from django.db import models
from django.db.models import F, Q

from circle.users.models import User


class Friend(models.Model):
    """한 친구 관계 = (A, B), (B, A) 두 row."""

    user = models.ForeignKey(User, related_name="friends", on_delete=models.CASCADE)
    friend_user = models.ForeignKey(
        User, related_name="friend_of", on_delete=models.CASCADE
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("user", "friend_user")
        constraints = [
            models.CheckConstraint(
                condition=~Q(user=F("friend_user")), name="friend_not_self"
            ),
        ]


class FriendRequest(models.Model):
    """
    pending 요청 한 건.
    from_user 의 outgoingRequests 이자 to_user 의 incomingRequests.
    """

    from_user = models.ForeignKey(
        User, related_name="outgoing_requests", on_delete=models.CASCADE
    )
    to_user = models.ForeignKey(
        User, related_name="incoming_requests", on_delete=models.CASCADE
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("from_user", "to_user")
        constraints = [
            models.CheckConstraint(
                condition=~Q(from_user=F("to_user")), name="friend_request_not_self"
            ),
        ]

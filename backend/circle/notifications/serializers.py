from rest_framework import serializers

from circle.users.serializers import UserBriefSerializer

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    fromUser = UserBriefSerializer(source="from_user", read_only=True)
    toUser = UserBriefSerializer(source="to_user", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Notification
        fields = ["id", "type", "content", "seen", "fromUser", "toUser", "createdAt"]

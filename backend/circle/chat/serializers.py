from rest_framework import serializers

from circle.users.serializers import UserBriefSerializer

from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    senderId = serializers.UUIDField(source="sender_id", read_only=True)
    receiverId = serializers.UUIDField(source="receiver_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Message
        fields = ["id", "senderId", "receiverId", "content", "createdAt", "updatedAt"]


class ConversationMessageSerializer(MessageSerializer):
    sender = UserBriefSerializer(read_only=True)
    receiver = UserBriefSerializer(read_only=True)

    class Meta(MessageSerializer.Meta):
        fields = MessageSerializer.Meta.fields + ["sender", "receiver"]


class SendMessageSerializer(serializers.Serializer):
    receiverId = serializers.UUIDField()
    content = serializers.CharField(max_length=5000)


class UpdateMessageSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=5000)

# circle/chat/views.py
import logging
import uuid

from django.db.models import Q
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from circle.common.errors import ForbiddenError, InvalidTarget, NotFoundError
from circle.common.ids import parse_user_id
from circle.common.responses import ok
from circle.events import get_bus
from circle.events.types import MESSAGE, DomainEvent
from circle.users.models import User

from .models import Message
from .serializers import (
    ConversationMessageSerializer,
    MessageSerializer,
    SendMessageSerializer,
    UpdateMessageSerializer,
)

logger = logging.getLogger(__name__)


def _get_message_or_404(message_id) -> Message:
    try:
        pk = uuid.UUID(str(message_id))
    except ValueError:
        raise NotFoundError("Message not found")
    message = Message.objects.filter(pk=pk).first()
    if not message:
        raise NotFoundError("Message not found")
    return message


class SendMessageView(APIView):
    permission_classes = [IsAuthenticated]

    # POST /api/v1/send-message
    # body: { "receiverId": "<uuid>", "content": "..." }
    def post(self, request):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        receiver_id = serializer.validated_data["receiverId"]

        if receiver_id == request.user.id:
            raise InvalidTarget("cannot send a message to yourself")
        if not User.objects.filter(id=receiver_id, is_active=True).exists():
            raise InvalidTarget("receiver not found")

        message = Message.objects.create(
            sender=request.user,
            receiver_id=receiver_id,
            content=serializer.validated_data["content"],
        )
        data = MessageSerializer(message).data

        # 알림 저장 + receiver room 으로 "message" push 는 bus 구독자가 처리
        get_bus().emit(
            MESSAGE,
            DomainEvent(
                MESSAGE,
                from_id=request.user.id,
                to_id=receiver_id,
                data={"message": dict(data)},
            ),
        )
        return ok({"message": "Message sent successfully", "data": data}, http_status=201)


class MessageListView(APIView):
    permission_classes = [IsAuthenticated]

    # GET /api/v1/messages  (보낸 + 받은, 최신순)
    def get(self, request):
        messages = Message.objects.filter(
            Q(sender=request.user) | Q(receiver=request.user)
        ).order_by("-created_at")
        return ok(MessageSerializer(messages, many=True).data)


class MessageDetailView(APIView):
    permission_classes = [IsAuthenticated]

    # GET /api/v1/messages/<id>
    def get(self, request, message_id):
        message = _get_message_or_404(message_id)
        if request.user.id not in (message.sender_id, message.receiver_id):
            # 남의 대화는 존재 여부도 숨김
            raise NotFoundError("Message not found")
        return ok(MessageSerializer(message).data)

    # PUT /api/v1/messages/<id>
    def put(self, request, message_id):
        message = _get_message_or_404(message_id)
        if message.sender_id != request.user.id:
            raise ForbiddenError("only the sender can edit a message")

        serializer = UpdateMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message.content = serializer.validated_data["content"]
        message.save(update_fields=["content", "updated_at"])
        return ok(
            {"message": "Message updated successfully", "data": MessageSerializer(message).data}
        )

    # DELETE /api/v1/messages/<id>
    def delete(self, request, message_id):
        message = _get_message_or_404(message_id)
        if message.sender_id != request.user.id:
            raise ForbiddenError("only the sender can delete a message")
        message.delete()
        logger.info("message %s deleted by %s", message_id, request.user.id)
        return ok({"message": "Message deleted successfully"})


class ConversationView(APIView):
    permission_classes = [IsAuthenticated]

    # GET /api/v1/user-messages?user1=<uuid>&user2=<uuid>
    def get(self, request):
        user1 = parse_user_id(request.query_params.get("user1"), "user1")
        user2 = parse_user_id(request.query_params.get("user2"), "user2")
        if request.user.id not in (user1, user2):
            raise ForbiddenError("you can only read your own conversations")

        messages = (
            Message.objects.filter(
                Q(sender_id=user1, receiver_id=user2)
                | Q(sender_id=user2, receiver_id=user1)
            )
            .select_related("sender", "receiver")
            .order_by("-created_at")
        )
        return ok(ConversationMessageSerializer(messages, many=True).data)

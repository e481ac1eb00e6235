# circle/notifications/views.py
import uuid

from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from circle.common.errors import NotFoundError
from circle.common.responses import ok
from circle.events import get_sink

from .serializers import NotificationSerializer


def _notification_id(raw) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        # 형식이 틀린 id 는 어차피 존재하지 않는 알림
        raise NotFoundError("Not found any Notifications")


class UserNotificationListView(APIView):
    permission_classes = [IsAuthenticated]

    # GET /api/v1/user-notifications
    def get(self, request):
        notifications = get_sink().list_by_recipient(request.user.id)
        return ok(
            {"notifications": NotificationSerializer(notifications, many=True).data}
        )


class NotificationSeenView(APIView):
    permission_classes = [IsAuthenticated]

    # PUT /api/v1/notifications/<id>/seen
    def put(self, request, notification_id):
        notification = get_sink().mark_seen(
            _notification_id(notification_id), recipient_id=request.user.id
        )
        return ok(
            {
                "message": "Notification updated successfully",
                "notification": NotificationSerializer(notification).data,
            }
        )


class NotificationDetailView(APIView):
    permission_classes = [IsAuthenticated]

    # DELETE /api/v1/notifications/<id>
    def delete(self, request, notification_id):
        deleted = get_sink().delete(
            _notification_id(notification_id), recipient_id=request.user.id
        )
        if not deleted:
            raise NotFoundError("Not found any Notifications")
        return ok({"message": "Notification deleted successfully"})

# circle/friends/views.py
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from circle.common.ids import parse_user_id
from circle.common.responses import ok
from circle.users.models import User
from circle.users.serializers import UserSerializer
from circle.users.views import get_user_or_404

from .apps import get_friendship_service


class FriendRequestView(APIView):
    permission_classes = [IsAuthenticated]

    # POST /api/v1/add-friend
    # body: { "friendId": "<uuid>" }
    def post(self, request):
        friend_id = parse_user_id(request.data.get("friendId"), "friendId")
        transition = get_friendship_service().send_request(request.user.id, friend_id)
        return ok(
            {
                "message": "Friend request sent",
                "friendId": str(friend_id),
                "state": transition.state.value,
            }
        )


class FriendAcceptView(APIView):
    permission_classes = [IsAuthenticated]

    # PUT /api/v1/accept-friend-request
    # body: { "requesterId": "<uuid>" }
    def put(self, request):
        requester_id = parse_user_id(request.data.get("requesterId"), "requesterId")
        transition = get_friendship_service().accept_request(
            request.user.id, requester_id
        )
        return ok(
            {
                "message": "Successfully accepted",
                "friendId": str(requester_id),
                "state": transition.state.value,
            }
        )


class FriendCancelView(APIView):
    permission_classes = [IsAuthenticated]

    # POST /api/v1/friends/cancel
    # body: { "friendId": "<uuid>" }
    def post(self, request):
        friend_id = parse_user_id(request.data.get("friendId"), "friendId")
        transition = get_friendship_service().cancel_request(request.user.id, friend_id)
        return ok(
            {
                "message": "Friend request canceled",
                "friendId": str(friend_id),
                "state": transition.state.value,
            }
        )


class FriendDeclineView(APIView):
    permission_classes = [IsAuthenticated]

    # POST /api/v1/friends/decline
    # body: { "friendId": "<uuid>" }
    def post(self, request):
        friend_id = parse_user_id(request.data.get("friendId"), "friendId")
        transition = get_friendship_service().decline_request(
            request.user.id, friend_id
        )
        return ok(
            {
                "message": "Friend request declined",
                "friendId": str(friend_id),
                "state": transition.state.value,
            }
        )


class FriendRemoveView(APIView):
    permission_classes = [IsAuthenticated]

    # DELETE /api/v1/remove-friend
    # body: { "friendId": "<uuid>" }
    def delete(self, request):
        friend_id = parse_user_id(request.data.get("friendId"), "friendId")
        transition = get_friendship_service().remove_friend(request.user.id, friend_id)
        return ok(
            {
                "message": "Friend removed successfully",
                "friendId": str(friend_id),
                "state": transition.state.value,
            }
        )


class FriendListView(APIView):
    permission_classes = [IsAuthenticated]

    # GET /api/v1/friends/<userId>
    def get(self, request, user_id):
        user = get_user_or_404(user_id, "userId")

        # 친구 관계 생성일 기준 최신순
        friends = (
            User.objects.filter(friend_of__user=user)
            .order_by("-friend_of__created_at")
        )
        return ok(UserSerializer(friends, many=True).data)

# circle/users/views.py
import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from circle.common.errors import ConflictError, ForbiddenError, UserNotFound
from circle.common.ids import parse_user_id
from circle.common.responses import ok

from .models import User
from .serializers import UserProfileSerializer, UserSerializer, UserUpdateSerializer

logger = logging.getLogger(__name__)


def get_user_or_404(raw_id, field: str = "id") -> User:
    user = User.objects.filter(id=parse_user_id(raw_id, field), is_active=True).first()
    if not user:
        logger.warning("User not found: %s", raw_id)
        raise UserNotFound()
    return user


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    # GET /api/v1/profile/<id>
    def get(self, request, user_id):
        user = get_user_or_404(user_id)
        return ok(UserProfileSerializer(user).data)


class UserListView(APIView):
    permission_classes = [IsAuthenticated]

    # GET /api/v1/users
    def get(self, request):
        users = User.objects.filter(is_active=True)
        return ok(UserSerializer(users, many=True).data)


class UserSearchView(APIView):
    permission_classes = [IsAuthenticated]

    # GET /api/v1/search?query=kim
    def get(self, request):
        query = (request.query_params.get("query") or "").strip()
        users = User.objects.filter(is_active=True).exclude(id=request.user.id)
        if query:
            users = users.filter(
                Q(username__icontains=query) | Q(email__icontains=query)
            )

        data = UserSerializer(users, many=True).data
        if not data:
            raise UserNotFound("No users found")
        return ok(data)


class UserUpdateView(APIView):
    permission_classes = [IsAuthenticated]

    # PUT /api/v1/update/<id>
    # body: { "username"?, "email"?, "password"? }
    def put(self, request, user_id):
        user = get_user_or_404(user_id)
        if user.id != request.user.id:
            raise ForbiddenError("you can only update your own profile")

        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        fields = ["updated_at"]
        if data.get("username"):
            user.username = data["username"]
            fields.append("username")
        if data.get("email"):
            user.email = User.objects.normalize_email(data["email"])
            fields.append("email")
        if data.get("password"):
            user.set_password(data["password"])
            fields.append("password")

        try:
            with transaction.atomic():
                user.save(update_fields=fields)
        except IntegrityError:
            raise ConflictError("username or email already in use")

        logger.info("user updated: %s (%s)", user.id, ", ".join(fields[1:]))
        return ok({"message": "User updated successfully", "user": UserSerializer(user).data})

# circle/users/serializers.py
from rest_framework import serializers

from .models import User


class UserBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "email"]


class UserSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="date_joined", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "email", "createdAt", "updatedAt"]


class UserProfileSerializer(UserSerializer):
    """프로필: 친구 / 보낸 요청 / 받은 요청 목록 포함."""

    friends = serializers.SerializerMethodField()
    outgoingRequests = serializers.SerializerMethodField()
    incomingRequests = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + [
            "friends",
            "outgoingRequests",
            "incomingRequests",
        ]

    def get_friends(self, obj: User):
        users = User.objects.filter(friend_of__user=obj).order_by("username")
        return UserSerializer(users, many=True).data

    def get_outgoingRequests(self, obj: User):
        users = User.objects.filter(incoming_requests__from_user=obj).order_by(
            "username"
        )
        return UserBriefSerializer(users, many=True).data

    def get_incomingRequests(self, obj: User):
        users = User.objects.filter(outgoing_requests__to_user=obj).order_by(
            "username"
        )
        return UserBriefSerializer(users, many=True).data


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class UserUpdateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    password = serializers.CharField(min_length=6, write_only=True, required=False)

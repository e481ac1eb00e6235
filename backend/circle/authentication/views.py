# circle/authentication/views.py
from rest_framework.views import APIView

from circle.common.responses import ok
from circle.users.serializers import LoginSerializer, RegisterSerializer

from .services import authenticate_user, issue_jwt_for_user, register_user


class RegisterView(APIView):
    authentication_classes = []
    permission_classes = []

    # POST /api/v1/auth/register
    # body: { "username": "...", "email": "...", "password": "..." }
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = register_user(**serializer.validated_data)
        return ok(
            {"userId": str(user.id), "message": "User created successfully"},
            http_status=201,
        )


class LoginView(APIView):
    authentication_classes = []
    permission_classes = []

    # POST /api/v1/auth/login
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate_user(**serializer.validated_data)
        token = issue_jwt_for_user(user)
        return ok({"accessToken": token, "tokenType": "Bearer"})

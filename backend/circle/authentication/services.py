# circle/authentication/services.py
import logging

from django.db import IntegrityError, transaction
from rest_framework_simplejwt.tokens import AccessToken

from circle.common.errors import AuthError, ConflictError, UserNotFound
from circle.users.models import User

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return User.objects.normalize_email(str(email or "").strip())


def register_user(username: str, email: str, password: str) -> User:
    email = _normalize_email(email)
    username = str(username).strip()

    if User.objects.filter(email__iexact=email).exists():
        logger.warning("User already exists: %s", email)
        raise ConflictError("User already exists", code="EMAIL_ALREADY_USED")
    if User.objects.filter(username=username).exists():
        raise ConflictError("username already taken", code="USERNAME_ALREADY_USED")

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email, username=username, password=password
            )
    except IntegrityError:
        # 동시에 같은 email/username 가입 시도
        raise ConflictError("User already exists", code="EMAIL_ALREADY_USED")

    logger.info("user registered: %s", user.id)
    return user


def authenticate_user(email: str, password: str) -> User:
    user = User.objects.filter(email__iexact=_normalize_email(email)).first()
    if not user or not user.is_active:
        logger.warning("User not found: %s", email)
        raise UserNotFound()
    if not user.check_password(password):
        logger.warning("Invalid credentials for user: %s", email)
        raise AuthError("Invalid credentials", code="INVALID_CREDENTIALS")
    return user


def issue_jwt_for_user(user: User) -> str:
    token = AccessToken.for_user(user)
    token["username"] = user.username
    return str(token)

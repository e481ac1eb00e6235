import logging

from rest_framework import status
from rest_framework.exceptions import (
    AuthenticationFailed,
    NotAuthenticated,
    PermissionDenied,
)
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.views import exception_handler
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from circle.common.errors import CircleError
from circle.common.responses import fail

logger = logging.getLogger(__name__)


def _envelope(code: str, message: str) -> dict:
    return {
        "success": False,
        "data": None,
        "error": {"code": code, "message": message},
    }


def _first_message(detail) -> str:
    # {"email": ["..."]} -> "email: ..."
    if isinstance(detail, dict):
        for field, value in detail.items():
            return f"{field}: {_first_message(value)}"
    if isinstance(detail, list) and detail:
        return _first_message(detail[0])
    return str(detail)


def custom_exception_handler(exc, context):
    if isinstance(exc, CircleError):
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.code, exc.message)
        return fail(exc.code, exc.message, http_status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        # 예상하지 못한 예외: 로그 남기고 500 envelope
        logger.exception("unhandled error in %s", context.get("view"))
        return fail(
            "INTERNAL_ERROR",
            "internal server error",
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, NotAuthenticated):
        response.data = _envelope("UNAUTHORIZED", "Authorization header missing")
    elif isinstance(exc, (InvalidToken, TokenError)):
        # 만료/위조를 더 정확히 나누려면 exc.detail 내용으로 분기
        response.data = _envelope("INVALID_TOKEN", "Invalid token")
    elif isinstance(exc, AuthenticationFailed):
        response.data = _envelope("UNAUTHORIZED", str(exc.detail))
    elif isinstance(exc, DRFValidationError):
        response.data = _envelope("VALIDATION_ERROR", _first_message(exc.detail))
    elif isinstance(exc, PermissionDenied):
        response.data = _envelope("FORBIDDEN", "Permission denied")
    else:
        response.data = _envelope(
            getattr(exc, "default_code", "ERROR").upper(), str(exc.detail)
        )

    return response

# circle/common/ids.py
import uuid

from circle.common.errors import ValidationError


def parse_user_id(raw, field: str = "id") -> uuid.UUID:
    """
    요청 body/path 에서 들어온 user id 검증.
    빈 값이나 UUID 형식이 아니면 ValidationError.
    """
    if raw is None or raw == "":
        raise ValidationError(f"{field} is required")
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (ValueError, AttributeError, TypeError):
        raise ValidationError(f"invalid {field}")

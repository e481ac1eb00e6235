# circle/events/types.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

FRIEND_REQUEST = "friend_request"
REQUEST_ACCEPTED = "request_accepted"
MESSAGE = "message"
LIKE = "like"

EVENT_NAMES = (FRIEND_REQUEST, REQUEST_ACCEPTED, MESSAGE, LIKE)


@dataclass(frozen=True)
class DomainEvent:
    """상태 변화 알림. from_id -> to_id 방향."""

    name: str
    from_id: Any
    to_id: Any
    data: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

# circle/friends/checks.py
from django.conf import settings
from django.core.checks import Error, register


def atomic_request_errors(databases):
    """
    FriendshipService 는 자기 atomic() 블록이 끝나면 바로 이벤트를 발행한다.
    요청 전체를 감싸는 transaction 이 있으면 알림/push 가 rollback 될 변경에
    대해 나갈 수 있으므로 설정 단계에서 거부.
    """
    return [
        Error(
            f"DATABASES[{alias!r}] has ATOMIC_REQUESTS enabled",
            hint=(
                "Friend request events are emitted when the service's own "
                "transaction block exits. Turn ATOMIC_REQUESTS off."
            ),
            id="friends.E001",
        )
        for alias, config in databases.items()
        if config.get("ATOMIC_REQUESTS")
    ]


@register()
def check_atomic_requests(app_configs, **kwargs):
    return atomic_request_errors(settings.DATABASES)

# circle/friends/apps.py
from django.apps import AppConfig


class FriendsConfig(AppConfig):
    name = "circle.friends"
    label = "friends"

    service = None

    def ready(self):
        # events 앱이 INSTALLED_APPS 에서 먼저 와야 bus 가 준비되어 있음
        from circle.events import get_bus
        from circle.friends import checks  # noqa: F401
        from circle.friends.services import FriendshipService
        from circle.friends.store import RelationshipStore

        self.service = FriendshipService(RelationshipStore(), bus=get_bus())


def get_friendship_service():
    from django.apps import apps

    return apps.get_app_config("friends").service

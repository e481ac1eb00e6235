import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from rest_framework.test import APIClient

from circle.authentication.services import issue_jwt_for_user
from circle.events import get_dispatcher
from circle.users.models import User


@pytest.fixture
def make_user(db):
    def _make(username, password="test1234!"):
        return User.objects.create_user(
            email=f"{username}@example.com", username=username, password=password
        )

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def client_for():
    """APIClient with a Bearer token for the given user."""

    def _client(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_jwt_for_user(user)}")
        return client

    return _client


@pytest.fixture(autouse=True)
def _clean_registry():
    # 테스트끼리 room 멤버십이 새지 않게
    registry = get_dispatcher().registry
    yield
    for user_id in list(getattr(registry, "_rooms", {})):
        for connection in registry.connections(user_id):
            registry.unbind(connection)
    # push 가 registry 를 거치지 않으므로 layer 의 group 도 비움
    async_to_sync(get_channel_layer().flush)()

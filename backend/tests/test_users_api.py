import pytest
from rest_framework.test import APIClient

from circle.users.models import User

pytestmark = pytest.mark.django_db


class TestAuth:
    def test_register_and_login(self):
        client = APIClient()
        res = client.post(
            "/api/v1/auth/register",
            {"username": "dana", "email": "Dana@Example.com", "password": "secret123"},
            format="json",
        )
        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        assert body["data"]["message"] == "User created successfully"

        res = client.post(
            "/api/v1/auth/login",
            {"email": "Dana@example.com", "password": "secret123"},
            format="json",
        )
        assert res.status_code == 200
        assert res.json()["data"]["tokenType"] == "Bearer"

    def test_register_duplicate_email(self, alice):
        res = APIClient().post(
            "/api/v1/auth/register",
            {"username": "other", "email": "alice@example.com", "password": "secret123"},
            format="json",
        )
        assert res.status_code == 409
        assert res.json()["error"]["code"] == "EMAIL_ALREADY_USED"

    def test_register_validation(self):
        res = APIClient().post(
            "/api/v1/auth/register",
            {"username": "x", "email": "not-an-email", "password": "secret123"},
            format="json",
        )
        assert res.status_code == 400
        assert res.json()["error"]["code"] == "VALIDATION_ERROR"
        assert res.json()["error"]["message"].startswith("email:")

    def test_login_wrong_password(self, alice):
        res = APIClient().post(
            "/api/v1/auth/login",
            {"email": "alice@example.com", "password": "wrong-one"},
            format="json",
        )
        assert res.status_code == 401
        assert res.json()["error"]["code"] == "INVALID_CREDENTIALS"

    def test_login_unknown_user(self):
        res = APIClient().post(
            "/api/v1/auth/login",
            {"email": "nobody@example.com", "password": "secret123"},
            format="json",
        )
        assert res.status_code == 404
        assert res.json()["error"]["code"] == "USER_NOT_FOUND"


class TestUsers:
    def test_profile(self, alice, client_for):
        res = client_for(alice).get(f"/api/v1/profile/{alice.id}")
        data = res.json()["data"]
        assert data["username"] == "alice"
        assert data["friends"] == []
        assert data["outgoingRequests"] == []
        assert data["incomingRequests"] == []

    def test_profile_not_found(self, alice, client_for):
        res = client_for(alice).get("/api/v1/profile/00000000-0000-0000-0000-000000000000")
        assert res.status_code == 404
        assert res.json()["error"]["code"] == "USER_NOT_FOUND"

    def test_list(self, alice, bob, client_for):
        res = client_for(alice).get("/api/v1/users")
        assert {u["username"] for u in res.json()["data"]} == {"alice", "bob"}

    def test_search_excludes_caller(self, alice, bob, make_user, client_for):
        make_user("bobby")
        res = client_for(alice).get("/api/v1/search", {"query": "bob"})
        assert sorted(u["username"] for u in res.json()["data"]) == ["bob", "bobby"]

        res = client_for(alice).get("/api/v1/search", {"query": "alice"})
        assert res.status_code == 404

    def test_update_self(self, alice, client_for):
        res = client_for(alice).put(
            f"/api/v1/update/{alice.id}", {"username": "alicia"}, format="json"
        )
        assert res.status_code == 200
        assert User.objects.get(pk=alice.pk).username == "alicia"

    def test_update_other(self, alice, bob, client_for):
        res = client_for(alice).put(
            f"/api/v1/update/{bob.id}", {"username": "hacked"}, format="json"
        )
        assert res.status_code == 403
        assert res.json()["error"]["code"] == "FORBIDDEN"

    def test_update_taken_username(self, alice, bob, client_for):
        res = client_for(alice).put(
            f"/api/v1/update/{alice.id}", {"username": "bob"}, format="json"
        )
        assert res.status_code == 409

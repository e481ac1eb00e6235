import pytest

from circle.chat.models import Message
from circle.notifications.models import Notification

pytestmark = pytest.mark.django_db


def send(client, receiver, content="hi"):
    return client.post(
        "/api/v1/send-message",
        {"receiverId": str(receiver.id), "content": content},
        format="json",
    )


class TestChat:
    def test_send_records_notification(self, alice, bob, client_for):
        res = send(client_for(alice), bob, "hello bob")

        assert res.status_code == 201
        data = res.json()["data"]["data"]
        assert data["senderId"] == str(alice.id)
        assert data["content"] == "hello bob"
        note = Notification.objects.get()
        assert (note.type, note.to_user_id) == ("message", bob.id)
        assert note.content == "New message from alice"

    def test_send_to_self(self, alice, client_for):
        res = send(client_for(alice), alice)
        assert res.status_code == 400
        assert res.json()["error"]["code"] == "INVALID_TARGET"

    def test_conversation(self, alice, bob, make_user, client_for):
        carol = make_user("carol")
        send(client_for(alice), bob, "1")
        send(client_for(bob), alice, "2")
        send(client_for(carol), bob, "other")

        res = client_for(alice).get(
            "/api/v1/user-messages", {"user1": str(alice.id), "user2": str(bob.id)}
        )
        assert sorted(m["content"] for m in res.json()["data"]) == ["1", "2"]

        res = client_for(carol).get(
            "/api/v1/user-messages", {"user1": str(alice.id), "user2": str(bob.id)}
        )
        assert res.status_code == 403

    def test_only_sender_edits(self, alice, bob, client_for):
        message_id = send(client_for(alice), bob).json()["data"]["data"]["id"]

        res = client_for(bob).put(
            f"/api/v1/messages/{message_id}", {"content": "x"}, format="json"
        )
        assert res.status_code == 403

        res = client_for(alice).put(
            f"/api/v1/messages/{message_id}", {"content": "edited"}, format="json"
        )
        assert res.status_code == 200
        assert Message.objects.get(pk=message_id).content == "edited"

    def test_hidden_from_outsiders(self, alice, bob, make_user, client_for):
        message_id = send(client_for(alice), bob).json()["data"]["data"]["id"]
        carol = make_user("carol")

        assert client_for(bob).get(f"/api/v1/messages/{message_id}").status_code == 200
        assert client_for(carol).get(f"/api/v1/messages/{message_id}").status_code == 404

    def test_delete(self, alice, bob, client_for):
        message_id = send(client_for(alice), bob).json()["data"]["data"]["id"]

        assert client_for(bob).delete(f"/api/v1/messages/{message_id}").status_code == 403
        assert client_for(alice).delete(f"/api/v1/messages/{message_id}").status_code == 200
        assert not Message.objects.exists()

# circle/friends/store.py
import logging
from typing import Iterable, Sequence, Set, Tuple

from django.db import transaction

from circle.friends.models import Friend, FriendRequest
from circle.friends.state_machine import RelationshipRecord
from circle.users.models import User

logger = logging.getLogger(__name__)


def _friend_rows(records: Iterable[RelationshipRecord]) -> Set[Tuple]:
    return {(r.user_id, f) for r in records for f in r.friends}


def _request_rows(records: Iterable[RelationshipRecord]) -> Set[Tuple]:
    rows = set()
    for r in records:
        rows.update((r.user_id, to_id) for to_id in r.outgoing)
        rows.update((from_id, r.user_id) for from_id in r.incoming)
    return rows


class RelationshipStore:
    """
    friends / outgoing / incoming 세트를 Friend, FriendRequest row 로 저장.
    save() 는 반드시 atomic() 안에서 호출.
    """

    def atomic(self):
        return transaction.atomic()

    def lock(self, *user_ids) -> Set:
        # pk 순서로 잠가서 (A,B) / (B,A) 동시 요청이 서로 데드락 나지 않게
        qs = (
            User.objects.select_for_update()
            .filter(pk__in=list(user_ids), is_active=True)
            .order_by("pk")
        )
        return {u.pk for u in qs}

    def load(self, user_id) -> RelationshipRecord:
        friends = Friend.objects.filter(user_id=user_id).values_list(
            "friend_user_id", flat=True
        )
        outgoing = FriendRequest.objects.filter(from_user_id=user_id).values_list(
            "to_user_id", flat=True
        )
        incoming = FriendRequest.objects.filter(to_user_id=user_id).values_list(
            "from_user_id", flat=True
        )
        return RelationshipRecord(
            user_id=user_id,
            friends=frozenset(friends),
            outgoing=frozenset(outgoing),
            incoming=frozenset(incoming),
        )

    def save(
        self,
        before: Sequence[RelationshipRecord],
        after: Sequence[RelationshipRecord],
    ) -> None:
        old_friends, new_friends = _friend_rows(before), _friend_rows(after)
        old_requests, new_requests = _request_rows(before), _request_rows(after)

        for user_id, friend_id in old_friends - new_friends:
            Friend.objects.filter(user_id=user_id, friend_user_id=friend_id).delete()
        for from_id, to_id in old_requests - new_requests:
            FriendRequest.objects.filter(from_user_id=from_id, to_user_id=to_id).delete()

        Friend.objects.bulk_create(
            [Friend(user_id=u, friend_user_id=f) for u, f in new_friends - old_friends]
        )
        FriendRequest.objects.bulk_create(
            [
                FriendRequest(from_user_id=f, to_user_id=t)
                for f, t in new_requests - old_requests
            ]
        )
        logger.debug(
            "relationship rows saved: friends +%d -%d, requests +%d -%d",
            len(new_friends - old_friends),
            len(old_friends - new_friends),
            len(new_requests - old_requests),
            len(old_requests - new_requests),
        )

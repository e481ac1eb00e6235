# circle/friends/state_machine.py
"""
Friend relationship state machine.

Pure functions over two RelationshipRecord snapshots. Nothing here touches
the database: callers load both records, call a transition, and persist the
two returned records together (see circle.friends.services).

For an ordered pair (A, B) the relationship is exactly one of::

    NONE          no link
    A_REQUESTED   B in A.outgoing  and A in B.incoming
    B_REQUESTED   A in B.outgoing  and B in A.incoming
    FRIENDS       B in A.friends   and A in B.friends

FRIENDS takes precedence: a pair that is friends on both sides reads as
FRIENDS even when stale pending entries are still around, and leaving
FRIENDS clears every link between the two users.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import FrozenSet, Hashable, Tuple

from circle.common.errors import (
    AlreadyFriends,
    DuplicateRequest,
    InvalidTarget,
    NoSuchRequest,
    NotFriends,
    ReciprocalRequestExists,
    RelationshipCorrupted,
)
from circle.events.types import FRIEND_REQUEST, REQUEST_ACCEPTED, DomainEvent


class PairState(str, Enum):
    NONE = "none"
    A_REQUESTED = "a_requested"
    B_REQUESTED = "b_requested"
    FRIENDS = "friends"


@dataclass(frozen=True)
class RelationshipRecord:
    user_id: Hashable
    friends: FrozenSet = frozenset()
    outgoing: FrozenSet = frozenset()
    incoming: FrozenSet = frozenset()

    def without(self, other_id) -> "RelationshipRecord":
        return replace(
            self,
            friends=self.friends - {other_id},
            outgoing=self.outgoing - {other_id},
            incoming=self.incoming - {other_id},
        )

    def links_to(self, other_id) -> bool:
        return (
            other_id in self.friends
            or other_id in self.outgoing
            or other_id in self.incoming
        )


@dataclass(frozen=True)
class Transition:
    """Both new records, in the same order the transition was called with."""

    first: RelationshipRecord
    second: RelationshipRecord
    state: PairState
    events: Tuple[DomainEvent, ...] = ()


def _check_self(record: RelationshipRecord):
    if record.links_to(record.user_id):
        raise RelationshipCorrupted(f"user {record.user_id} is linked to itself")


def pair_state(a: RelationshipRecord, b: RelationshipRecord) -> PairState:
    """Current state of (a, b). Raises if the two records disagree."""
    if a.user_id == b.user_id:
        raise InvalidTarget("cannot target yourself")
    _check_self(a)
    _check_self(b)

    a_friend = b.user_id in a.friends
    b_friend = a.user_id in b.friends
    if a_friend != b_friend:
        raise RelationshipCorrupted(
            f"friendship between {a.user_id} and {b.user_id} is one-sided"
        )
    if a_friend:
        return PairState.FRIENDS

    a_asked = b.user_id in a.outgoing
    if a_asked != (a.user_id in b.incoming):
        raise RelationshipCorrupted(
            f"request {a.user_id} -> {b.user_id} is recorded on one side only"
        )
    b_asked = a.user_id in b.outgoing
    if b_asked != (b.user_id in a.incoming):
        raise RelationshipCorrupted(
            f"request {b.user_id} -> {a.user_id} is recorded on one side only"
        )
    if a_asked and b_asked:
        raise RelationshipCorrupted(
            f"{a.user_id} and {b.user_id} have requested each other"
        )

    if a_asked:
        return PairState.A_REQUESTED
    if b_asked:
        return PairState.B_REQUESTED
    return PairState.NONE


def request(a: RelationshipRecord, b: RelationshipRecord) -> Transition:
    """A asks B to be friends."""
    state = pair_state(a, b)
    if state is PairState.FRIENDS:
        raise AlreadyFriends()
    if state is PairState.A_REQUESTED:
        raise DuplicateRequest()
    if state is PairState.B_REQUESTED:
        raise ReciprocalRequestExists()

    return Transition(
        first=replace(a, outgoing=a.outgoing | {b.user_id}),
        second=replace(b, incoming=b.incoming | {a.user_id}),
        state=PairState.A_REQUESTED,
        events=(DomainEvent(FRIEND_REQUEST, from_id=a.user_id, to_id=b.user_id),),
    )


def accept(b: RelationshipRecord, a: RelationshipRecord) -> Transition:
    """B accepts the request A sent earlier."""
    state = pair_state(a, b)
    if state is PairState.FRIENDS:
        raise AlreadyFriends()
    if state is not PairState.A_REQUESTED:
        raise NoSuchRequest()

    new_b = b.without(a.user_id)
    new_a = a.without(b.user_id)
    return Transition(
        first=replace(new_b, friends=new_b.friends | {a.user_id}),
        second=replace(new_a, friends=new_a.friends | {b.user_id}),
        state=PairState.FRIENDS,
        events=(DomainEvent(REQUEST_ACCEPTED, from_id=b.user_id, to_id=a.user_id),),
    )


def cancel(a: RelationshipRecord, b: RelationshipRecord) -> Transition:
    """A withdraws its own pending request to B."""
    if pair_state(a, b) is not PairState.A_REQUESTED:
        raise NoSuchRequest()
    return Transition(
        first=a.without(b.user_id),
        second=b.without(a.user_id),
        state=PairState.NONE,
    )


def decline(b: RelationshipRecord, a: RelationshipRecord) -> Transition:
    """B rejects the request A sent."""
    if pair_state(a, b) is not PairState.A_REQUESTED:
        raise NoSuchRequest()
    return Transition(
        first=b.without(a.user_id),
        second=a.without(b.user_id),
        state=PairState.NONE,
    )


def remove(a: RelationshipRecord, b: RelationshipRecord) -> Transition:
    """Unfriend. Either side may call it."""
    if pair_state(a, b) is not PairState.FRIENDS:
        raise NotFriends()
    return Transition(
        first=a.without(b.user_id),
        second=b.without(a.user_id),
        state=PairState.NONE,
    )

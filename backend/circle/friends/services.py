# circle/friends/services.py
import logging

from circle.common.errors import InvalidTarget, UserNotFound
from circle.friends import state_machine
from circle.friends.locks import PairLock

logger = logging.getLogger(__name__)


class FriendshipService:
    """
    친구 요청 흐름 (요청/수락/취소/거절/삭제).

    1) pair lock + transaction 안에서 두 유저 row 잠금
    2) 두 record 를 읽어서 state machine 으로 다음 상태 계산
    3) 두 record 를 같은 transaction 에서 저장 (둘 다 or 둘 다 X)
    4) commit 이후 event bus 로 domain event 발행
       (알림 저장 / 실시간 push 는 bus 구독자가 처리)
    """

    def __init__(self, store, bus=None, locks: PairLock = None):
        self.store = store
        self.bus = bus
        self.locks = locks or PairLock()

    def send_request(self, user_id, target_id):
        return self._apply(
            state_machine.request,
            user_id,
            target_id,
            missing=InvalidTarget("target user not found"),
        )

    def accept_request(self, user_id, requester_id):
        return self._apply(
            state_machine.accept,
            user_id,
            requester_id,
            missing=UserNotFound("requester not found"),
        )

    def cancel_request(self, user_id, target_id):
        return self._apply(
            state_machine.cancel,
            user_id,
            target_id,
            missing=UserNotFound("target user not found"),
        )

    def decline_request(self, user_id, requester_id):
        return self._apply(
            state_machine.decline,
            user_id,
            requester_id,
            missing=UserNotFound("requester not found"),
        )

    def remove_friend(self, user_id, friend_id):
        return self._apply(
            state_machine.remove,
            user_id,
            friend_id,
            missing=UserNotFound("friend not found"),
        )

    def relationship(self, user_id, other_id) -> state_machine.PairState:
        """Read-only, not linearizable with in-flight writes."""
        return state_machine.pair_state(
            self.store.load(user_id), self.store.load(other_id)
        )

    def _apply(self, transition_fn, user_id, other_id, *, missing):
        if user_id == other_id:
            raise InvalidTarget("cannot target yourself")

        with self.locks.hold(user_id, other_id):
            with self.store.atomic():
                found = self.store.lock(user_id, other_id)
                if user_id not in found:
                    raise UserNotFound("current user not found")
                if other_id not in found:
                    raise missing

                before = (self.store.load(user_id), self.store.load(other_id))
                try:
                    transition = transition_fn(*before)
                except Exception as e:
                    logger.warning(
                        "%s rejected for %s -> %s: %s",
                        transition_fn.__name__,
                        user_id,
                        other_id,
                        e,
                    )
                    raise
                self.store.save(before, (transition.first, transition.second))

        logger.info(
            "%s committed for %s -> %s (now %s)",
            transition_fn.__name__,
            user_id,
            other_id,
            transition.state.value,
        )
        # atomic() 블록이 끝난 시점 = commit 이라는 전제 (ATOMIC_REQUESTS 꺼짐).
        # 켜지면 바깥 transaction 이 rollback 돼도 이벤트는 이미 나감: checks.py 가 막음
        self._publish(transition.events)
        return transition

    def _publish(self, events):
        if self.bus is None:
            return
        for event in events:
            self.bus.emit(event.name, event)

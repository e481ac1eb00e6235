# circle/friends/locks.py
import threading
from contextlib import contextmanager

DEFAULT_STRIPES = 64


class PairLock:
    """
    In-process lock keyed by the unordered pair {a, b}.

    Locks are striped so memory stays bounded; two unrelated pairs may share a
    stripe, which only costs some waiting. Cross-process exclusion comes from
    the row locks taken inside the transaction.
    """

    def __init__(self, stripes: int = DEFAULT_STRIPES):
        self._locks = [threading.Lock() for _ in range(stripes)]

    def _index(self, a, b) -> int:
        low, high = sorted((str(a), str(b)))
        return hash((low, high)) % len(self._locks)

    @contextmanager
    def hold(self, a, b):
        lock = self._locks[self._index(a, b)]
        with lock:
            yield

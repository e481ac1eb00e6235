# circle/events/bus.py
"""
In-process publish/subscribe.

Producers call ``emit(name, payload)``; subscribers registered at start-up
receive the payload off the caller's stack. A single worker thread runs the
handlers, so handlers of one event fire in registration order. Handler
errors are logged and never reach the producer or the other handlers.

Delivery is best effort: nothing is persisted, and work still queued when
the process dies is lost.
"""
import logging
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, wait as wait_futures
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

Handler = Callable[[object], None]


class EventBus:
    def __init__(self, asynchronous: bool = True, executor: ThreadPoolExecutor = None):
        self.asynchronous = asynchronous
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._lock = threading.Lock()
        self._executor = executor
        self._pending = set()

    def subscribe(self, name: str, handler: Handler) -> None:
        with self._lock:
            self._handlers[name].append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        with self._lock:
            handlers = self._handlers.get(name, [])
            if handler in handlers:
                handlers.remove(handler)

    def handlers(self, name: str) -> List[Handler]:
        with self._lock:
            return list(self._handlers.get(name, ()))

    def emit(self, name: str, payload) -> None:
        handlers = self.handlers(name)
        if not handlers:
            logger.debug("no subscriber for %s", name)
            return

        if not self.asynchronous:
            self._dispatch(name, handlers, payload)
            return

        try:
            future = self._get_executor().submit(
                self._dispatch, name, handlers, payload
            )
        except RuntimeError:
            # executor 가 이미 shutdown 된 경우 (프로세스 종료 중)
            logger.warning("event bus is shut down, dropping %s", name)
            return
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def wait(self, timeout: float = None) -> bool:
        """Block until everything emitted so far has been handled."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="event-bus"
                )
            return self._executor

    def _forget(self, future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _dispatch(self, name: str, handlers: List[Handler], payload) -> None:
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception(
                    "event handler %r failed for %s",
                    getattr(handler, "__qualname__", handler),
                    name,
                )

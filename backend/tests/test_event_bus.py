import threading

from circle.events.bus import EventBus


class TestEventBus:
    def test_handlers_run_in_order(self):
        bus = EventBus(asynchronous=False)
        calls = []
        bus.subscribe("ping", lambda p: calls.append(("first", p)))
        bus.subscribe("ping", lambda p: calls.append(("second", p)))

        bus.emit("ping", 1)

        assert calls == [("first", 1), ("second", 1)]

    def test_failing_handler_is_isolated(self, caplog):
        bus = EventBus(asynchronous=False)
        calls = []

        def boom(payload):
            raise RuntimeError("boom")

        bus.subscribe("ping", boom)
        bus.subscribe("ping", calls.append)

        bus.emit("ping", "x")

        assert calls == ["x"]
        assert "event handler" in caplog.text

    def test_no_subscriber(self):
        EventBus(asynchronous=False).emit("nobody", None)

    def test_unsubscribe(self):
        bus = EventBus(asynchronous=False)
        calls = []
        bus.subscribe("ping", calls.append)
        bus.unsubscribe("ping", calls.append)
        bus.unsubscribe("ping", calls.append)

        bus.emit("ping", 1)

        assert calls == []
        assert bus.handlers("ping") == []

    def test_async_runs_off_caller_thread(self):
        bus = EventBus(asynchronous=True)
        seen = []
        bus.subscribe("ping", lambda p: seen.append((p, threading.current_thread().name)))
        try:
            for i in range(5):
                bus.emit("ping", i)
            assert bus.wait(timeout=5)
        finally:
            bus.shutdown()

        assert [p for p, _ in seen] == [0, 1, 2, 3, 4]
        assert all(name.startswith("event-bus") for _, name in seen)

    def test_async_emit_does_not_block_on_handler(self):
        bus = EventBus(asynchronous=True)
        release = threading.Event()
        done = []
        bus.subscribe("ping", lambda p: (release.wait(5), done.append(p)))
        try:
            bus.emit("ping", 1)
            assert done == []
            release.set()
            assert bus.wait(timeout=5)
        finally:
            bus.shutdown()
        assert done == [1]

    def test_emit_after_shutdown_is_dropped(self, caplog):
        bus = EventBus(asynchronous=True)
        calls = []
        bus.subscribe("ping", calls.append)
        bus.emit("ping", 1)
        bus.shutdown()

        bus.emit("ping", 2)

        assert calls == [1]
        assert "dropping" in caplog.text

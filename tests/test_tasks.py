"""Task runners: deferred completion and error capture."""

from __future__ import annotations

import time
import unittest

from foldering.events import CURSOR_CHANGED, EventHub
from foldering.tasks import InlineTaskRunner, PendingCall, ThreadedTaskRunner


class InlineTaskRunnerTests(unittest.TestCase):
    def test_completion_waits_for_drain(self) -> None:
        runner = InlineTaskRunner()
        seen: list[PendingCall] = []

        call = runner.submit(lambda: 42, on_done=seen.append, label="answer")

        self.assertFalse(call.done)
        self.assertTrue(runner.has_pending())
        self.assertEqual(runner.drain(), 1)
        self.assertEqual(seen, [call])
        self.assertEqual(call.result(), 42)
        self.assertFalse(runner.has_pending())

    def test_errors_are_captured_not_raised(self) -> None:
        runner = InlineTaskRunner()

        def boom() -> None:
            raise ValueError("bad")

        call = runner.submit(boom)
        runner.drain()

        self.assertFalse(call.ok)
        self.assertIsInstance(call.error, ValueError)
        with self.assertRaises(ValueError):
            call.result()

    def test_result_before_completion_raises(self) -> None:
        call = InlineTaskRunner().submit(lambda: None, label="pending")
        with self.assertRaises(RuntimeError):
            call.result()

    def test_completions_queued_by_handlers_drain_in_same_pass(self) -> None:
        runner = InlineTaskRunner()
        order: list[str] = []

        def first_done(_call: PendingCall) -> None:
            order.append("first")
            runner.submit(lambda: None, on_done=lambda _c: order.append("second"))

        runner.submit(lambda: None, on_done=first_done)

        self.assertEqual(runner.drain(), 2)
        self.assertEqual(order, ["first", "second"])


class ThreadedTaskRunnerTests(unittest.TestCase):
    def test_results_arrive_on_drain(self) -> None:
        runner = ThreadedTaskRunner()
        try:
            calls = [runner.submit(lambda value=value: value * 2) for value in range(3)]
            deadline = time.monotonic() + 5.0
            while runner.has_pending() and time.monotonic() < deadline:
                runner.drain()
                time.sleep(0.01)
        finally:
            runner.close()

        self.assertEqual([call.result() for call in calls], [0, 2, 4])


class EventHubTests(unittest.TestCase):
    def test_connect_emit_disconnect(self) -> None:
        hub = EventHub()
        seen: list[object] = []
        hub.connect(CURSOR_CHANGED, seen.append)
        hub.emit(CURSOR_CHANGED, "x")
        hub.disconnect(CURSOR_CHANGED, seen.append)
        hub.emit(CURSOR_CHANGED, "y")
        self.assertEqual(seen, ["x"])

    def test_unknown_event_rejected(self) -> None:
        with self.assertRaises(ValueError):
            EventHub().connect("no-such-event", print)


if __name__ == "__main__":
    unittest.main()

import io
import logging
import unittest
from queue import Queue

from pomodoro import MonotonicTickScheduler
from preferences import TimerSettings
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from runtime.commands import RuntimeCommand


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class _PreferencesStub:
    def __init__(self, settings: TimerSettings):
        self.settings = settings

    def load_settings(self) -> TimerSettings:
        return self.settings

    def save_settings(self, settings: TimerSettings) -> None:
        self.settings = settings


class _OverlayServerStub:
    def __init__(self):
        self.published: list[tuple[str, dict]] = []
        self.command_handler = None
        self.stopped = False

    def set_command_handler(self, handler) -> None:
        self.command_handler = handler

    def publish(self, event_type: str, **payload) -> None:
        self.published.append((event_type, payload))

    def stop(self, timeout_seconds: float = 5.0) -> None:
        self.stopped = True


class RuntimeLoopTests(unittest.TestCase):
    def _runtime(self, *, console_input=None, settings=None):
        self.lines: list[str] = []
        self.signal_hooks: list[object] = []
        self.overlay = _OverlayServerStub()
        self.queue: Queue = Queue()
        self.clock = _Clock()
        return RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("test.runtime"),
                preferences=_PreferencesStub(settings or TimerSettings()),
                overlay_server=self.overlay,
                notifier=None,
                hooks=RuntimeHooks(setup_signal_handlers=self.signal_hooks.append),
                console_input=console_input,
                write_fn=self.lines.append,
                scheduler=MonotonicTickScheduler(monotonic_fn=self.clock),
                command_queue=self.queue,
            )
        )

    def test_runs_queued_commands_until_quit(self) -> None:
        runtime = self._runtime(settings=TimerSettings(work_minutes=1))
        self.queue.put(RuntimeCommand(action="start"))
        self.queue.put(RuntimeCommand(action="status"))
        self.queue.put(RuntimeCommand(action="quit"))

        self.assertEqual(0, runtime.run())

        self.assertEqual("Work Time 01:00 (paused, session 1/4, break total 00:00)", self.lines[0])
        self.assertIn("Timer started.", self.lines)
        self.assertIn("Work Time 01:00 (running, session 1/4, break total 00:00)", self.lines)
        self.assertEqual([runtime.request_stop], self.signal_hooks)
        self.assertFalse(runtime.engine.is_running)
        self.assertTrue(self.overlay.stopped)

    def test_startup_sync_reaches_overlay_before_commands(self) -> None:
        runtime = self._runtime()
        self.queue.put(RuntimeCommand(action="quit"))

        runtime.run()

        self.assertEqual(
            ["cat_theme", "cat_state", "overlay_visibility"],
            [event_type for event_type, _ in self.overlay.published[:3]],
        )

    def test_overlay_commands_are_logged_not_written(self) -> None:
        runtime = self._runtime()
        self.overlay.command_handler("requestStart")
        self.overlay.command_handler("requestHide")
        self.queue.put(RuntimeCommand(action="quit"))

        with self.assertLogs("test.runtime", level="INFO"):
            runtime.run()

        self.assertNotIn("Timer started.", self.lines)
        self.assertIn(("overlay_visibility", {"visible": False}), self.overlay.published)
        self.assertIn(
            ("cat_state", {"isRunning": True, "mode": "work", "theme": "chubby-gray", "petType": "cat"}),
            self.overlay.published,
        )

    def test_console_input_drives_runtime_and_eof_quits(self) -> None:
        runtime = self._runtime(console_input=io.StringIO("start-timer\nnonsense\n"))

        self.assertEqual(0, runtime.run())

        self.assertIn("Timer started.", self.lines)
        self.assertTrue(any("Unknown command 'nonsense'" in line for line in self.lines))

    def test_request_stop_ends_loop(self) -> None:
        runtime = self._runtime()
        runtime.request_stop()

        self.assertEqual(0, runtime.run())
        self.assertTrue(self.overlay.stopped)


if __name__ == "__main__":
    unittest.main()

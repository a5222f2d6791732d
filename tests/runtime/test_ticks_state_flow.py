import logging
import unittest

from pomodoro import TimerConfig, TimerEngine
from runtime.ticks import LoggingNotifier, TickDependencies, TickProcessor


class _NotifierStub:
    def __init__(self):
        self.alerts: list[tuple[str, str]] = []

    def notify(self, title: str, message: str) -> None:
        self.alerts.append((title, message))


class _BrokenNotifier:
    def notify(self, title: str, message: str) -> None:
        raise OSError("no notification daemon")


class _NullHandle:
    def cancel(self) -> None:
        return None


class _NullScheduler:
    def schedule_repeating(self, interval_seconds, callback):
        return _NullHandle()


def _engine_with(notifier) -> TimerEngine:
    engine = TimerEngine(_NullScheduler(), config=TimerConfig(work_duration=2, break_duration=1))
    engine.subscribe(
        TickProcessor(TickDependencies(notifier=notifier, logger=logging.getLogger("test")))
    )
    return engine


class TickStateFlowTests(unittest.TestCase):
    def test_completion_alerts_once_with_fixed_text(self) -> None:
        notifier = _NotifierStub()
        engine = _engine_with(notifier)

        engine.start()
        engine.tick()
        self.assertEqual([], notifier.alerts)
        engine.tick()

        self.assertEqual([("PomodoroCat", "Time is up! Take a break!")], notifier.alerts)

    def test_break_completion_uses_the_same_alert_text(self) -> None:
        notifier = _NotifierStub()
        engine = _engine_with(notifier)

        engine.start()
        engine.tick()
        engine.tick()
        engine.start()
        engine.tick()

        self.assertEqual(2, len(notifier.alerts))
        self.assertEqual(notifier.alerts[0], notifier.alerts[1])

    def test_notifier_failure_is_logged(self) -> None:
        engine = _engine_with(_BrokenNotifier())
        engine.start()
        engine.tick()

        with self.assertLogs("test", level="ERROR"):
            engine.tick()

        self.assertEqual("break", engine.snapshot().mode)

    def test_missing_notifier_only_logs(self) -> None:
        engine = _engine_with(None)
        engine.start()
        engine.tick()

        with self.assertLogs("test", level="INFO"):
            engine.tick()

    def test_logging_notifier_writes_title_and_message(self) -> None:
        with self.assertLogs("runtime.notifier", level="INFO") as captured:
            LoggingNotifier().notify("PomodoroCat", "Time is up! Take a break!")

        self.assertIn("[PomodoroCat] Time is up! Take a break!", captured.output[0])


if __name__ == "__main__":
    unittest.main()

import unittest

from pomodoro import TimerConfig, TimerEngine
from runtime.display import ConsoleDisplay, build_display
from runtime.messages import format_duration


class _NullHandle:
    def cancel(self) -> None:
        return None


class _NullScheduler:
    def schedule_repeating(self, interval_seconds, callback):
        return _NullHandle()


class DisplayTests(unittest.TestCase):
    def test_format_duration(self) -> None:
        self.assertEqual("25:00", format_duration(1500))
        self.assertEqual("00:59", format_duration(59))
        self.assertEqual("00:00", format_duration(-3))
        self.assertEqual("100:00", format_duration(6000))

    def test_build_display_for_countdown(self) -> None:
        engine = TimerEngine(_NullScheduler(), config=TimerConfig(work_duration=100))
        engine.start()
        for _ in range(25):
            engine.tick()

        display = build_display(engine.snapshot(), engine.config)

        self.assertEqual("01:15", display.time_text)
        self.assertEqual("Work Time", display.label)
        self.assertEqual("Work", display.mode_indicator)
        self.assertEqual("1/4", display.session_text)
        self.assertEqual(0.25, display.progress)
        self.assertTrue(display.is_running)

    def test_build_display_for_countup(self) -> None:
        engine = TimerEngine(_NullScheduler(), config=TimerConfig(work_duration=100))
        engine.set_direction("countup")
        engine.start()
        engine.tick()

        display = build_display(engine.snapshot(), engine.config)

        self.assertEqual("+00:01", display.time_text)
        self.assertEqual("countup", display.count_direction)

    def test_console_display_writes_each_distinct_frame(self) -> None:
        lines: list[str] = []
        engine = TimerEngine(_NullScheduler(), config=TimerConfig(work_duration=2, break_duration=60))
        display = ConsoleDisplay(lambda: engine.config, write_fn=lines.append)
        engine.subscribe(display)

        engine.start()
        engine.tick()
        engine.tick()

        self.assertEqual(4, len(lines))
        self.assertTrue(lines[0].startswith("> Work"))
        self.assertIn("00:01", lines[1])
        self.assertIn("00:00", lines[2])
        self.assertTrue(lines[3].startswith("= Break"))
        self.assertIn("01:00", lines[3])
        self.assertEqual("Break Time", display.last_rendered.label)


if __name__ == "__main__":
    unittest.main()

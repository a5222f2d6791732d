import unittest

from pomodoro import TimerConfig, TimerEngine
from sync import SyncBridge, overlay_payload


class _RecordingChannel:
    def __init__(self):
        self.published: list[tuple[str, dict]] = []

    def publish(self, event_type: str, **payload) -> None:
        self.published.append((event_type, payload))


class _BrokenChannel:
    def publish(self, event_type: str, **payload) -> None:
        raise ConnectionError("socket gone")


class _NullHandle:
    def cancel(self) -> None:
        return None


class _NullScheduler:
    def schedule_repeating(self, interval_seconds, callback):
        return _NullHandle()


def _engine(**config) -> TimerEngine:
    return TimerEngine(_NullScheduler(), config=TimerConfig(**config))


class SyncBridgeTests(unittest.TestCase):
    def test_overlay_payload_carries_no_numeric_time(self) -> None:
        engine = _engine(pet_type="dog", theme="pixel-calico")
        payload = overlay_payload(engine.snapshot(), engine.config)

        self.assertEqual(
            {"isRunning": False, "mode": "work", "theme": "pixel-calico", "petType": "dog"},
            payload,
        )

    def test_startup_sync_publishes_appearance_state_and_visibility(self) -> None:
        channel = _RecordingChannel()
        bridge = SyncBridge(channel)
        bridge.attach(_engine())

        bridge.publish_startup_sync()

        self.assertEqual(
            ["cat_theme", "cat_state", "overlay_visibility"],
            [event_type for event_type, _ in channel.published],
        )
        self.assertEqual({"visible": True}, channel.published[-1][1])

    def test_state_changes_are_published_but_ticks_are_not(self) -> None:
        channel = _RecordingChannel()
        engine = _engine(work_duration=3)
        bridge = SyncBridge(channel)
        bridge.attach(engine)

        engine.start()
        engine.tick()
        self.assertEqual(["cat_state"], [event_type for event_type, _ in channel.published])
        self.assertTrue(channel.published[-1][1]["isRunning"])

        engine.tick()
        engine.tick()
        self.assertEqual(2, len(channel.published))
        self.assertEqual(
            {"isRunning": False, "mode": "break", "theme": "chubby-gray", "petType": "cat"},
            channel.published[-1][1],
        )

    def test_visibility_is_remembered(self) -> None:
        channel = _RecordingChannel()
        bridge = SyncBridge(channel)

        bridge.publish_visibility(False)

        self.assertFalse(bridge.overlay_visible)
        self.assertEqual(("overlay_visibility", {"visible": False}), channel.published[-1])

    def test_detach_stops_publishing(self) -> None:
        channel = _RecordingChannel()
        engine = _engine()
        bridge = SyncBridge(channel)
        bridge.attach(engine)
        bridge.detach()

        engine.start()

        self.assertEqual([], channel.published)

    def test_missing_channel_is_a_silent_no_op(self) -> None:
        engine = _engine()
        bridge = SyncBridge(None)
        bridge.attach(engine)

        bridge.publish_startup_sync()
        engine.start()

        self.assertTrue(engine.is_running)

    def test_channel_failures_do_not_reach_the_engine(self) -> None:
        engine = _engine()
        bridge = SyncBridge(_BrokenChannel())
        bridge.attach(engine)

        with self.assertLogs("sync", level="WARNING"):
            engine.start()

        self.assertTrue(engine.is_running)


if __name__ == "__main__":
    unittest.main()

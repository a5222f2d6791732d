import unittest

from overlay import OverlayView, OverlayViewState, visual_state_for
from overlay.app import handle_console_line
from overlay.view import displayed_pet


class _RecordingRenderer:
    def __init__(self):
        self.frames = []

    def render(self, frame) -> None:
        self.frames.append(frame)


def _view(random_value: float = 0.99):
    renderer = _RecordingRenderer()
    commands: list[str] = []
    view = OverlayView(
        renderer,
        send_command=commands.append,
        screen_size=(800, 600),
        pet_size=(100, 100),
        random_fn=lambda: random_value,
    )
    return view, renderer, commands


class VisualStateTests(unittest.TestCase):
    def test_visual_state_mapping(self) -> None:
        cases = (
            (False, "work", "idle"),
            (False, "break", "idle"),
            (True, "work", "working"),
            (True, "break", "onBreak"),
            (True, "longBreak", "onBreak"),
        )
        for is_running, mode, expected in cases:
            with self.subTest(is_running=is_running, mode=mode):
                self.assertEqual(expected, visual_state_for(is_running, mode))

    def test_running_break_broadcast_never_shows_working(self) -> None:
        view, renderer, _ = _view()
        view.apply_state({"isRunning": True, "mode": "break"})

        self.assertEqual("onBreak", view.state.visual_state)
        self.assertEqual("onBreak", renderer.frames[-1].visual_state)

    def test_merge_keeps_previous_values_for_missing_or_bad_keys(self) -> None:
        state = OverlayViewState(mode="break", is_running=True, theme="pixel-calico")

        merged = state.merged({"mode": "nap", "isRunning": "yes", "theme": ""})

        self.assertEqual(state, merged)

    def test_unknown_pet_type_is_drawn_as_cat(self) -> None:
        self.assertEqual("cat", displayed_pet("dragon"))
        self.assertEqual("dog", displayed_pet("dog"))


class OverlayViewTests(unittest.TestCase):
    def test_theme_update_keeps_timer_state(self) -> None:
        view, renderer, _ = _view()
        view.apply_state({"isRunning": True, "mode": "work"})

        view.apply_theme({"theme": "pixel-calico", "petType": "rabbit", "mode": "break"})

        self.assertEqual("work", view.state.mode)
        self.assertEqual("pixel-calico", renderer.frames[-1].theme)
        self.assertEqual("rabbit", renderer.frames[-1].pet)

    def test_identical_frames_are_not_rerendered(self) -> None:
        view, renderer, _ = _view()
        view.apply_state({"isRunning": False, "mode": "work"})
        view.apply_state({"isRunning": False, "mode": "work"})

        self.assertEqual(1, len(renderer.frames))

    def test_petting_expires_after_half_a_second(self) -> None:
        view, renderer, _ = _view()

        view.pet(10.0)
        self.assertTrue(view.petting)
        view.on_timer(10.2)
        self.assertTrue(view.petting)
        view.on_timer(10.5)

        self.assertFalse(view.petting)
        self.assertFalse(renderer.frames[-1].petting)

    def test_idle_pet_fidgets_occasionally(self) -> None:
        view, _, _ = _view(random_value=0.05)

        view.on_timer(0.0)
        view.on_timer(5.0)
        self.assertFalse(view.petting)
        view.on_timer(10.0)

        self.assertTrue(view.petting)

    def test_running_pet_does_not_fidget(self) -> None:
        view, _, _ = _view(random_value=0.0)
        view.apply_state({"isRunning": True, "mode": "work"})

        view.on_timer(0.0)
        view.on_timer(10.0)

        self.assertFalse(view.petting)

    def test_drag_is_clamped_to_screen(self) -> None:
        view, renderer, _ = _view()
        self.assertEqual((700, 500), view.position)

        view.begin_drag(710, 510)
        view.drag_to(5000, -300)
        view.end_drag()
        view.drag_to(0, 0)

        self.assertEqual((700, 0), view.position)
        self.assertEqual((700, 0), renderer.frames[-1].position)

    def test_toggle_sends_start_or_pause(self) -> None:
        view, _, commands = _view()

        view.request_toggle()
        view.apply_state({"isRunning": True})
        view.request_toggle()
        view.close()

        self.assertEqual(["requestStart", "requestPause", "requestHide"], commands)

    def test_visibility_is_rendered(self) -> None:
        view, renderer, _ = _view()
        view.set_visible(False)

        self.assertFalse(view.visible)
        self.assertFalse(renderer.frames[-1].visible)

    def test_renderer_failure_is_logged(self) -> None:
        class _BrokenRenderer:
            def render(self, frame) -> None:
                raise RuntimeError("no display")

        view = OverlayView(_BrokenRenderer(), send_command=lambda command: None)
        with self.assertLogs("overlay", level="ERROR"):
            view.set_visible(False)


class OverlayConsoleTests(unittest.TestCase):
    def test_console_lines_drive_local_interactions(self) -> None:
        view, _, commands = _view()

        self.assertIsNone(handle_console_line(view, "pet", now=1.0))
        self.assertIsNone(handle_console_line(view, "toggle", now=1.0))
        self.assertIsNone(handle_console_line(view, "drag 10 20", now=1.0))
        self.assertIsNone(handle_console_line(view, "close", now=1.0))

        self.assertTrue(view.petting)
        self.assertEqual((10, 20), view.position)
        self.assertEqual(["requestStart", "requestHide"], commands)

    def test_unknown_console_line_returns_help(self) -> None:
        view, _, _ = _view()
        self.assertIn("Overlay commands", handle_console_line(view, "dance", now=0.0))
        self.assertIn("Overlay commands", handle_console_line(view, "drag x y", now=0.0))
        self.assertIsNone(handle_console_line(view, "   ", now=0.0))


if __name__ == "__main__":
    unittest.main()

import unittest

from app_config import OverlayServerSettings
from sync import OverlayServerConfig, SyncConfigurationError


class OverlayServerConfigTests(unittest.TestCase):
    def test_from_settings_builds_websocket_url(self) -> None:
        settings = OverlayServerSettings(
            enabled=True,
            host="127.0.0.1",
            port=9001,
            path="/cat",
        )

        config = OverlayServerConfig.from_settings(settings)

        self.assertEqual("/cat", config.websocket_path)
        self.assertEqual("ws://127.0.0.1:9001/cat", config.url)

    def test_from_settings_defaults_blank_path(self) -> None:
        settings = OverlayServerSettings(enabled=False, host="localhost", port=8766, path="  ")
        config = OverlayServerConfig.from_settings(settings)

        self.assertFalse(config.enabled)
        self.assertEqual("/overlay", config.path)

    def test_rejects_invalid_values(self) -> None:
        cases = (
            {"host": " "},
            {"port": 0},
            {"port": 70000},
            {"path": "overlay"},
            {"path": "/healthz"},
        )
        for kwargs in cases:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(SyncConfigurationError):
                    OverlayServerConfig(**kwargs)


if __name__ == "__main__":
    unittest.main()

import json
import socket
import threading
import unittest
import urllib.error
import urllib.request

from websockets.sync.client import connect

from sync import OverlayServer, OverlayServerConfig


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class OverlayServerInboundTests(unittest.TestCase):
    def _server(self, handler) -> OverlayServer:
        return OverlayServer(OverlayServerConfig(), command_handler=handler)

    def test_command_frames_reach_handler(self) -> None:
        received: list[str] = []
        server = self._server(received.append)

        server._handle_inbound('{"type": "command", "command": "requestStart"}')

        self.assertEqual(["requestStart"], received)

    def test_malformed_frames_are_dropped(self) -> None:
        received: list[str] = []
        server = self._server(received.append)

        with self.assertLogs("sync.server", level="WARNING"):
            server._handle_inbound("{broken")
            server._handle_inbound('{"type": "command", "command": "launch"}')

        self.assertEqual([], received)

    def test_handler_errors_are_logged(self) -> None:
        def broken(command: str) -> None:
            raise RuntimeError(command)

        server = self._server(broken)
        with self.assertLogs("sync.server", level="ERROR"):
            server._handle_inbound('{"type": "command", "command": "requestHide"}')

    def test_publish_without_running_server_is_no_op(self) -> None:
        server = self._server(None)
        server.publish("cat_state", isRunning=False, mode="work")
        self.assertFalse(server.is_running)


class OverlayServerLoopbackTests(unittest.TestCase):
    def setUp(self) -> None:
        self.commands: list[str] = []
        self.command_seen = threading.Event()

        def handler(command: str) -> None:
            self.commands.append(command)
            self.command_seen.set()

        config = OverlayServerConfig(host="127.0.0.1", port=_free_port())
        self.server = OverlayServer(config, command_handler=handler)
        self.server.start()
        self.addCleanup(self.server.stop)
        self.url = config.url
        self.http_root = f"http://127.0.0.1:{config.port}"

    def test_late_overlay_receives_hello_then_sticky_state(self) -> None:
        self.server.publish("cat_state", isRunning=True, mode="work", theme="t", petType="cat")
        self.server.publish("cat_theme", theme="t", petType="cat")

        with connect(self.url, open_timeout=5) as websocket:
            types = [json.loads(websocket.recv(timeout=5))["type"] for _ in range(3)]

        self.assertEqual(["hello", "cat_theme", "cat_state"], types)

    def test_overlay_command_is_forwarded(self) -> None:
        with connect(self.url, open_timeout=5) as websocket:
            json.loads(websocket.recv(timeout=5))
            websocket.send(json.dumps({"type": "command", "command": "requestPause"}))
            self.assertTrue(self.command_seen.wait(5))

        self.assertEqual(["requestPause"], self.commands)

    def test_health_route_answers_and_unknown_paths_are_refused(self) -> None:
        with urllib.request.urlopen(f"{self.http_root}/healthz", timeout=5) as response:
            self.assertEqual(200, response.status)
            self.assertEqual(b"ok\n", response.read())

        with self.assertRaises(urllib.error.HTTPError) as context:
            urllib.request.urlopen(f"{self.http_root}/elsewhere", timeout=5)
        self.assertEqual(404, context.exception.code)
        context.exception.close()


if __name__ == "__main__":
    unittest.main()

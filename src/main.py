import logging
import signal
import sys
from typing import Callable, Optional

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from preferences import JsonPreferencesStore
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from runtime.ticks import LoggingNotifier
from sync import OverlayServer, OverlayServerConfig, SyncConfigurationError


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_cat")


def setup_signal_handlers(request_stop: Callable[[], None]) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logging.getLogger("pomodoro_cat").info(
            "%s received, stopping...",
            signal.Signals(signum).name,
        )
        request_stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def start_overlay_server(
    settings,
    logger: logging.Logger,
) -> Optional[OverlayServer]:
    """Start the overlay channel; failures leave the timer usable without it."""
    try:
        config = OverlayServerConfig.from_settings(settings)
    except SyncConfigurationError as error:
        logger.error("Overlay server configuration error: %s", error)
        logger.warning("Continuing without overlay.")
        return None

    if not config.enabled:
        logger.info("Overlay disabled via overlay_server.enabled=false")
        return None

    server = OverlayServer(config=config, logger=logging.getLogger("sync.server"))
    try:
        logger.info("Starting overlay server...")
        server.start()
    except Exception as error:
        logger.error("Overlay server startup failed: %s", error)
        logger.warning("Continuing without overlay.")
        return None
    return server


def main() -> int:
    """Run the primary timer surface."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        logger.info("Loaded runtime config: %s", config_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    logging.getLogger().setLevel(app_config.logging.level_number)

    preferences = JsonPreferencesStore(
        app_config.preferences.file,
        logger=logging.getLogger("preferences"),
    )
    overlay_server = start_overlay_server(app_config.overlay_server, logger)

    runtime = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            preferences=preferences,
            overlay_server=overlay_server,
            notifier=LoggingNotifier(logging.getLogger("notifier")),
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
            console_input=sys.stdin,
        )
    )
    return runtime.run()


if __name__ == "__main__":
    raise SystemExit(main())

"""Application entry point for QuizShow."""

from __future__ import annotations

import socket
import sys

from PySide6.QtWidgets import QApplication

from quiz_show.constants.ui_constants import SHOW_LOAD_FAILED_TITLE
from quiz_show.core.settings import ShowSettings
from quiz_show.core.show_importer import ShowImportError
from quiz_show.core.show_manager import ShowManager
from quiz_show.server.api_server import start_api_server
from quiz_show.ui.dialog_helpers import show_error
from quiz_show.ui.operator_window import OperatorMainWindow
from quiz_show.utils.logging_config import configure_logging


def _determine_screen_url(host: str, port: int) -> str:
    """Best-effort URL for opening the presentation on another machine."""
    if host not in ("0.0.0.0", ""):
        return f"http://{host}:{port}/"
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}/"


def main() -> None:
    """Load the show, start the presentation server, and launch the operator console."""
    settings = ShowSettings.from_environment()
    logger = configure_logging(settings.log_level)
    logger.info("Starting QuizShow with %s", settings.show_file)

    app = QApplication(sys.argv)
    try:
        show_manager = ShowManager.from_settings(settings)
    except (ShowImportError, OSError) as exc:
        logger.error("Could not load show file %s: %s", settings.show_file, exc)
        show_error(None, SHOW_LOAD_FAILED_TITLE, f"{settings.show_file}: {exc}")
        sys.exit(1)

    server = start_api_server(
        show_manager,
        host=settings.host,
        port=settings.port,
        media_dir=settings.media_dir,
    )
    logger.info("Presentation available at %s", _determine_screen_url(settings.host, settings.port))

    local_host = "127.0.0.1" if settings.host in ("0.0.0.0", "") else settings.host
    window = OperatorMainWindow(
        rounds=show_manager.list_rounds(),
        base_url=f"http://{local_host}:{settings.port}",
    )
    window.show()
    exit_code = app.exec()
    server.stop()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

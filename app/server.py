# =============================================================================
# app/server.py - API Process Entry Point
# =============================================================================
# Owns the server lifecycle:
#
#   starting -> listening -> shutting-down
#           \-> crashed (port unavailable)
#
# The listening socket is bound here, before uvicorn starts, so a bind
# failure is reported as BindError with exit code 1 instead of uvicorn
# exiting the process from inside its startup.
#
# Usage:
#   python -m app.server
#   python scripts/start_api.py
# =============================================================================

from __future__ import annotations

import logging
import socket
import sys
from enum import Enum

import uvicorn

from app.config import Settings, load_configuration
from app.exceptions import BindError, ConfigValidationError
from app.main import create_app
from lib.utils import configure_logging

logger = logging.getLogger(__name__)


class ServerState(str, Enum):
    """
    Lifecycle states of the API process.

    - starting: app built, socket not yet bound
    - listening: socket bound, serving requests
    - crashed: could not bind (terminal)
    - shutting_down: serve loop returned (terminal)
    """
    STARTING = "starting"
    LISTENING = "listening"
    CRASHED = "crashed"
    SHUTTING_DOWN = "shutting-down"


class ApiServer:
    """
    Runs the FastAPI app under uvicorn on a socket it binds itself.

    Example:
        server = ApiServer(load_configuration())
        sys.exit(server.run())
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.state = ServerState.STARTING
        self.app = create_app(settings)
        self.socket: socket.socket | None = None

    @property
    def address(self) -> tuple[str, int]:
        """Actual (host, port) once bound; the configured pair before."""
        if self.socket is not None:
            host, port = self.socket.getsockname()[:2]
            return host, port
        return self.settings.HOST, self.settings.PORT

    def bind(self) -> socket.socket:
        """
        Acquire the listening socket for HOST:PORT.

        Raises:
            BindError: If the address is in use or otherwise unavailable
        """
        host, port = self.settings.HOST, self.settings.PORT
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(2048)
        except OSError as e:
            sock.close()
            raise BindError(host, port, str(e)) from e
        sock.set_inheritable(True)
        self.socket = sock
        return sock

    def serve(self, sock: socket.socket) -> None:
        """Serve requests on `sock` until uvicorn receives a shutdown signal."""
        config = uvicorn.Config(
            self.app,
            log_level="debug" if self.settings.DEBUG else "info",
            log_config=None,
        )
        uvicorn.Server(config).run(sockets=[sock])

    def run(self) -> int:
        """
        Bind, serve and return the process exit code.

        Returns:
            int: 0 after a normal shutdown, 1 if the socket could not be bound
        """
        try:
            sock = self.bind()
        except BindError as e:
            self.state = ServerState.CRASHED
            logger.error(str(e))
            return 1

        self.state = ServerState.LISTENING
        host, port = self.address
        logger.info(f"API listening on http://{host}:{port}")

        try:
            self.serve(sock)
        finally:
            self.state = ServerState.SHUTTING_DOWN
            sock.close()
            logger.info("API stopped")
        return 0


def main() -> int:
    """Load configuration, then run the API until shutdown."""
    try:
        settings = load_configuration()
    except ConfigValidationError as e:
        configure_logging()
        logger.error(e.message)
        return 1

    configure_logging(debug=settings.DEBUG)
    return ApiServer(settings).run()


if __name__ == "__main__":
    sys.exit(main())

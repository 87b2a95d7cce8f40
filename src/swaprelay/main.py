"""Main entry point - runs the swap API with port fallback."""

import errno
import logging
import socket
import sys
from typing import Iterable, Optional

import uvicorn

from swaprelay.api.app import create_app
from swaprelay.config import Settings, get_settings

logger = logging.getLogger(__name__)

FALLBACK_PORTS = (8080, 3000)


def configure_logging(settings: Settings) -> None:
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def candidate_ports(preferred: int) -> list[int]:
    """Preferred port first, then the fallbacks, without duplicates."""
    first = preferred if preferred > 0 else FALLBACK_PORTS[0]
    ports: list[int] = []
    for port in (first, *FALLBACK_PORTS):
        if port not in ports:
            ports.append(port)
    return ports


def port_available(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return False
            raise
    return True


def pick_port(host: str, ports: Iterable[int]) -> Optional[int]:
    """First port in ``ports`` that can be bound, or None."""
    for port in ports:
        if port_available(host, port):
            return port
        logger.warning(f"Port {port} in use. Trying next port...")
    return None


def main() -> None:
    settings = get_settings()
    configure_logging(settings)

    logger.info("Starting swaprelay...")
    logger.info(f"Environment: {settings.environment}")

    port = pick_port(settings.api_host, candidate_ports(settings.api_port))
    if port is None:
        logger.error("Could not start server: all candidate ports are in use")
        sys.exit(1)

    logger.info(f"Server on :{port} (docs: /docs)")
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()

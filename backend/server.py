"""Run the API on a plaintext listener and, when certificates exist, a TLS one."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import uvicorn

from app.config import Settings, get_settings
from app.main import app

logger = logging.getLogger(__name__)


def build_server(settings: Settings, port: int, **ssl: Any) -> uvicorn.Server:
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=port,
        log_level=settings.log_level.lower(),
        ws_max_size=settings.max_message_bytes,
        # keepalive is client-initiated ping/pong only
        ws_ping_interval=None,
        **ssl,
    )
    return uvicorn.Server(config)


async def serve(settings: Settings) -> None:
    servers = [build_server(settings, settings.http_port)]
    if settings.tls_enabled:
        servers.append(
            build_server(
                settings,
                settings.https_port,
                ssl_certfile=settings.tls_cert_path,
                ssl_keyfile=settings.tls_key_path,
            )
        )
        logger.info("[server] TLS listener on :%d", settings.https_port)
    else:
        logger.warning(
            "[server] TLS disabled: cert %r or key %r not found",
            settings.tls_cert_path,
            settings.tls_key_path,
        )
    logger.info("[server] Plaintext listener on :%d", settings.http_port)
    await asyncio.gather(*(server.serve() for server in servers))


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()

"""Web server configuration."""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class WebConfig:
    """Configuration for the web server."""

    host: str = "0.0.0.0"
    port: int = 5000
    db_path: str = ".syncboard/syncboard.db"
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24
    cors_origins: list[str] | None = None
    debug: bool = False
    log_level: str = "INFO"
    chat_page_size: int = 50
    socketio_path: str = "socket.io"
    seed: bool = True

    @classmethod
    def load(cls) -> WebConfig:
        config = cls()
        config.host = os.environ.get("SYNCBOARD_HOST", config.host)
        config.port = int(os.environ.get("SYNCBOARD_PORT", config.port))
        config.db_path = os.environ.get("SYNCBOARD_DB_PATH", config.db_path)
        config.jwt_secret = os.environ.get("SYNCBOARD_JWT_SECRET", "")
        config.debug = os.environ.get("SYNCBOARD_DEBUG", "").lower() in ("1", "true")
        config.log_level = os.environ.get("SYNCBOARD_LOG_LEVEL", config.log_level).upper()
        config.chat_page_size = int(
            os.environ.get("SYNCBOARD_CHAT_PAGE_SIZE", config.chat_page_size)
        )
        config.socketio_path = os.environ.get("SYNCBOARD_SOCKETIO_PATH", config.socketio_path)
        config.seed = os.environ.get("SYNCBOARD_SEED", "true").lower() not in ("0", "false", "no")
        origins = os.environ.get("SYNCBOARD_CORS_ORIGINS")
        if origins:
            config.cors_origins = [o.strip() for o in origins.split(",")]

        if not config.jwt_secret:
            # Sessions won't survive restarts, which is fine for local development.
            config.jwt_secret = secrets.token_hex(32)
            logger.warning(
                "SYNCBOARD_JWT_SECRET not set -- using random ephemeral secret. "
                "Set SYNCBOARD_JWT_SECRET for persistent sessions."
            )

        return config

"""JWT operations. Issuing credentials is left to the auth service in front of us."""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta

import jwt

from ..config import WebConfig

_config: WebConfig | None = None


def _get_config() -> WebConfig:
    global _config
    if _config is None:
        _config = WebConfig.load()
    return _config


def init_auth(config: WebConfig) -> None:
    global _config
    _config = config


def create_token(user_id: str, name: str = "") -> str:
    """Create a JWT token for a user."""
    config = _get_config()
    payload = {
        "sub": user_id,
        "name": name,
        "exp": datetime.now(UTC) + timedelta(hours=config.jwt_expire_hours),
        "iat": datetime.now(UTC),
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises jwt.InvalidTokenError on failure."""
    config = _get_config()
    return jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])

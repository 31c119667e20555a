"""Client side: local board cache, REST client and the socket session."""

from .api import ApiClient, ApiError
from .cache import BoardCache
from .session import BoardSession

__all__ = ["ApiClient", "ApiError", "BoardCache", "BoardSession"]

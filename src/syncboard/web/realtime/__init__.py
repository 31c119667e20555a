"""Real-time synchronization core: presence, rooms, relay and chat."""

from .chat import ChatBridge, MessageStore
from .models import Connection, EventType, PresenceEntry, UserIdentity, board_room, user_room
from .notifications import Notifier
from .presence import PresenceRegistry
from .relay import EventRelay
from .rooms import RoomRouter
from .server import SyncServer
from .transport import MemoryTransport, RoomTransport, SocketIOTransport

__all__ = [
    "ChatBridge",
    "Connection",
    "EventRelay",
    "EventType",
    "MemoryTransport",
    "MessageStore",
    "Notifier",
    "PresenceEntry",
    "PresenceRegistry",
    "RoomRouter",
    "RoomTransport",
    "SocketIOTransport",
    "SyncServer",
    "UserIdentity",
    "board_room",
    "user_room",
]

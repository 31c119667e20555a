"""BoardSession - one client's socket connection to a board.

Local mutations (REST responses) are applied to the cache first and then
emitted so the server can relay them to everyone else. Relayed events from
other users land in the ``on_*`` handlers and go through the same cache.
"""

from __future__ import annotations

import logging
from typing import Any

import socketio

from ..web.realtime.models import EventType
from .cache import BoardCache, Entity

logger = logging.getLogger(__name__)


def strip_sender(payload: dict[str, Any]) -> Entity:
    """Relayed entities carry the sender alongside their own fields."""
    if not isinstance(payload, dict):
        return {}
    return {k: v for k, v in payload.items() if k != "sender"}


class BoardSession:
    def __init__(
        self,
        board_id: str,
        user: dict[str, Any] | None = None,
        cache: BoardCache | None = None,
        sio: socketio.AsyncClient | None = None,
    ) -> None:
        self.board_id = board_id
        self.user = user
        self.cache = cache or BoardCache()
        self.sio = sio or socketio.AsyncClient()

        self.online_users: list[dict[str, Any]] = []
        self.typing_users: list[dict[str, Any]] = []
        self.chat_typing_users: list[dict[str, Any]] = []
        self.messages: list[dict[str, Any]] = []
        self.notifications: list[dict[str, Any]] = []
        self.activity: list[str] = []
        self.last_error: str | None = None

        self._register()

    def _register(self) -> None:
        handlers = {
            "connect": self.on_connect,
            EventType.ONLINE_USERS: self.on_online_users,
            EventType.USER_JOINED: self.on_user_joined,
            EventType.USER_LEFT: self.on_user_left,
            EventType.TASK_CREATED: self.on_task_created,
            EventType.TASK_UPDATED: self.on_task_updated,
            EventType.TASK_MOVED: self.on_task_moved,
            EventType.TASK_DELETED: self.on_task_deleted,
            EventType.LIST_CREATED: self.on_list_created,
            EventType.LIST_UPDATED: self.on_list_updated,
            EventType.LIST_DELETED: self.on_list_deleted,
            EventType.BOARD_UPDATED: self.on_board_updated,
            EventType.USER_TYPING: self.on_user_typing,
            EventType.CHAT_TYPING: self.on_chat_typing,
            EventType.NEW_CHAT_MESSAGE: self.on_chat_message,
            EventType.CHAT_ERROR: self.on_chat_error,
            EventType.NOTIFICATION: self.on_notification,
        }
        for event, handler in handlers.items():
            self.sio.on(str(event), handler)

    # --- Connection ---

    async def connect(self, url: str, token: str = "", socketio_path: str = "socket.io") -> None:
        await self.sio.connect(
            url,
            auth={"token": token} if token else None,
            transports=["websocket", "polling"],
            socketio_path=socketio_path,
        )

    async def on_connect(self) -> None:
        await self._emit(EventType.JOIN_BOARD, {"boardId": self.board_id, "user": self.user})

    async def close(self) -> None:
        await self._emit(EventType.LEAVE_BOARD, {"boardId": self.board_id})
        await self.sio.disconnect()

    async def _emit(self, event: EventType, data: Any) -> None:
        await self.sio.emit(str(event), data)

    # --- Local mutations: apply the REST response, then tell the room ---

    async def task_created(self, task: Entity) -> None:
        self.cache.create_task(task)
        await self._emit(EventType.TASK_CREATED, {"boardId": self.board_id, "task": task})

    async def task_updated(self, task: Entity) -> None:
        self.cache.update_task(task)
        await self._emit(EventType.TASK_UPDATED, {"boardId": self.board_id, "task": task})

    async def task_moved(
        self, task: Entity, source_list_id: str, source_index: int, destination_index: int
    ) -> None:
        """Apply a drag-and-drop move already saved over REST."""
        self.cache.move_task(task["_id"], task["listId"], destination_index)
        self.cache.update_task(task)
        await self._emit(EventType.TASK_UPDATED, {"boardId": self.board_id, "task": task})
        await self._emit(
            EventType.TASK_MOVED,
            {
                "boardId": self.board_id,
                "taskId": task["_id"],
                "sourceListId": source_list_id,
                "destinationListId": task["listId"],
                "sourceIndex": source_index,
                "destinationIndex": destination_index,
            },
        )

    async def task_deleted(self, task_id: str, list_id: str) -> None:
        self.cache.delete_task(task_id)
        await self._emit(
            EventType.TASK_DELETED, {"boardId": self.board_id, "taskId": task_id, "listId": list_id}
        )

    async def comment_added(self, task_id: str, comment: Entity) -> None:
        task = self.cache.add_comment(task_id, comment)
        if task is not None:
            await self._emit(EventType.TASK_UPDATED, {"boardId": self.board_id, "task": task})

    async def comment_deleted(self, task_id: str, comment_id: str) -> None:
        task = self.cache.delete_comment(task_id, comment_id)
        if task is not None:
            await self._emit(EventType.TASK_UPDATED, {"boardId": self.board_id, "task": task})

    async def list_created(self, lst: Entity) -> None:
        self.cache.create_list(lst)
        await self._emit(EventType.LIST_CREATED, {"boardId": self.board_id, "list": lst})

    async def list_updated(self, lst: Entity) -> None:
        self.cache.update_list(lst)
        await self._emit(EventType.LIST_UPDATED, {"boardId": self.board_id, "list": lst})

    async def list_deleted(self, list_id: str) -> None:
        self.cache.delete_list(list_id)
        await self._emit(EventType.LIST_DELETED, {"boardId": self.board_id, "listId": list_id})

    async def board_updated(self, board: Entity) -> None:
        self.cache.update_board(board)
        await self._emit(EventType.BOARD_UPDATED, {"boardId": self.board_id, "board": board})

    async def send_chat(self, content: str, type: str = "text") -> None:
        """Send a chat message. It shows up in ``messages`` once the server echoes it."""
        sender_id = (self.user or {}).get("_id") or (self.user or {}).get("id")
        await self._emit(
            EventType.CHAT_MESSAGE,
            {"boardId": self.board_id, "senderId": sender_id, "content": content, "type": type},
        )

    async def set_typing(self, is_typing: bool) -> None:
        await self._emit(EventType.USER_TYPING, {"boardId": self.board_id, "isTyping": is_typing})

    async def set_chat_typing(self, is_typing: bool) -> None:
        await self._emit(EventType.CHAT_TYPING, {"boardId": self.board_id, "isTyping": is_typing})

    # --- Remote events ---

    def on_online_users(self, users: list[dict[str, Any]]) -> None:
        self.online_users = list(users or [])

    def on_user_joined(self, data: dict[str, Any]) -> None:
        self.online_users = list(data.get("onlineUsers") or [])
        if data.get("user"):
            self._note(f"{data['user'].get('name')} joined the board")

    def on_user_left(self, data: dict[str, Any]) -> None:
        self.online_users = list(data.get("onlineUsers") or [])
        if data.get("user"):
            self._note(f"{data['user'].get('name')} left the board")

    def on_task_created(self, payload: dict[str, Any]) -> None:
        task = strip_sender(payload)
        if self.cache.create_task(task) and payload.get("sender"):
            self._note(f"{payload['sender'].get('name')} created task \"{task.get('title')}\"")

    def on_task_updated(self, payload: dict[str, Any]) -> None:
        self.cache.update_task(strip_sender(payload))

    def on_task_moved(self, payload: dict[str, Any]) -> None:
        self.cache.move_task(
            payload.get("taskId") or "",
            payload.get("destinationListId") or "",
            payload.get("destinationIndex"),
        )
        if payload.get("sender"):
            self._note(f"{payload['sender'].get('name')} moved a task")

    def on_task_deleted(self, payload: dict[str, Any]) -> None:
        self.cache.delete_task(payload.get("taskId") or "")
        if payload.get("sender"):
            self._note(f"{payload['sender'].get('name')} deleted a task")

    def on_list_created(self, payload: dict[str, Any]) -> None:
        lst = strip_sender(payload)
        if self.cache.create_list(lst) and payload.get("sender"):
            self._note(f"{payload['sender'].get('name')} created list \"{lst.get('title')}\"")

    def on_list_updated(self, payload: dict[str, Any]) -> None:
        self.cache.update_list(strip_sender(payload))

    def on_list_deleted(self, payload: dict[str, Any]) -> None:
        self.cache.delete_list(payload.get("listId") or "")

    def on_board_updated(self, board: dict[str, Any]) -> None:
        if isinstance(board, dict):
            self.cache.update_board(board)

    def on_user_typing(self, data: dict[str, Any]) -> None:
        _set_typing(self.typing_users, data)

    def on_chat_typing(self, data: dict[str, Any]) -> None:
        _set_typing(self.chat_typing_users, data)

    def on_chat_message(self, message: dict[str, Any]) -> None:
        if not any(m.get("_id") == message.get("_id") for m in self.messages):
            self.messages.append(message)

    def on_chat_error(self, data: dict[str, Any]) -> None:
        self.last_error = (data or {}).get("message") or "Failed to send message"
        logger.warning("Chat error on board %s: %s", self.board_id, self.last_error)

    def on_notification(self, data: dict[str, Any]) -> None:
        self.notifications.append(data)

    def _note(self, message: str) -> None:
        self.activity.append(message)
        logger.info(message)


def _set_typing(typing_users: list[dict[str, Any]], data: dict[str, Any]) -> None:
    user = data.get("user") if isinstance(data, dict) else None
    user_id = user.get("_id") if isinstance(user, dict) else None
    if user_id is None:
        return
    present = any(u.get("_id") == user_id for u in typing_users)
    if data.get("isTyping"):
        if not present:
            typing_users.append(user)
    else:
        typing_users[:] = [u for u in typing_users if u.get("_id") != user_id]

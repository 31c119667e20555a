"""Tests for mutation fan-out: everyone in the board room except the sender."""

from __future__ import annotations

import pytest
import pytest_asyncio

from syncboard.web.realtime import Connection, EventRelay, EventType, RoomRouter
from syncboard.web.realtime.relay import format_relayed


@pytest_asyncio.fixture
async def room(transport, registry, alice, bob, carol):
    """Three connections on board b1 and one on b2, with join traffic cleared."""
    router = RoomRouter(transport, registry)
    conns = {
        "a": Connection("a"),
        "b": Connection("b"),
        "c": Connection("c"),
        "z": Connection("z"),
    }
    await router.join_board(conns["a"], "b1", alice)
    await router.join_board(conns["b"], "b1", bob)
    await router.join_board(conns["c"], "b1", carol)
    await router.join_board(conns["z"], "b2", bob)
    transport.inbox.clear()
    return conns


@pytest.fixture
def relay(transport) -> EventRelay:
    return EventRelay(transport)


class TestSenderExclusion:
    async def test_task_updated_reaches_others_once(self, relay, transport, room):
        data = {"boardId": "b1", "task": {"_id": "t1", "title": "X"}}
        await relay.relay(room["a"], EventType.TASK_UPDATED, data)

        assert transport.received("a", "taskUpdated") == []
        for cid in ("b", "c"):
            (payload,) = transport.received(cid, "taskUpdated")
            assert payload["_id"] == "t1"
            assert payload["title"] == "X"
            assert payload["sender"]["_id"] == "u1"
        assert transport.received("z") == []

    @pytest.mark.parametrize(
        ("event", "data"),
        [
            (EventType.TASK_CREATED, {"task": {"_id": "t1", "listId": "l1"}}),
            (EventType.TASK_DELETED, {"taskId": "t1", "listId": "l1"}),
            (EventType.LIST_CREATED, {"list": {"_id": "l1", "title": "Todo"}}),
            (EventType.LIST_UPDATED, {"list": {"_id": "l1", "title": "Doing"}}),
            (EventType.LIST_DELETED, {"listId": "l1"}),
            (EventType.BOARD_UPDATED, {"board": {"_id": "b1", "title": "New"}}),
            (EventType.USER_TYPING, {"isTyping": True}),
            (EventType.CHAT_TYPING, {"isTyping": True}),
            (
                EventType.TASK_MOVED,
                {
                    "taskId": "t1",
                    "sourceListId": "l1",
                    "destinationListId": "l2",
                    "sourceIndex": 0,
                    "destinationIndex": 3,
                },
            ),
        ],
    )
    async def test_every_relayed_event_skips_sender(self, relay, transport, room, event, data):
        await relay.relay(room["b"], event, {"boardId": "b1", **data})
        assert transport.received("b") == []
        assert len(transport.received("a", event)) == 1
        assert len(transport.received("c", event)) == 1


class TestPayloads:
    async def test_entity_is_spread_with_sender(self, relay, transport, room):
        task = {"_id": "t1", "listId": "l1", "assignedUsers": ["u2"], "comments": []}
        await relay.relay(room["a"], EventType.TASK_CREATED, {"boardId": "b1", "task": task})
        (payload,) = transport.received("b", "taskCreated")
        assert payload == {**task, "sender": room["a"].sender}

    async def test_move_fields(self, relay, transport, room):
        data = {
            "boardId": "b1",
            "taskId": "t1",
            "sourceListId": "l1",
            "destinationListId": "l2",
            "sourceIndex": 1,
            "destinationIndex": 0,
            "extra": "ignored",
        }
        await relay.relay(room["a"], EventType.TASK_MOVED, data)
        (payload,) = transport.received("b", "taskMoved")
        assert payload == {
            "taskId": "t1",
            "sourceListId": "l1",
            "destinationListId": "l2",
            "sourceIndex": 1,
            "destinationIndex": 0,
            "sender": room["a"].sender,
        }

    async def test_task_deleted_fields(self, relay, transport, room):
        await relay.relay(
            room["a"], EventType.TASK_DELETED, {"boardId": "b1", "taskId": "t1", "listId": "l1"}
        )
        (payload,) = transport.received("c", "taskDeleted")
        assert payload == {"taskId": "t1", "listId": "l1", "sender": room["a"].sender}

    async def test_list_deleted_fields(self, relay, transport, room):
        await relay.relay(room["a"], EventType.LIST_DELETED, {"boardId": "b1", "listId": "l1"})
        (payload,) = transport.received("c", "listDeleted")
        assert payload == {"listId": "l1", "sender": room["a"].sender}

    async def test_board_updated_has_no_sender(self, relay, transport, room):
        board = {"_id": "b1", "title": "Renamed"}
        await relay.relay(room["a"], EventType.BOARD_UPDATED, {"boardId": "b1", "board": board})
        assert transport.received("b", "boardUpdated") == [board]

    async def test_typing_carries_sender_as_user(self, relay, transport, room):
        await relay.relay(room["a"], EventType.USER_TYPING, {"boardId": "b1", "isTyping": True})
        assert transport.received("b", "userTyping") == [
            {"user": room["a"].sender, "isTyping": True}
        ]

    async def test_payload_is_not_validated(self, relay, transport, room):
        data = {"boardId": "b1", "task": {"_id": "t1", "title": "", "priority": "bogus"}}
        await relay.relay(room["a"], EventType.TASK_UPDATED, data)
        assert transport.received("b", "taskUpdated")[0]["priority"] == "bogus"

    async def test_anonymous_sender_is_none(self, relay, transport, room):
        anon = Connection("x")
        await relay.relay(anon, EventType.LIST_DELETED, {"boardId": "b1", "listId": "l1"})
        assert transport.received("a", "listDeleted")[0]["sender"] is None

    def test_unknown_event_rejected(self):
        with pytest.raises(ValueError):
            format_relayed(EventType.NOTIFICATION, {}, None)


class TestMalformed:
    @pytest.mark.parametrize("data", [None, "b1", 42, {}, {"boardId": ""}, {"task": {"_id": "t"}}])
    async def test_no_board_is_dropped(self, relay, transport, room, data):
        assert await relay.relay(room["a"], EventType.TASK_UPDATED, data) is False
        assert all(transport.received(cid) == [] for cid in room)

    async def test_board_never_joined_is_still_routed(self, relay, transport, room):
        data = {"boardId": "b1", "task": {"_id": "t"}}
        await relay.relay(room["z"], EventType.TASK_UPDATED, data)
        assert len(transport.received("a", "taskUpdated")) == 1

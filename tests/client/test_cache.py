"""Tests for BoardCache reconciliation of local and relayed writes."""

from __future__ import annotations

import pytest

from syncboard.client import BoardCache


def _task(task_id: str, list_id: str, **fields) -> dict:
    return {"_id": task_id, "listId": list_id, "title": task_id, "comments": [], **fields}


@pytest.fixture
def cache() -> BoardCache:
    return BoardCache(
        {
            "_id": "b1",
            "title": "Roadmap",
            "lists": [
                {"_id": "l1", "title": "Todo", "tasks": [_task("t1", "l1"), _task("t2", "l1")]},
                {"_id": "l2", "title": "Doing", "tasks": []},
            ],
        }
    )


def _ids(cache: BoardCache, list_id: str) -> list[str]:
    return [t["_id"] for t in cache.tasks(list_id)]


class TestLoad:
    def test_load_copies_input(self):
        board = {"_id": "b1", "lists": [{"_id": "l1", "tasks": [_task("t1", "l1")]}]}
        cache = BoardCache(board)
        cache.delete_task("t1")
        assert board["lists"][0]["tasks"][0]["_id"] == "t1"

    def test_unpopulated_refs_dropped(self):
        cache = BoardCache({"_id": "b1", "lists": [{"_id": "l1", "tasks": ["t1", "t2"]}]})
        assert cache.tasks("l1") == []

    def test_empty_cache_is_inert(self):
        cache = BoardCache()
        assert cache.create_task(_task("t1", "l1")) is False
        assert cache.update_task(_task("t1", "l1")) is False
        assert cache.delete_task("t1") is False
        assert cache.create_list({"_id": "l1"}) is False
        assert cache.delete_list("l1") is False
        assert cache.update_board({"_id": "b1"}) is False


class TestCreate:
    def test_appends_to_its_list(self, cache):
        assert cache.create_task(_task("t3", "l2")) is True
        assert _ids(cache, "l2") == ["t3"]

    def test_idempotent_by_id(self, cache):
        cache.create_task(_task("t3", "l2", title="local"))
        assert cache.create_task(_task("t3", "l2", title="echo")) is False
        assert _ids(cache, "l2") == ["t3"]
        assert cache.get_task("t3")["title"] == "local"

    def test_existing_id_in_other_list_not_duplicated(self, cache):
        assert cache.create_task(_task("t1", "l2")) is False
        assert cache.list_ids_holding("t1") == ["l1"]

    def test_unknown_list_is_noop(self, cache):
        assert cache.create_task(_task("t9", "missing")) is False
        assert cache.get_task("t9") is None

    def test_list_create_idempotent(self, cache):
        assert cache.create_list({"_id": "l3", "title": "Done"}) is True
        assert cache.create_list({"_id": "l3", "title": "Done again"}) is False
        assert [lst["_id"] for lst in cache.lists] == ["l1", "l2", "l3"]
        assert cache.tasks("l3") == []


class TestUpdate:
    def test_replaces_wholesale(self, cache):
        cache.update_task({"_id": "t1", "listId": "l1", "title": "New"})
        task = cache.get_task("t1")
        assert task == {"_id": "t1", "listId": "l1", "title": "New"}
        assert _ids(cache, "l1") == ["t1", "t2"]

    def test_last_writer_wins(self, cache):
        cache.update_task(_task("t1", "l1", title="remote"))
        cache.update_task(_task("t1", "l1", title="local"))
        assert cache.get_task("t1")["title"] == "local"

    def test_absent_is_noop(self, cache):
        assert cache.update_task(_task("t9", "l1")) is False
        assert cache.get_task("t9") is None

    def test_update_without_list_id_stays_put(self, cache):
        cache.update_task({"_id": "t2", "title": "Renamed"})
        assert _ids(cache, "l1") == ["t1", "t2"]

    def test_list_update_keeps_tasks(self, cache):
        assert cache.update_list({"_id": "l1", "title": "Backlog", "tasks": ["t1"]}) is True
        lst = cache.get_list("l1")
        assert lst["title"] == "Backlog"
        assert _ids(cache, "l1") == ["t1", "t2"]

    def test_list_update_absent_is_noop(self, cache):
        assert cache.update_list({"_id": "l9", "title": "x"}) is False

    def test_board_update_keeps_lists(self, cache):
        assert cache.update_board({"_id": "b1", "title": "Renamed"}) is True
        assert cache.board["title"] == "Renamed"
        assert len(cache.lists) == 2

    def test_board_update_other_board_ignored(self, cache):
        assert cache.update_board({"_id": "b2", "title": "Other"}) is False
        assert cache.board["title"] == "Roadmap"


class TestMove:
    def test_update_with_new_list_moves_task(self, cache):
        cache.update_task(_task("t1", "l2", title="moved"))
        assert _ids(cache, "l1") == ["t2"]
        assert _ids(cache, "l2") == ["t1"]
        assert cache.get_task("t1")["title"] == "moved"

    def test_update_after_optimistic_move(self, cache):
        cache.move_task("t1", "l2", 0)
        cache.update_task(_task("t1", "l2", title="server"))
        assert _ids(cache, "l1") == ["t2"]
        assert _ids(cache, "l2") == ["t1"]

    def test_stale_copy_in_old_list_removed(self, cache):
        cache.get_list("l2")["tasks"].append(_task("t1", "l2"))
        cache.update_task(_task("t1", "l2"))
        assert cache.list_ids_holding("t1") == ["l2"]
        assert _ids(cache, "l2") == ["t1"]

    def test_update_to_uncached_list_drops_task(self, cache):
        assert cache.update_task(_task("t1", "elsewhere")) is True
        assert cache.get_task("t1") is None

    def test_move_to_index(self, cache):
        cache.create_task(_task("t3", "l2"))
        assert cache.move_task("t1", "l2", 0) is True
        assert _ids(cache, "l2") == ["t1", "t3"]
        assert cache.get_task("t1")["listId"] == "l2"

    def test_move_within_list(self, cache):
        cache.move_task("t2", "l1", 0)
        assert _ids(cache, "l1") == ["t2", "t1"]

    def test_move_out_of_range_appends(self, cache):
        cache.move_task("t1", "l2", 99)
        assert _ids(cache, "l2") == ["t1"]

    def test_move_absent_task_or_list_is_noop(self, cache):
        assert cache.move_task("t9", "l2", 0) is False
        assert cache.move_task("t1", "l9", 0) is False
        assert _ids(cache, "l1") == ["t1", "t2"]

    def test_populated_list_reference(self, cache):
        cache.update_task({"_id": "t1", "listId": {"_id": "l2", "title": "Doing"}})
        assert _ids(cache, "l2") == ["t1"]


class TestDelete:
    def test_delete_task(self, cache):
        assert cache.delete_task("t1") is True
        assert _ids(cache, "l1") == ["t2"]

    def test_delete_absent_task(self, cache):
        cache.delete_task("t1")
        assert cache.delete_task("t1") is False

    def test_delete_list(self, cache):
        assert cache.delete_list("l1") is True
        assert cache.get_task("t1") is None
        assert cache.delete_list("l1") is False

    def test_create_after_delete(self, cache):
        cache.delete_task("t1")
        assert cache.create_task(_task("t1", "l2")) is True
        assert _ids(cache, "l2") == ["t1"]


class TestComments:
    def test_add_comment(self, cache):
        task = cache.add_comment("t1", {"_id": "c1", "text": "hi", "user": "u1"})
        assert [c["_id"] for c in task["comments"]] == ["c1"]
        assert [c["_id"] for c in cache.get_task("t1")["comments"]] == ["c1"]

    def test_add_comment_idempotent(self, cache):
        cache.add_comment("t1", {"_id": "c1", "text": "hi"})
        cache.add_comment("t1", {"_id": "c1", "text": "hi"})
        assert len(cache.get_task("t1")["comments"]) == 1

    def test_delete_comment_rebuilds_task(self, cache):
        cache.add_comment("t1", {"_id": "c1", "text": "one"})
        cache.add_comment("t1", {"_id": "c2", "text": "two"})
        task = cache.delete_comment("t1", "c1")
        assert [c["_id"] for c in task["comments"]] == ["c2"]
        assert [c["_id"] for c in cache.get_task("t1")["comments"]] == ["c2"]

    def test_comment_on_absent_task(self, cache):
        assert cache.add_comment("t9", {"_id": "c1"}) is None
        assert cache.delete_comment("t9", "c1") is None


class TestMalformed:
    @pytest.mark.parametrize("entity", [{}, {"title": "no id"}, {"_id": None, "listId": "l1"}])
    def test_entities_without_id_are_noops(self, cache, entity):
        before = [dict(lst, tasks=list(lst["tasks"])) for lst in cache.lists]
        assert cache.create_task(entity) is False
        assert cache.update_task(entity) is False
        assert cache.create_list(entity) is False
        assert cache.update_list(entity) is False
        assert cache.update_board(entity) is False
        assert cache.lists == before
        assert cache.board["title"] == "Roadmap"

    @pytest.mark.parametrize("entity", [None, "t1", ["t1"], 7])
    def test_non_dict_entities_are_noops(self, cache, entity):
        assert cache.create_task(entity) is False
        assert cache.update_task(entity) is False
        assert cache.create_list(entity) is False
        assert cache.update_list(entity) is False
        assert cache.update_board(entity) is False
        assert _ids(cache, "l1") == ["t1", "t2"]

    def test_cached_entries_without_id_are_skipped(self):
        cache = BoardCache(
            {"_id": "b1", "lists": [{"title": "stray", "tasks": [{"title": "x"}]}, {"_id": "l1"}]}
        )
        assert cache.get_list("l1") is not None
        assert cache.get_task("t1") is None
        assert cache.create_task(_task("t1", "l1")) is True
        assert cache.list_ids_holding("t1") == ["l1"]
        assert cache.delete_list("l9") is False

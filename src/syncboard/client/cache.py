"""BoardCache - the client-local board -> lists -> tasks tree.

Two producers write into it: the client's own REST responses and events
relayed from other users. Neither is ordered against the other, so every
operation is idempotent by id and a no-op when its target is missing:

- create appends only if the id is not already present
- update replaces the entity wholesale (last writer wins, no field merge)
- delete removes the id wherever it is, or does nothing
- a task lives in exactly one list: the one its ``listId`` names
- anything without an ``_id`` is ignored

Child collections (a board's lists, a list's tasks) are owned by their own
events, so updating a board or a list replaces its fields but keeps them.
"""

from __future__ import annotations

import copy
from typing import Any

Entity = dict[str, Any]


def entity_id(value: Any) -> str | None:
    """Id of an entity, or of a reference that may be a bare id or a populated dict."""
    if isinstance(value, dict):
        value = value.get("_id")
    return str(value) if value is not None else None


def _own_id(entity: Any) -> str | None:
    """Id of an incoming entity; None for anything that is not a dict with an id."""
    return entity_id(entity) if isinstance(entity, dict) else None


class BoardCache:
    def __init__(self, board: Entity | None = None) -> None:
        self.board: Entity | None = None
        if board is not None:
            self.load(board)

    def load(self, board: Entity) -> None:
        """Replace the whole tree, e.g. after fetching the board."""
        board = copy.deepcopy(board)
        board["lists"] = [
            {**lst, "tasks": [t for t in lst.get("tasks") or [] if isinstance(t, dict)]}
            for lst in board.get("lists") or []
            if isinstance(lst, dict)
        ]
        self.board = board

    def clear(self) -> None:
        self.board = None

    # --- Lookups ---

    @property
    def lists(self) -> list[Entity]:
        return self.board["lists"] if self.board is not None else []

    def get_list(self, list_id: str) -> Entity | None:
        return next((lst for lst in self.lists if entity_id(lst) == list_id), None)

    def get_task(self, task_id: str) -> Entity | None:
        for lst in self.lists:
            for task in lst["tasks"]:
                if entity_id(task) == task_id:
                    return task
        return None

    def tasks(self, list_id: str) -> list[Entity]:
        lst = self.get_list(list_id)
        return lst["tasks"] if lst is not None else []

    def list_ids_holding(self, task_id: str) -> list[str]:
        return [
            entity_id(lst)
            for lst in self.lists
            if any(entity_id(t) == task_id for t in lst["tasks"])
        ]

    # --- Tasks ---

    def create_task(self, task: Entity) -> bool:
        task_id = _own_id(task)
        if task_id is None:
            return False
        lst = self.get_list(entity_id(task.get("listId")) or "")
        if lst is None or self.get_task(task_id) is not None:
            return False
        lst["tasks"].append(copy.deepcopy(task))
        return True

    def update_task(self, task: Entity) -> bool:
        """Replace a cached task, moving it if its listId changed.

        Unknown tasks are ignored. If the new list is not cached the task
        drops out of the tree rather than staying in its old list.
        """
        task_id = _own_id(task)
        if task_id is None or self.get_task(task_id) is None:
            return False

        task = copy.deepcopy(task)
        target_id = entity_id(task.get("listId"))
        placed = False
        for lst in self.lists:
            for index, cached in enumerate(lst["tasks"]):
                if entity_id(cached) != task_id:
                    continue
                if target_id is None or entity_id(lst) == target_id:
                    lst["tasks"][index] = task
                    placed = True
                else:
                    lst["tasks"].pop(index)
                break

        if not placed and target_id is not None:
            destination = self.get_list(target_id)
            if destination is not None:
                destination["tasks"].append(task)
        return True

    def move_task(self, task_id: str, list_id: str, index: int | None = None) -> bool:
        """Relocate a task to ``list_id`` at ``index`` (appended if None or out of range)."""
        task = self.get_task(task_id)
        destination = self.get_list(list_id)
        if task is None or destination is None:
            return False

        for lst in self.lists:
            lst["tasks"] = [t for t in lst["tasks"] if entity_id(t) != task_id]
        task["listId"] = list_id
        if index is None or not 0 <= index <= len(destination["tasks"]):
            destination["tasks"].append(task)
        else:
            destination["tasks"].insert(index, task)
        return True

    def delete_task(self, task_id: str) -> bool:
        removed = False
        for lst in self.lists:
            kept = [t for t in lst["tasks"] if entity_id(t) != task_id]
            removed = removed or len(kept) != len(lst["tasks"])
            lst["tasks"] = kept
        return removed

    # --- Comments ---

    def add_comment(self, task_id: str, comment: Entity) -> Entity | None:
        """Append a comment to a cached task. Returns the updated task."""
        task = self.get_task(task_id)
        if task is None:
            return None
        comments = list(task.get("comments") or [])
        if not any(entity_id(c) == entity_id(comment) for c in comments):
            comments.append(copy.deepcopy(comment))
        updated = {**task, "comments": comments}
        self.update_task(updated)
        return updated

    def delete_comment(self, task_id: str, comment_id: str) -> Entity | None:
        """Rebuild a task without one comment.

        The server only confirms the deleted comment id, so the new task is
        derived from the local comment list and goes through the update path.
        """
        task = self.get_task(task_id)
        if task is None:
            return None
        comments = [c for c in task.get("comments") or [] if entity_id(c) != comment_id]
        updated = {**task, "comments": comments}
        self.update_task(updated)
        return updated

    # --- Lists ---

    def create_list(self, lst: Entity) -> bool:
        list_id = _own_id(lst)
        if self.board is None or list_id is None or self.get_list(list_id) is not None:
            return False
        tasks = [t for t in lst.get("tasks") or [] if isinstance(t, dict)]
        self.board["lists"].append({**copy.deepcopy(lst), "tasks": copy.deepcopy(tasks)})
        return True

    def update_list(self, lst: Entity) -> bool:
        list_id = _own_id(lst)
        if list_id is None:
            return False
        for index, cached in enumerate(self.lists):
            if entity_id(cached) == list_id:
                self.lists[index] = {**copy.deepcopy(lst), "tasks": cached["tasks"]}
                return True
        return False

    def delete_list(self, list_id: str) -> bool:
        if self.board is None:
            return False
        kept = [lst for lst in self.lists if entity_id(lst) != list_id]
        removed = len(kept) != len(self.lists)
        self.board["lists"] = kept
        return removed

    # --- Board ---

    def update_board(self, board: Entity) -> bool:
        board_id = _own_id(board)
        if self.board is None or board_id is None or entity_id(self.board) != board_id:
            return False
        self.board = {**copy.deepcopy(board), "lists": self.board["lists"]}
        return True

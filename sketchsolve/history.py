"""Undo and redo history of editing actions."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Action:
    """One editing step: the ids touched and their parameters before and after it."""

    objects: list[int] = field(default_factory=list)
    params_before: list[list[float]] = field(default_factory=list)
    params_after: list[list[float]] = field(default_factory=list)


class UndoRedo:
    """Two stacks of actions; a new action discards what could be redone."""

    def __init__(self) -> None:
        self._done: list[Action] = []
        self._undone: list[Action] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._done)

    @property
    def can_redo(self) -> bool:
        return bool(self._undone)

    def add(self, action: Action) -> None:
        """Record a new action and forget the actions that were undone."""
        self._done.append(action)
        self._undone.clear()

    def undo(self) -> Action:
        """Take back the latest action and return it."""
        if not self._done:
            raise IndexError("nothing to undo")
        action = self._done.pop()
        self._undone.append(action)
        return action

    def redo(self) -> Action:
        """Repeat the latest undone action and return it."""
        if not self._undone:
            raise IndexError("nothing to redo")
        action = self._undone.pop()
        self._done.append(action)
        return action

    def clear(self) -> None:
        self._done.clear()
        self._undone.clear()
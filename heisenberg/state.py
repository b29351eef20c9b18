"""Lifecycle flags shared by models and model arrays."""

from __future__ import annotations

from typing import List


class ObjectState:
    """
    Tracks whether an instance is new, loading, loaded, errored or dirty.

    Every SerializableObject and SerializableArray owns exactly one state.
    Nested containers contribute their own state as a child, so a change
    anywhere below an instance makes the instance report dirty.

    The instance's own dirty flag is one-shot: it is armed when the owner
    finishes loading, flips to True on the first observed change and then
    stays True until the owner is loaded again.
    """

    def __init__(self):
        self._is_new = True
        self._is_loaded = False
        self._is_error = False
        self._is_dirty = False
        self._dirty_armed = True
        self._children: List[ObjectState] = []

    def __repr__(self) -> str:
        flags = [
            name
            for name in ("is_new", "is_loading", "is_loaded", "is_error", "is_dirty")
            if getattr(self, name)
        ]
        return f"ObjectState({', '.join(flags)})"

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def is_loaded(self) -> bool:
        return self._is_loaded

    @property
    def is_error(self) -> bool:
        return self._is_error

    @property
    def is_loading(self) -> bool:
        return not self._is_loaded and not self._is_error

    @property
    def is_dirty(self) -> bool:
        pending, seen = [self], set()
        while pending:
            state = pending.pop()
            if id(state) in seen:
                continue
            seen.add(id(state))
            if state._is_dirty:
                return True
            pending.extend(state._children)
        return False

    @property
    def children(self) -> tuple:
        return tuple(self._children)

    def attach_child(self, state: ObjectState) -> None:
        if state is self:
            raise ValueError("An object state cannot be its own child")
        if any(child is state for child in self._children):
            return
        self._children.append(state)

    def mark_loaded(self) -> None:
        self._is_loaded = True

    def mark_error(self) -> None:
        self._is_error = True

    def mark_not_new(self) -> None:
        self._is_new = False

    def mark_dirty_once(self) -> None:
        """Set the own dirty flag, at most once per loaded lifetime."""
        if not self._dirty_armed:
            return
        self._is_dirty = True
        self._dirty_armed = False

    def begin_load(self) -> None:
        """
        Forget the previous load before the owner is repopulated.

        Children belonged to the old field values and are dropped; the own
        dirty flag is cleared and re-armed.
        """
        self._children.clear()
        self._is_dirty = False
        self._dirty_armed = True

"""Location marker collaborator for Genro HashRouter.

The navigation controller reads the current fragment to derive a path and
writes ``"#" + path`` back once a navigation commits. ``LocationInterface``
is the contract; ``MemoryLocation`` keeps the fragment in memory and
notifies subscribers synchronously, like a browser ``hashchange`` that only
fires when the value actually changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

__all__ = ["LocationInterface", "MemoryLocation"]


class LocationInterface(ABC):
    """Readable/writable fragment with change notification."""

    @property
    @abstractmethod
    def hash(self) -> str: ...

    @hash.setter
    @abstractmethod
    def hash(self, value: str) -> None: ...

    @abstractmethod
    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Call ``callback`` on every change; return an unsubscribe callable."""
        ...


class MemoryLocation(LocationInterface):
    """In-memory fragment.

    Values are stored with a leading ``#`` (as ``location.hash`` reports
    them); the empty fragment stays empty.
    """

    __slots__ = ("_hash", "_listeners")

    def __init__(self, hash: str = "") -> None:  # noqa: A002
        self._hash = self._normalize(hash)
        self._listeners: list[Callable[[], None]] = []

    @staticmethod
    def _normalize(value: str) -> str:
        if not value or value.startswith("#"):
            return value
        return "#" + value

    @property
    def hash(self) -> str:
        return self._hash

    @hash.setter
    def hash(self, value: str) -> None:
        value = self._normalize(value)
        if value == self._hash:
            return
        self._hash = value
        for listener in list(self._listeners):
            listener()

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Store collaborator for Genro HashRouter.

The router only needs a store exposing ``state``, ``dispatch`` and
``commit`` (``StoreInterface``). ``Store`` is a small in-memory
implementation able to host the module exported by a
``NavigationController`` next to application modules.

Modules
-------
A module is a dict with optional ``state``, ``getters``, ``mutations`` and
``actions`` keys:

- module state is nested under the module name in the root state
  (root-level keys passed to ``Store(state=...)`` sit beside it);
- getters, mutations and actions share one flat namespace; registering a
  name twice raises ``ValueError``.

Call conventions:
    - getter(local_state)
    - mutation(local_state, payload)
    - action(ActionContext, payload), sync or async

Example::

    store = Store({"router": controller.store_module},
                  actions={"loadUser": load_user})
    await store.dispatch("navigate", "/users/42")
    store.getters["routeParams"]["id"]  # '42'
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

__all__ = ["StoreInterface", "Store", "ActionContext"]


class StoreInterface(ABC):
    """The three store operations the router relies on."""

    @property
    @abstractmethod
    def state(self) -> Any:
        """Readable root state."""
        ...

    @abstractmethod
    def dispatch(self, name: str, payload: Any = None) -> Any:
        """Run an action; may return an awaitable."""
        ...

    @abstractmethod
    def commit(self, name: str, payload: Any = None) -> None:
        """Run a mutation synchronously."""
        ...


@dataclass(frozen=True, slots=True)
class ActionContext:
    """First argument of every action.

    Attributes:
        state: State of the module owning the action.
        root_state: Root state of the store.
        dispatch: Store dispatch.
        commit: Store commit.
        getters: Store getters.
    """

    state: Any
    root_state: Any
    dispatch: Callable[..., Any]
    commit: Callable[..., Any]
    getters: Mapping[str, Any]


class _Getters(Mapping[str, Any]):
    """Read-only view computing getters on access."""

    __slots__ = ("_store",)

    def __init__(self, store: Store) -> None:
        self._store = store

    def __getitem__(self, name: str) -> Any:
        getter, module = self._store._getters[name]
        return getter(self._store._local_state(module))

    def __iter__(self) -> Iterator[str]:
        return iter(self._store._getters)

    def __len__(self) -> int:
        return len(self._store._getters)


class Store(StoreInterface):
    """In-memory store hosting namespaced state and flat actions/mutations."""

    def __init__(
        self,
        modules: Mapping[str, Mapping[str, Any]] | None = None,
        *,
        state: Mapping[str, Any] | None = None,
        getters: Mapping[str, Callable] | None = None,
        mutations: Mapping[str, Callable] | None = None,
        actions: Mapping[str, Callable] | None = None,
    ) -> None:
        self._state: dict[str, Any] = dict(state or {})
        self._getters: dict[str, tuple[Callable, str | None]] = {}
        self._mutations: dict[str, tuple[Callable, str | None]] = {}
        self._actions: dict[str, tuple[Callable, str | None]] = {}
        self._register(None, getters, self._getters, "getter")
        self._register(None, mutations, self._mutations, "mutation")
        self._register(None, actions, self._actions, "action")
        for name, module in (modules or {}).items():
            self.register_module(name, module)

    def register_module(self, name: str, module: Mapping[str, Any]) -> None:
        """Mount ``module`` under ``name``."""
        if not name:
            raise ValueError("Module name must be a non-empty string")
        if name in self._state:
            raise ValueError(f"Module name collision: {name!r}")
        module_state = module.get("state", {})
        self._state[name] = module_state() if inspect.isfunction(module_state) else module_state
        self._register(name, module.get("getters"), self._getters, "getter")
        self._register(name, module.get("mutations"), self._mutations, "mutation")
        self._register(name, module.get("actions"), self._actions, "action")

    def _register(
        self,
        module: str | None,
        handlers: Mapping[str, Callable] | None,
        table: dict[str, tuple[Callable, str | None]],
        kind: str,
    ) -> None:
        for handler_name, handler in (handlers or {}).items():
            if handler_name in table:
                raise ValueError(f"Duplicate {kind} name: {handler_name!r}")
            table[handler_name] = (handler, module)

    def _local_state(self, module: str | None) -> Any:
        return self._state if module is None else self._state[module]

    @property
    def state(self) -> dict[str, Any]:
        return self._state

    @property
    def getters(self) -> Mapping[str, Any]:
        return _Getters(self)

    def commit(self, name: str, payload: Any = None) -> None:
        """Run mutation ``name``.

        Raises:
            KeyError: If no mutation is registered under ``name``.
        """
        if name not in self._mutations:
            raise KeyError(f"Unknown mutation {name!r}")
        mutation, module = self._mutations[name]
        mutation(self._local_state(module), payload)

    async def dispatch(self, name: str, payload: Any = None) -> Any:
        """Run action ``name`` and return its (awaited) result.

        Raises:
            KeyError: If no action is registered under ``name``.
        """
        if name not in self._actions:
            raise KeyError(f"Unknown action {name!r}")
        action, module = self._actions[name]
        context = ActionContext(
            state=self._local_state(module),
            root_state=self._state,
            dispatch=self.dispatch,
            commit=self.commit,
            getters=self.getters,
        )
        result = action(context, payload)
        if inspect.isawaitable(result):
            result = await result
        return result

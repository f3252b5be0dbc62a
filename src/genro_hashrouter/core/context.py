# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""RoutingContext - store capabilities handed to route steps.

Function steps receive a ``RoutingContext`` as first argument. It carries the
three store operations the router relies on and nothing else, so any store
exposing ``state``, ``dispatch`` and ``commit`` can host the router.

Example::

    async def load_user(context, params):
        await context.dispatch("fetchUser", params["id"])
        return {"user": context.state["users"][params["id"]]}

    router.add("/users/:id", load_user)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

__all__ = ["RoutingContext"]


@dataclass(frozen=True, slots=True)
class RoutingContext:
    """Store capabilities visible to steps.

    Attributes:
        state: Readable (root) store state.
        dispatch: ``dispatch(action_name, payload)``; may return an awaitable.
        commit: ``commit(mutation_name, payload)``.
    """

    state: Any
    dispatch: Callable[..., Any]
    commit: Callable[..., Any]

    @classmethod
    def from_store(cls, store: Any) -> RoutingContext:
        """Build a context from any object exposing ``state``/``dispatch``/``commit``."""
        if isinstance(store, RoutingContext):
            return store
        return cls(state=store.state, dispatch=store.dispatch, commit=store.commit)

"""NavigationController - preemption-safe navigation over a router.

The controller turns location changes into router executions and commits
the outcome to a store, guarding against overlapping navigations.

Protocol
--------
``navigate(context, path)`` (exported as the ``navigate`` action):

1. A request for the path of the current (or most recent) navigation is
   ignored. This stops the change notification caused by our own location
   write from starting a second navigation.
2. A new handle (generation number) is recorded as current, and the
   ``navigating`` mutation is committed.
3. ``router.exec`` runs, then the ``post`` hook. Failures of either end up
   in ``params.error``; nothing is raised.
4. If the handle is still current, the location is set to ``sigil + path``
   and ``navigated`` is committed with ``{"path", "params"}``. Otherwise the
   result is discarded. This block contains no ``await``.

Superseded navigations are not cancelled: their steps run to completion
and the result is dropped.

Store module
------------
``controller.store_module`` is the contract offered to a hosting store::

    {
        "state": NavigationState(progress, path, params),
        "getters": {"routing", "routeParams"},
        "mutations": {"navigating", "navigated"},
        "actions": {"navigate"},
    }

Example::

    controller = create_navigation(router, location=MemoryLocation("#/users/42"))
    store = Store({"router": controller.store_module})
    await controller.start(store)
    store.state["router"].params["id"]  # '42'
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from genro_hashrouter.exceptions import RoutingError, StepFailure

from .context import RoutingContext
from .location import LocationInterface, MemoryLocation
from .params import RouteParams
from .route import HASH_SIGIL
from .router import Router
from .router_interface import RouterInterface

__all__ = ["NavigationState", "NavigationController", "create_navigation"]

logger = logging.getLogger(__name__)


@dataclass
class NavigationState:
    """Routing state held by the store.

    Attributes:
        progress: True between ``navigating`` and ``navigated``.
        path: Last committed path.
        params: Last committed params.
    """

    progress: bool = False
    path: str = ""
    params: RouteParams = field(default_factory=RouteParams)


def navigating(state: NavigationState, payload: Any = None) -> None:
    state.progress = True


def navigated(state: NavigationState, payload: dict[str, Any]) -> None:
    state.progress = False
    state.path = payload["path"]
    state.params = payload["params"]


class NavigationController:
    """Sequences navigations for one router.

    Args:
        router: Root router (a new ``Router`` when omitted).
        location: Location collaborator (a ``MemoryLocation`` when omitted).
        post: Hook ``post(params)`` run after the steps and before commit;
            sync or async.
        strip_chars: Leading characters stripped from the fragment by ``update``.
        sigil: Prefix written before the path on commit.
    """

    def __init__(
        self,
        router: RouterInterface | None = None,
        *,
        location: LocationInterface | None = None,
        post: Callable[[RouteParams], Any] | None = None,
        strip_chars: str = "#/",
        sigil: str = HASH_SIGIL,
    ) -> None:
        self.router = router if router is not None else Router()
        self.location = location if location is not None else MemoryLocation()
        self.post = post
        self.strip_chars = strip_chars
        self.sigil = sigil
        self.state = NavigationState()
        self._handle = 0
        self._current_path = ""
        self._unsubscribe: Callable[[], None] | None = None
        self._tasks: set[asyncio.Task] = set()
        self.store_module: dict[str, Any] = {
            "state": self.state,
            "getters": {
                "routing": lambda state: state,
                "routeParams": lambda state: state.params,
            },
            "mutations": {
                "navigating": navigating,
                "navigated": navigated,
            },
            "actions": {
                "navigate": self.navigate,
            },
        }

    @property
    def handle(self) -> int:
        """Handle of the current navigation (0 before the first one)."""
        return self._handle

    @property
    def current_path(self) -> str:
        return self._current_path

    async def navigate(self, context: Any, path: str) -> RouteParams | None:
        """Action called on location change.

        ``context`` is an action context (or a store) exposing ``dispatch``,
        ``commit`` and ``state``; ``root_state`` is used when present.
        Returns the params, or None for an ignored repeated request.
        """
        if path == self._current_path:
            logger.debug("Ignoring repeated navigation to %r", path)
            return None
        self._handle += 1
        handle = self._handle
        self._current_path = path

        context.commit("navigating")
        routing_context = RoutingContext(
            state=getattr(context, "root_state", context.state),
            dispatch=context.dispatch,
            commit=context.commit,
        )
        params = await self.router.exec(routing_context, path)
        await self._run_post(params)

        if handle != self._handle:
            logger.debug("Discarding preempted navigation to %r", path)
            return params
        self.location.hash = self.sigil + path
        context.commit("navigated", {"path": path, "params": params})
        return params

    async def _run_post(self, params: RouteParams) -> None:
        """Run the post hook; a failure becomes ``params.error``.

        The hook runs even when the pipeline failed. Its failure replaces the
        earlier error, which stays reachable as ``params.error.__context__``.
        """
        if self.post is None:
            return
        try:
            result = self.post(params)
            if inspect.isawaitable(result):
                await result
        except Exception as error:
            logger.debug("Post hook failed: %r", error)
            failure = error if isinstance(error, RoutingError) else StepFailure(error)
            if params.error is not None and params.error is not failure:
                failure.__context__ = params.error
            params.error = failure

    async def update(self, store: Any) -> RouteParams | None:
        """Navigate to the path held by the location."""
        path = "/" + self.location.hash.lstrip(self.strip_chars)
        return await store.dispatch("navigate", path)

    def install(self, store: Any) -> Callable[[], None]:
        """Subscribe to location changes; each change schedules ``update``.

        Returns the unsubscribe callable (also available as ``uninstall``).
        """
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = self.location.subscribe(lambda: self._schedule_update(store))
        return self._unsubscribe

    def uninstall(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def start(self, store: Any) -> RouteParams | None:
        """Start routing: install the listener and update once immediately."""
        self.install(store)
        return await self.update(store)

    def _schedule_update(self, store: Any) -> None:
        task = asyncio.get_running_loop().create_task(self.update(store))
        self._tasks.add(task)
        task.add_done_callback(self._update_done)

    def _update_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Location update failed", exc_info=error)


def create_navigation(router: RouterInterface | None = None, **kwargs: Any) -> NavigationController:
    """Build a NavigationController for ``router`` (a new Router when omitted)."""
    return NavigationController(router, **kwargs)

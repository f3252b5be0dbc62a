"""Genro HashRouter - hash-fragment routing engine for Python.

Maps paths to ordered step pipelines, extracts named and positional
parameters, delegates path remainders to nested routers and commits
navigations to a store, discarding the ones that were superseded.

Public exports:
    - ``Router``: Router with plugin support (``add``, ``child``, ``match``, ``exec``)
    - ``Route`` / ``RouteParams``: Matched route and parameter carrier
    - ``NavigationController`` / ``create_navigation``: Navigation sequencing
    - ``Store`` / ``MemoryLocation``: In-memory collaborators
    - ``NotFound``, ``StepFailure``, ``GenerationFailure``: Error kinds

Built-in plugins (logging) are auto-registered on first import.

Example::

    from genro_hashrouter import Router, Store, create_navigation

    router = Router(name="app")
    router.add("/users/:id", {"tab": "profile"})
    admin = router.child("/admin", "requireAdmin")
    admin.add("/settings")

    controller = create_navigation(router)
    store = Store({"router": controller.store_module},
                  actions={"requireAdmin": check_admin})
    await store.dispatch("navigate", "/users/42")
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    BaseRouter,
    MemoryLocation,
    NavigationController,
    NavigationState,
    PathPattern,
    Route,
    RouteParams,
    Router,
    RouterInterface,
    RoutingContext,
    Store,
    create_navigation,
)
from .exceptions import GenerationFailure, NotFound, RoutingError, StepFailure

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging",):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "BaseRouter",
    "MemoryLocation",
    "NavigationController",
    "NavigationState",
    "PathPattern",
    "Route",
    "RouteParams",
    "Router",
    "RouterInterface",
    "RoutingContext",
    "Store",
    "create_navigation",
    "RoutingError",
    "NotFound",
    "StepFailure",
    "GenerationFailure",
]

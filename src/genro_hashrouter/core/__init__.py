"""Core runtime aggregator for Genro HashRouter.

Exposes the runtime building blocks from a single module.

Public API:
    - ``BaseRouter``: Plugin-free routing engine
    - ``Router``: Plugin-enabled router
    - ``Route``: Compiled route with URL generation
    - ``RouteParams``: Per-navigation parameter carrier
    - ``PathPattern``: Template matcher/generator
    - ``NavigationController``: Preemption-safe navigation
    - ``Store`` / ``MemoryLocation``: In-memory collaborators

Importing this module performs only imports; it does not register plugins
or instantiate routers.
"""

from .base_router import BaseRouter
from .context import RoutingContext
from .location import LocationInterface, MemoryLocation
from .navigation import NavigationController, NavigationState, create_navigation
from .params import RouteParams
from .pattern import CaptureKey, Named, PathPattern, Positional
from .route import Route
from .router import Router
from .router_interface import RouterInterface
from .store import ActionContext, Store, StoreInterface

__all__ = [
    "ActionContext",
    "BaseRouter",
    "CaptureKey",
    "LocationInterface",
    "MemoryLocation",
    "Named",
    "NavigationController",
    "NavigationState",
    "PathPattern",
    "Positional",
    "Route",
    "RouteParams",
    "Router",
    "RouterInterface",
    "RoutingContext",
    "Store",
    "StoreInterface",
    "create_navigation",
]

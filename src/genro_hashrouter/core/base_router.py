"""Plugin-free router runtime for Genro HashRouter.

This module exposes :class:`BaseRouter`, which registers routes, resolves
paths with ordered first-match semantics, runs step pipelines and builds
router hierarchies. Subclasses add plugins but must preserve these semantics.

Constructor and slots
---------------------
Constructor signature::

    BaseRouter(name=None, *, base_path="", parent=None, router_factory=None,
               sensitive=False, strict=False)

- ``base_path``: fully-qualified prefix; routes generate URLs under it.
- ``parent``: back-reference to the enclosing router (never ownership).
- ``router_factory``: callable building child routers. It receives the
  keyword arguments of this constructor and must return a ``BaseRouter``.
  When omitted, ``_create_child`` builds an instance of the same flavour.
  Children inherit the factory.
- ``sensitive`` / ``strict``: pattern options applied to every route.

Registration
------------
``add(path, *steps, name=None, **options)`` compiles ``path`` into a
``Route`` and appends it; registration order is match priority. ``options``
are handed to ``_after_route_registered`` (plugin-scoped route config).

Matching and execution
----------------------
- ``match(path, params=None)`` scans routes top-down, binds the captures of
  the first match and never runs steps.
- ``exec(context, path, params=None)`` matches, then runs the route steps
  via ``pipeline.run_steps``. Unmatched paths record ``NotFound``.

Children
--------
``child(path, *steps)`` strips trailing slashes, creates a router whose
``base_path`` extends this one, and registers here a synthetic
``path + "/*"`` route whose last step pops the rest capture and delegates
``"/" + rest`` to the child with the same params. The captures before the
rest move to ``params.ancestor_positional`` so URLs can still be generated
from the child's match.

Hooks for subclasses
--------------------
- ``_wrap_step``: override to wrap step invocation (plugin chain).
- ``_after_route_registered``: invoked with the route-level options.
- ``_on_attached_to_parent``: invoked on a new child router.
- ``_create_child``: default child construction.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from genro_toolbox.typeutils import safe_is_instance

from genro_hashrouter.exceptions import NotFound

from .context import RoutingContext
from .params import RouteParams
from .pipeline import run_steps
from .route import Route, Step
from .router_interface import RouterInterface

__all__ = ["BaseRouter"]


class BaseRouter(RouterInterface):
    """Plugin-free router.

    Responsibilities:
        - Register routes in priority order
        - Resolve paths (first match wins) and bind captures
        - Run step pipelines with failures captured into the params
        - Build nested routers reachable through synthetic wildcard routes
    """

    __slots__ = (
        "name",
        "base_path",
        "parent",
        "base_route",
        "routes",
        "router_factory",
        "sensitive",
        "strict",
        "_children",
    )

    def __init__(
        self,
        name: str | None = None,
        *,
        base_path: str = "",
        parent: BaseRouter | None = None,
        router_factory: Callable[..., BaseRouter] | None = None,
        sensitive: bool = False,
        strict: bool = False,
    ) -> None:
        self.name = name
        self.base_path = base_path
        self.parent = parent
        self.base_route: Route | None = None
        self.routes: list[Route] = []
        self.router_factory = router_factory
        self.sensitive = sensitive
        self.strict = strict
        self._children: list[BaseRouter] = []

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def add(self, path: str, *steps: Step, name: str | None = None, **options: Any) -> Route:
        """Register a route. Routes are matched in the order they are added.

        Args:
            path: Path template (``/users/:id``, ``/files/*``...).
            *steps: Steps run in order when the route matches.
            name: Logical route name (defaults to ``path``).
            **options: Route-level options (e.g. ``logging_before=False``).

        Returns:
            The new Route.

        Raises:
            TypeError: on an unsupported step or unknown option.
        """
        route = Route(
            self, path, steps, name=name, sensitive=self.sensitive, strict=self.strict
        )
        self._after_route_registered(route, options)
        self.routes.append(route)
        return route

    def child(self, path: str, *steps: Step, name: str | None = None, **options: Any) -> BaseRouter:
        """Create a child router and a route here which delegates to it.

        Any steps run before delegating. Returns the child router.
        """
        prefix = path.rstrip("/")
        child = self._build_child(prefix, name)
        route = self.add(
            prefix + "/*",
            *steps,
            self._delegation_step(child),
            name=name,
            **options,
        )
        child.base_route = route
        self._children.append(child)
        child._on_attached_to_parent(self)
        return child

    def _build_child(self, prefix: str, name: str | None) -> BaseRouter:
        kwargs: dict[str, Any] = {
            "name": name or prefix or None,
            "base_path": self.base_path + prefix,
            "parent": self,
            "router_factory": self.router_factory,
            "sensitive": self.sensitive,
            "strict": self.strict,
        }
        if self.router_factory is None:
            return self._create_child(**kwargs)
        child = self.router_factory(**kwargs)
        if not safe_is_instance(child, "genro_hashrouter.core.base_router.BaseRouter"):
            raise TypeError(
                f"router_factory must return a BaseRouter, got {type(child).__name__}"
            )
        return child

    def _create_child(self, **kwargs: Any) -> BaseRouter:
        return BaseRouter(**kwargs)

    @staticmethod
    def _delegation_step(child: BaseRouter) -> Callable[..., Any]:
        async def delegate(context: RoutingContext, params: RouteParams) -> RouteParams:
            sub_path = "/" + params.descend()
            return await child._resolve(context, sub_path, params)

        return delegate

    # ------------------------------------------------------------------
    # Matching and execution
    # ------------------------------------------------------------------
    def match(self, path: str, params: RouteParams | Mapping[str, Any] | None = None) -> RouteParams:
        """Match the path to the first route accepting it.

        Returns the params with ``router`` set to this router and ``route``
        set to the matched route, or None when no route matched.
        """
        params = RouteParams.coerce(params)
        params.reset()
        return self._match(path, params)

    def _match(self, path: str, params: RouteParams) -> RouteParams:
        params.router = self
        params.route = None
        for route in self.routes:
            captures = route.pattern.match(path)
            if captures is not None:
                params.bind(captures)
                params.route = route
                break
        return params

    async def exec(
        self, context: Any, path: str, params: RouteParams | Mapping[str, Any] | None = None
    ) -> RouteParams:
        """Match the path and run the route steps.

        If no route matched, ``route`` is None and ``error`` is ``NotFound``.
        A seeded ``RouteParams`` starts with a clean outcome.
        """
        params = RouteParams.coerce(params)
        params.reset()
        return await self._resolve(RoutingContext.from_store(context), path, params)

    async def _resolve(self, context: RoutingContext, path: str, params: RouteParams) -> RouteParams:
        params = self._match(path, params)
        if params.route is None:
            params.error = NotFound(path, router=self)
            return params
        return await run_steps(self, params.route, context, params)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def children(self) -> list[BaseRouter]:
        return list(self._children)

    def nodes(self) -> dict[str, Any]:
        """Return a nested description of this router and its children."""
        result: dict[str, Any] = {"name": self.name, "base_path": self.base_path}
        if self.routes:
            result["routes"] = [
                {
                    "name": route.name,
                    "path": route.path,
                    "full_path": route.full_path,
                    "steps": len(route.steps),
                }
                for route in self.routes
            ]
        if self._children:
            result["routers"] = {
                child.base_route.name: child.nodes()  # type: ignore[union-attr]
                for child in self._children
            }
        return result

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def _wrap_step(
        self, route: Route, index: int, call_next: Callable[..., Any]
    ) -> Callable[..., Any]:
        return call_next

    def _after_route_registered(self, route: Route, options: dict[str, Any]) -> None:
        if options:
            raise TypeError(f"Unexpected route options: {', '.join(sorted(options))}")

    def _on_attached_to_parent(self, parent: BaseRouter) -> None:
        """Hook invoked on a freshly created child router."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, base_path={self.base_path!r})"

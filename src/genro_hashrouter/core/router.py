"""Router with plugin pipeline for Genro HashRouter.

``Router`` extends ``BaseRouter`` with a global plugin registry, per-router
plugin instances, step wrapping, and plugin state stored on the router.

Internal state
--------------
- ``_plugin_specs``: list of ``_PluginSpec`` (factory, kwargs copy).
- ``_plugins``: instantiated plugins in the order they were attached.
- ``_plugins_by_name``: name → plugin instance.
- ``_plugin_info``: per-plugin config store (``_all_`` and per-route buckets).
- ``_plugin_children``: plugin name → child routers to notify on config change.

Global registry
---------------
``Router.register_plugin(plugin_class)`` validates that ``plugin_class`` is a
subclass of ``BasePlugin`` with a ``plugin_code``.

Attaching plugins
-----------------
``plug(plugin_name, **config)`` looks up the plugin class in the registry,
instantiates it for this router, runs ``on_route`` for existing routes and
returns ``self``.

Wrapping pipeline
-----------------
``_wrap_step(route, index, call_next)`` builds middleware layers from
``_plugins`` in reverse order (last attached closest to the step). A plugin
disabled for a route is skipped.

Route options
-------------
``add(path, *steps, logging_before=False)`` routes ``<plugin>_<key>``
keywords to that plugin's per-route config (target = route name).

Inheritance
-----------
Children created with ``child()`` get a fresh instance of every parent
plugin, configured like the parent's.

Example::

    from genro_hashrouter import Router

    router = Router(name="app").plug("logging")
    router.add("/users/:id", load_user, logging_after=False)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any

from genro_toolbox import dictExtract

from genro_hashrouter.core.base_router import BaseRouter
from genro_hashrouter.core.route import Route
from genro_hashrouter.plugins._base_plugin import BasePlugin

__all__ = ["Router"]

_PLUGIN_REGISTRY: dict[str, type[BasePlugin]] = {}


@dataclass
class _PluginSpec:
    """Specification for creating plugin instances."""

    factory: type[BasePlugin]
    kwargs: dict[str, Any]

    def instantiate(self, router: Router) -> BasePlugin:
        return self.factory(router=router, **self.kwargs)


class Router(BaseRouter):
    """Router with plugin registry and step wrapping.

    Extends BaseRouter with:
        - Global plugin registry for registering plugin classes
        - Per-router plugin instances wrapping every step
        - Plugin configuration, router-wide or per route
        - Plugin inheritance for child routers
    """

    __slots__ = BaseRouter.__slots__ + (
        "_plugin_specs",
        "_plugins",
        "_plugins_by_name",
        "_plugin_info",
        "_plugin_children",
    )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._plugin_specs: list[_PluginSpec] = []
        self._plugins: list[BasePlugin] = []
        self._plugins_by_name: dict[str, BasePlugin] = {}
        self._plugin_info: dict[str, dict[str, Any]] = {}
        self._plugin_children: dict[str, list[Router]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: type[BasePlugin], name: str | None = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined.
            name: Optional override name. If provided, overwrites any existing
                  registration.

        Raises:
            TypeError: If plugin_class is not a BasePlugin subclass.
            ValueError: If plugin_code is missing or name collision occurs.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> dict[str, type[BasePlugin]]:
        """Return a copy of the global plugin registry."""
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> Router:
        """Attach a plugin by name (previously registered globally).

        Returns:
            self (for method chaining).

        Raises:
            TypeError: If plugin is not a string.
            ValueError: If plugin is not registered or already attached.
        """
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        if plugin in self._plugins_by_name:
            raise ValueError(f"Plugin '{plugin}' is already attached to this router.")
        spec = _PluginSpec(plugin_class, dict(config))
        self._plugin_specs.append(spec)
        instance = spec.instantiate(self)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        for route in self.routes:
            instance.on_route(self, route)
        return self

    def iter_plugins(self) -> list[BasePlugin]:
        """Return attached plugin instances in application order."""
        return list(self._plugins)

    def get_config(self, plugin_name: str, route_name: str | None = None) -> dict[str, Any]:
        """Return plugin config (router-level + per-route overrides)."""
        return self._require_plugin(plugin_name).configuration(route_name)

    def __getattr__(self, name: str) -> Any:
        plugins = object.__getattribute__(self, "_plugins_by_name")
        plugin = plugins.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to router '{self.name}'")
        return plugin

    def _require_plugin(self, plugin_name: str) -> BasePlugin:
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to router '{self.name}'"
            )
        return plugin

    # ------------------------------------------------------------------
    # Runtime enable/disable (state stored on plugin_info)
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, route_name: str, plugin_name: str, enabled: bool = True) -> None:
        """Enable or disable a plugin for a specific route (``_all_`` for every route)."""
        self._require_plugin(plugin_name)
        bucket = self._plugin_info[plugin_name]
        entry = bucket.setdefault(route_name, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, route_name: str, plugin_name: str) -> bool:
        """Check if a plugin is enabled for a specific route.

        Resolution order (first found wins):
        1. route locals (runtime override via set_plugin_enabled)
        2. route config (configure(_target=route_name, enabled=...))
        3. global locals
        4. global config
        5. default: True
        """
        self._require_plugin(plugin_name)
        bucket = self._plugin_info[plugin_name]
        for scope in (bucket.get(route_name, {}), bucket.get("_all_", {})):
            if "enabled" in scope.get("locals", {}):
                return bool(scope["locals"]["enabled"])
            if "enabled" in scope.get("config", {}):
                return bool(scope["config"]["enabled"])
        return True

    # ------------------------------------------------------------------
    # Overrides/hooks
    # ------------------------------------------------------------------
    def _wrap_step(self, route: Route, index: int, call_next: Callable) -> Callable:  # type: ignore[override]
        wrapped = call_next
        for plugin in reversed(self._plugins):
            plugin_call = plugin.wrap_step(self, route, index, wrapped)
            wrapped = self._create_wrapper(plugin, route, plugin_call, wrapped)
        return wrapped

    def _create_wrapper(
        self,
        plugin: BasePlugin,
        route: Route,
        plugin_call: Callable,
        next_step: Callable,
    ) -> Callable:
        @wraps(next_step)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not self.is_plugin_enabled(route.name, plugin.name):
                return await next_step(*args, **kwargs)
            return await plugin_call(*args, **kwargs)

        return wrapper

    def _after_route_registered(self, route: Route, options: dict[str, Any]) -> None:  # type: ignore[override]
        remaining = dict(options)
        for code in self.available_plugins():
            plugin_options = dictExtract(remaining, f"{code}_", slice_prefix=True, pop=True)
            if not plugin_options:
                continue
            plugin = self._plugins_by_name.get(code)
            if plugin is not None:
                plugin.configure(_target=route.name, **plugin_options)
            else:
                flags = plugin_options.pop("flags", None)
                if flags:
                    plugin_options.update(BasePlugin._parse_flags(flags))
                bucket = self._plugin_info.setdefault(
                    code, {"_all_": {"config": {}, "locals": {}}}
                )
                bucket.setdefault(route.name, {"config": {}, "locals": {}})["config"].update(
                    plugin_options
                )
        super()._after_route_registered(route, remaining)
        for plugin in self._plugins:
            plugin.on_route(self, route)

    def _create_child(self, **kwargs: Any) -> Router:  # type: ignore[override]
        return Router(**kwargs)

    def _on_attached_to_parent(self, parent: BaseRouter) -> None:  # type: ignore[override]
        if not isinstance(parent, Router):
            return
        for parent_plugin in parent._plugins:
            parent._plugin_children.setdefault(parent_plugin.name, []).append(self)
            child_plugin = self._plugins_by_name.get(parent_plugin.name)
            if child_plugin is None:
                child_plugin = parent_plugin.__class__(self)
                self._plugins.append(child_plugin)
                self._plugins_by_name[child_plugin.name] = child_plugin
            child_plugin.on_attached_to_parent(parent_plugin)

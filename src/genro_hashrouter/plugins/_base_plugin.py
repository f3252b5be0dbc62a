"""Plugin contract definitions for Genro HashRouter.

``BasePlugin``
    Base class every plugin must subclass. Provides:
        - Configuration helpers backed by the router's ``_plugin_info`` store
        - Optional hooks ``on_route`` and ``wrap_step`` for the step pipeline

    Required class attributes:
        - ``plugin_code``: unique identifier used for registration (e.g. "logging")
        - ``plugin_description``: human-readable description of the plugin

    Constructor signature: ``BasePlugin(router, **config)``

    Key methods:
        - ``configure(**config)``: Define accepted configuration parameters
        - ``configuration(route_name=None)``: Read merged configuration
        - ``on_route(router, route)``: Called when a route is registered
        - ``wrap_step(router, route, index, call_next)``: Build middleware chain

Example::

    from genro_hashrouter.plugins._base_plugin import BasePlugin

    class CountingPlugin(BasePlugin):
        plugin_code = "counting"
        plugin_description = "Counts executed steps"

        def configure(self, enabled: bool = True, limit: int = 10):
            pass  # Storage handled by wrapper

        def wrap_step(self, router, route, index, call_next):
            async def wrapper(context, params):
                params["steps_run"] = params.get("steps_run", 0) + 1
                return await call_next(context, params)
            return wrapper
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import TYPE_CHECKING, Any

from pydantic import validate_call

if TYPE_CHECKING:  # pragma: no cover
    from genro_hashrouter.core.route import Route

__all__ = ["BasePlugin"]


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() method to handle flags, _target, validation, and storage."""
    validated = validate_call(original_configure)

    @wraps(original_configure)
    def wrapper(
        self: BasePlugin, *, _target: str = "_all_", flags: str | None = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            targets = [t.strip() for t in _target.split(",") if t.strip()]
            for t in targets:
                wrapper(self, _target=t, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface and configuration helpers for router plugins.

    Subclass this to create custom plugins. Override the hooks you need
    and define your configuration schema in ``configure()``.
    """

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])  # type: ignore[method-assign]

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "_all_", {"config": {"enabled": True}, "locals": {}}
        )

    def _write_config(self, target: str, config: dict[str, Any]) -> None:
        if not config:
            return
        store = self._get_store()
        plugin_bucket = store.setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        old_config = dict(bucket["config"]) if target == "_all_" else None
        bucket["config"].update(config)
        if old_config is not None:
            self._notify_children(old_config, dict(bucket["config"]))

    def configuration(self, route_name: str | None = None) -> dict[str, Any]:
        """Read merged configuration (router-level + optional per-route override)."""
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("_all_", {}).get("config", {}))
        if route_name:
            merged.update(plugin_bucket.get(route_name, {}).get("config", {}))
        return merged

    @staticmethod
    def _parse_flags(flags: str) -> dict[str, bool]:
        """Parse flag string like "enabled,before:off" into boolean dict."""
        mapping: dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def _get_store(self) -> dict[str, Any]:
        return self._router._plugin_info  # type: ignore[no-any-return]

    def _notify_children(self, old_config: dict[str, Any], new_config: dict[str, Any]) -> None:
        for child_router in self._router._plugin_children.get(self.name, []):
            child_plugin = child_router._plugins_by_name.get(self.name)
            if child_plugin:
                child_plugin.on_parent_config_changed(old_config, new_config)

    # =========================================================================
    # METHODS TO OVERRIDE IN CUSTOM PLUGINS
    # =========================================================================

    def configure(self, *, _target: str = "_all_", flags: str | None = None) -> None:
        """Override to define accepted configuration parameters.

        The wrapper added by __init_subclass__ handles:
            - Parsing ``flags`` (e.g. "enabled,before:off") into booleans
            - Routing to ``_target`` ("_all_", a route name, or comma-separated)
            - Pydantic validation via @validate_call
            - Writing to the router's config store
        """
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def on_route(self, router: Any, route: Route) -> None:
        """Override to run logic when a route is registered."""

    def wrap_step(
        self,
        router: Any,
        route: Route,
        index: int,
        call_next: Callable,
    ) -> Callable:
        """Override to wrap step invocation with custom logic.

        ``call_next(context, params)`` is a coroutine function running the
        step (and the plugins closer to it). Return a coroutine function with
        the same signature.
        """
        return call_next

    def on_attached_to_parent(self, parent_plugin: BasePlugin) -> None:
        """Handle creation of a child router under a router with this plugin.

        Copies the parent's router-level config unless this plugin already
        has its own.
        """
        parent_config = parent_plugin.configuration()
        default_config = {"enabled": True}
        if self.configuration() == default_config and parent_config != default_config:
            self.configure(**parent_config)

    def on_parent_config_changed(self, old_config: dict[str, Any], new_config: dict[str, Any]) -> None:
        """Follow the parent's config while this plugin is still aligned with it."""
        if self.configuration() == old_config:
            self.configure(**new_config)

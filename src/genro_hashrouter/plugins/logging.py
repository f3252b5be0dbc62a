"""Logging plugin for Genro HashRouter.

Wraps every route step with start/end messages including timing.

Configuration
-------------
Accepted keys (router-level or per-route):
    - ``enabled``: Gate the plugin entirely (default True)
    - ``before``: Log "start" message (default True)
    - ``after``: Log "end" message with timing (default True)
    - ``level``: Logging level name (default "INFO")

Example::

    from genro_hashrouter import Router

    router = Router(name="app").plug("logging")
    router.add("/users/:id", "loadUser")

    # Or configure per-route:
    router.add("/ping", {"pong": True}, logging_after=False)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Literal

from genro_hashrouter.core.route import Route
from genro_hashrouter.core.router import Router
from genro_hashrouter.plugins._base_plugin import BasePlugin


class LoggingPlugin(BasePlugin):
    """Logging plugin with configurable start/end messages and timing."""

    plugin_code = "logging"
    plugin_description = "Logs route steps with timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: logging.Logger | None = None, **cfg):
        self._logger = logger or logging.getLogger("genro_hashrouter")
        super().__init__(router, **cfg)

    def configure(  # type: ignore[override]
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        level: Literal["DEBUG", "INFO", "WARNING"] = "INFO",
    ):
        """Configure logging plugin options.

        Args:
            enabled: Enable/disable the plugin entirely.
            before: Log "{route} step {i} start" before execution.
            after: Log "{route} step {i} end (X ms)" after execution.
            level: Level used for both messages.
        """
        pass  # Storage is handled by the wrapper

    def wrap_step(self, router, route: Route, index: int, call_next: Callable):
        """Wrap step with start/end logging and timing."""
        label = f"{route.name} step {index}"

        async def logged(context, params):
            cfg = self._effective_config(route.name)
            if not cfg["enabled"]:
                return await call_next(context, params)
            level = logging.getLevelName(cfg["level"])
            if cfg["before"]:
                self._logger.log(level, "%s start", label)
            t0 = time.perf_counter()
            try:
                return await call_next(context, params)
            finally:
                elapsed = (time.perf_counter() - t0) * 1000
                if cfg["after"]:
                    self._logger.log(level, "%s end (%.2f ms)", label, elapsed)

        return logged

    def _effective_config(self, route_name: str) -> dict:
        """Get effective configuration for a route, merging defaults."""
        defaults = {"enabled": True, "before": True, "after": True, "level": "INFO"}
        cfg = defaults | self.configuration(route_name)
        return {key: defaults[key] if cfg.get(key) is None else cfg[key] for key in defaults}


Router.register_plugin(LoggingPlugin)

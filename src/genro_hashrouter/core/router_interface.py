# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""RouterInterface - Abstract base for router-like objects.

Defines the minimal interface a router must implement to take part in a
route hierarchy or to be driven by a ``NavigationController``. Router
factories passed to ``child()`` must return a ``BaseRouter``.

Required members:
    - ``base_path``: fully-qualified prefix of this router
    - match(path, params) -> RouteParams, no steps run
    - exec(context, path, params) -> RouteParams, steps run
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from genro_hashrouter.core.params import RouteParams

__all__ = ["RouterInterface"]


class RouterInterface(ABC):
    """Minimal interface for router-like objects.

    Attributes:
        name: Router name for identification and debugging.
        base_path: Prefix accumulated from all ancestor routers.
    """

    name: str | None
    base_path: str

    @abstractmethod
    def match(self, path: str, params: RouteParams | Mapping[str, Any] | None = None) -> RouteParams:
        """Resolve ``path`` to a route without running any step.

        Args:
            path: Path to resolve (e.g. ``"/users/42"``).
            params: Optional seed values; a RouteParams is updated in place.

        Returns:
            RouteParams with ``router`` set and ``route`` set to the first
            matching route, or None when nothing matched.
        """
        ...

    @abstractmethod
    async def exec(
        self, context: Any, path: str, params: RouteParams | Mapping[str, Any] | None = None
    ) -> RouteParams:
        """Match ``path`` and run the matched route's steps.

        Args:
            context: Store exposing ``state``, ``dispatch`` and ``commit``.
            path: Path to resolve.
            params: Optional seed values.

        Returns:
            RouteParams; failures are recorded in ``params.error``, never raised.
        """
        ...

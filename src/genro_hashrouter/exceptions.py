# Copyright 2025 Softwell S.r.l. - All Rights Reserved
# SPDX-License-Identifier: Apache-2.0
"""Exceptions for Genro HashRouter.

Routing failures never escape a navigation: the step pipeline stores them in
``params.error`` and resolves normally. The ``kind`` code lets callers branch
on the failure without importing the classes.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "RoutingError",
    "NotFound",
    "StepFailure",
    "GenerationFailure",
]


class RoutingError(Exception):
    """Base class for all routing failures."""

    kind: str = "routing_error"


class NotFound(RoutingError):
    """Raised when no route matches a path at some level of the hierarchy.

    Attributes:
        path: The path that could not be matched.
        router: The router where matching failed (if known).
    """

    kind = "not_found"

    def __init__(self, path: str, router: Any = None) -> None:
        self.path = path
        self.router = router
        super().__init__(f"Path '{path}' not found")


class StepFailure(RoutingError):
    """Wraps an exception raised by a route step or by the post hook.

    Attributes:
        cause: The original exception.
        route: The route whose step failed (None for the post hook).
        step: Index of the failing step in ``route.steps`` (None for the post hook).
    """

    kind = "step_failure"

    def __init__(self, cause: BaseException, *, route: Any = None, step: int | None = None) -> None:
        self.cause = cause
        self.route = route
        self.step = step
        self.__cause__ = cause
        where = f"step {step} of '{route.name}'" if route is not None else "post hook"
        super().__init__(f"{where} failed: {cause!r}")


class GenerationFailure(RoutingError):
    """Raised when a URL cannot be generated from a route template.

    Attributes:
        template: The fully-qualified template being generated.
        key: The capture key that could not be substituted.
        reason: ``"missing"`` or ``"invalid"``.
    """

    kind = "generation_failure"

    def __init__(self, template: str, key: Any, reason: str = "missing") -> None:
        self.template = template
        self.key = key
        self.reason = reason
        super().__init__(f"Cannot generate '{template}': {reason} value for {key}")

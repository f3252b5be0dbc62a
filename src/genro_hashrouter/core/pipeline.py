"""Step pipeline for matched routes.

``run_steps`` executes ``route.steps`` strictly in order: each step, and any
awaitable it returns, completes before the next one starts.

Step kinds
----------
- ``str``: ``context.dispatch(step, params)``
- mapping: used as-is
- callable: ``step(context, params)``

Whatever mapping a step produces is backfilled into the params with
``apply_defaults``, so captured and seeded values are never overridden.

Failure policy
--------------
The first exception, raised by a step or while plugins wrap it, stops the
pipeline. It is stored in ``params.error`` (wrapped in ``StepFailure``
unless it already is a ``RoutingError``) and the params are returned
normally. A step that leaves ``params.error`` set, as a
delegation into a child router does when the child fails, stops the
pipeline as well.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from functools import partial
from typing import TYPE_CHECKING, Any

from genro_hashrouter.exceptions import RoutingError, StepFailure

from .context import RoutingContext
from .params import RouteParams

if TYPE_CHECKING:  # pragma: no cover
    from .base_router import BaseRouter
    from .route import Route, Step

__all__ = ["invoke_step", "run_steps"]


async def invoke_step(step: Step, context: RoutingContext, params: RouteParams) -> Any:
    """Run a single step and return what it produced."""
    if isinstance(step, str):
        result = context.dispatch(step, params)
    elif isinstance(step, Mapping):
        return step
    else:
        result = step(context, params)
    if inspect.isawaitable(result):
        result = await result
    return result


async def run_steps(
    router: BaseRouter, route: Route, context: RoutingContext, params: RouteParams
) -> RouteParams:
    """Execute the steps of ``route`` against ``params``."""
    for index, step in enumerate(route.steps):
        try:
            call = router._wrap_step(route, index, partial(invoke_step, step))
            result = await call(context, params)
        except Exception as error:
            if isinstance(error, RoutingError):
                params.error = error
            else:
                params.error = StepFailure(error, route=route, step=index)
            return params
        if isinstance(result, Mapping) and result is not params:
            params.apply_defaults(result)
        if params.error is not None:
            return params
    return params

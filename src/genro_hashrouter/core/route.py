"""Route - one compiled pattern plus its ordered steps.

Routes are created by ``Router.add`` / ``Router.child`` and are immutable
afterwards. Two patterns are compiled per route:

- ``pattern``: over ``path`` as registered, used for matching inside the
  owning router (child routers only see the delegated remainder).
- ``generator``: over ``router.base_path + path``, used by ``url()`` to
  produce a fully-qualified hash location.

Steps
-----
Each step is one of:
    - ``str``: name of a store action, dispatched with the params as payload
    - callable: ``step(context, params)``, sync or async
    - mapping: default values for the params
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Union

from .params import RouteParams
from .pattern import CaptureKey, PathPattern

if TYPE_CHECKING:  # pragma: no cover
    from .base_router import BaseRouter

__all__ = ["Route", "Step", "HASH_SIGIL", "check_step"]

HASH_SIGIL = "#"

Step = Union[str, Callable[..., Any], Mapping[str, Any]]


def check_step(step: Any) -> Step:
    """Validate a step at registration time."""
    if isinstance(step, (str, Mapping)) or callable(step):
        return step
    raise TypeError(f"Unsupported route step: {step!r}")


class Route:
    """A compiled route owned by a router.

    Attributes:
        path: Template as registered on the owning router.
        name: Logical name (defaults to ``path``); target for per-route plugin config.
        router: Owning router.
        pattern: Matcher compiled over ``path``.
        generator: Generator compiled over the fully-qualified template.
        steps: Immutable tuple of steps.
    """

    __slots__ = ("path", "name", "router", "pattern", "generator", "steps")

    def __init__(
        self,
        router: BaseRouter,
        path: str,
        steps: tuple[Step, ...] = (),
        *,
        name: str | None = None,
        sensitive: bool = False,
        strict: bool = False,
    ) -> None:
        self.router = router
        self.path = path
        self.name = name or path
        self.steps = tuple(check_step(step) for step in steps)
        self.pattern = PathPattern(path, sensitive=sensitive, strict=strict)
        self.generator = PathPattern(router.base_path + path, sensitive=sensitive, strict=strict)

    @property
    def keys(self) -> tuple[CaptureKey, ...]:
        return self.pattern.keys

    @property
    def full_path(self) -> str:
        return self.generator.template

    def url(self, params: Mapping[str, Any] | None = None, **values: Any) -> str:
        """Generate the hash location for this route.

        ``params`` may be a plain mapping or a ``RouteParams``. The positional
        captures of a ``RouteParams`` (ancestors first, then its own match)
        fill ``*``/unnamed tokens. Keyword values override entries of
        ``params``.

        Raises:
            GenerationFailure: a required template value is missing or invalid.
        """
        positional: list[Any] = []
        named: dict[str, Any] = {}
        if isinstance(params, RouteParams):
            positional = params.ancestor_positional + params.positional
            named.update(params)
        elif params:
            named.update(params)
        named.update(values)
        return HASH_SIGIL + self.generator.generate(named, positional)

    def __repr__(self) -> str:
        return f"Route({self.full_path!r}, steps={len(self.steps)})"

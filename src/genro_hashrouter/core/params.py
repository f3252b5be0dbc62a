"""RouteParams - the per-navigation parameter carrier.

A ``RouteParams`` is created fresh for every ``match``/``exec`` call (or
passed in pre-seeded by a delegating parent router) and is what a navigation
finally commits.

Structure
---------
- Named values: a mutable mapping of string keys. Holds named captures,
  caller seed values and defaults contributed by steps.
- ``positional``: positional captures of the *current* match, in order.
- ``ancestor_positional``: positional captures of the delegating routes,
  minus their rest segments. Together with ``positional`` they fill the
  unnamed tokens of a route's fully-qualified template.
- ``length``: ``len(positional)``; the last positional capture is the rest
  segment a delegating route hands to its child router.
- ``router`` / ``route``: the router that matched and the matched route
  (``route`` is None when nothing matched).
- ``error``: the ``RoutingError`` that stopped the pipeline, or None.

Precedence
----------
Steps contribute values through ``apply_defaults``, which only fills keys
that are not already present: captures and seed values always win.

Example::

    params = RouteParams({"id": "42"})
    params.apply_defaults({"id": "0", "role": "member"})
    assert params == {"id": "42", "role": "member"}
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any

from .pattern import CaptureKey, Named

if TYPE_CHECKING:  # pragma: no cover
    from genro_hashrouter.exceptions import RoutingError

    from .base_router import BaseRouter
    from .route import Route

__all__ = ["RouteParams"]


class RouteParams(MutableMapping[str, Any]):
    """Named values plus positional captures and routing outcome."""

    __slots__ = ("_values", "positional", "ancestor_positional", "router", "route", "error")

    def __init__(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._values: dict[str, Any] = dict(values or {}, **kwargs)
        self.positional: list[str | None] = []
        self.ancestor_positional: list[str | None] = []
        self.router: BaseRouter | None = None
        self.route: Route | None = None
        self.error: RoutingError | None = None

    @classmethod
    def coerce(cls, seed: RouteParams | Mapping[str, Any] | None) -> RouteParams:
        """Return ``seed`` itself when it is a RouteParams, else a new one seeded with it."""
        if isinstance(seed, RouteParams):
            return seed
        return cls(seed)

    # ------------------------------------------------------------------
    # Outcome
    # ------------------------------------------------------------------
    @property
    def length(self) -> int:
        """Number of positional captures in the current match."""
        return len(self.positional)

    @property
    def ok(self) -> bool:
        return self.error is None

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------
    def bind(self, captures: list[tuple[CaptureKey, str | None]]) -> None:
        """Bind the captures of a successful match.

        Named captures overwrite seed values; unmatched optional named
        captures leave the key untouched. Positional captures replace the
        previous match's list.
        """
        positional: list[str | None] = []
        for key, value in captures:
            if isinstance(key, Named):
                if value is not None:
                    self._values[key.name] = value
            else:
                positional.append(value)
        self.positional = positional

    def apply_defaults(self, defaults: Mapping[str, Any]) -> None:
        """Set values for keys that are not already present."""
        for key, value in defaults.items():
            self._values.setdefault(key, value)

    def pop_rest(self) -> str:
        """Remove and return the last positional capture ('' when it is None)."""
        if not self.positional:
            raise IndexError("No positional capture to delegate")
        rest = self.positional.pop()
        return rest or ""

    def descend(self) -> str:
        """Pop the rest segment and keep the remaining positionals as ancestors.

        Called when a delegating route hands the rest to its child router.
        """
        rest = self.pop_rest()
        self.ancestor_positional.extend(self.positional)
        self.positional = []
        return rest

    def reset(self) -> None:
        """Clear the outcome and ancestor captures before a new top-level match."""
        self.ancestor_positional = []
        self.route = None
        self.error = None

    # ------------------------------------------------------------------
    # Mapping protocol (named values only; int keys read positionals)
    # ------------------------------------------------------------------
    def __getitem__(self, key: str | int) -> Any:
        if isinstance(key, int):
            try:
                return self.positional[key]
            except IndexError:
                raise KeyError(key) from None
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def to_dict(self) -> dict[str, Any]:
        """Return a plain snapshot including positionals and outcome."""
        return {
            "values": dict(self._values),
            "positional": list(self.positional),
            "ancestor_positional": list(self.ancestor_positional),
            "route": self.route.name if self.route is not None else None,
            "error": self.error,
        }

    def __repr__(self) -> str:
        route = self.route.name if self.route is not None else None
        return f"RouteParams({self._values!r}, positional={self.positional!r}, route={route!r}, error={self.error!r})"

"""Path template compilation for Genro HashRouter.

A template is compiled once into a matcher (anchored regex plus ordered
capture keys) and a generator (the same tokens rendered back into a path).

Grammar
-------
- ``/users``            literal text
- ``/:id``              named capture, one segment
- ``/:id?``             optional named capture (prefix omitted when absent)
- ``/:path+``, ``/:path*``  repeating named capture (one-or-more, zero-or-more)
- ``/:id(\\d+)``        named capture with a custom pattern
- ``/(\\d+)``           unnamed capture, positional
- ``/*``                rest capture, positional, matches anything (``.*``)
- ``\\:``               escaped character

Capture keys
------------
Each capture is tagged at compile time as ``Named(name)`` or
``Positional(index)``; positional indices count from 0 in template order.

Matching options (``PathPattern(template, sensitive=False, strict=False, end=True)``):
    - ``sensitive``: case-sensitive match (default False)
    - ``strict``: disallow the optional trailing slash (default False)
    - ``end``: anchor at the end of the path (default True)

Example::

    pattern = PathPattern("/users/:id/*")
    pattern.match("/users/42/posts/7")
    # [(Named('id'), '42'), (Positional(0), 'posts/7')]
    pattern.generate({"id": 42}, ["posts/7"])
    # '/users/42/posts/7'
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import quote, unquote

from genro_hashrouter.exceptions import GenerationFailure

__all__ = ["Named", "Positional", "CaptureKey", "PathPattern"]

_TOKEN_RE = re.compile(
    r"(\\.)"
    r"|([/.])?(?:(?::(\w+)(?:\(((?:\\.|[^\\()])+)\))?|\(((?:\\.|[^\\()])+)\))([+*?])?|(\*))"
)
_GROUP_ESCAPE_RE = re.compile(r"([=!:$/()])")


@dataclass(frozen=True, slots=True)
class Named:
    """Capture bound by name (``:name``)."""

    name: str

    def __str__(self) -> str:
        return f":{self.name}"


@dataclass(frozen=True, slots=True)
class Positional:
    """Unnamed capture bound by position (``*`` or ``(regex)``)."""

    index: int

    def __str__(self) -> str:
        return f"positional {self.index}"


CaptureKey = Union[Named, Positional]


@dataclass(frozen=True, slots=True)
class _Token:
    key: CaptureKey
    prefix: str
    delimiter: str
    optional: bool
    repeat: bool
    partial: bool
    asterisk: bool
    pattern: str


def _parse(template: str) -> list[str | _Token]:
    tokens: list[str | _Token] = []
    position = 0
    index = 0
    path = ""
    for match in _TOKEN_RE.finditer(template):
        escaped = match.group(1)
        path += template[index : match.start()]
        index = match.end()
        if escaped:
            path += escaped[1]
            continue

        prefix, name, capture, group, modifier, asterisk = match.group(2, 3, 4, 5, 6, 7)
        next_char = template[index : index + 1]
        if path:
            tokens.append(path)
            path = ""

        delimiter = prefix or "/"
        custom = capture or group
        if custom:
            pattern = _GROUP_ESCAPE_RE.sub(r"\\\1", custom)
        elif asterisk:
            pattern = ".*"
        else:
            pattern = f"[^{re.escape(delimiter)}]+?"

        if name:
            key: CaptureKey = Named(name)
        else:
            key = Positional(position)
            position += 1

        tokens.append(
            _Token(
                key=key,
                prefix=prefix or "",
                delimiter=delimiter,
                optional=modifier in ("?", "*"),
                repeat=modifier in ("+", "*"),
                partial=bool(prefix) and bool(next_char) and next_char != prefix,
                asterisk=bool(asterisk),
                pattern=pattern,
            )
        )

    path += template[index:]
    if path:
        tokens.append(path)
    return tokens


def _to_regex(tokens: list[str | _Token], *, sensitive: bool, strict: bool, end: bool) -> re.Pattern[str]:
    delimiter = re.escape("/")
    route = ""
    for token in tokens:
        if isinstance(token, str):
            route += re.escape(token)
            continue
        prefix = re.escape(token.prefix)
        capture = f"(?:{token.pattern})"
        if token.repeat:
            capture += f"(?:{prefix}{capture})*"
        if token.optional:
            if token.partial:
                capture = f"{prefix}({capture})?"
            else:
                capture = f"(?:{prefix}({capture}))?"
        else:
            capture = f"{prefix}({capture})"
        route += capture

    ends_with_delimiter = route.endswith(delimiter)
    if not strict:
        if ends_with_delimiter:
            route = route[: -len(delimiter)]
        route += f"(?:{delimiter}(?=$))?"
    if end:
        route += "$"
    else:
        route += "" if strict and ends_with_delimiter else f"(?={delimiter}|$)"
    return re.compile("^" + route, 0 if sensitive else re.IGNORECASE)


class PathPattern:
    """Compiled path template: matcher and generator over the same tokens."""

    __slots__ = ("template", "keys", "regex", "sensitive", "_tokens")

    def __init__(
        self,
        template: str,
        *,
        sensitive: bool = False,
        strict: bool = False,
        end: bool = True,
    ) -> None:
        self.template = template
        self.sensitive = sensitive
        self._tokens = _parse(template)
        self.keys: tuple[CaptureKey, ...] = tuple(
            token.key for token in self._tokens if isinstance(token, _Token)
        )
        self.regex = _to_regex(self._tokens, sensitive=sensitive, strict=strict, end=end)

    def match(self, path: str) -> list[tuple[CaptureKey, str | None]] | None:
        """Match ``path`` and return ``(key, value)`` pairs in template order.

        Named values are percent-decoded; positional values are returned raw
        so a rest capture can be delegated unchanged. Optional captures that
        did not participate are returned as None. Returns None on mismatch.
        """
        found = self.regex.match(path)
        if found is None:
            return None
        captures: list[tuple[CaptureKey, str | None]] = []
        for key, value in zip(self.keys, found.groups()):
            if value is not None and isinstance(key, Named):
                value = unquote(value)
            captures.append((key, value))
        return captures

    def generate(self, named: Mapping[str, Any] | None = None, positional: Sequence[Any] = ()) -> str:
        """Substitute values back into the template.

        Raises:
            GenerationFailure: a required value is missing, or a value does
                not satisfy its capture pattern.
        """
        named = named or {}
        path = ""
        for token in self._tokens:
            if isinstance(token, str):
                path += token
                continue
            value = self._lookup(token.key, named, positional)
            if value is None:
                if token.optional:
                    if token.partial:
                        path += token.prefix
                    continue
                raise GenerationFailure(self.template, token.key, "missing")

            if isinstance(value, (list, tuple)):
                if not token.repeat:
                    raise GenerationFailure(self.template, token.key, "invalid")
                if not value:
                    if token.optional:
                        continue
                    raise GenerationFailure(self.template, token.key, "missing")
                segments = [self._encode(token, item) for item in value]
                path += token.prefix + token.delimiter.join(segments)
                continue

            path += token.prefix + self._encode(token, value)
        return path

    def _lookup(self, key: CaptureKey, named: Mapping[str, Any], positional: Sequence[Any]) -> Any:
        if isinstance(key, Named):
            return named.get(key.name)
        if key.index < len(positional):
            return positional[key.index]
        return named.get(key.index)  # type: ignore[call-overload]

    def _encode(self, token: _Token, value: Any) -> str:
        if isinstance(token.key, Positional):
            segment = quote(str(value), safe="/%")
        else:
            segment = quote(str(value), safe="")
        flags = re.DOTALL if self.sensitive else re.DOTALL | re.IGNORECASE
        if not re.fullmatch(token.pattern, segment, flags):
            raise GenerationFailure(self.template, token.key, "invalid")
        return segment

    def __repr__(self) -> str:
        return f"PathPattern({self.template!r})"

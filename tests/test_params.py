"""Tests for the RouteParams carrier."""

import pytest

from genro_hashrouter import RouteParams
from genro_hashrouter.core.pattern import Named, Positional


def test_mapping_behaviour_covers_named_values_only():
    params = RouteParams({"id": "42"}, lang="it")
    params.positional = ["rest"]
    assert params == {"id": "42", "lang": "it"}
    assert list(params) == ["id", "lang"]
    assert params[0] == "rest"
    assert params.get(3) is None
    assert 0 in params


def test_bind_overwrites_seed_and_replaces_positionals():
    params = RouteParams({"id": "seed", "keep": 1})
    params.positional = ["old", "older"]
    params.bind([(Named("id"), "42"), (Named("opt"), None), (Positional(0), "a/b")])
    assert params == {"id": "42", "keep": 1}
    assert params.positional == ["a/b"]
    assert params.length == 1


def test_apply_defaults_never_overrides():
    params = RouteParams({"id": "42"})
    params.apply_defaults({"id": "0", "role": "member"})
    params.apply_defaults({"role": "admin"})
    assert params == {"id": "42", "role": "member"}


def test_pop_rest_takes_last_positional():
    params = RouteParams()
    params.positional = ["12", "posts/7"]
    assert params.pop_rest() == "posts/7"
    assert params.length == 1

    params.positional = [None]
    assert params.pop_rest() == ""

    with pytest.raises(IndexError):
        params.pop_rest()


def test_coerce_keeps_instances():
    params = RouteParams()
    assert RouteParams.coerce(params) is params
    assert RouteParams.coerce({"a": 1}) == {"a": 1}
    assert RouteParams.coerce(None) == {}


def test_outcome_and_snapshot():
    params = RouteParams({"a": 1})
    assert params.ok
    assert params.length == 0
    assert params.to_dict() == {
        "values": {"a": 1},
        "positional": [],
        "ancestor_positional": [],
        "route": None,
        "error": None,
    }


def test_descend_moves_leading_captures_to_ancestors():
    params = RouteParams()
    params.positional = ["12", "view/all"]
    assert params.descend() == "view/all"
    assert params.positional == []
    assert params.ancestor_positional == ["12"]
    assert params.length == 0

    params.reset()
    assert params.ancestor_positional == []

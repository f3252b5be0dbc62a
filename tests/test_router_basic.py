# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for route registration, matching, child routers and URL generation."""

import pytest

from genro_hashrouter import BaseRouter, GenerationFailure, NotFound, Route, RouteParams, Router
from genro_hashrouter.core.pattern import Named, Positional


def test_add_returns_compiled_route():
    router = Router(name="app")
    route = router.add("/users/:id", {"tab": "profile"})
    assert isinstance(route, Route)
    assert route.name == "/users/:id"
    assert route.keys == (Named("id"),)
    assert route.steps == ({"tab": "profile"},)
    assert route.router is router
    assert router.routes == [route]


def test_add_rejects_unsupported_steps():
    router = Router()
    with pytest.raises(TypeError):
        router.add("/users/:id", 42)
    assert router.routes == []


def test_base_router_rejects_route_options():
    router = BaseRouter()
    with pytest.raises(TypeError, match="logging_before"):
        router.add("/x", logging_before=False)


def test_first_registered_route_wins():
    router = Router()
    first = router.add("/users/:id", name="by-id")
    router.add("/users/:name", name="by-name")
    router.add("/users/:id", name="duplicate")

    params = router.match("/users/5")
    assert params.route is first
    assert params == {"id": "5"}
    assert "name" not in params


def test_registration_order_is_load_bearing():
    router = Router()
    wildcard = router.add("/*")
    router.add("/users")
    assert router.match("/users").route is wildcard


def test_unmatched_path_leaves_route_empty():
    router = Router()
    router.add("/users")
    params = router.match("/nowhere")
    assert params.route is None
    assert params.router is router
    assert params.error is None


def test_length_counts_positional_captures():
    router = Router()
    router.add("/files/*")
    router.add("/:kind/(\\d+)/*")
    router.add("/users/:id")

    params = router.match("/files/a/b")
    assert params.length == 1
    assert params[0] == "a/b"

    params = router.match("/pages/12/x/y")
    assert params.length == 2
    assert params["kind"] == "pages"
    assert params.positional == ["12", "x/y"]

    assert router.match("/users/1").length == 0


def test_match_keeps_seed_values_and_updates_seed_instance():
    router = Router()
    router.add("/users/:id")
    seed = RouteParams({"lang": "it", "id": "old"})
    params = router.match("/users/5", seed)
    assert params is seed
    assert params == {"lang": "it", "id": "5"}

    assert router.match("/users/6", {"lang": "en"}) == {"lang": "en", "id": "6"}


def test_match_clears_previous_outcome():
    router = Router()
    router.add("/users/:id")
    seed = RouteParams()
    seed.error = NotFound("/old")
    seed.ancestor_positional = ["stale"]
    params = router.match("/users/5", seed)
    assert params.error is None
    assert params.ancestor_positional == []


class TestChildRouters:
    def test_child_registers_synthetic_wildcard_route(self):
        root = Router(name="root")
        users = root.child("/users/:id//")
        assert isinstance(users, Router)
        assert users.base_path == "/users/:id"
        assert users.parent is root
        assert users.base_route is root.routes[-1]
        assert users.base_route.path == "/users/:id/*"
        assert users.base_route.keys == (Named("id"), Positional(0))
        assert root.children == [users]

    def test_child_steps_precede_delegation(self):
        root = Router()
        guard = {"guarded": True}
        admin = root.child("/admin", guard)
        assert admin.base_route.steps[0] is guard
        assert len(admin.base_route.steps) == 2
        assert callable(admin.base_route.steps[-1])

    def test_empty_prefix_matches_everything(self):
        root = Router()
        everything = root.child("")
        assert everything.base_route.path == "/*"
        assert everything.base_path == ""
        assert root.match("/anything/at/all").route is everything.base_route

    def test_nested_base_paths_accumulate(self):
        root = Router()
        grandchild = root.child("/a").child("/b/").child("/c")
        assert grandchild.base_path == "/a/b/c"
        assert grandchild.parent.parent.parent is root

    def test_router_factory_is_used_and_inherited(self):
        created = []

        class AuditedRouter(Router):
            pass

        def factory(**kwargs):
            child = AuditedRouter(**kwargs)
            created.append(child)
            return child

        root = Router(router_factory=factory)
        child = root.child("/a")
        grandchild = child.child("/b")
        assert created == [child, grandchild]
        assert grandchild.base_path == "/a/b"
        assert grandchild.router_factory is factory

    def test_router_factory_must_return_a_router(self):
        root = Router(router_factory=lambda **kwargs: object())
        with pytest.raises(TypeError, match="router_factory"):
            root.child("/a")

    def test_base_router_children_are_base_routers(self):
        child = BaseRouter().child("/a")
        assert type(child) is BaseRouter

    def test_nodes_describes_hierarchy(self):
        root = Router(name="root")
        root.add("/", name="home")
        users = root.child("/users/:id", name="users")
        users.add("/posts/:postId")
        nodes = root.nodes()
        assert nodes["name"] == "root"
        assert [r["name"] for r in nodes["routes"]] == ["home", "users"]
        child_nodes = nodes["routers"]["users"]
        assert child_nodes["base_path"] == "/users/:id"
        assert child_nodes["routes"][0]["full_path"] == "/users/:id/posts/:postId"


class TestUrlGeneration:
    def test_url_uses_fully_qualified_template(self):
        root = Router()
        users = root.child("/users/:id")
        posts = users.add("/posts/:postId")
        assert posts.full_path == "/users/:id/posts/:postId"
        assert posts.url({"id": 42, "postId": 7}) == "#/users/42/posts/7"
        assert posts.url(id=1, postId=2) == "#/users/1/posts/2"

    def test_url_from_matched_params(self):
        root = Router()
        root.add("/users/:id")
        files = root.add("/files/*")
        params = root.match("/users/5")
        assert params.route.url(params) == "#/users/5"
        params = root.match("/files/docs/readme")
        assert files.url(params) == "#/files/docs/readme"

    def test_url_from_case_insensitive_match(self):
        router = Router()
        tags = router.add("/tags/:slug([a-z]+)")
        params = router.match("/tags/ABC")
        assert params.route is tags
        assert tags.url(params) == "#/tags/ABC"

    def test_keyword_values_override_params(self):
        route = Router().add("/users/:id")
        assert route.url({"id": 1}, id=2) == "#/users/2"

    def test_missing_parameter_fails(self):
        posts = Router().child("/users/:id").add("/posts/:postId")
        with pytest.raises(GenerationFailure):
            posts.url({"postId": 7})

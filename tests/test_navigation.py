"""Tests for the navigation controller and its store module."""

import asyncio
import logging

import pytest

from genro_hashrouter import (
    MemoryLocation,
    NavigationController,
    NavigationState,
    NotFound,
    RouteParams,
    Router,
    StepFailure,
    Store,
    create_navigation,
)


def build(router=None, **kwargs):
    kwargs.setdefault("location", MemoryLocation())
    controller = create_navigation(router, **kwargs)
    store = Store({"router": controller.store_module})
    return controller, store


def routing(store):
    return store.state["router"]


@pytest.mark.asyncio
async def test_successful_navigation_commits_state_and_location():
    router = Router()
    router.add("/users/:id", {"tab": "profile"})
    controller, store = build(router)

    params = await store.dispatch("navigate", "/users/42")

    state = routing(store)
    assert state.progress is False
    assert state.path == "/users/42"
    assert state.params is params
    assert params == {"id": "42", "tab": "profile"}
    assert controller.location.hash == "#/users/42"
    assert store.getters["routing"] is state
    assert store.getters["routeParams"]["id"] == "42"


@pytest.mark.asyncio
async def test_failed_navigation_is_still_committed():
    router = Router()
    router.add("/users/:id")
    controller, store = build(router)

    params = await store.dispatch("navigate", "/nowhere")

    assert isinstance(params.error, NotFound)
    assert routing(store).path == "/nowhere"
    assert routing(store).params.error is params.error
    assert controller.location.hash == "#/nowhere"


@pytest.mark.asyncio
async def test_progress_flag_is_set_while_steps_run():
    observed = []

    def look(context, params):
        observed.append(context.state["router"].progress)

    router = Router()
    router.add("/x", look)
    _, store = build(router)
    await store.dispatch("navigate", "/x")
    assert observed == [True]
    assert routing(store).progress is False


@pytest.mark.asyncio
async def test_repeated_request_during_navigation_is_ignored():
    gate = asyncio.Event()
    calls = []

    async def slow(context, params):
        calls.append(params["id"])
        await gate.wait()

    router = Router()
    router.add("/users/:id", slow)
    controller, store = build(router)

    first = asyncio.create_task(store.dispatch("navigate", "/users/1"))
    await asyncio.sleep(0)
    assert await store.dispatch("navigate", "/users/1") is None
    gate.set()
    params = await first

    assert calls == ["1"]
    assert controller.handle == 1
    assert routing(store).params is params


@pytest.mark.asyncio
async def test_repeated_request_after_completion_is_ignored():
    calls = []
    router = Router()
    router.add("/users/:id", lambda context, params: calls.append(params["id"]))
    controller, store = build(router)

    await store.dispatch("navigate", "/users/1")
    assert await store.dispatch("navigate", "/users/1") is None
    await store.dispatch("navigate", "/users/2")
    await store.dispatch("navigate", "/users/1")
    assert calls == ["1", "2", "1"]
    assert controller.handle == 3


@pytest.mark.asyncio
async def test_newer_navigation_preempts_older_one():
    gate = asyncio.Event()
    finished = []

    async def slow(context, params):
        await gate.wait()
        finished.append("a")
        return {"page": "a"}

    def fast(context, params):
        finished.append("b")
        return {"page": "b"}

    router = Router()
    router.add("/a", slow)
    router.add("/b", fast)
    controller, store = build(router)

    task_a = asyncio.create_task(store.dispatch("navigate", "/a"))
    await asyncio.sleep(0)
    params_b = await store.dispatch("navigate", "/b")
    gate.set()
    params_a = await task_a

    assert finished == ["b", "a"]
    assert params_a["page"] == "a"
    state = routing(store)
    assert state.path == "/b"
    assert state.params is params_b
    assert state.progress is False
    assert controller.location.hash == "#/b"
    assert controller.handle == 2


@pytest.mark.asyncio
async def test_post_hook_runs_before_commit():
    seen = []

    async def post(params):
        await asyncio.sleep(0)
        seen.append(dict(params))
        params["visited"] = True

    router = Router()
    router.add("/users/:id")
    _, store = build(router, post=post)
    await store.dispatch("navigate", "/users/3")

    assert seen == [{"id": "3"}]
    assert routing(store).params["visited"] is True


@pytest.mark.asyncio
async def test_post_hook_failure_is_captured():
    def post(params):
        raise RuntimeError("analytics down")

    router = Router()
    router.add("/x")
    _, store = build(router, post=post)
    params = await store.dispatch("navigate", "/x")

    assert isinstance(params.error, StepFailure)
    assert params.error.route is None
    assert isinstance(params.error.cause, RuntimeError)
    assert routing(store).params is params


@pytest.mark.asyncio
async def test_post_hook_failure_keeps_pipeline_error_reachable():
    def post(params):
        raise RuntimeError("analytics down")

    router = Router()
    router.add("/x")
    _, store = build(router, post=post)
    params = await store.dispatch("navigate", "/nowhere")

    assert isinstance(params.error, StepFailure)
    assert isinstance(params.error.__context__, NotFound)
    assert params.error.__context__.path == "/nowhere"


@pytest.mark.asyncio
async def test_update_strips_fragment_prefix():
    router = Router()
    router.add("/users/:id")
    controller, store = build(router, location=MemoryLocation("#/users/7"))

    params = await controller.update(store)
    assert params["id"] == "7"
    assert routing(store).path == "/users/7"


@pytest.mark.asyncio
async def test_update_accepts_fragment_without_slash():
    router = Router()
    router.add("/users/:id")
    controller, store = build(router, location=MemoryLocation("#users/1"))

    await controller.start(store)
    assert routing(store).path == "/users/1"
    assert controller.location.hash == "#/users/1"
    await asyncio.gather(*controller._tasks)
    assert controller.handle == 1


@pytest.mark.asyncio
async def test_empty_fragment_navigates_to_root():
    router = Router()
    home = router.add("/")
    controller, store = build(router)
    params = await controller.start(store)
    assert params.route is home
    assert controller.location.hash == "#/"
    await asyncio.gather(*controller._tasks)
    assert controller.handle == 1


@pytest.mark.asyncio
async def test_installed_controller_follows_location_changes():
    router = Router()
    router.add("/users/:id")
    location = MemoryLocation()
    controller, store = build(router, location=location)
    controller.install(store)

    location.hash = "#/users/5"
    await asyncio.gather(*controller._tasks)
    assert routing(store).params["id"] == "5"

    controller.uninstall()
    location.hash = "#/users/6"
    assert not controller._tasks
    assert routing(store).params["id"] == "5"


@pytest.mark.asyncio
async def test_navigate_accepts_store_as_context():
    router = Router()
    router.add("/x")
    controller, store = build(router)
    params = await controller.navigate(store, "/x")
    assert params.ok
    assert routing(store).path == "/x"


def test_store_module_shape():
    controller = NavigationController(location=MemoryLocation())
    module = controller.store_module
    assert isinstance(module["state"], NavigationState)
    assert set(module["getters"]) == {"routing", "routeParams"}
    assert set(module["mutations"]) == {"navigating", "navigated"}
    assert set(module["actions"]) == {"navigate"}
    assert module["state"].progress is False
    assert module["state"].path == ""
    assert isinstance(module["state"].params, RouteParams)


def test_create_navigation_defaults():
    controller = create_navigation()
    assert isinstance(controller.router, Router)
    assert isinstance(controller.location, MemoryLocation)
    assert controller.handle == 0
    assert controller.current_path == ""


@pytest.mark.asyncio
async def test_failed_scheduled_update_is_logged(caplog):
    router = Router()
    router.add("/x")
    location = MemoryLocation()
    controller = create_navigation(router, location=location)
    store = Store()
    controller.install(store)

    with caplog.at_level(logging.ERROR, logger="genro_hashrouter.core.navigation"):
        location.hash = "#/x"
        await asyncio.gather(*controller._tasks, return_exceptions=True)

    assert not controller._tasks
    assert [r.getMessage() for r in caplog.records] == ["Location update failed"]
    assert isinstance(caplog.records[0].exc_info[1], KeyError)

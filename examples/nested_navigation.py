from __future__ import annotations

import asyncio
import logging

from genro_hashrouter import MemoryLocation, Router, Store, create_navigation

USERS = {"42": "Ada", "7": "Grace"}


async def load_user(context, user_id):
    await asyncio.sleep(0.01)
    return {"user": USERS.get(user_id, "unknown")}


def load_post(context, params):
    return {"title": f"Post {params['postId']} by {params['user']}"}


def build_router():
    router = Router(name="app").plug("logging", level="DEBUG")
    router.add("/", {"page": "home"}, name="home")

    # Steps before the child run first, then the rest is delegated.
    users = router.child(
        "/users/:id",
        lambda context, params: context.dispatch("loadUser", params["id"]),
        name="users",
    )
    users.add("/", {"page": "profile"}, name="profile")
    users.add("/posts/:postId", load_post, {"page": "post"}, name="post")
    return router


async def main():
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    router = build_router()
    location = MemoryLocation("#/users/42/posts/7")
    navigation = create_navigation(router, location=location)
    store = Store({"router": navigation.store_module}, actions={"loadUser": load_user})

    print("--- Hash Router Demo ---")
    await navigation.start(store)
    params = store.getters["routeParams"]
    print(f"{store.state['router'].path} -> {dict(params)}")

    # A location change schedules a navigation
    location.hash = "#/users/7/"
    await asyncio.gather(*navigation._tasks)
    print(f"{store.state['router'].path} -> {dict(store.getters['routeParams'])}")

    post = router.children[0].routes[-1]
    print(f"\nLink to post 3 of Ada: {post.url(id=42, postId=3)}")

    missing = await store.dispatch("navigate", "/nowhere")
    print(f"Unknown path recorded as: {missing.error.kind}")

    navigation.uninstall()


if __name__ == "__main__":
    asyncio.run(main())

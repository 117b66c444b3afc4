"""End-to-end scenario demonstrating the callback and deferred styles."""

from __future__ import annotations

import asyncio
import os

from pydantic import BaseModel

from promised_http import ApiClient, Failure, RequestError, Success

BASE_URL = os.getenv("PROMISED_HTTP_DEMO_URL", "https://jsonplaceholder.typicode.com")
LOG_LEVEL = os.getenv("PROMISED_HTTP_LOG", "info")


class User(BaseModel):
    id: int
    name: str


class ApiError(BaseModel):
    message: str


def log_section(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def describe(error: ApiError | RequestError) -> str:
    if isinstance(error, RequestError):
        return f"infrastructure error: {error}"
    return f"server said: {error.message}"


async def main() -> None:
    async with ApiClient(base_url=BASE_URL, log_level=LOG_LEVEL) as client:
        log_section("Step 1: Completion callback")
        done = asyncio.Event()

        def completion(outcome: Success[User] | Failure[ApiError]) -> None:
            if isinstance(outcome, Success):
                print(f"→ Loaded {outcome.value.name} (#{outcome.value.id})")
            else:
                print(f"→ {describe(outcome.error)}")
            done.set()

        client.request("/users/1", User, ApiError, completion=completion)
        await done.wait()

        log_section("Step 2: Deferred with chained observers")
        deferred = (
            client.get("/users/2", User, ApiError)
            .on_success(lambda user: print(f"→ Loaded {user.name}"))
            .on_failure(lambda error: print(f"→ {describe(error)}"))
            .on_settled(lambda: print("→ Request settled"))
        )
        await deferred.as_future()

        log_section("Step 3: Late observer replays the stored outcome")
        deferred.on_success(lambda user: print(f"→ Replayed {user.name}"))

        log_section("Step 4: Body matching neither shape")
        outcome = await client.fetch("/posts/1/comments", User, ApiError)
        if isinstance(outcome, Failure):
            print(f"→ {describe(outcome.error)}")


if __name__ == "__main__":
    asyncio.run(main())

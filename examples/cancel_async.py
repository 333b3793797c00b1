"""Run a search as an asyncio task and cancel it from another task.

The solver yields to the event loop between 50ms slices, so a ticker
coroutine keeps running while the search is in flight. After a few
ticks the ticker sets the cancel token; the search observes it at the
next slice boundary and returns a CANCELLED result.
"""

import asyncio
import pathlib
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent))

import compute_plan
import cycle_planner
import regions

_C = cycle_planner._Colors


async def _ticker(token: compute_plan.CancelToken, ticks: int) -> None:
    for i in range(ticks):
        print(f"  {_C.DIM}tick {i + 1}{_C.RESET}")
        await asyncio.sleep(0.02)
    token.cancel()


async def main() -> None:
    region = regions.get_region("tsurumi")
    codec = region.codec()
    start = cycle_planner.uniform_config(region.group_keys, "A")
    # Without boats no route reaches Wakukau Shoal, so this target is
    # unreachable and the search would otherwise run to exhaustion.
    goal = cycle_planner.parse_config("B C A C B A B", region.group_keys)
    token = compute_plan.CancelToken()

    search = asyncio.create_task(
        compute_plan.find_shortest_plan_async(
            codec, start, goal, region.effect_patterns(allow_boat=False),
            multiplayer=True,
            cancel=token,
            on_progress=lambda n: print(f"  verified {n:,}"),
        )
    )
    await _ticker(token, ticks=3)
    result = await search
    print(result.summary(), f"({result.verified_count:,} states verified)")


if __name__ == "__main__":
    asyncio.run(main())

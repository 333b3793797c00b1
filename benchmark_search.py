"""Benchmark plan search across random start configurations.

Draws random Tsurumi Island start configurations and solves each
against the recommended target in solo and hold+advance modes.
Collects plan length, verified-state count and wall time per mode to
show how much the second player shortens plans and what it costs.
"""

import pathlib
import random
import statistics
import sys
import time

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent))

import compute_plan
import cycle_planner
import regions


def main() -> None:
    num_trials = 100
    region = regions.get_region("tsurumi")
    goal = region.recommended_goal()
    rng = random.Random(7)

    stats: dict[str, dict[str, list[float]]] = {
        mode: {"days": [], "verified": [], "seconds": []}
        for mode in ("solo", "multi")
    }
    unsolved = {"solo": 0, "multi": 0}

    for trial in range(num_trials):
        start = {
            k: cycle_planner.Phase(rng.randrange(cycle_planner.NUM_PHASES))
            for k in region.group_keys
        }
        for mode in ("solo", "multi"):
            t0 = time.perf_counter()
            result = compute_plan.plan_for_region(
                region, start, goal, multiplayer=(mode == "multi"),
            )
            elapsed = time.perf_counter() - t0
            if result.found:
                stats[mode]["days"].append(result.num_days)
            else:
                unsolved[mode] += 1
            stats[mode]["verified"].append(result.verified_count)
            stats[mode]["seconds"].append(elapsed)

        if (trial + 1) % 20 == 0:
            print(f"  Completed {trial + 1}/{num_trials} trials...")

    print()
    print("=" * 60)
    print(f"PLAN SEARCH BENCHMARK ({num_trials} random starts, {region.name})")
    print("=" * 60)

    for mode, name in (("solo", "Solo only"), ("multi", "Hold+advance")):
        days = stats[mode]["days"]
        verified = stats[mode]["verified"]
        seconds = stats[mode]["seconds"]
        print(f"\n{name}:")
        print(f"  Unsolved within {compute_plan.MAX_PLAN_LENGTH} days: "
              f"{unsolved[mode]}")
        if days:
            print(f"  Days:     mean {statistics.mean(days):.2f}  "
                  f"max {max(days)}")
        print(f"  Verified: mean {statistics.mean(verified):,.0f}  "
              f"max {max(verified):,}")
        print(f"  Seconds:  mean {statistics.mean(seconds):.3f}  "
              f"median {statistics.median(seconds):.3f}  "
              f"max {max(seconds):.3f}")


if __name__ == "__main__":
    main()

"""Compare solo and hold+advance plans for a partial goal.

Only three Tsurumi Island groups are constrained here; the rest are
left as "don't care". With a second player holding some groups, routes
that would otherwise overshoot a group can still be used.
"""

import pathlib
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent))

import compute_plan
import cycle_planner
import regions


def main() -> None:
    region = regions.get_region("tsurumi")
    start = cycle_planner.uniform_config(region.group_keys, "A")
    goal = cycle_planner.parse_config("B C - A - - -", region.group_keys)

    for multiplayer in (False, True):
        result = compute_plan.plan_for_region(
            region, start, goal, multiplayer=multiplayer,
        )
        compute_plan.print_plan(result, region, start)
        print()


if __name__ == "__main__":
    main()

"""Calculate a solo plan for the training grounds.

Demonstrates entering configurations with ``parse_config()`` and
running ``find_shortest_plan()`` directly against a region's codec and
effect patterns.
"""

import pathlib
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent))

import compute_plan
import cycle_planner
import regions


# ── Main ────────────────────────────────────────────────────

def main() -> None:
    """Plan the training grounds from all-A to all-B.

    The camp loop loads the Cliffside Camp group; the river walk loads
    the River Ford and Old Watchtower groups. Doing both on the same
    day advances all three.
    """
    region = regions.get_region("training")
    codec = region.codec()
    patterns = region.effect_patterns()

    print("Daily patterns:")
    for pattern in patterns:
        print(f"  {pattern}")
    print()

    start = cycle_planner.uniform_config(region.group_keys, "A")
    goal = cycle_planner.parse_config("B B B", region.group_keys)

    result = compute_plan.find_shortest_plan(codec, start, goal, patterns)
    compute_plan.print_plan(result, region, start, show_details=True)


if __name__ == "__main__":
    main()

"""Region definitions for the cycle planner.

Defines the ``Region`` dataclass bundling a region's elite groups (the
entities whose phases are planned), its catalog of atomic actions, and
a recommended target configuration, plus a registry of the regions the
planner ships with. Regions are static data; the number of groups in a
region fixes the size of the state space the solver searches.
"""

from __future__ import annotations

import dataclasses

import cycle_planner


# =============================================================================
# Region Dataclass
# =============================================================================

@dataclasses.dataclass(frozen=True)
class Region:
    """A planning region: its groups, actions and recommended goal.

    Attributes:
        key: Registry identifier (e.g. ``"tsurumi"``).
        name: Display name.
        groups: Elite groups in display order. This order is also the
            state encoding order.
        actions: Atomic action catalog in catalog order. The order
            drives the pattern generator, and with it the names chosen
            for deduplicated patterns.
        recommended: ``(group_key, label)`` pairs of the suggested
            target configuration. Groups not listed are unconstrained.
        notes: Free-text notes shown alongside plans.
    """
    key: str
    name: str
    groups: tuple[cycle_planner.EliteGroup, ...]
    actions: tuple[cycle_planner.AtomicAction, ...]
    recommended: tuple[tuple[str, str], ...] = ()
    notes: str = ""

    def __post_init__(self) -> None:
        keys = [g.key for g in self.groups]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Region {self.key!r} has duplicate group keys")
        known = set(keys)
        action_ids = [a.action_id for a in self.actions]
        if len(set(action_ids)) != len(action_ids):
            raise ValueError(f"Region {self.key!r} has duplicate action IDs")
        action_names = [a.name for a in self.actions]
        if len(set(action_names)) != len(action_names):
            raise ValueError(
                f"Region {self.key!r} has duplicate action names"
            )
        for action in self.actions:
            if cycle_planner.ACTION_NAME_SEP in action.name:
                raise ValueError(
                    f"Action name {action.name!r} in region {self.key!r} "
                    f"must not contain {cycle_planner.ACTION_NAME_SEP!r}"
                )
            unknown = sorted(action.affected - known)
            if unknown:
                raise ValueError(
                    f"Action {action.action_id!r} in region {self.key!r} "
                    f"references unknown group(s): {', '.join(unknown)}"
                )
        for group_key, label in self.recommended:
            if group_key not in known:
                raise ValueError(
                    f"Recommended goal for region {self.key!r} references "
                    f"unknown group {group_key!r}"
                )
            cycle_planner.Phase.from_label(label)

    @property
    def group_keys(self) -> tuple[str, ...]:
        return tuple(g.key for g in self.groups)

    def codec(self) -> cycle_planner.StateCodec:
        """State codec using this region's group order."""
        return cycle_planner.StateCodec(self.group_keys)

    def group_name(self, key: str) -> str:
        for group in self.groups:
            if group.key == key:
                return group.name
        raise ValueError(
            f"Unknown group key {key!r} for region {self.key!r}"
        )

    def get_action(self, action_id: str) -> cycle_planner.AtomicAction:
        """Look up an atomic action by ID.

        Raises:
            ValueError: If the region has no action with that ID.
        """
        for action in self.actions:
            if action.action_id == action_id:
                return action
        raise ValueError(
            f"Unknown action ID {action_id!r} for region {self.key!r}. "
            f"Valid IDs: {', '.join(a.action_id for a in self.actions)}"
        )

    def recommended_goal(self) -> dict[str, cycle_planner.Phase]:
        """The recommended target as a partial configuration."""
        return {
            k: cycle_planner.Phase.from_label(label)
            for k, label in self.recommended
        }

    def effect_patterns(
        self, allow_boat: bool = True,
    ) -> list[cycle_planner.EffectPattern]:
        """Distinct daily effects achievable in this region.

        Args:
            allow_boat: If False, boat routes are not used.
        """
        return cycle_planner.generate_effect_patterns(
            self.actions, cycle_planner.allow_transport(allow_boat),
        )


# =============================================================================
# Region Registry
# =============================================================================

REGIONS: dict[str, Region] = {}


def get_region(key: str) -> Region:
    """Look up a region by key.

    Raises:
        ValueError: If no region with that key is defined.
    """
    region = REGIONS.get(key)
    if region is None:
        raise ValueError(
            f"Region {key!r} is not defined. "
            f"Defined regions: {sorted(REGIONS.keys())}"
        )
    return region


def all_regions() -> list[Region]:
    """Return all defined regions sorted by key."""
    return [REGIONS[k] for k in sorted(REGIONS.keys())]


# =============================================================================
# Region Definitions
# =============================================================================

_G = cycle_planner.EliteGroup
_A = cycle_planner.AtomicAction
_WALK = cycle_planner.TransportMode.WALK
_BOAT = cycle_planner.TransportMode.BOAT
_TELEPORT = cycle_planner.TransportMode.TELEPORT

# ── Training grounds ──────────────────────────────────────────
# Three groups and two routes. Small enough to reason about by hand.

REGIONS["training"] = Region(
    key="training",
    name="Training Grounds",
    groups=(
        _G("e1", "Cliffside Camp"),
        _G("e2", "River Ford"),
        _G("e3", "Old Watchtower"),
    ),
    actions=(
        _A("camp", "Camp loop", frozenset({"e1"})),
        _A("river", "River walk", frozenset({"e2", "e3"})),
    ),
    recommended=(("e1", "B"), ("e2", "B"), ("e3", "B")),
)

# ── Tsurumi Island ────────────────────────────────────────────
# Seven elite groups. Each route loads the groups it passes close to;
# a loaded group's cycle advances by one phase at the daily reset.
# Illustrative data: the group names, routes and notes are made up to
# exercise the planner and do not describe in-game paths.

REGIONS["tsurumi"] = Region(
    key="tsurumi",
    name="Tsurumi Island",
    groups=(
        _G("shirikoro", "Shirikoro Peak"),
        _G("moshiri", "Moshiri Kara"),
        _G("oina", "Oina Beach"),
        _G("chirai", "Chirai Shrine"),
        _G("wakukau", "Wakukau Shoal"),
        _G("autake", "Autake Plains"),
        _G("mantle", "Mantle Hollow"),
    ),
    actions=(
        _A(
            "peak_descent", "Peak descent",
            frozenset({"shirikoro", "moshiri"}),
            note="Start at the Shirikoro waypoint and glide down the "
                 "east face.\nLand before the ruins; do not enter them.",
        ),
        _A(
            "beach_walk", "Beach walk", frozenset({"oina"}),
            note="Walk the shoreline from the statue to the shrine steps.",
        ),
        _A(
            "shrine_loop", "Shrine loop", frozenset({"chirai", "oina"}),
            note="Circle the shrine once clockwise.",
        ),
        _A(
            "shoal_boat", "Shoal crossing (boat)",
            frozenset({"wakukau", "mantle"}),
            transport=_BOAT,
            note="Take the waverider from the beach pier across the shoal.",
        ),
        _A(
            "plains_run", "Plains run", frozenset({"autake"}),
            note="Run the road from the camp to the lookout.",
        ),
        _A(
            "hollow_warp", "Hollow warp", frozenset({"mantle", "autake"}),
            transport=_TELEPORT,
            note="Teleport into the hollow and leave by the north exit.",
        ),
        _A(
            "island_tour", "Island tour (boat)",
            frozenset({"moshiri", "wakukau", "chirai"}),
            transport=_BOAT,
            note="Sail around the north cape, stopping at each landing.",
        ),
    ),
    recommended=(
        ("shirikoro", "A"),
        ("moshiri", "C"),
        ("oina", "B"),
        ("chirai", "B"),
        ("wakukau", "A"),
        ("autake", "C"),
    ),
    notes="Walk or sail the routes exactly; flying characters skip "
          "load zones and may not load every group.",
)

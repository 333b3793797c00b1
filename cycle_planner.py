"""Cycle planner domain model.

Core classes describing independently-cycling elite groups, the three
phases each group cycles through, the atomic actions that advance a
group's cycle, and the daily transitions a plan is made of. Also holds
the action-pattern generator that collapses every combination of atomic
actions into the distinct daily effects the plan solver searches over.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Callable, Iterable, Mapping, Sequence


# =============================================================================
# Constants
# =============================================================================

# Number of phases in every group's cycle (A -> B -> C -> A).
NUM_PHASES = 3

# Goal vector entry for a group whose phase is unconstrained.
DONT_CARE = -1

# Separator used when joining atomic action names into a pattern name.
ACTION_NAME_SEP = " + "

# Display name of the always-present empty effect pattern.
DO_NOTHING_NAME = "Do nothing"

# Hold column placeholder shown for solo transitions.
SOLO_HOLD_NAME = "---"


# =============================================================================
# ANSI Color Constants
# =============================================================================

class _Colors:
    """ANSI escape codes for terminal coloring."""
    BLUE = "\033[94m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    MAGENTA = "\033[95m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


# =============================================================================
# Enums
# =============================================================================

class Phase(enum.Enum):
    """Cycle position of an elite group.

    The value is the ordinal used as a base-3 digit in the state
    encoding. Users see the phases as labels A, B and C.
    """
    A = 0
    B = 1
    C = 2

    @property
    def label(self) -> str:
        """The user-facing label (``"A"``, ``"B"`` or ``"C"``)."""
        return self.name

    def advance(self, steps: int = 1) -> Phase:
        """Returns the phase reached after advancing ``steps`` times."""
        return Phase((self.value + steps) % NUM_PHASES)

    def ansi(self) -> str:
        """Returns the ANSI color code for this phase."""
        return {
            Phase.A: _Colors.BLUE,
            Phase.B: _Colors.GREEN,
            Phase.C: _Colors.MAGENTA,
        }[self]

    @classmethod
    def from_label(cls, label: str) -> Phase:
        """Parse a phase label, case-insensitive.

        Args:
            label: ``"A"``, ``"B"`` or ``"C"`` (surrounding whitespace
                is ignored).

        Returns:
            The matching Phase.

        Raises:
            ValueError: If the label is not a known phase.
        """
        key = label.strip().upper()
        if key not in cls.__members__:
            raise ValueError(
                f"Unknown phase label: {label!r}. "
                f"Valid labels: {', '.join(cls.__members__)}"
            )
        return cls[key]

    @classmethod
    def coerce(cls, value: Phase | str | int) -> Phase:
        """Convert a Phase, label string or ordinal (0-2) to a Phase.

        Raises:
            ValueError: If the value cannot be interpreted as a phase.
        """
        if isinstance(value, Phase):
            return value
        if isinstance(value, str):
            return cls.from_label(value)
        if isinstance(value, int) and not isinstance(value, bool):
            if 0 <= value < NUM_PHASES:
                return cls(value)
            raise ValueError(
                f"Phase ordinal out of range: {value} "
                f"(expected 0-{NUM_PHASES - 1})"
            )
        raise ValueError(f"Cannot interpret {value!r} as a phase")

    def __str__(self) -> str:
        return f"{self.ansi()}{self.label}{_Colors.RESET}"


class TransportMode(enum.Enum):
    """How the route of an atomic action is travelled.

    Some players cannot (or prefer not to) use boats, so boat routes
    can be excluded from the set of eligible actions.
    """
    WALK = enum.auto()
    BOAT = enum.auto()
    TELEPORT = enum.auto()


class TransitionMode(enum.Enum):
    """Kind of daily transition in a plan."""
    SOLO = enum.auto()          # One effect pattern applied directly
    HOLD_ADVANCE = enum.auto()  # Guest holds some groups, host advances the rest

    @property
    def display_name(self) -> str:
        return {
            TransitionMode.SOLO: "Solo",
            TransitionMode.HOLD_ADVANCE: "Multi",
        }[self]

    def ansi(self) -> str:
        """Returns the ANSI color code used when printing this mode."""
        return {
            TransitionMode.SOLO: _Colors.BLUE,
            TransitionMode.HOLD_ADVANCE: _Colors.YELLOW,
        }[self]


# =============================================================================
# Groups and Actions
# =============================================================================

@dataclasses.dataclass(frozen=True)
class EliteGroup:
    """One independently-cycling elite group.

    Attributes:
        key: Stable identifier used in configurations and affected sets.
        name: Display name.
    """
    key: str
    name: str


@dataclasses.dataclass(frozen=True)
class AtomicAction:
    """A primitive action that can be performed on its own in a day.

    Performing the action loads the listed groups, which advances each
    of their cycles by one phase.

    Attributes:
        action_id: Unique identifier within a region's action catalog.
        name: Display name. Pattern names are built by joining these
            with ``ACTION_NAME_SEP``.
        affected: Keys of the groups this action advances. Never empty.
        transport: How the action's route is travelled.
        note: Free-text route notes shown in the day breakdown.
    """
    action_id: str
    name: str
    affected: frozenset[str]
    transport: TransportMode = TransportMode.WALK
    note: str = ""

    def __post_init__(self) -> None:
        if not self.affected:
            raise ValueError(
                f"Atomic action {self.action_id!r} must affect at least "
                f"one group"
            )
        # Accept any iterable of keys at construction time.
        if not isinstance(self.affected, frozenset):
            object.__setattr__(self, "affected", frozenset(self.affected))


@dataclasses.dataclass(frozen=True)
class EffectPattern:
    """A distinct daily effect: the groups advanced by some action set.

    Two different combinations of atomic actions that advance the same
    groups are the same effect pattern; the name records the first
    combination that produced it.

    Attributes:
        name: Atomic action names joined by ``ACTION_NAME_SEP``, or
            ``DO_NOTHING_NAME`` for the empty pattern.
        affected: Keys of the groups advanced.
    """
    name: str
    affected: frozenset[str]

    @property
    def key(self) -> tuple[str, ...]:
        """Canonical, order-independent identity of the affected set."""
        return tuple(sorted(self.affected))

    @property
    def is_empty(self) -> bool:
        return not self.affected

    @property
    def action_names(self) -> list[str]:
        """Names of the atomic actions combined in this pattern."""
        if self.is_empty:
            return []
        return self.name.split(ACTION_NAME_SEP)

    def __str__(self) -> str:
        groups = ", ".join(self.key) if self.affected else "-"
        return f"{self.name} [{groups}]"


DO_NOTHING = EffectPattern(DO_NOTHING_NAME, frozenset())


# =============================================================================
# Action-Pattern Generator
# =============================================================================

def allow_transport(
    allow_boat: bool = True,
) -> Callable[[AtomicAction], bool]:
    """Build an eligibility predicate from the transport options.

    Args:
        allow_boat: If False, actions travelled by boat are excluded.

    Returns:
        A predicate returning True for eligible actions.
    """
    def _eligible(action: AtomicAction) -> bool:
        if not allow_boat and action.transport == TransportMode.BOAT:
            return False
        return True
    return _eligible


def generate_effect_patterns(
    actions: Sequence[AtomicAction],
    eligible: Callable[[AtomicAction], bool] | None = None,
) -> list[EffectPattern]:
    """Enumerate every distinct daily effect of the eligible actions.

    Walks all non-empty subsets of the eligible actions in ascending
    bitmask order (bit ``j`` set means action ``j`` is performed). Each
    subset's effect is the union of its members' affected groups. The
    first subset to produce a given affected set is kept and names the
    pattern; later subsets with the same union are dropped. The empty
    ``DO_NOTHING`` pattern always comes first.

    The cost is exponential in the number of eligible actions, which is
    small for any real region.

    Args:
        actions: Atomic action catalog, in catalog order.
        eligible: Optional predicate selecting which actions may be
            used. Defaults to all actions.

    Returns:
        Effect patterns in generation order. The order is deterministic
        and is the order the plan solver tries them in.
    """
    usable = [a for a in actions if eligible is None or eligible(a)]
    patterns: dict[tuple[str, ...], EffectPattern] = {
        DO_NOTHING.key: DO_NOTHING,
    }
    for mask in range(1, 1 << len(usable)):
        members = [a for j, a in enumerate(usable) if (mask >> j) & 1]
        affected: frozenset[str] = frozenset().union(
            *(a.affected for a in members)
        )
        key = tuple(sorted(affected))
        if key in patterns:
            continue
        patterns[key] = EffectPattern(
            name=ACTION_NAME_SEP.join(a.name for a in members),
            affected=affected,
        )
    return list(patterns.values())


# =============================================================================
# Daily Transitions
# =============================================================================

@dataclasses.dataclass(frozen=True)
class DailyTransition:
    """One day of a plan.

    A solo day applies ``advance`` directly. A hold+advance day is
    played with a guest: the guest performs ``hold`` first, which keeps
    those groups' cycles from moving, then the host performs
    ``advance``. Only groups in advance but not in hold change phase.

    Attributes:
        mode: Solo or hold+advance.
        advance: The pattern whose groups are advanced.
        hold: The guest's pattern for hold+advance days, None for solo.
    """
    mode: TransitionMode
    advance: EffectPattern
    hold: EffectPattern | None = None

    @classmethod
    def solo(cls, pattern: EffectPattern) -> DailyTransition:
        return cls(mode=TransitionMode.SOLO, advance=pattern)

    @classmethod
    def hold_advance(
        cls, hold: EffectPattern, advance: EffectPattern,
    ) -> DailyTransition:
        """Create a hold+advance day.

        Raises:
            ValueError: If the hold covers every group the advance
                would move, which would make the day a no-op.
        """
        if not advance.affected - hold.affected:
            raise ValueError(
                f"Hold {hold.name!r} cancels every group advanced by "
                f"{advance.name!r}"
            )
        return cls(
            mode=TransitionMode.HOLD_ADVANCE, advance=advance, hold=hold,
        )

    @property
    def effective_advance(self) -> frozenset[str]:
        """Groups whose phase actually changes on this day."""
        if self.hold is None:
            return self.advance.affected
        return self.advance.affected - self.hold.affected

    @property
    def hold_name(self) -> str:
        if self.hold is None:
            return SOLO_HOLD_NAME
        return self.hold.name

    def describe(self) -> str:
        """Human-readable one-line description for display."""
        mode = self.mode.display_name
        if self.mode == TransitionMode.SOLO:
            return f"{mode}: {self.advance.name}"
        return f"{mode}: hold {self.hold_name}, advance {self.advance.name}"


# =============================================================================
# State Encoding
# =============================================================================

ConfigValue = Phase | str | int


class StateCodec:
    """Converts between group configurations and base-3 state integers.

    The first group in ``keys`` is the most significant digit. A state
    integer is therefore in ``[0, 3**N)`` and two states are equal iff
    their integers are equal, which makes the integer the visited-set
    and queue key during search.

    Attributes:
        keys: Group keys in encoding order.
    """

    def __init__(self, keys: Sequence[str]) -> None:
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate group keys: {list(keys)}")
        self.keys: tuple[str, ...] = tuple(keys)
        self._index = {k: i for i, k in enumerate(self.keys)}
        n = len(self.keys)
        self._place = {
            k: NUM_PHASES ** (n - 1 - i) for i, k in enumerate(self.keys)
        }

    @property
    def num_groups(self) -> int:
        return len(self.keys)

    @property
    def num_states(self) -> int:
        """Size of the state space, ``3**N``."""
        return NUM_PHASES ** len(self.keys)

    def _check_key(self, key: str) -> None:
        if key not in self._index:
            raise ValueError(
                f"Unknown group key: {key!r}. "
                f"Valid keys: {', '.join(self.keys)}"
            )

    def _check_state(self, state: int) -> None:
        if not 0 <= state < self.num_states:
            raise ValueError(
                f"State {state} out of range [0, {self.num_states})"
            )

    # ── Conversions ───────────────────────────────────────────

    def encode(self, digits: Sequence[int]) -> int:
        """Encode phase ordinals (one per group, in key order)."""
        if len(digits) != len(self.keys):
            raise ValueError(
                f"Expected {len(self.keys)} phases, got {len(digits)}"
            )
        state = 0
        for d in digits:
            if not 0 <= d < NUM_PHASES:
                raise ValueError(f"Phase ordinal out of range: {d}")
            state = state * NUM_PHASES + d
        return state

    def decode(self, state: int) -> list[int]:
        """Decode a state integer into phase ordinals in key order."""
        self._check_state(state)
        digits = [0] * len(self.keys)
        for i in range(len(self.keys) - 1, -1, -1):
            state, digits[i] = divmod(state, NUM_PHASES)
        return digits

    def encode_config(self, config: Mapping[str, ConfigValue]) -> int:
        """Encode a complete configuration.

        Args:
            config: Mapping of every group key to its phase (Phase,
                label or ordinal).

        Raises:
            ValueError: If a group is missing, a key is unknown, or a
                phase value is invalid.
        """
        for key in config:
            self._check_key(key)
        missing = [k for k in self.keys if k not in config]
        if missing:
            raise ValueError(
                f"Start configuration is incomplete; missing group(s): "
                f"{', '.join(missing)}"
            )
        return self.encode([Phase.coerce(config[k]).value for k in self.keys])

    def decode_config(self, state: int) -> dict[str, Phase]:
        """Decode a state integer into a group -> Phase mapping."""
        return {
            k: Phase(d) for k, d in zip(self.keys, self.decode(state))
        }

    def goal_vector(
        self, config: Mapping[str, ConfigValue | None],
    ) -> tuple[int, ...]:
        """Build a goal vector from a partial configuration.

        Groups absent from ``config`` (or mapped to None) are
        unconstrained and hold ``DONT_CARE``.

        Raises:
            ValueError: If a key is unknown or a phase value is invalid.
        """
        for key in config:
            self._check_key(key)
        vector = []
        for k in self.keys:
            value = config.get(k)
            vector.append(
                DONT_CARE if value is None else Phase.coerce(value).value
            )
        return tuple(vector)

    # ── State arithmetic ──────────────────────────────────────

    def apply(self, state: int, affected: Iterable[str]) -> int:
        """Advance every affected group by one phase.

        Args:
            state: Current state integer.
            affected: Keys of the groups to advance.

        Returns:
            The resulting state integer.
        """
        for key in affected:
            place = self._place.get(key)
            if place is None:
                self._check_key(key)
            if (state // place) % NUM_PHASES == NUM_PHASES - 1:
                state -= (NUM_PHASES - 1) * place
            else:
                state += place
        return state

    def check_goal(self, goal: Sequence[int]) -> None:
        """Validate a goal vector.

        Raises:
            ValueError: If the length is wrong or an entry is neither
                ``DONT_CARE`` nor a phase ordinal.
        """
        if len(goal) != len(self.keys):
            raise ValueError(
                f"Goal vector has {len(goal)} entries, expected "
                f"{len(self.keys)}"
            )
        for key, want in zip(self.keys, goal):
            if want != DONT_CARE and not 0 <= want < NUM_PHASES:
                raise ValueError(
                    f"Goal phase for {key!r} out of range: {want}"
                )

    def satisfies(self, state: int, goal: Sequence[int]) -> bool:
        """True if every constrained group in ``goal`` matches ``state``."""
        digits = self.decode(state)
        for have, want in zip(digits, goal):
            if want != DONT_CARE and want != have:
                return False
        return True

    def matcher(self, goal: Sequence[int]) -> Callable[[int], bool]:
        """Build a fast goal test for repeated use during search.

        Only the constrained digits are extracted, so a goal with few
        constrained groups is cheap to test.
        """
        self.check_goal(goal)
        constrained = [
            (self._place[k], want)
            for k, want in zip(self.keys, goal)
            if want != DONT_CARE
        ]

        def _is_goal(state: int) -> bool:
            for place, want in constrained:
                if (state // place) % NUM_PHASES != want:
                    return False
            return True
        return _is_goal

    def format_state(self, state: int, color: bool = False) -> str:
        """Compact label string, e.g. ``"ABCA"``, in key order."""
        phases = [Phase(d) for d in self.decode(state)]
        if color:
            return "".join(str(p) for p in phases)
        return "".join(p.label for p in phases)


# =============================================================================
# Configuration Helpers
# =============================================================================

def uniform_config(keys: Iterable[str], phase: ConfigValue) -> dict[str, Phase]:
    """A configuration with every group set to the same phase."""
    p = Phase.coerce(phase)
    return {k: p for k in keys}


def parse_config(
    notation: str, keys: Sequence[str], sep: str = " ",
) -> dict[str, Phase]:
    """Parse a configuration from shorthand notation.

    One token per group, in key order. ``A``/``B``/``C`` set the phase
    and ``-`` or ``?`` leave the group out (unconstrained in a goal).
    A token string without separators (``"AB-C"``) is also accepted.

    Args:
        notation: The shorthand string, e.g. ``"A B - C"``.
        keys: Group keys in the order the tokens refer to.
        sep: Token separator (default ``" "``).

    Returns:
        Mapping of the specified groups to their phases.

    Raises:
        ValueError: If the token count doesn't match ``keys`` or a token
            is not a phase label.

    Examples::

        parse_config("A B C", ["g1", "g2", "g3"])
        parse_config("A-C", ["g1", "g2", "g3"])   # g2 unconstrained
    """
    tokens = [t for t in notation.split(sep) if t]
    if len(tokens) == 1 and len(tokens[0]) == len(keys) > 1:
        tokens = list(tokens[0])
    if len(tokens) != len(keys):
        raise ValueError(
            f"Expected {len(keys)} phase tokens, got {len(tokens)} "
            f"in {notation!r}"
        )
    config: dict[str, Phase] = {}
    for key, token in zip(keys, tokens):
        if token in ("-", "?"):
            continue
        config[key] = Phase.from_label(token)
    return config

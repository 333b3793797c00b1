"""Shortest-plan solver for the cycle planner.

Finds the fewest days needed to take every elite group from a start
configuration to a (possibly partial) target configuration. Each day
applies one effect pattern (solo), or, with a second player, a hold
pattern that pins some groups plus an advance pattern that moves the
rest.

Architecture:
    PlanSearch owns one breadth-first search over base-3 state integers
    and processes it in bounded time slices. The synchronous and asyncio
    drivers run slices back to back, report the verified-state counter
    between slices, and observe cancellation only at those boundaries,
    so a host application stays responsive during large searches.
"""

from __future__ import annotations

import asyncio
import collections
import dataclasses
import enum
import time
from collections.abc import Callable, Mapping, Sequence

import tqdm

import cycle_planner
import regions

_C = cycle_planner._Colors

# Longest plan the solver will return, in days.
MAX_PLAN_LENGTH = 8

# Wall-clock budget of one work slice, in seconds. The drivers yield
# between slices.
SLICE_SECONDS = 0.05


# =============================================================================
# Results
# =============================================================================

class SolveStatus(enum.Enum):
    """Outcome of a plan search."""
    FOUND = enum.auto()      # A plan was found (possibly empty)
    NO_PLAN = enum.auto()    # Goal unreachable within the length bound
    CANCELLED = enum.auto()  # Abandoned at the caller's request


@dataclasses.dataclass
class SolveResult:
    """Result of one solve invocation.

    The plan list is created fresh for every call and is owned by the
    caller; the solver keeps no reference to it.

    Attributes:
        status: Found, no plan within the bound, or cancelled.
        plan: Daily transitions in order when status is FOUND, else None.
        verified_count: Number of search nodes dequeued and processed.
        max_plan_length: The length bound the search ran with.
    """
    status: SolveStatus
    plan: list[cycle_planner.DailyTransition] | None
    verified_count: int = 0
    max_plan_length: int = MAX_PLAN_LENGTH

    @property
    def found(self) -> bool:
        return self.status == SolveStatus.FOUND

    @property
    def num_days(self) -> int | None:
        """Plan length in days, or None when no plan was produced."""
        if self.plan is None:
            return None
        return len(self.plan)

    def summary(self) -> str:
        """One-line summary for display."""
        if self.status == SolveStatus.CANCELLED:
            return "Calculation cancelled."
        if self.status == SolveStatus.NO_PLAN:
            return (
                f"No plan within {self.max_plan_length} days was found."
            )
        if not self.plan:
            return "No adjustment needed!"
        days = len(self.plan)
        return f"Shortest plan: {days} day{'s' if days != 1 else ''}."


class CancelToken:
    """Cooperative cancellation flag shared between a caller and a solve.

    The solve checks the flag between work slices only; a slice that has
    already started always runs to completion.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


# =============================================================================
# Search
# =============================================================================

# Queue entry: (state integer, transitions taken to reach it).
_Node = tuple[int, tuple[cycle_planner.DailyTransition, ...]]


class PlanSearch:
    """Breadth-first search for the shortest plan, run in time slices.

    Every transition costs exactly one day, so the first goal state
    generated by BFS with a visited set is reached by a shortest plan.
    Ties are broken by generation order: nodes are expanded FIFO, solo
    transitions are tried before hold+advance ones, patterns in
    generator order, and hold+advance pairs with the hold pattern in the
    outer loop. The first goal-satisfying successor ends the search.

    The queue, visited set and counter belong to this instance alone.
    Create one PlanSearch per solve.

    Attributes:
        codec: State codec defining the group order.
        multiplayer: Whether hold+advance transitions are explored.
        max_plan_length: Nodes whose path has this many days are not
            expanded.
        result: Set once the search has finished, else None.
    """

    def __init__(
        self,
        codec: cycle_planner.StateCodec,
        start_state: int,
        goal: Sequence[int],
        patterns: Sequence[cycle_planner.EffectPattern],
        multiplayer: bool = False,
        max_plan_length: int = MAX_PLAN_LENGTH,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if max_plan_length < 0:
            raise ValueError(
                f"max_plan_length must be >= 0, got {max_plan_length}"
            )
        codec.decode(start_state)  # range check
        known = set(codec.keys)
        for pattern in patterns:
            unknown = sorted(pattern.affected - known)
            if unknown:
                raise ValueError(
                    f"Pattern {pattern.name!r} affects unknown group(s): "
                    f"{', '.join(unknown)}"
                )

        self.codec = codec
        self.multiplayer = multiplayer
        self.max_plan_length = max_plan_length
        self.result: SolveResult | None = None
        self._clock = clock
        self._is_goal = codec.matcher(goal)
        self._verified = 0
        self._queue: collections.deque[_Node] = collections.deque()
        self._visited: set[int] = set()

        # Transitions are immutable and shared by every path using them.
        self._solo = [
            (cycle_planner.DailyTransition.solo(p), p.affected)
            for p in patterns
        ]
        self._hold_advance: list[
            tuple[cycle_planner.DailyTransition, frozenset[str]]
        ] = []
        if multiplayer:
            for hold in patterns:
                for advance in patterns:
                    effective = advance.affected - hold.affected
                    if not effective:
                        continue
                    self._hold_advance.append((
                        cycle_planner.DailyTransition.hold_advance(
                            hold, advance,
                        ),
                        effective,
                    ))
        self._candidates = self._solo + self._hold_advance

        if self._is_goal(start_state):
            self.result = self._finish(SolveStatus.FOUND, [])
        else:
            self._queue.append((start_state, ()))
            self._visited.add(start_state)

    @property
    def done(self) -> bool:
        return self.result is not None

    @property
    def verified_count(self) -> int:
        """Number of nodes dequeued and processed so far."""
        return self._verified

    def _finish(
        self,
        status: SolveStatus,
        plan: list[cycle_planner.DailyTransition] | None,
    ) -> SolveResult:
        self._queue.clear()
        self._visited.clear()
        return SolveResult(
            status=status,
            plan=plan,
            verified_count=self._verified,
            max_plan_length=self.max_plan_length,
        )

    def _expand(
        self,
        state: int,
        path: tuple[cycle_planner.DailyTransition, ...],
    ) -> tuple[cycle_planner.DailyTransition, ...] | None:
        """Generate successors; return the winning path if one is a goal."""
        apply = self.codec.apply
        for transition, affected in self._candidates:
            next_state = apply(state, affected)
            if self._is_goal(next_state):
                return path + (transition,)
            if next_state not in self._visited:
                self._visited.add(next_state)
                self._queue.append((next_state, path + (transition,)))
        return None

    def run_slice(self, budget: float = SLICE_SECONDS) -> SolveResult | None:
        """Process queue entries for up to ``budget`` seconds.

        At least one node is processed per call, so a zero budget steps
        the search one node at a time.

        Args:
            budget: Wall-clock budget in seconds.

        Returns:
            The final result if the search finished during this slice,
            otherwise None.

        Raises:
            RuntimeError: If the search has already finished.
        """
        if self.result is not None:
            raise RuntimeError("Search has already finished")
        started = self._clock()
        while self._queue:
            state, path = self._queue.popleft()
            self._verified += 1
            if len(path) < self.max_plan_length:
                solution = self._expand(state, path)
                if solution is not None:
                    self.result = self._finish(
                        SolveStatus.FOUND, list(solution),
                    )
                    return self.result
            if self._clock() - started >= budget:
                break
        if not self._queue:
            self.result = self._finish(SolveStatus.NO_PLAN, None)
        return self.result

    def cancel(self) -> SolveResult:
        """Abandon the search and return a CANCELLED result."""
        if self.result is None:
            self.result = self._finish(SolveStatus.CANCELLED, None)
        return self.result


# =============================================================================
# Drivers
# =============================================================================

class _ProgressReporter:
    """Forwards the verified-state counter to a callback and/or tqdm."""

    def __init__(
        self,
        on_progress: Callable[[int], None] | None,
        show_progress: bool,
        total: int,
    ) -> None:
        self._on_progress = on_progress
        self._last = 0
        self._pbar = None
        if show_progress:
            self._pbar = tqdm.tqdm(
                total=total,
                desc="Searching",
                unit=" states",
                dynamic_ncols=True,
            )

    def update(self, count: int) -> None:
        if self._pbar is not None:
            self._pbar.update(count - self._last)
        self._last = count
        if self._on_progress is not None:
            self._on_progress(count)

    def close(self) -> None:
        if self._pbar is not None:
            self._pbar.close()


def _build_search(
    codec: cycle_planner.StateCodec,
    start_config: Mapping[str, cycle_planner.ConfigValue],
    goal_config: Mapping[str, cycle_planner.ConfigValue | None],
    patterns: Sequence[cycle_planner.EffectPattern],
    multiplayer: bool,
    max_plan_length: int,
    slice_seconds: float,
) -> PlanSearch:
    if slice_seconds <= 0:
        raise ValueError(f"slice_seconds must be > 0, got {slice_seconds}")
    return PlanSearch(
        codec,
        codec.encode_config(start_config),
        codec.goal_vector(goal_config),
        patterns,
        multiplayer=multiplayer,
        max_plan_length=max_plan_length,
    )


def find_shortest_plan(
    codec: cycle_planner.StateCodec,
    start_config: Mapping[str, cycle_planner.ConfigValue],
    goal_config: Mapping[str, cycle_planner.ConfigValue | None],
    patterns: Sequence[cycle_planner.EffectPattern],
    multiplayer: bool = False,
    max_plan_length: int = MAX_PLAN_LENGTH,
    on_progress: Callable[[int], None] | None = None,
    cancel: CancelToken | None = None,
    slice_seconds: float = SLICE_SECONDS,
    show_progress: bool = False,
) -> SolveResult:
    """Find the shortest plan from a start to a goal configuration.

    Runs the search in slices of ``slice_seconds``. After every slice
    the verified-state counter is passed to ``on_progress``, and
    ``cancel`` is checked before the next slice starts.

    Args:
        codec: Codec for the region's group order.
        start_config: Phase of every group. Must be complete.
        goal_config: Target phase per group; omitted groups are
            unconstrained.
        patterns: Effect patterns from ``generate_effect_patterns``.
        multiplayer: If True, also explore hold+advance days.
        max_plan_length: Longest plan to consider, in days.
        on_progress: Optional callback receiving the verified count.
        cancel: Optional token; when set, the search stops at the next
            slice boundary with a CANCELLED result.
        slice_seconds: Wall-clock budget of one slice.
        show_progress: If True, display a tqdm progress bar over the
            state space.

    Returns:
        The SolveResult. When the start already satisfies the goal, the
        empty plan is returned without searching (verified count 0).

    Raises:
        ValueError: If the start configuration is incomplete, a key or
            phase is invalid, or a bound is out of range.
    """
    search = _build_search(
        codec, start_config, goal_config, patterns,
        multiplayer, max_plan_length, slice_seconds,
    )
    if search.result is not None:
        return search.result

    reporter = _ProgressReporter(on_progress, show_progress, codec.num_states)
    try:
        while True:
            if cancel is not None and cancel.cancelled:
                return search.cancel()
            result = search.run_slice(slice_seconds)
            reporter.update(search.verified_count)
            if result is not None:
                return result
    finally:
        reporter.close()


async def find_shortest_plan_async(
    codec: cycle_planner.StateCodec,
    start_config: Mapping[str, cycle_planner.ConfigValue],
    goal_config: Mapping[str, cycle_planner.ConfigValue | None],
    patterns: Sequence[cycle_planner.EffectPattern],
    multiplayer: bool = False,
    max_plan_length: int = MAX_PLAN_LENGTH,
    on_progress: Callable[[int], None] | None = None,
    cancel: CancelToken | None = None,
    slice_seconds: float = SLICE_SECONDS,
    show_progress: bool = False,
) -> SolveResult:
    """Asyncio version of ``find_shortest_plan``.

    Yields to the event loop between slices so other tasks keep running.
    Setting ``cancel`` returns a CANCELLED result at the next slice
    boundary; cancelling the task itself raises ``asyncio.CancelledError``
    there instead.
    """
    search = _build_search(
        codec, start_config, goal_config, patterns,
        multiplayer, max_plan_length, slice_seconds,
    )
    if search.result is not None:
        return search.result

    reporter = _ProgressReporter(on_progress, show_progress, codec.num_states)
    try:
        while True:
            if cancel is not None and cancel.cancelled:
                return search.cancel()
            result = search.run_slice(slice_seconds)
            reporter.update(search.verified_count)
            if result is not None:
                return result
            await asyncio.sleep(0)
    finally:
        reporter.close()


def plan_for_region(
    region: regions.Region,
    start_config: Mapping[str, cycle_planner.ConfigValue],
    goal_config: Mapping[str, cycle_planner.ConfigValue | None] | None = None,
    multiplayer: bool = False,
    allow_boat: bool = True,
    **kwargs,
) -> SolveResult:
    """Solve a region's plan with its own action catalog.

    Args:
        region: The region to plan for.
        start_config: Phase of every group in the region.
        goal_config: Target configuration. Defaults to the region's
            recommended goal.
        multiplayer: If True, also explore hold+advance days.
        allow_boat: If False, boat routes are excluded.
        **kwargs: Passed through to ``find_shortest_plan``.
    """
    if goal_config is None:
        goal_config = region.recommended_goal()
    return find_shortest_plan(
        region.codec(),
        start_config,
        goal_config,
        region.effect_patterns(allow_boat=allow_boat),
        multiplayer=multiplayer,
        **kwargs,
    )


# =============================================================================
# Plan Replay
# =============================================================================

def trace_plan(
    codec: cycle_planner.StateCodec,
    start_state: int,
    plan: Sequence[cycle_planner.DailyTransition],
) -> list[int]:
    """States visited by a plan, starting with ``start_state``.

    Returns:
        ``len(plan) + 1`` state integers: the start, then the state at
        the end of each day.
    """
    states = [start_state]
    for transition in plan:
        states.append(codec.apply(states[-1], transition.effective_advance))
    return states


def apply_plan(
    codec: cycle_planner.StateCodec,
    start_state: int,
    plan: Sequence[cycle_planner.DailyTransition],
) -> int:
    """State reached after every day of the plan."""
    return trace_plan(codec, start_state, plan)[-1]


# =============================================================================
# Day Breakdown
# =============================================================================

@dataclasses.dataclass(frozen=True)
class ActionStep:
    """One atomic action to perform on a given day.

    Attributes:
        role: ``"hold"`` for the guest's pinning actions, ``"advance"``
            for actions that move cycles.
        action: The atomic action.
        groups: Keys of the groups this action is responsible for on
            this day, sorted by key.
    """
    role: str
    action: cycle_planner.AtomicAction
    groups: tuple[str, ...]


def _pattern_steps(
    role: str,
    pattern: cycle_planner.EffectPattern,
    relevant: frozenset[str],
    by_name: dict[str, cycle_planner.AtomicAction],
) -> list[ActionStep]:
    steps = []
    for name in pattern.action_names:
        action = by_name.get(name)
        if action is None:
            raise ValueError(
                f"Pattern {pattern.name!r} uses unknown action {name!r}"
            )
        groups = tuple(sorted(action.affected & relevant))
        if groups:
            steps.append(ActionStep(role, action, groups))
    return steps


def describe_transition(
    transition: cycle_planner.DailyTransition,
    actions: Sequence[cycle_planner.AtomicAction],
) -> list[ActionStep]:
    """Break a day down into the atomic actions to perform.

    For hold+advance days, the guest's hold actions come first, then
    the host's advance actions limited to the groups that actually
    advance. Actions that contribute no relevant group are skipped, so
    an empty list means no special action is needed that day.

    Args:
        transition: The day to describe.
        actions: The atomic action catalog the plan was built from.

    Raises:
        ValueError: If a pattern names an action not in the catalog.
    """
    by_name = {a.name: a for a in actions}
    steps: list[ActionStep] = []
    if transition.hold is not None:
        steps += _pattern_steps(
            "hold", transition.hold, transition.hold.affected, by_name,
        )
    steps += _pattern_steps(
        "advance", transition.advance, transition.effective_advance, by_name,
    )
    return steps


# =============================================================================
# Display
# =============================================================================

def _status_color(result: SolveResult) -> str:
    return {
        SolveStatus.FOUND: _C.GREEN,
        SolveStatus.NO_PLAN: _C.YELLOW,
        SolveStatus.CANCELLED: _C.RED,
    }[result.status]


def print_plan(
    result: SolveResult,
    region: regions.Region,
    start_config: Mapping[str, cycle_planner.ConfigValue],
    show_details: bool = False,
) -> None:
    """Print a solve result as a day-by-day table.

    Args:
        result: The result to print.
        region: Region the plan was computed for.
        start_config: The start configuration the plan was computed from.
        show_details: If True, list each day's atomic actions, the groups
            they load, and their route notes.
    """
    codec = region.codec()
    start_state = codec.encode_config(start_config)

    print(f"{_C.BOLD}{'─' * 60}{_C.RESET}")
    print(f"{_C.BOLD}{region.name}{_C.RESET}")
    print(f"{_C.BOLD}{'─' * 60}{_C.RESET}")
    print(f"Start: {codec.format_state(start_state, color=True)}"
          f"  {_C.DIM}({' '.join(codec.keys)}){_C.RESET}")
    print(f"{_status_color(result)}{result.summary()}{_C.RESET}"
          f"  {_C.DIM}[{result.verified_count:,} states verified]{_C.RESET}")
    if not result.plan:
        return

    print()
    states = trace_plan(codec, start_state, result.plan)
    for day, (transition, state) in enumerate(
        zip(result.plan, states[1:]), start=1,
    ):
        mode = transition.mode
        print(
            f"  Day {day}  "
            f"{mode.ansi()}{mode.display_name:<5}{_C.RESET}  "
            f"hold: {transition.hold_name:<24} "
            f"advance: {transition.advance.name:<32} "
            f"-> {codec.format_state(state, color=True)}"
        )
        if not show_details:
            continue
        steps = describe_transition(transition, region.actions)
        if not steps:
            print(f"      {_C.DIM}No special action needed.{_C.RESET}")
        for step in steps:
            names = ", ".join(region.group_name(k) for k in step.groups)
            print(f"      [{step.role}] {step.action.name}: {names}")
            for line in step.action.note.splitlines():
                print(f"        {_C.DIM}{line}{_C.RESET}")
    if region.notes and show_details:
        print()
        print(f"{_C.DIM}{region.notes}{_C.RESET}")

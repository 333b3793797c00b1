"""Unit tests for the cycle planner domain model."""

import unittest

import cycle_planner


def _action(
    action_id: str,
    groups: set[str],
    transport: cycle_planner.TransportMode = cycle_planner.TransportMode.WALK,
) -> cycle_planner.AtomicAction:
    """Helper to build an atomic action named after its ID."""
    return cycle_planner.AtomicAction(
        action_id, action_id, frozenset(groups), transport=transport,
    )


class TestPhase(unittest.TestCase):
    """Tests for Phase labels and arithmetic."""

    def test_ordinals(self) -> None:
        self.assertEqual(
            [p.value for p in cycle_planner.Phase], [0, 1, 2],
        )

    def test_advance_wraps(self) -> None:
        self.assertEqual(cycle_planner.Phase.A.advance(), cycle_planner.Phase.B)
        self.assertEqual(cycle_planner.Phase.C.advance(), cycle_planner.Phase.A)
        self.assertEqual(
            cycle_planner.Phase.B.advance(2), cycle_planner.Phase.A,
        )

    def test_from_label_case_insensitive(self) -> None:
        self.assertEqual(
            cycle_planner.Phase.from_label(" b "), cycle_planner.Phase.B,
        )

    def test_from_label_unknown(self) -> None:
        with self.assertRaises(ValueError) as cm:
            cycle_planner.Phase.from_label("D")
        self.assertIn("Valid labels", str(cm.exception))

    def test_coerce(self) -> None:
        self.assertEqual(cycle_planner.Phase.coerce(2), cycle_planner.Phase.C)
        self.assertEqual(
            cycle_planner.Phase.coerce("a"), cycle_planner.Phase.A,
        )
        self.assertEqual(
            cycle_planner.Phase.coerce(cycle_planner.Phase.B),
            cycle_planner.Phase.B,
        )

    def test_coerce_rejects_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            cycle_planner.Phase.coerce(3)
        with self.assertRaises(ValueError):
            cycle_planner.Phase.coerce(True)
        with self.assertRaises(ValueError):
            cycle_planner.Phase.coerce(1.0)  # type: ignore[arg-type]


class TestAtomicAction(unittest.TestCase):
    """Tests for AtomicAction construction."""

    def test_empty_affected_rejected(self) -> None:
        with self.assertRaises(ValueError):
            cycle_planner.AtomicAction("x", "X", frozenset())

    def test_affected_normalized_to_frozenset(self) -> None:
        action = cycle_planner.AtomicAction("x", "X", {"g1"})  # type: ignore[arg-type]
        self.assertIsInstance(action.affected, frozenset)
        self.assertEqual(action.transport, cycle_planner.TransportMode.WALK)


class TestGenerateEffectPatterns(unittest.TestCase):
    """Tests for cycle_planner.generate_effect_patterns."""

    def test_empty_catalog_yields_do_nothing(self) -> None:
        patterns = cycle_planner.generate_effect_patterns([])
        self.assertEqual(patterns, [cycle_planner.DO_NOTHING])

    def test_disjoint_actions(self) -> None:
        """No two subsets collapse: 2 actions give 3 + 1 patterns."""
        patterns = cycle_planner.generate_effect_patterns([
            _action("a1", {"e1"}),
            _action("a2", {"e2", "e3"}),
        ])
        self.assertEqual(
            [p.name for p in patterns],
            [cycle_planner.DO_NOTHING_NAME, "a1", "a2", "a1 + a2"],
        )
        self.assertEqual(
            [p.key for p in patterns],
            [(), ("e1",), ("e2", "e3"), ("e1", "e2", "e3")],
        )

    def test_overlapping_actions_deduplicated(self) -> None:
        """Subsets with the same union collapse to the first one."""
        actions = [
            _action("a", {"x"}),
            _action("b", {"y"}),
            _action("c", {"x", "y"}),
        ]
        patterns = cycle_planner.generate_effect_patterns(actions)
        non_empty = [p for p in patterns if not p.is_empty]
        self.assertLess(len(non_empty), 2 ** len(actions) - 1)
        self.assertEqual([p.name for p in non_empty], ["a", "b", "a + b"])

    def test_first_subset_names_pattern(self) -> None:
        """The lowest bitmask realizing a union fixes its name."""
        patterns = cycle_planner.generate_effect_patterns([
            _action("wide", {"x", "y"}),
            _action("left", {"x"}),
            _action("right", {"y"}),
        ])
        by_key = {p.key: p.name for p in patterns}
        self.assertEqual(by_key[("x", "y")], "wide")
        self.assertEqual(len(patterns), 4)

    def test_keys_are_unique(self) -> None:
        patterns = cycle_planner.generate_effect_patterns([
            _action("a", {"x", "y"}),
            _action("b", {"y", "z"}),
            _action("c", {"z"}),
            _action("d", {"x"}),
        ])
        keys = [p.key for p in patterns]
        self.assertEqual(len(keys), len(set(keys)))
        self.assertEqual(patterns[0], cycle_planner.DO_NOTHING)

    def test_deterministic(self) -> None:
        actions = [
            _action("a", {"x", "y"}),
            _action("b", {"y", "z"}),
            _action("c", {"z"}),
        ]
        self.assertEqual(
            cycle_planner.generate_effect_patterns(actions),
            cycle_planner.generate_effect_patterns(actions),
        )

    def test_eligibility_excludes_boat(self) -> None:
        actions = [
            _action("walk", {"x"}),
            _action("boat", {"y"}, cycle_planner.TransportMode.BOAT),
        ]
        patterns = cycle_planner.generate_effect_patterns(
            actions, cycle_planner.allow_transport(allow_boat=False),
        )
        self.assertEqual(
            [p.name for p in patterns],
            [cycle_planner.DO_NOTHING_NAME, "walk"],
        )

    def test_eligibility_allows_boat(self) -> None:
        actions = [
            _action("walk", {"x"}),
            _action("boat", {"y"}, cycle_planner.TransportMode.BOAT),
        ]
        patterns = cycle_planner.generate_effect_patterns(
            actions, cycle_planner.allow_transport(allow_boat=True),
        )
        self.assertEqual(len(patterns), 4)

    def test_action_names_split(self) -> None:
        patterns = cycle_planner.generate_effect_patterns([
            _action("a", {"x"}),
            _action("b", {"y"}),
        ])
        self.assertEqual(patterns[3].action_names, ["a", "b"])
        self.assertEqual(cycle_planner.DO_NOTHING.action_names, [])


class TestDailyTransition(unittest.TestCase):
    """Tests for DailyTransition."""

    def setUp(self) -> None:
        self.hold = cycle_planner.EffectPattern("h", frozenset({"x"}))
        self.advance = cycle_planner.EffectPattern(
            "a", frozenset({"x", "y"}),
        )

    def test_solo(self) -> None:
        day = cycle_planner.DailyTransition.solo(self.advance)
        self.assertEqual(day.mode, cycle_planner.TransitionMode.SOLO)
        self.assertEqual(day.effective_advance, frozenset({"x", "y"}))
        self.assertEqual(day.hold_name, cycle_planner.SOLO_HOLD_NAME)

    def test_hold_advance_effective_set(self) -> None:
        day = cycle_planner.DailyTransition.hold_advance(
            self.hold, self.advance,
        )
        self.assertEqual(day.mode, cycle_planner.TransitionMode.HOLD_ADVANCE)
        self.assertEqual(day.effective_advance, frozenset({"y"}))
        self.assertEqual(day.hold_name, "h")

    def test_hold_advance_rejects_noop(self) -> None:
        with self.assertRaises(ValueError):
            cycle_planner.DailyTransition.hold_advance(
                self.advance, self.hold,
            )

    def test_describe(self) -> None:
        day = cycle_planner.DailyTransition.hold_advance(
            self.hold, self.advance,
        )
        self.assertEqual(day.describe(), "Multi: hold h, advance a")


class TestStateCodec(unittest.TestCase):
    """Tests for StateCodec encoding and arithmetic."""

    def setUp(self) -> None:
        self.codec = cycle_planner.StateCodec(["g1", "g2", "g3"])

    def test_encode_first_key_most_significant(self) -> None:
        self.assertEqual(self.codec.encode([1, 0, 2]), 11)
        self.assertEqual(self.codec.encode([0, 0, 0]), 0)
        self.assertEqual(self.codec.encode([2, 2, 2]), 26)

    def test_decode(self) -> None:
        self.assertEqual(self.codec.decode(11), [1, 0, 2])

    def test_decode_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            self.codec.decode(27)
        with self.assertRaises(ValueError):
            self.codec.decode(-1)

    def test_num_states(self) -> None:
        self.assertEqual(self.codec.num_states, 27)

    def test_duplicate_keys_rejected(self) -> None:
        with self.assertRaises(ValueError):
            cycle_planner.StateCodec(["g1", "g1"])

    def test_encode_config(self) -> None:
        state = self.codec.encode_config({"g1": "B", "g2": 0, "g3": "c"})
        self.assertEqual(state, 11)

    def test_encode_config_missing_group(self) -> None:
        with self.assertRaises(ValueError) as cm:
            self.codec.encode_config({"g1": "A", "g2": "A"})
        self.assertIn("g3", str(cm.exception))

    def test_encode_config_unknown_group(self) -> None:
        with self.assertRaises(ValueError) as cm:
            self.codec.encode_config(
                {"g1": "A", "g2": "A", "g3": "A", "g9": "A"},
            )
        self.assertIn("g9", str(cm.exception))

    def test_decode_config(self) -> None:
        config = self.codec.decode_config(11)
        self.assertEqual(config["g1"], cycle_planner.Phase.B)
        self.assertEqual(config["g3"], cycle_planner.Phase.C)

    def test_goal_vector(self) -> None:
        self.assertEqual(
            self.codec.goal_vector({"g2": "C"}),
            (cycle_planner.DONT_CARE, 2, cycle_planner.DONT_CARE),
        )
        self.assertEqual(
            self.codec.goal_vector({"g1": None, "g3": "A"}),
            (cycle_planner.DONT_CARE, cycle_planner.DONT_CARE, 0),
        )

    def test_goal_vector_unknown_group(self) -> None:
        with self.assertRaises(ValueError):
            self.codec.goal_vector({"nope": "A"})

    def test_apply_increments_and_wraps(self) -> None:
        self.assertEqual(self.codec.apply(0, {"g1"}), 9)
        # g3 wraps from C back to A
        self.assertEqual(self.codec.apply(11, {"g3"}), 9)
        self.assertEqual(
            self.codec.decode(self.codec.apply(11, {"g1", "g2", "g3"})),
            [2, 1, 0],
        )

    def test_apply_empty_is_identity(self) -> None:
        self.assertEqual(self.codec.apply(11, frozenset()), 11)

    def test_apply_unknown_group(self) -> None:
        with self.assertRaises(ValueError):
            self.codec.apply(0, {"g9"})

    def test_satisfies(self) -> None:
        goal = self.codec.goal_vector({"g1": "B"})
        self.assertTrue(self.codec.satisfies(11, goal))
        self.assertFalse(self.codec.satisfies(0, goal))

    def test_matcher_agrees_with_satisfies(self) -> None:
        goal = self.codec.goal_vector({"g1": "B", "g3": "C"})
        is_goal = self.codec.matcher(goal)
        for state in range(self.codec.num_states):
            self.assertEqual(
                is_goal(state), self.codec.satisfies(state, goal),
            )

    def test_unconstrained_goal_always_satisfied(self) -> None:
        is_goal = self.codec.matcher(self.codec.goal_vector({}))
        self.assertTrue(all(is_goal(s) for s in range(27)))

    def test_check_goal_rejects_bad_vectors(self) -> None:
        with self.assertRaises(ValueError):
            self.codec.check_goal((0, 0))
        with self.assertRaises(ValueError):
            self.codec.check_goal((0, 3, 0))

    def test_format_state(self) -> None:
        self.assertEqual(self.codec.format_state(11), "BAC")


class TestConfigHelpers(unittest.TestCase):
    """Tests for uniform_config and parse_config."""

    KEYS = ["g1", "g2", "g3"]

    def test_uniform_config(self) -> None:
        config = cycle_planner.uniform_config(self.KEYS, "C")
        self.assertEqual(set(config.values()), {cycle_planner.Phase.C})
        self.assertEqual(list(config), self.KEYS)

    def test_parse_spaced(self) -> None:
        config = cycle_planner.parse_config("A b C", self.KEYS)
        self.assertEqual(
            config,
            {
                "g1": cycle_planner.Phase.A,
                "g2": cycle_planner.Phase.B,
                "g3": cycle_planner.Phase.C,
            },
        )

    def test_parse_compact_with_dont_care(self) -> None:
        config = cycle_planner.parse_config("A-C", self.KEYS)
        self.assertEqual(
            config,
            {"g1": cycle_planner.Phase.A, "g3": cycle_planner.Phase.C},
        )

    def test_parse_question_mark_dont_care(self) -> None:
        config = cycle_planner.parse_config("? ? B", self.KEYS)
        self.assertEqual(config, {"g3": cycle_planner.Phase.B})

    def test_parse_wrong_count(self) -> None:
        with self.assertRaises(ValueError):
            cycle_planner.parse_config("A B", self.KEYS)

    def test_parse_bad_label(self) -> None:
        with self.assertRaises(ValueError):
            cycle_planner.parse_config("A B X", self.KEYS)


if __name__ == "__main__":
    unittest.main()

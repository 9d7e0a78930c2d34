import random
import unittest

from game import (
    POLICY_ALL,
    POLICY_HIGHEST_ID,
    EngineSettings,
    GameState,
    Piece,
    advance_growth,
    load_catalog,
    place,
    progress,
)


class _StubRng:
    """Keeps visiting order and returns a fixed roll."""

    def __init__(self, roll):
        self.roll = roll
        self.rolls = 0

    def shuffle(self, seq):
        pass

    def random(self):
        self.rolls += 1
        return self.roll


def _config(extra_cards):
    cards = [{"name": "Wheat", "size": 1, "scores": {"wheat": 1}, "maxGrowthStage": 3}]
    cards.extend(extra_cards)
    return {"scoreParams": ["wheat"], "cards": cards}


class TestGrowth(unittest.TestCase):
    def setUp(self):
        self.state = GameState(catalog=load_catalog(_config([
            {"name": "Glass", "size": 1, "maxGrowthStage": 9, "specialEffect": "glasscorn"},
            {"name": "Never", "size": 1, "maxGrowthStage": 0},
        ])))

    def _put(self, type_id, origin, stage):
        pid = self.state.allocate_placement_id()
        self.state.board.put(Piece(type_id, origin, 1, False, stage, pid))

    def test_given_standard_piece_when_ticking_then_stage_increments_until_max(self):
        place(self.state, (0, 0), 0, simulation=True)
        sim = EngineSettings(simulation_mode=True)
        stages = []
        for _ in range(5):
            progress(self.state, sim, random.Random(1))
            stages.append(self.state.board.at(0, 0).growth_stage)
        self.assertEqual(stages, [1, 2, 3, 3, 3])

    def test_given_glasscorn_one_below_max_when_ticking_then_wraps_to_one(self):
        self._put(1, (5, 5), 8)
        progress(self.state, EngineSettings(simulation_mode=True), random.Random(0))
        self.assertEqual(self.state.board.at(5, 5).growth_stage, 1)

    def test_given_glasscorn_when_cycling_then_sequence_repeats(self):
        self._put(1, (5, 5), 1)
        seen = []
        for _ in range(9):
            advance_growth(self.state)
            seen.append(self.state.board.at(5, 5).growth_stage)
        self.assertEqual(seen, [2, 3, 4, 5, 6, 7, 8, 1, 2])

    def test_given_zero_max_stage_when_ticking_then_unchanged(self):
        self._put(2, (1, 1), 0)
        self.assertEqual(advance_growth(self.state), 0)
        self.assertEqual(self.state.board.at(1, 1).growth_stage, 0)

    def test_given_simulation_off_when_ticking_then_growth_frozen(self):
        place(self.state, (0, 0), 0, simulation=True)
        progress(self.state, EngineSettings(), random.Random(0))
        self.assertEqual(self.state.board.at(0, 0).growth_stage, 0)


class TestSpawnPass(unittest.TestCase):
    def _state(self, extra_cards):
        return GameState(catalog=load_catalog(_config(extra_cards)))

    def _row_of_wheat(self, state):
        for c in (0, 1, 2):
            place(state, (0, c), 0)

    def test_given_condition_met_once_when_ticking_then_single_unplayered_spawn_at_stage_zero(self):
        state = self._state([{"name": "Mut", "size": 1, "conditions": [{"id": 0, "amount": 3}]}])
        self._row_of_wheat(state)
        spawned = progress(state, EngineSettings(), random.Random(3))
        self.assertEqual(len(spawned), 1)
        p = spawned[0]
        self.assertEqual(p.origin, (1, 1))
        self.assertEqual(p.type_id, 1)
        self.assertFalse(p.is_player_placed)
        self.assertEqual(p.growth_stage, 0)
        self.assertEqual(p.placement_id, 3)
        self.assertIs(state.board.at(1, 1), p)

    def test_given_no_conditions_when_ticking_then_nothing_spawns(self):
        state = self._state([{"name": "Plain", "size": 1}])
        self._row_of_wheat(state)
        self.assertEqual(progress(state, EngineSettings(), random.Random(0)), [])

    def test_given_two_eligible_types_when_highest_id_policy_then_higher_id_wins(self):
        state = self._state([
            {"name": "Low", "size": 1, "conditions": [{"id": 0, "amount": 3}]},
            {"name": "High", "size": 1, "conditions": [{"id": 0, "amount": 3}]},
        ])
        self._row_of_wheat(state)
        spawned = progress(state, EngineSettings(spawn_policy=POLICY_HIGHEST_ID), random.Random(5))
        self.assertEqual([(p.type_id, p.origin) for p in spawned], [(2, (1, 1))])

    def test_given_two_eligible_types_when_all_policy_then_first_type_claims_cell(self):
        state = self._state([
            {"name": "Low", "size": 1, "conditions": [{"id": 0, "amount": 3}]},
            {"name": "High", "size": 1, "conditions": [{"id": 0, "amount": 3}]},
        ])
        self._row_of_wheat(state)
        spawned = progress(state, EngineSettings(spawn_policy=POLICY_ALL), random.Random(5))
        self.assertEqual([(p.type_id, p.origin) for p in spawned], [(1, (1, 1))])

    def test_given_different_types_at_different_cells_when_ticking_then_both_spawn(self):
        state = self._state([
            {"name": "Carrot", "size": 1},
            {"name": "A", "size": 1, "conditions": [{"id": 0, "amount": 3}]},
            {"name": "B", "size": 1, "conditions": [{"id": 1, "amount": 3}]},
        ])
        self._row_of_wheat(state)
        for c in (6, 7, 8):
            place(state, (9, c), 1)
        spawned = progress(state, EngineSettings(), random.Random(11))
        self.assertEqual(sorted((p.type_id, p.origin) for p in spawned), [(2, (1, 1)), (3, (8, 7))])

    def test_given_large_type_when_footprint_blocked_then_no_spawn(self):
        state = self._state([{"name": "Big", "size": 2, "conditions": [{"id": 0, "amount": 1}]}])
        # Fill every cell except (4, 4) so no 2x2 footprint is free anywhere.
        for (r, c) in list(state.board.coords()):
            if (r, c) != (4, 4):
                place(state, (r, c), 0)
        self.assertEqual(progress(state, EngineSettings(), random.Random(0)), [])

    def test_given_large_type_when_room_available_then_spawns_full_footprint(self):
        state = self._state([{"name": "Big", "size": 2, "conditions": [{"id": 0, "amount": 4}]}])
        for c in range(4):
            place(state, (0, c), 0)
        stub = _StubRng(0.0)
        spawned = progress(state, EngineSettings(), stub)
        self.assertTrue(spawned)
        first = spawned[0]
        self.assertEqual(first.size, 2)
        for (r, c) in first.footprint():
            self.assertIs(state.board.at(r, c), first)

    def test_given_simulation_mode_when_roll_fails_then_spawn_suppressed(self):
        state = self._state([{"name": "Mut", "size": 1, "conditions": [{"id": 0, "amount": 3}]}])
        self._row_of_wheat(state)
        stub = _StubRng(0.9)
        spawned = progress(state, EngineSettings(simulation_mode=True, spawn_probability=0.25), stub)
        self.assertEqual(spawned, [])
        self.assertEqual(stub.rolls, 1)

        lucky = _StubRng(0.1)
        spawned = progress(state, EngineSettings(simulation_mode=True, spawn_probability=0.25), lucky)
        self.assertEqual(len(spawned), 1)

    def test_given_simulation_off_when_ticking_then_no_rolls_consumed(self):
        state = self._state([{"name": "Mut", "size": 1, "conditions": [{"id": 0, "amount": 3}]}])
        self._row_of_wheat(state)
        stub = _StubRng(0.99)
        self.assertEqual(len(progress(state, EngineSettings(), stub)), 1)
        self.assertEqual(stub.rolls, 0)

    def test_given_same_seed_when_ticking_then_deterministic(self):
        cards = [{"name": "Mut", "size": 1, "conditions": [{"id": 0, "amount": 1}]}]
        results = []
        for _ in range(2):
            state = self._state(cards)
            place(state, (5, 5), 0)
            spawned = progress(state, EngineSettings(simulation_mode=True, spawn_probability=0.5), random.Random(42))
            results.append([p.origin for p in spawned])
        self.assertEqual(results[0], results[1])


if __name__ == '__main__':
    unittest.main(verbosity=2)

"""
tests/test_growth_rules.py — Tests for growth accrual and the mutation lottery.

Tests cover:
- Growth points per elapsed time (10-minute blocks, floor, clamp)
- Growth percentage and full growth
- Trial counts per session length
- Mutation lottery outcomes and RNG consumption order
- add_mutation idempotence
"""

import pytest

from growth_rules import (
    FULL_GROWTH_GP,
    add_mutation,
    growth_percentage,
    growth_points_for_elapsed,
    is_fully_grown,
    minutes_to_ms,
    mutation_roll_count,
    roll_mutation,
)
from models import MutationId, Plant, SessionMinutes
from rng import FixedRNG, SequenceRNG


def make_plant(**overrides):
    defaults = dict(
        id='plant-1',
        species_id='basil',
        slot_index=0,
        growth_points=10,
        planted_at=1000,
        updated_at=1000,
        last_care_check_at=1000,
    )
    defaults.update(overrides)
    return Plant(**defaults)


# ========================================
# Growth points
# ========================================

class TestGrowthPoints:

    def test_one_point_per_ten_minutes(self):
        assert growth_points_for_elapsed(minutes_to_ms(10)) == 1
        assert growth_points_for_elapsed(minutes_to_ms(20)) == 2
        assert growth_points_for_elapsed(minutes_to_ms(60)) == 6

    def test_partial_blocks_are_dropped(self):
        assert growth_points_for_elapsed(minutes_to_ms(5)) == 0
        assert growth_points_for_elapsed(minutes_to_ms(15)) == 1
        assert growth_points_for_elapsed(minutes_to_ms(10) - 1) == 0

    def test_negative_elapsed_earns_nothing(self):
        assert growth_points_for_elapsed(-1) == 0
        assert growth_points_for_elapsed(-minutes_to_ms(30)) == 0

    def test_zero_elapsed(self):
        assert growth_points_for_elapsed(0) == 0


class TestGrowthPercentage:

    def test_percentage_values(self):
        assert growth_percentage(0) == 0
        assert growth_percentage(60) == 50
        assert growth_percentage(120) == 100

    def test_percentage_is_clamped(self):
        assert growth_percentage(240) == 100
        assert growth_percentage(-10) == 0

    def test_fully_grown_threshold(self):
        assert FULL_GROWTH_GP == 120
        assert is_fully_grown(119) is False
        assert is_fully_grown(120) is True
        assert is_fully_grown(500) is True


# ========================================
# Mutation lottery
# ========================================

class TestMutationRollCount:

    def test_roll_table(self):
        assert mutation_roll_count(10) == 1
        assert mutation_roll_count(25) == 2
        assert mutation_roll_count(45) == 3
        assert mutation_roll_count(60) == 4

    def test_accepts_enum_members(self):
        assert mutation_roll_count(SessionMinutes.SIXTY) == 4

    def test_unknown_length_rejected(self):
        with pytest.raises(ValueError):
            mutation_roll_count(30)


class TestRollMutation:

    @pytest.mark.parametrize('minutes', [10, 25, 45, 60])
    def test_high_rng_never_mutates(self, minutes):
        rng = FixedRNG(0.99)
        assert roll_mutation(make_plant(), minutes, rng) is None
        # Every allotted trial was drawn
        assert rng.calls == mutation_roll_count(minutes)

    def test_first_hit_picks_first_mutation(self):
        rng = SequenceRNG([0.001, 0.0])
        assert roll_mutation(make_plant(), 10, rng) == MutationId.VARIEGATED
        assert rng.calls == 2

    def test_stops_after_first_hit(self):
        rng = SequenceRNG([0.001, 0.0, 0.001, 0.0])
        result = roll_mutation(make_plant(), 60, rng)

        assert result == MutationId.VARIEGATED
        assert rng.calls == 2

    def test_hit_on_later_trial(self):
        rng = SequenceRNG([0.5, 0.001, 0.99])
        assert roll_mutation(make_plant(), 25, rng) == MutationId.GROWTH_FORM
        assert rng.calls == 3

    def test_no_trials_beyond_allotment(self):
        rng = SequenceRNG([0.5, 0.001, 0.0])
        assert roll_mutation(make_plant(), 10, rng) is None
        assert rng.calls == 1

    def test_duplicate_is_wasted_not_retried(self):
        plant = make_plant(mutations=(MutationId.VARIEGATED,))
        rng = SequenceRNG([0.001, 0.0, 0.001, 0.2])

        assert roll_mutation(plant, 60, rng) is None
        assert rng.calls == 2

    def test_threshold_is_strict(self):
        rng = FixedRNG(0.005)
        assert roll_mutation(make_plant(), 10, rng) is None


class TestAddMutation:

    def test_adds_new_mutation(self):
        plant = make_plant()
        updated = add_mutation(plant, MutationId.DWARF, current_time=5000)

        assert updated.mutations == (MutationId.DWARF,)
        assert updated.updated_at == 5000
        assert plant.mutations == ()

    def test_appends_in_order(self):
        plant = make_plant(mutations=(MutationId.DWARF,))
        updated = add_mutation(plant, MutationId.TINT_SHIFT, current_time=5000)
        assert updated.mutations == (MutationId.DWARF, MutationId.TINT_SHIFT)

    def test_existing_mutation_is_a_no_op(self):
        plant = make_plant(mutations=(MutationId.LEAF_SHAPE,))
        updated = add_mutation(plant, MutationId.LEAF_SHAPE, current_time=5000)

        assert updated == plant
        assert updated.updated_at == 1000

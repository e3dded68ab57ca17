"""
tests/test_focus_engine.py — Tests for the focus session state machine.

Tests cover:
- Session start and timing helpers
- Completion rewards, care scaling and the mutation lottery
- Interruption forfeits everything
- Transitions out of a finished session are rejected
- Applying results to plants and summarizing
"""

import pytest

from errors import InvalidTransitionError
from focus_engine import (
    apply_results,
    complete,
    interrupt,
    is_completed,
    progress,
    remaining,
    start_session,
    summarize,
)
from growth_rules import minutes_to_ms
from models import DiseaseType, MutationId, Plant, PlantSessionResult, SessionStatus
from rng import FixedRNG, SequenceRNG

T0 = 1_700_000_000_000


def make_plant(plant_id='plant-1', slot_index=0, **overrides):
    defaults = dict(
        id=plant_id,
        species_id='basil',
        slot_index=slot_index,
        growth_points=10,
        water_level=100,
        nutrition_level=100,
        health=100,
        planted_at=T0,
        updated_at=T0,
        last_care_check_at=T0,
    )
    defaults.update(overrides)
    return Plant(**defaults)


class TestStartSession:

    def test_new_session_is_active(self):
        session = start_session(25, T0)

        assert session.status == SessionStatus.ACTIVE
        assert session.minutes == 25
        assert session.started_at == T0
        assert session.ended_at is None
        assert session.id

    def test_invalid_length_rejected(self):
        with pytest.raises(ValueError):
            start_session(15, T0)


class TestTiming:

    def test_is_completed_at_nominal_end(self):
        session = start_session(10, T0)
        assert is_completed(session, T0 + minutes_to_ms(10) - 1) is False
        assert is_completed(session, T0 + minutes_to_ms(10)) is True

    def test_finished_session_is_never_completed_again(self):
        session = start_session(10, T0)
        done, _ = complete(session, [], T0 + minutes_to_ms(10), FixedRNG(0.99))
        assert is_completed(done, T0 + minutes_to_ms(60)) is False

    def test_progress(self):
        session = start_session(10, T0)
        assert progress(session, T0) == 0.0
        assert progress(session, T0 + minutes_to_ms(5)) == pytest.approx(0.5)
        assert progress(session, T0 + minutes_to_ms(30)) == 1.0

    def test_remaining(self):
        session = start_session(25, T0)
        assert remaining(session, T0 + minutes_to_ms(5)) == minutes_to_ms(20)
        assert remaining(session, T0 + minutes_to_ms(40)) == 0

    def test_interrupted_session_has_no_progress(self):
        session = start_session(25, T0)
        stopped, _ = interrupt(session, [], T0 + minutes_to_ms(5))
        assert progress(stopped, T0 + minutes_to_ms(6)) == 0.0
        assert remaining(stopped, T0 + minutes_to_ms(6)) == 0


class TestComplete:

    def test_ten_minute_session_earns_one_point(self):
        plant = make_plant()
        session = start_session(10, T0)

        done, results = complete(session, [plant], T0 + 600000, FixedRNG(0.99))
        updated = apply_results([plant], results, T0 + 600000)

        assert done.status == SessionStatus.COMPLETED
        assert done.ended_at == T0 + 600000
        assert results == [PlantSessionResult(plant_id='plant-1', earned_gp=1, new_mutation=None)]
        assert updated[0].growth_points == 11
        assert updated[0].mutations == ()

    def test_late_detection_counts_elapsed_time(self):
        session = start_session(10, T0)
        _, results = complete(session, [make_plant()], T0 + minutes_to_ms(25), FixedRNG(0.99))
        assert results[0].earned_gp == 2

    def test_care_multiplier_scales_and_floors(self):
        thirsty = make_plant(water_level=40)
        session = start_session(60, T0)
        _, results = complete(session, [thirsty], T0 + minutes_to_ms(60), FixedRNG(0.99))

        # 6 * 0.7 = 4.2
        assert results[0].earned_gp == 4

    def test_mutation_drawn_per_plant_in_order(self):
        first = make_plant('a', 0)
        second = make_plant('b', 1, mutations=(MutationId.TINT_SHIFT,))
        rng = SequenceRNG([0.001, 0.2, 0.001, 0.2])
        session = start_session(10, T0)

        _, results = complete(session, [first, second], T0 + minutes_to_ms(10), rng)

        assert results[0].new_mutation == MutationId.TINT_SHIFT
        # Duplicate draw is wasted
        assert results[1].new_mutation is None
        assert rng.calls == 4

    def test_dead_plant_earns_nothing_and_draws_nothing(self):
        dead = make_plant(is_dead=True, health=0, disease_type=DiseaseType.PEST)
        rng = FixedRNG(0.0)
        session = start_session(60, T0)

        _, results = complete(session, [dead], T0 + minutes_to_ms(60), rng)

        assert results[0].earned_gp == 0
        assert results[0].new_mutation is None
        assert rng.calls == 0

    def test_completing_twice_is_rejected(self):
        session = start_session(10, T0)
        done, _ = complete(session, [], T0 + minutes_to_ms(10), FixedRNG(0.99))
        with pytest.raises(InvalidTransitionError):
            complete(done, [make_plant()], T0 + minutes_to_ms(11), FixedRNG(0.99))


class TestInterrupt:

    def test_interrupt_forfeits_everything(self):
        plants = [make_plant('a', 0), make_plant('b', 1)]
        session = start_session(60, T0)

        stopped, results = interrupt(session, plants, T0 + minutes_to_ms(25))

        assert stopped.status == SessionStatus.INTERRUPTED
        assert stopped.ended_at == T0 + minutes_to_ms(25)
        assert [r.earned_gp for r in results] == [0, 0]
        assert [r.new_mutation for r in results] == [None, None]

        updated = apply_results(plants, results, T0 + minutes_to_ms(25))
        assert [p.growth_points for p in updated] == [10, 10]

    def test_interrupt_after_completion_rejected(self):
        session = start_session(10, T0)
        done, _ = complete(session, [], T0 + minutes_to_ms(10), FixedRNG(0.99))
        with pytest.raises(InvalidTransitionError):
            interrupt(done, [], T0 + minutes_to_ms(11))


class TestApplyResults:

    def test_unmatched_plants_pass_through(self):
        a = make_plant('a', 0)
        b = make_plant('b', 1)
        results = [PlantSessionResult('a', earned_gp=3, new_mutation=MutationId.DWARF)]

        updated = apply_results([a, b], results, T0 + 1)

        assert updated[0].growth_points == 13
        assert updated[0].mutations == (MutationId.DWARF,)
        assert updated[0].updated_at == T0 + 1
        assert updated[1] is b


class TestSummarize:

    def test_completed_summary(self):
        session = start_session(25, T0)
        done, results = complete(session, [make_plant()], T0 + minutes_to_ms(25), FixedRNG(0.99))
        summary = summarize(done, results)

        assert summary.completed_successfully is True
        assert summary.elapsed_minutes == pytest.approx(25)
        assert summary.plant_results == tuple(results)

    def test_interrupted_summary(self):
        session = start_session(45, T0)
        stopped, results = interrupt(session, [], T0 + minutes_to_ms(15))
        summary = summarize(stopped, results)

        assert summary.completed_successfully is False
        assert summary.elapsed_minutes == pytest.approx(15)

    def test_active_session_cannot_be_summarized(self):
        with pytest.raises(InvalidTransitionError):
            summarize(start_session(10, T0), [])

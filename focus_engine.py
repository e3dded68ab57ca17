"""
focus_engine.py — Focus session state machine.

States: idle → active → completed | interrupted (terminal).
Sessions are created already active; there is no observable idle session.

This module implements:
- Session start, elapsed/progress/remaining time
- Completion detection (sampled by the caller's polling loop)
- Completion: per-plant growth points and mutation lottery
- Interruption: every plant forfeits the whole session
- Applying per-plant results back onto plants

Growth points at completion:
- Base GP comes from the elapsed time at the moment completion is detected,
  so a late poll never shortchanges the plants
- Base GP is scaled by the plant's care multiplier and floored
- The mutation lottery uses the nominal session length

Completing or interrupting a session that is not active raises
InvalidTransitionError; nothing is computed in that case.
"""

import math
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from care_engine import care_multiplier
from clock import new_id, now_ms
from errors import InvalidTransitionError
from growth_rules import (
    add_mutation, growth_points_for_elapsed, minutes_to_ms, ms_to_minutes, roll_mutation
)
from models import (
    FocusSession, Plant, PlantSessionResult, SessionMinutes, SessionStatus, SessionSummary
)
from rng import RNG, default_rng


# ========================================
# Session creation and timing
# ========================================

def start_session(minutes, current_time: Optional[int] = None) -> FocusSession:
    """
    Create a new active session.

    Raises:
        ValueError: minutes is not one of 10, 25, 45, 60.
    """
    if current_time is None:
        current_time = now_ms()

    return FocusSession(
        id=new_id(),
        minutes=SessionMinutes(minutes),
        status=SessionStatus.ACTIVE,
        started_at=current_time,
        ended_at=None,
    )


def elapsed(session: FocusSession, current_time: int) -> int:
    """Milliseconds since the session started (0 if it never started)."""
    if session.started_at is None:
        return 0
    return current_time - session.started_at


def duration(session: FocusSession) -> int:
    return minutes_to_ms(session.minutes)


def is_completed(session: FocusSession, current_time: int) -> bool:
    """
    True when an active session has reached its nominal length.

    Always False once the session has left the active state, so a finished
    session is never reported as newly completed twice.
    """
    if session.status != SessionStatus.ACTIVE:
        return False
    return elapsed(session, current_time) >= duration(session)


def progress(session: FocusSession, current_time: int) -> float:
    """Fraction of the session done, in [0, 1]; 0 when not active."""
    if session.status != SessionStatus.ACTIVE or session.started_at is None:
        return 0.0
    ratio = elapsed(session, current_time) / duration(session)
    return min(1.0, max(0.0, ratio))


def remaining(session: FocusSession, current_time: int) -> int:
    """Milliseconds left, never negative; 0 when not active."""
    if session.status != SessionStatus.ACTIVE or session.started_at is None:
        return 0
    return max(0, duration(session) - elapsed(session, current_time))


# ========================================
# Transitions
# ========================================

def _require_active(session: FocusSession, action: str):
    if session.status != SessionStatus.ACTIVE:
        raise InvalidTransitionError(
            f"Cannot {action} session {session.id}: status is {session.status.value}"
        )


def complete(
    session: FocusSession,
    plants: Sequence[Plant],
    current_time: int,
    rng: RNG = default_rng,
) -> Tuple[FocusSession, List[PlantSessionResult]]:
    """
    Finish an active session and compute every plant's reward.

    Plants are processed in the given order, each drawing its own mutation
    trials from rng.

    Args:
        session: The active session.
        plants: Every currently growing plant.
        current_time: Detection time in milliseconds (not the nominal end).
        rng: Random source for the mutation lottery.

    Returns:
        (completed session, list of PlantSessionResult in plant order)

    Raises:
        InvalidTransitionError: the session is not active.
    """
    _require_active(session, 'complete')

    base_gp = growth_points_for_elapsed(elapsed(session, current_time))

    results = []
    for plant in plants:
        earned_gp = math.floor(base_gp * care_multiplier(plant))
        # Dead plants draw nothing from rng
        new_mutation = None if plant.is_dead else roll_mutation(plant, session.minutes, rng)
        results.append(PlantSessionResult(
            plant_id=plant.id,
            earned_gp=earned_gp,
            new_mutation=new_mutation,
        ))

    completed = replace(session, status=SessionStatus.COMPLETED, ended_at=current_time)
    return completed, results


def interrupt(
    session: FocusSession,
    plants: Sequence[Plant],
    current_time: int,
) -> Tuple[FocusSession, List[PlantSessionResult]]:
    """
    Stop an active session early.

    Interrupting forfeits the whole session for every plant: no growth
    points and no mutation, however long the session ran.

    Raises:
        InvalidTransitionError: the session is not active.
    """
    _require_active(session, 'interrupt')

    results = [
        PlantSessionResult(plant_id=plant.id, earned_gp=0, new_mutation=None)
        for plant in plants
    ]

    interrupted = replace(session, status=SessionStatus.INTERRUPTED, ended_at=current_time)
    return interrupted, results


# ========================================
# Results
# ========================================

def apply_result(plant: Plant, result: PlantSessionResult, current_time: Optional[int] = None) -> Plant:
    """Add earned GP and any new mutation to a single plant."""
    if current_time is None:
        current_time = now_ms()

    updated = replace(
        plant,
        growth_points=plant.growth_points + result.earned_gp,
        updated_at=current_time,
    )
    if result.new_mutation is not None:
        updated = add_mutation(updated, result.new_mutation, current_time)
    return updated


def apply_results(
    plants: Iterable[Plant],
    results: Iterable[PlantSessionResult],
    current_time: Optional[int] = None,
) -> List[Plant]:
    """
    Apply session results to plants.

    Plants without a matching result pass through unchanged.
    """
    by_plant_id = {r.plant_id: r for r in results}
    updated = []
    for plant in plants:
        result = by_plant_id.get(plant.id)
        if result is None:
            updated.append(plant)
        else:
            updated.append(apply_result(plant, result, current_time))
    return updated


def summarize(session: FocusSession, results: Iterable[PlantSessionResult]) -> SessionSummary:
    """
    Build the results-screen summary of a finished session.

    Raises:
        InvalidTransitionError: the session has not ended yet.
    """
    if session.started_at is None or session.ended_at is None:
        raise InvalidTransitionError(f"Session {session.id} has not ended")

    return SessionSummary(
        completed_successfully=session.status == SessionStatus.COMPLETED,
        elapsed_minutes=ms_to_minutes(session.ended_at - session.started_at),
        plant_results=tuple(results),
    )

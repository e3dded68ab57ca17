"""
growth_rules.py — Growth point accrual and the mutation lottery.

This module implements:
- Growth accrual: 1 growth point (GP) per full 10 minutes of elapsed time
- Growth percentage and the full-growth threshold (120 GP)
- Mutation lottery: a number of independent 0.5% trials per session

Mutation lottery details:
- Trials per session by nominal length: 10 min = 1, 25 = 2, 45 = 3, 60 = 4
- Each trial draws one RNG value and succeeds when it is below 0.005
- The first success draws one more value to pick the mutation and stops
- Picking a mutation the plant already holds wastes the win (no retry)

All functions are pure: time and randomness come in as arguments.
"""

import math
from dataclasses import replace
from typing import Optional

from clock import now_ms
from models import ALL_MUTATION_IDS, MutationId, Plant, SessionMinutes
from rng import RNG, default_rng


GP_PER_BLOCK = 1
BLOCK_MINUTES = 10
FULL_GROWTH_GP = 120
MUTATION_CHANCE = 0.005

# Session length (nominal minutes) → number of mutation trials
ROLLS_TABLE = {
    SessionMinutes.TEN: 1,
    SessionMinutes.TWENTY_FIVE: 2,
    SessionMinutes.FORTY_FIVE: 3,
    SessionMinutes.SIXTY: 4,
}

MS_PER_MINUTE = 60 * 1000


def minutes_to_ms(minutes) -> int:
    return int(minutes) * MS_PER_MINUTE


def ms_to_minutes(ms) -> float:
    return ms / MS_PER_MINUTE


def growth_points_for_elapsed(elapsed_ms) -> int:
    """
    Convert elapsed time to earned growth points.

    Partial 10-minute blocks are dropped; negative elapsed time earns nothing.

    Args:
        elapsed_ms: Elapsed time in milliseconds.

    Returns:
        Non-negative integer GP.
    """
    blocks = math.floor(ms_to_minutes(elapsed_ms) / BLOCK_MINUTES)
    return max(0, blocks * GP_PER_BLOCK)


def growth_percentage(current_gp) -> float:
    """Growth progress in percent, clamped to [0, 100]."""
    percentage = current_gp / FULL_GROWTH_GP * 100
    return min(100.0, max(0.0, percentage))


def is_fully_grown(current_gp) -> bool:
    return current_gp >= FULL_GROWTH_GP


def mutation_roll_count(minutes) -> int:
    """
    Number of mutation trials granted by a session.

    Based on the nominal minutes chosen at session start, not on elapsed time.
    Raises ValueError for a length outside the fixed menu.
    """
    return ROLLS_TABLE[SessionMinutes(minutes)]


def _roll_once(rng: RNG) -> bool:
    return rng.random() < MUTATION_CHANCE


def _pick_mutation(rng: RNG) -> MutationId:
    index = math.floor(rng.random() * len(ALL_MUTATION_IDS))
    return ALL_MUTATION_IDS[index]


def roll_mutation(plant: Plant, minutes, rng: RNG = default_rng) -> Optional[MutationId]:
    """
    Run the mutation lottery for one plant.

    At most one mutation is won per session. Trials after the first win
    are never drawn, so RNG consumption is: one value per losing trial,
    two values for the winning trial, nothing afterwards.

    Args:
        plant: Plant whose current mutations are checked for duplicates.
        minutes: Nominal session length.
        rng: Random source.

    Returns:
        The newly won MutationId, or None (no win, or a duplicate win).
    """
    rolls = mutation_roll_count(minutes)

    for _ in range(rolls):
        if _roll_once(rng):
            mutation = _pick_mutation(rng)
            if plant.has_mutation(mutation):
                return None
            return mutation

    return None


def add_mutation(plant: Plant, mutation: MutationId, current_time: Optional[int] = None) -> Plant:
    """
    Give a plant a mutation.

    Returns the same plant object when it already holds the mutation, so
    callers can detect the no-op by equality.
    """
    if plant.has_mutation(mutation):
        return plant

    if current_time is None:
        current_time = now_ms()

    return replace(
        plant,
        mutations=plant.mutations + (MutationId(mutation),),
        updated_at=current_time,
    )

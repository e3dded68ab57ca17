"""
care_engine.py — Water, nutrition, health and disease over real time.

This module implements:
- Time decay: projecting a plant's care substate forward to a given time
- Care actions: water, fertilize, cure (rejected on invalid targets)
- Classification: condition label and "needs ..." predicates
- The care multiplier applied to growth points at session completion

Decay per elapsed hour, applied in this order within a single tick:
1. Water -3, nutrition -1 (never below 0)
2. Water below 30 → health -(30 - water) * 0.1
3. Nutrition below 20 → health -(20 - nutrition) * 0.05
4. Water above 90 and healthy → 5% chance of root rot (-20 health, flat)
5. Still disease-free → 1% chance of pest/fungus/nutrient deficiency (-15 health, flat)
6. Diseased (including just now) → health -5
Health reaching 0 kills the plant; a dead plant never changes again.

Probabilities scale linearly with elapsed hours (rng.random() < p * hours).
"""

import math
from dataclasses import replace
from typing import Optional

from clock import now_ms
from errors import CareActionError
from models import CareState, Condition, DiseaseType, Plant
from rng import RNG, default_rng


MS_PER_HOUR = 60 * 60 * 1000

WATER_DECAY_PER_HOUR = 3
NUTRITION_DECAY_PER_HOUR = 1

WATER_LOW_THRESHOLD = 30
NUTRITION_LOW_THRESHOLD = 20
WATER_HIGH_THRESHOLD = 90
HEALTH_CRITICAL_THRESHOLD = 20

WATER_SHORTFALL_FACTOR = 0.1
NUTRITION_SHORTFALL_FACTOR = 0.05

ROOT_ROT_CHANCE_PER_HOUR = 0.05
ROOT_ROT_DAMAGE = 20
DISEASE_CHANCE_PER_HOUR = 0.01
DISEASE_DAMAGE = 15
DISEASE_DECAY_PER_HOUR = 5

# Diseases that can strike at random, in draw order
RANDOM_DISEASES = (DiseaseType.PEST, DiseaseType.FUNGUS, DiseaseType.NUTRIENT_DEF)

WATER_RESTORE_AMOUNT = 40
NUTRITION_RESTORE_AMOUNT = 50
CURE_HEALTH_RESTORE = 30

NEEDS_WATER_BELOW = 50
NEEDS_FERTILIZER_BELOW = 30

MAX_LEVEL = 100.0
MIN_LEVEL = 0.0


def _clamp(value: float) -> float:
    return min(MAX_LEVEL, max(MIN_LEVEL, value))


# ========================================
# Time decay
# ========================================

def apply_time_decay(plant: Plant, current_time: int, rng: RNG = default_rng) -> Plant:
    """
    Project a plant's care substate forward to current_time.

    Decay is integrated from plant.last_care_check_at, which is moved to
    current_time on return so the same interval is never applied twice.

    Args:
        plant: Plant to update.
        current_time: Time of the check in milliseconds.
        rng: Random source for disease rolls.

    Returns:
        Updated plant, or the same plant if it is already dead.
    """
    if plant.is_dead:
        return plant

    elapsed_hours = (current_time - plant.last_care_check_at) / MS_PER_HOUR

    water = max(MIN_LEVEL, plant.water_level - WATER_DECAY_PER_HOUR * elapsed_hours)
    nutrition = max(MIN_LEVEL, plant.nutrition_level - NUTRITION_DECAY_PER_HOUR * elapsed_hours)
    health = plant.health
    disease = plant.disease_type

    if water < WATER_LOW_THRESHOLD:
        shortfall = WATER_LOW_THRESHOLD - water
        health = max(MIN_LEVEL, health - shortfall * WATER_SHORTFALL_FACTOR * elapsed_hours)

    if nutrition < NUTRITION_LOW_THRESHOLD:
        shortfall = NUTRITION_LOW_THRESHOLD - nutrition
        health = max(MIN_LEVEL, health - shortfall * NUTRITION_SHORTFALL_FACTOR * elapsed_hours)

    # Overwatering: root rot risk
    if water > WATER_HIGH_THRESHOLD and disease is None:
        if rng.random() < ROOT_ROT_CHANCE_PER_HOUR * elapsed_hours:
            disease = DiseaseType.ROOT_ROT
            health = max(MIN_LEVEL, health - ROOT_ROT_DAMAGE)

    if disease is None and health > 0:
        if rng.random() < DISEASE_CHANCE_PER_HOUR * elapsed_hours:
            index = math.floor(rng.random() * len(RANDOM_DISEASES))
            disease = RANDOM_DISEASES[index]
            health = max(MIN_LEVEL, health - DISEASE_DAMAGE)

    if disease is not None:
        health = max(MIN_LEVEL, health - DISEASE_DECAY_PER_HOUR * elapsed_hours)

    return replace(
        plant,
        water_level=_clamp(water),
        nutrition_level=_clamp(nutrition),
        health=_clamp(health),
        disease_type=disease,
        is_dead=health <= 0,
        last_care_check_at=current_time,
        updated_at=current_time,
    )


# ========================================
# Care actions
# ========================================

def water_plant(plant: Plant, current_time: Optional[int] = None) -> Plant:
    """Add 40 water (capped at 100). Raises CareActionError on a dead plant."""
    if plant.is_dead:
        raise CareActionError("A dead plant cannot be watered.")
    if current_time is None:
        current_time = now_ms()

    return replace(
        plant,
        water_level=min(MAX_LEVEL, plant.water_level + WATER_RESTORE_AMOUNT),
        last_watered_at=current_time,
        updated_at=current_time,
    )


def fertilize_plant(plant: Plant, current_time: Optional[int] = None) -> Plant:
    """Add 50 nutrition (capped at 100). Raises CareActionError on a dead plant."""
    if plant.is_dead:
        raise CareActionError("A dead plant cannot be fertilized.")
    if current_time is None:
        current_time = now_ms()

    return replace(
        plant,
        nutrition_level=min(MAX_LEVEL, plant.nutrition_level + NUTRITION_RESTORE_AMOUNT),
        last_fertilized_at=current_time,
        updated_at=current_time,
    )


def cure_plant(plant: Plant, current_time: Optional[int] = None) -> Plant:
    """
    Clear the plant's disease and restore 30 health (capped at 100).

    Raises:
        CareActionError: the plant is dead or is not diseased.
    """
    if plant.is_dead:
        raise CareActionError("A dead plant cannot be cured.")
    if plant.disease_type is None:
        raise CareActionError("This plant is not sick.")
    if current_time is None:
        current_time = now_ms()

    return replace(
        plant,
        health=min(MAX_LEVEL, plant.health + CURE_HEALTH_RESTORE),
        disease_type=None,
        updated_at=current_time,
    )


# ========================================
# Classification
# ========================================

def condition_label(plant: Plant) -> Condition:
    """Single condition for a plant; earlier checks win."""
    if plant.is_dead:
        return Condition.DEAD
    if plant.disease_type is not None:
        return Condition.DISEASED
    if plant.health < HEALTH_CRITICAL_THRESHOLD:
        return Condition.CRITICAL
    if plant.water_level < WATER_LOW_THRESHOLD:
        return Condition.THIRSTY
    if plant.nutrition_level < NUTRITION_LOW_THRESHOLD:
        return Condition.MALNOURISHED
    if plant.health < 50:
        return Condition.WEAK
    if plant.health < 80:
        return Condition.OK
    return Condition.HEALTHY


def needs_water(plant: Plant) -> bool:
    return not plant.is_dead and plant.water_level < NEEDS_WATER_BELOW


def needs_fertilizer(plant: Plant) -> bool:
    return not plant.is_dead and plant.nutrition_level < NEEDS_FERTILIZER_BELOW


def needs_cure(plant: Plant) -> bool:
    return not plant.is_dead and plant.disease_type is not None


def default_care_state(current_time: Optional[int] = None) -> CareState:
    """Care substate for a freshly planted seed."""
    if current_time is None:
        current_time = now_ms()
    return CareState(last_care_check_at=current_time)


def care_multiplier(plant: Plant) -> float:
    """
    Growth multiplier from the plant's care bands.

    Penalties compound: a thirsty (×0.3), sick (×0.5) plant earns 15%.
    Dead plants earn nothing.
    """
    if plant.is_dead:
        return 0.0

    multiplier = 1.0

    if plant.water_level < 30:
        multiplier *= 0.3
    elif plant.water_level < 50:
        multiplier *= 0.7

    if plant.nutrition_level < 20:
        multiplier *= 0.3
    elif plant.nutrition_level < 40:
        multiplier *= 0.7

    if plant.disease_type is not None:
        multiplier *= 0.5

    if plant.health < 30:
        multiplier *= 0.2
    elif plant.health < 60:
        multiplier *= 0.6

    return multiplier

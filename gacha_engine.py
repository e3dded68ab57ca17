"""
gacha_engine.py — Seed draws and the daily free-draw allowance.

Rarity odds:
- Free draw: common 85%, rare 13%, epic 2%
- Paid draw: common 70%, rare 25%, epic 5%
Within a rarity, every species is equally likely.

Free draws reset to FREE_DRAWS_PER_DAY at the first check on a new local
calendar day.
"""

import math
from datetime import datetime
from typing import Optional

from clock import new_id, now_ms
from models import Rarity, Seed
from rng import RNG, default_rng
from species import get_species_by_rarity


FREE_DRAWS_PER_DAY = 5

# (upper bound, rarity) checked in order against a single draw
FREE_RARITY_TABLE = ((0.85, Rarity.COMMON), (0.98, Rarity.RARE))
PAID_RARITY_TABLE = ((0.70, Rarity.COMMON), (0.95, Rarity.RARE))


def _roll_rarity(table, rng: RNG) -> Rarity:
    roll = rng.random()
    for bound, rarity in table:
        if roll < bound:
            return rarity
    return Rarity.EPIC


def roll_rarity_free(rng: RNG = default_rng) -> Rarity:
    return _roll_rarity(FREE_RARITY_TABLE, rng)


def roll_rarity_paid(rng: RNG = default_rng) -> Rarity:
    return _roll_rarity(PAID_RARITY_TABLE, rng)


def select_species_by_rarity(rarity: Rarity, rng: RNG = default_rng) -> str:
    """Pick a species id uniformly among the catalog entries of a rarity."""
    candidates = get_species_by_rarity(rarity)
    if not candidates:
        raise ValueError(f"No species found for rarity: {rarity.value}")
    index = math.floor(rng.random() * len(candidates))
    return candidates[index].id


def draw_seed(is_free: bool, rng: RNG = default_rng, current_time: Optional[int] = None) -> Seed:
    """Draw one seed: rarity first, then species."""
    if current_time is None:
        current_time = now_ms()

    rarity = roll_rarity_free(rng) if is_free else roll_rarity_paid(rng)
    species_id = select_species_by_rarity(rarity, rng)
    return Seed(id=new_id(), species_id=species_id, obtained_at=current_time)


def _same_day(a_ms: int, b_ms: int) -> bool:
    a = datetime.fromtimestamp(a_ms / 1000).date()
    b = datetime.fromtimestamp(b_ms / 1000).date()
    return a == b


def free_draws_remaining(last_reset: int, used_count: int, current_time: Optional[int] = None) -> int:
    """Free draws left today; a new calendar day restores the full allowance."""
    if current_time is None:
        current_time = now_ms()
    if not _same_day(last_reset, current_time):
        return FREE_DRAWS_PER_DAY
    return max(0, FREE_DRAWS_PER_DAY - used_count)


def should_reset_free_draws(last_reset: int, current_time: Optional[int] = None) -> bool:
    if current_time is None:
        current_time = now_ms()
    return not _same_day(last_reset, current_time)

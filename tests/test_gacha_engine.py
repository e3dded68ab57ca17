"""
tests/test_gacha_engine.py — Tests for seed draws, the free allowance and the catalog.
"""

from datetime import datetime

import pytest

from gacha_engine import (
    FREE_DRAWS_PER_DAY,
    draw_seed,
    free_draws_remaining,
    roll_rarity_free,
    roll_rarity_paid,
    select_species_by_rarity,
    should_reset_free_draws,
)
from models import Plant, Rarity
from rng import FixedRNG, SequenceRNG
from species import (
    PLANT_SPECIES,
    display_name,
    full_name,
    get_categories,
    get_species,
    get_species_by_rarity,
)


def local_ms(*args):
    return int(datetime(*args).timestamp() * 1000)


class TestRarityRolls:

    @pytest.mark.parametrize('roll, expected', [
        (0.0, Rarity.COMMON),
        (0.84, Rarity.COMMON),
        (0.85, Rarity.RARE),
        (0.97, Rarity.RARE),
        (0.98, Rarity.EPIC),
        (0.999, Rarity.EPIC),
    ])
    def test_free_odds(self, roll, expected):
        assert roll_rarity_free(FixedRNG(roll)) == expected

    @pytest.mark.parametrize('roll, expected', [
        (0.69, Rarity.COMMON),
        (0.70, Rarity.RARE),
        (0.94, Rarity.RARE),
        (0.95, Rarity.EPIC),
    ])
    def test_paid_odds(self, roll, expected):
        assert roll_rarity_paid(FixedRNG(roll)) == expected


class TestDrawSeed:

    def test_select_species_within_rarity(self):
        assert select_species_by_rarity(Rarity.EPIC, FixedRNG(0.0)) == 'monstera_albo'
        assert select_species_by_rarity(Rarity.EPIC, FixedRNG(0.99)) == 'blue_rose'

    def test_draw_uses_rarity_then_species(self):
        rng = SequenceRNG([0.99, 0.0])
        seed = draw_seed(True, rng, current_time=1234)

        assert seed.species_id == 'monstera_albo'
        assert seed.obtained_at == 1234
        assert seed.id
        assert rng.calls == 2

    def test_paid_draw_common(self):
        seed = draw_seed(False, SequenceRNG([0.1, 0.0]), current_time=1)
        assert get_species(seed.species_id).rarity == Rarity.COMMON


class TestFreeDraws:

    def test_same_day_counts_down(self):
        reset = local_ms(2026, 3, 1, 9, 0)
        now = local_ms(2026, 3, 1, 18, 0)

        assert free_draws_remaining(reset, 0, now) == FREE_DRAWS_PER_DAY
        assert free_draws_remaining(reset, 2, now) == 3
        assert free_draws_remaining(reset, 9, now) == 0
        assert should_reset_free_draws(reset, now) is False

    def test_new_day_restores_allowance(self):
        reset = local_ms(2026, 3, 1, 23, 59)
        now = local_ms(2026, 3, 2, 0, 1)

        assert free_draws_remaining(reset, 5, now) == FREE_DRAWS_PER_DAY
        assert should_reset_free_draws(reset, now) is True


class TestCatalog:

    def test_every_rarity_has_species(self):
        for rarity in Rarity:
            assert get_species_by_rarity(rarity)

    def test_ids_are_unique(self):
        ids = [s.id for s in PLANT_SPECIES]
        assert len(ids) == len(set(ids))

    def test_categories_in_catalog_order(self):
        assert get_categories()[0] == 'Succulent'
        assert 'Bonsai' in get_categories()

    def test_names(self):
        plain = Plant(id='p', species_id='tomato')
        named = Plant(id='p', species_id='tomato', nickname='Ruby')
        unknown = Plant(id='p', species_id='nope')

        assert display_name(plain) == 'Cherry Tomato'
        assert display_name(named) == 'Ruby'
        assert full_name(named) == 'Cherry Tomato (Ruby)'
        assert full_name(unknown) == 'Unknown plant'

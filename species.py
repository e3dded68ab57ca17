"""
species.py — Static plant species catalog.

Read-only lookup table consumed by planting, the gacha draw and the
display helpers. The engines only carry species_id on each plant.

Rarity tiers drive the gacha; growth_rate_multiplier is informational
and shown on the plant detail view.
"""

from typing import Dict, List, Optional

from models import PlantSpecies, Rarity


PLANT_SPECIES: List[PlantSpecies] = [
    # --- Common: succulents ---
    PlantSpecies('echeveria', 'Echeveria', Rarity.COMMON, 'Succulent',
                 'Rosette of soft, powdery leaves', 0.8),
    PlantSpecies('sedum', 'Sedum', Rarity.COMMON, 'Succulent',
                 'Tough little succulent with packed leaves', 1.2),
    PlantSpecies('aloe', 'Aloe', Rarity.COMMON, 'Succulent',
                 'Thick, fleshy leaves', 0.9),
    PlantSpecies('haworthia', 'Haworthia', Rarity.COMMON, 'Succulent',
                 'Translucent leaf windows', 0.7),
    PlantSpecies('crassula', 'Crassula', Rarity.COMMON, 'Succulent',
                 'Round, coin-like leaves', 1.0),
    # --- Common: foliage ---
    PlantSpecies('pothos', 'Pothos', Rarity.COMMON, 'Foliage',
                 'Easy trailing vine', 1.3),
    PlantSpecies('sansevieria', 'Sansevieria', Rarity.COMMON, 'Foliage',
                 'Upright sword-shaped leaves', 0.6),
    PlantSpecies('pachira', 'Pachira', Rarity.COMMON, 'Foliage',
                 'Braided trunk', 1.1),
    PlantSpecies('ficus', 'Ficus', Rarity.COMMON, 'Foliage',
                 'Glossy leaves', 1.0),
    PlantSpecies('monstera', 'Monstera', Rarity.COMMON, 'Foliage',
                 'Large split leaves', 1.2),
    # --- Common: herbs ---
    PlantSpecies('basil', 'Basil', Rarity.COMMON, 'Herb',
                 'Fragrant kitchen staple', 1.5),
    PlantSpecies('mint', 'Mint', Rarity.COMMON, 'Herb',
                 'Fresh and vigorous', 1.6),
    PlantSpecies('rosemary', 'Rosemary', Rarity.COMMON, 'Herb',
                 'Needle-like aromatic leaves', 0.9),
    PlantSpecies('thyme', 'Thyme', Rarity.COMMON, 'Herb',
                 'Small-leaved aromatic', 1.0),
    PlantSpecies('lavender', 'Lavender', Rarity.COMMON, 'Herb',
                 'Purple scented spikes', 1.1),
    # --- Common: vegetables and flowers ---
    PlantSpecies('tomato', 'Cherry Tomato', Rarity.COMMON, 'Vegetable',
                 'Sweet little fruits', 1.4),
    PlantSpecies('lettuce', 'Lettuce', Rarity.COMMON, 'Vegetable',
                 'Crisp leafy green', 1.3),
    PlantSpecies('radish', 'Radish', Rarity.COMMON, 'Vegetable',
                 'Fastest grower in the garden', 1.8),
    PlantSpecies('sunflower', 'Sunflower', Rarity.COMMON, 'Flower',
                 'Follows the sun', 1.5),
    PlantSpecies('marigold', 'Marigold', Rarity.COMMON, 'Flower',
                 'Bright orange blooms', 1.2),
    # --- Rare ---
    PlantSpecies('lithops', 'Lithops', Rarity.RARE, 'Succulent',
                 'Living stones', 0.5),
    PlantSpecies('adenium', 'Adenium', Rarity.RARE, 'Succulent',
                 'Desert rose with a swollen base', 0.7),
    PlantSpecies('euphorbia_obesa', 'Euphorbia Obesa', Rarity.RARE, 'Succulent',
                 'Perfectly round body', 0.6),
    PlantSpecies('alocasia', 'Alocasia', Rarity.RARE, 'Foliage',
                 'Arrow-shaped veined leaves', 1.0),
    PlantSpecies('calathea', 'Calathea', Rarity.RARE, 'Foliage',
                 'Patterned leaves that fold at night', 0.9),
    PlantSpecies('anthurium', 'Anthurium', Rarity.RARE, 'Foliage',
                 'Waxy red spathes', 1.1),
    PlantSpecies('philodendron', 'Philodendron', Rarity.RARE, 'Foliage',
                 'Heart-shaped leaves', 1.2),
    PlantSpecies('orchid', 'Orchid', Rarity.RARE, 'Flower',
                 'Elegant long-lasting blooms', 0.8),
    PlantSpecies('rose', 'Rose', Rarity.RARE, 'Flower',
                 'Classic garden rose', 1.0),
    PlantSpecies('carnation', 'Carnation', Rarity.RARE, 'Flower',
                 'Ruffled petals', 1.1),
    PlantSpecies('bonsai_pine', 'Pine Bonsai', Rarity.RARE, 'Bonsai',
                 'Patient miniature pine', 0.5),
    PlantSpecies('bonsai_maple', 'Maple Bonsai', Rarity.RARE, 'Bonsai',
                 'Turns red in autumn', 0.7),
    # --- Epic ---
    PlantSpecies('monstera_albo', 'Monstera Albo', Rarity.EPIC, 'Foliage',
                 'White-variegated monstera', 0.8),
    PlantSpecies('philodendron_pink', 'Pink Princess', Rarity.EPIC, 'Foliage',
                 'Pink-splashed philodendron', 0.7),
    PlantSpecies('variegated_aloe', 'Variegated Aloe', Rarity.EPIC, 'Succulent',
                 'Striped aloe', 0.6),
    PlantSpecies('conophytum', 'Conophytum', Rarity.EPIC, 'Succulent',
                 'Tiny jewel-like bodies', 0.4),
    PlantSpecies('aeonium_black', 'Black Aeonium', Rarity.EPIC, 'Succulent',
                 'Near-black rosettes', 0.6),
    PlantSpecies('bonsai_wisteria', 'Wisteria Bonsai', Rarity.EPIC, 'Bonsai',
                 'Cascading purple flowers', 0.5),
    PlantSpecies('bonsai_cherry', 'Cherry Blossom Bonsai', Rarity.EPIC, 'Bonsai',
                 'Spring blossoms in miniature', 0.6),
    PlantSpecies('blue_rose', 'Blue Rose', Rarity.EPIC, 'Flower',
                 'A rose that should not exist', 0.7),
]

_SPECIES_BY_ID: Dict[str, PlantSpecies] = {s.id: s for s in PLANT_SPECIES}

UNKNOWN_PLANT_NAME = 'Unknown plant'


def get_species(species_id: str) -> Optional[PlantSpecies]:
    return _SPECIES_BY_ID.get(species_id)


def get_species_by_rarity(rarity: Rarity) -> List[PlantSpecies]:
    return [s for s in PLANT_SPECIES if s.rarity == rarity]


def get_species_by_category(category: str) -> List[PlantSpecies]:
    return [s for s in PLANT_SPECIES if s.category == category]


def get_categories() -> List[str]:
    """Distinct categories in catalog order."""
    seen = []
    for s in PLANT_SPECIES:
        if s.category not in seen:
            seen.append(s.category)
    return seen


def display_name(plant) -> str:
    """Nickname if set, otherwise the species name."""
    if plant.nickname:
        return plant.nickname
    species = get_species(plant.species_id)
    return species.name if species else UNKNOWN_PLANT_NAME


def full_name(plant) -> str:
    """Species name followed by the nickname in parentheses, if any."""
    species = get_species(plant.species_id)
    species_name = species.name if species else UNKNOWN_PLANT_NAME
    if plant.nickname:
        return f"{species_name} ({plant.nickname})"
    return species_name

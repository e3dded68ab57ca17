"""
utils/api.py — Shared helpers for the JSON blueprints.

Provides:
- get_store() — the GardenStore owned by the running app
- get_i18n() — display strings loaded at startup
- plant_to_dict / session_to_dict / seed_to_dict / result_to_dict — JSON views
- error_response() — uniform 4xx body
"""

from flask import current_app, jsonify

import care_engine
from growth_rules import growth_percentage, is_fully_grown
from species import display_name, full_name, get_species


def get_store():
    return current_app.extensions['garden_store']


def get_i18n():
    return current_app.extensions['i18n']


def error_response(message, status=400):
    return jsonify({'error': message}), status


def plant_to_dict(plant):
    i18n = get_i18n()
    species = get_species(plant.species_id)
    condition = care_engine.condition_label(plant)
    return {
        'id': plant.id,
        'species_id': plant.species_id,
        'species_name': species.name if species else None,
        'rarity': species.rarity.value if species else None,
        'category': species.category if species else None,
        'growth_rate_multiplier': species.growth_rate_multiplier if species else None,
        'display_name': display_name(plant),
        'full_name': full_name(plant),
        'slot_index': plant.slot_index,
        'nickname': plant.nickname,
        'growth_points': plant.growth_points,
        'growth_percentage': growth_percentage(plant.growth_points),
        'is_fully_grown': is_fully_grown(plant.growth_points),
        'mutations': [m.value for m in plant.mutations],
        'planted_at': plant.planted_at,
        'updated_at': plant.updated_at,
        'water_level': round(plant.water_level, 2),
        'nutrition_level': round(plant.nutrition_level, 2),
        'health': round(plant.health, 2),
        'disease_type': plant.disease_type.value if plant.disease_type else None,
        'last_watered_at': plant.last_watered_at,
        'last_fertilized_at': plant.last_fertilized_at,
        'is_dead': plant.is_dead,
        'condition': condition.value,
        'condition_label': i18n['conditions'].get(condition.value, condition.value),
        'needs_water': care_engine.needs_water(plant),
        'needs_fertilizer': care_engine.needs_fertilizer(plant),
        'needs_cure': care_engine.needs_cure(plant),
    }


def session_to_dict(session):
    if session is None:
        return None
    return {
        'id': session.id,
        'minutes': int(session.minutes),
        'status': session.status.value,
        'started_at': session.started_at,
        'ended_at': session.ended_at,
    }


def seed_to_dict(seed):
    species = get_species(seed.species_id)
    return {
        'id': seed.id,
        'species_id': seed.species_id,
        'species_name': species.name if species else None,
        'rarity': species.rarity.value if species else None,
        'obtained_at': seed.obtained_at,
    }


def result_to_dict(result):
    return {
        'plant_id': result.plant_id,
        'earned_gp': result.earned_gp,
        'new_mutation': result.new_mutation.value if result.new_mutation else None,
    }

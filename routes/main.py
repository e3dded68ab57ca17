"""
routes/main.py — Garden overview and plant routes.

Provides:
- GET  /                          — Garden overview: plants, slots, seeds, session
- GET  /api/csrf-token            — CSRF token for POST requests
- POST /plants                    — Plant a seed into a slot
- GET  /plants/<plant_id>         — Single plant with derived care fields
- POST /plants/<plant_id>/rename  — Change or clear the nickname
- POST /plants/<plant_id>/water   — Water a plant
- POST /plants/<plant_id>/fertilize
- POST /plants/<plant_id>/cure
- POST /plants/<plant_id>/delete  — Remove a plant from its slot

Every read samples session completion and decay at request time.
"""

from flask import Blueprint, jsonify, request
from flask_wtf.csrf import generate_csrf

from utils.api import (
    error_response, get_store, plant_to_dict, seed_to_dict, session_to_dict
)
from utils.validators import validate_nickname, validate_slot_index

main_bp = Blueprint('main', __name__)


def _request_data():
    return request.get_json(silent=True) or request.form


def _sample(store):
    """Catch up on a finished session and on decay before answering."""
    store.check_session_completion()
    store.tick_decay()


@main_bp.route('/')
def index():
    """Garden overview."""
    store = get_store()
    _sample(store)
    state = store.state

    return jsonify({
        'plants': [plant_to_dict(p) for p in store.sorted_plants()],
        'max_slots': state.max_slots,
        'occupied_slots': store.occupied_slots(),
        'free_slots': store.free_slots(),
        'seeds': [seed_to_dict(s) for s in state.seeds],
        'active_session': session_to_dict(state.active_session),
        'progress': store.current_progress(),
        'remaining_ms': store.remaining_time(),
        'free_draws_remaining': state.free_draws_remaining,
        'has_results': state.last_session is not None,
    })


@main_bp.route('/api/csrf-token')
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})


@main_bp.route('/plants', methods=['POST'])
def plant_seed():
    """Plant a seed: seed_id, slot_index, optional nickname."""
    data = _request_data()
    seed_id = data.get('seed_id')
    if not seed_id:
        return error_response("A seed must be selected.")

    slot_index, error = validate_slot_index(data.get('slot_index'))
    if error:
        return error_response(error)
    nickname, error = validate_nickname(data.get('nickname'))
    if error:
        return error_response(error)

    plant, error = get_store().plant_seed(seed_id, slot_index, nickname)
    if error:
        return error_response(error)
    return jsonify(plant_to_dict(plant)), 201


@main_bp.route('/plants/<plant_id>')
def plant_detail(plant_id):
    store = get_store()
    _sample(store)
    plant = store.get_plant(plant_id)
    if plant is None:
        return error_response("Plant not found.", 404)
    return jsonify(plant_to_dict(plant))


@main_bp.route('/plants/<plant_id>/rename', methods=['POST'])
def rename_plant(plant_id):
    nickname, error = validate_nickname(_request_data().get('nickname'))
    if error:
        return error_response(error)

    plant, error = get_store().rename_plant(plant_id, nickname)
    if error:
        return error_response(error)
    return jsonify(plant_to_dict(plant))


def _care(plant_id, action):
    plant, error = action(plant_id)
    if error:
        return error_response(error)
    return jsonify(plant_to_dict(plant))


@main_bp.route('/plants/<plant_id>/water', methods=['POST'])
def water_plant(plant_id):
    return _care(plant_id, get_store().water_plant)


@main_bp.route('/plants/<plant_id>/fertilize', methods=['POST'])
def fertilize_plant(plant_id):
    return _care(plant_id, get_store().fertilize_plant)


@main_bp.route('/plants/<plant_id>/cure', methods=['POST'])
def cure_plant(plant_id):
    return _care(plant_id, get_store().cure_plant)


@main_bp.route('/plants/<plant_id>/delete', methods=['POST'])
def delete_plant(plant_id):
    success, error = get_store().delete_plant(plant_id)
    if not success:
        return error_response(error)
    return jsonify({'deleted': plant_id})

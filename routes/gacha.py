"""
routes/gacha.py — Seed draw routes.

Provides:
- GET  /gacha       — Free draws left today and the seed inventory
- POST /gacha/draw  — Draw a seed (free by default, "free": false for paid)
"""

from flask import Blueprint, jsonify, request

from utils.api import error_response, get_store, seed_to_dict

gacha_bp = Blueprint('gacha', __name__, url_prefix='/gacha')


@gacha_bp.route('')
def index():
    store = get_store()
    return jsonify({
        'free_draws_remaining': store.refresh_gacha_status(),
        'seeds': [seed_to_dict(s) for s in store.state.seeds],
    })


@gacha_bp.route('/draw', methods=['POST'])
def draw():
    data = request.get_json(silent=True) or request.form
    is_free = str(data.get('free', 'true')).lower() not in ('0', 'false', 'no')

    store = get_store()
    seed, error = store.draw_gacha(is_free)
    if error:
        return error_response(error)
    return jsonify({
        'seed': seed_to_dict(seed),
        'free_draws_remaining': store.state.free_draws_remaining,
    }), 201

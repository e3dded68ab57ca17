"""
routes/settings.py — Settings and administration routes.

Provides:
- GET  /settings/               — Slot count, species catalog, backups
- POST /settings/slots          — Change the number of growing slots
- POST /settings/backup/create  — Create a manual backup
- POST /settings/reset          — Back up, then delete all garden data
"""

from flask import Blueprint, jsonify, request

from species import PLANT_SPECIES, get_categories
from utils.api import error_response, get_i18n, get_store
from utils.backup import backup_db, list_backups
from utils.validators import validate_slot_count

settings_bp = Blueprint('settings', __name__, url_prefix='/settings')


@settings_bp.route('/')
def index():
    """Settings overview."""
    store = get_store()
    i18n = get_i18n()

    species_by_category = {}
    for category in get_categories():
        species_by_category[category] = [
            {
                'id': s.id,
                'name': s.name,
                'rarity': s.rarity.value,
                'rarity_label': i18n['rarities'].get(s.rarity.value, s.rarity.value),
                'growth_rate_multiplier': s.growth_rate_multiplier,
            }
            for s in PLANT_SPECIES if s.category == category
        ]

    return jsonify({
        'max_slots': store.state.max_slots,
        'occupied_slots': store.occupied_slots(),
        'species': species_by_category,
        'backups': list_backups(),
    })


@settings_bp.route('/slots', methods=['POST'])
def set_slots():
    data = request.get_json(silent=True) or request.form
    count, error = validate_slot_count(data.get('max_slots'))
    if error:
        return error_response(error)

    count, error = get_store().set_max_slots(count)
    if error:
        return error_response(error)
    return jsonify({'max_slots': count})


@settings_bp.route('/backup/create', methods=['POST'])
def create_backup():
    messages = get_i18n()['messages']
    filename = backup_db('manual')
    if not filename:
        return error_response(messages['backup_failed'], 500)
    return jsonify({'message': messages['backup_created'], 'filename': filename}), 201


@settings_bp.route('/reset', methods=['POST'])
def reset():
    """Delete everything. A backup is taken first."""
    filename = backup_db('pre_reset')
    get_store().reset_all_data()
    return jsonify({
        'message': get_i18n()['messages']['data_reset'],
        'backup': filename,
    })

"""
routes/focus.py — Focus session routes.

Provides:
- POST /session/start          — Start a session over every growing plant
- GET  /session                — Active session, progress and remaining time
- POST /session/interrupt      — Interrupt the active session (no rewards)
- GET  /session/results        — Results of the last finished session
- POST /session/results/clear  — Dismiss the results
- GET  /session/history        — Every stored session, newest first
"""

from flask import Blueprint, jsonify, request

from utils.api import error_response, get_i18n, get_store, result_to_dict, session_to_dict
from utils.validators import validate_minutes

focus_bp = Blueprint('focus', __name__, url_prefix='/session')


@focus_bp.route('/start', methods=['POST'])
def start():
    data = request.get_json(silent=True) or request.form
    minutes, error = validate_minutes(data.get('minutes'))
    if error:
        return error_response(error)

    session, error = get_store().start_session(minutes)
    if error:
        return error_response(error)
    return jsonify(session_to_dict(session)), 201


@focus_bp.route('')
def status():
    """Poll target: completes the session here once its time is up."""
    store = get_store()
    results = store.check_session_completion()
    state = store.state

    body = {
        'active_session': session_to_dict(state.active_session),
        'progress': store.current_progress(),
        'remaining_ms': store.remaining_time(),
        'just_completed': results is not None,
    }
    if results is not None:
        body['message'] = get_i18n()['messages']['session_completed']
        body['results'] = [result_to_dict(r) for r in results]
    return jsonify(body)


@focus_bp.route('/interrupt', methods=['POST'])
def interrupt():
    results, error = get_store().interrupt_session()
    if error:
        return error_response(error)
    return jsonify({
        'message': get_i18n()['messages']['session_interrupted'],
        'results': [result_to_dict(r) for r in results],
    })


@focus_bp.route('/results')
def results():
    store = get_store()
    summary = store.last_summary()
    if summary is None:
        return jsonify({'session': None, 'results': []})

    return jsonify({
        'session': session_to_dict(store.state.last_session),
        'completed_successfully': summary.completed_successfully,
        'elapsed_minutes': round(summary.elapsed_minutes, 2),
        'results': [result_to_dict(r) for r in summary.plant_results],
    })


@focus_bp.route('/results/clear', methods=['POST'])
def clear_results():
    get_store().clear_session_results()
    return jsonify({'cleared': True})


@focus_bp.route('/history')
def history():
    sessions = get_store().repo.list_sessions()
    return jsonify([session_to_dict(s) for s in sessions])

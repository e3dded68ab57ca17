"""
routes/export.py — Excel export route.

Provides:
- GET /export/excel — Download the garden (plants + session history) as .xlsx

Auto-backup is triggered before every export.
"""

from datetime import datetime

from flask import Blueprint, send_file

from utils.api import get_i18n, get_store
from utils.backup import backup_db
from utils.export import generate_excel

export_bp = Blueprint('export', __name__, url_prefix='/export')


@export_bp.route('/excel')
def export_excel():
    """Export every plant and session as an Excel workbook."""
    backup_db('export')

    store = get_store()
    store.tick_decay()
    buffer = generate_excel(
        store.state.plants,
        store.repo.list_sessions(),
        get_i18n()['conditions'],
    )
    filename = f"focus_garden_{datetime.now().strftime('%Y%m%d')}.xlsx"

    return send_file(
        buffer,
        as_attachment=True,
        download_name=filename,
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )

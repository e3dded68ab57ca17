"""
utils/backup.py — Snapshots of the garden database.

Reset and Excel export each take a backup first. The settings routes can
also take one on demand. The WAL is checkpointed first so the
single .db file holds every committed plant and session.

Files land in FOCUS_GARDEN_BACKUP_DIR (default backups/) as
focus_garden_YYYYMMDD_HHMMSS_{reason}.db.
"""

import logging
import os
import shutil
from datetime import datetime

from database import get_db, get_db_path

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

BACKUP_PREFIX = 'focus_garden_'
TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'


def get_backup_dir() -> str:
    """Where garden snapshots are written."""
    return os.environ.get('FOCUS_GARDEN_BACKUP_DIR', os.path.join(BASE_DIR, 'backups'))


def backup_db(reason='manual'):
    """
    Snapshot the garden database.

    Args:
        reason: What triggered the snapshot: 'manual', 'pre_reset' or 'export'.

    Returns:
        The snapshot filename, or None when there is no database yet or the
        copy failed.
    """
    backup_dir = get_backup_dir()
    os.makedirs(backup_dir, exist_ok=True)

    db_path = get_db_path()
    if not os.path.exists(db_path):
        return None

    # Fold the WAL into the main file so the copy is complete
    conn = get_db()
    try:
        conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
    finally:
        conn.close()

    timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
    safe_reason = reason.replace(' ', '_').replace('/', '_')[:30]
    filename = f'{BACKUP_PREFIX}{timestamp}_{safe_reason}.db'
    dest = os.path.join(backup_dir, filename)

    try:
        shutil.copy2(db_path, dest)
    except OSError:
        logger.exception("Backup to %s failed", dest)
        return None
    logger.info("Database backed up to %s", filename)
    return filename


def list_backups():
    """
    Garden snapshots for the settings overview, newest first.

    Each entry carries filename, timestamp, size_bytes and the reason
    parsed back out of the filename.
    """
    backup_dir = get_backup_dir()
    os.makedirs(backup_dir, exist_ok=True)

    backups = []
    for name in os.listdir(backup_dir):
        if not (name.startswith(BACKUP_PREFIX) and name.endswith('.db')):
            continue

        # YYYYMMDD_HHMMSS_reason
        stem = name[len(BACKUP_PREFIX):-len('.db')]
        try:
            taken_at = datetime.strptime(stem[:15], TIMESTAMP_FORMAT)
        except ValueError:
            logger.warning("Skipping unrecognized backup file %s", name)
            continue

        backups.append({
            'filename': name,
            'timestamp': taken_at.strftime('%Y-%m-%d %H:%M:%S'),
            'size_bytes': os.path.getsize(os.path.join(backup_dir, name)),
            'reason': stem[16:],
        })

    backups.sort(key=lambda b: b['filename'], reverse=True)
    return backups

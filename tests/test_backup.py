"""
tests/test_backup.py — Tests for garden database snapshots.
"""

import pytest

import database
from utils.backup import backup_db, list_backups


@pytest.fixture
def backup_dir(monkeypatch, tmp_path):
    path = tmp_path / 'backups'
    monkeypatch.setenv('FOCUS_GARDEN_BACKUP_DIR', str(path))
    monkeypatch.setenv('FOCUS_GARDEN_DB_PATH', str(tmp_path / 'garden.db'))
    return path


def test_no_database_no_backup(backup_dir):
    assert backup_db() is None
    assert list_backups() == []


def test_backup_is_listed(backup_dir):
    database.init_db()
    database.seed_defaults()

    filename = backup_db('pre_reset')
    assert filename.startswith('focus_garden_')
    assert filename.endswith('_pre_reset.db')

    backups = list_backups()
    assert len(backups) == 1
    assert backups[0]['filename'] == filename
    assert backups[0]['reason'] == 'pre_reset'
    assert backups[0]['size_bytes'] > 0


def test_listing_parses_names_newest_first(backup_dir):
    backup_dir.mkdir()
    (backup_dir / 'focus_garden_20260301_090000_manual.db').write_bytes(b'a')
    (backup_dir / 'focus_garden_20260302_101500_pre_reset.db').write_bytes(b'bb')

    backups = list_backups()
    assert [b['reason'] for b in backups] == ['pre_reset', 'manual']
    assert backups[0]['timestamp'] == '2026-03-02 10:15:00'
    assert backups[0]['size_bytes'] == 2


def test_listing_skips_unrelated_files(backup_dir):
    backup_dir.mkdir()
    (backup_dir / 'focus_garden_latest.db').write_bytes(b'')
    (backup_dir / 'notes.txt').write_text('hello')
    (backup_dir / 'focus_garden_20260301_090000_export.db').write_bytes(b'')

    assert [b['reason'] for b in list_backups()] == ['export']

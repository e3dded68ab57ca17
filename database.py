"""
database.py — SQLite schema, seed data, and repository operations.

Persists plants, focus sessions, seeds and key-value settings
(max slots, active session pointer, gacha counters).
Uses WAL mode for concurrent read performance.

The module itself is the repository handed to GardenStore: every
function opens its own connection, except the batch writers
(save_plants, save_session_outcome, reset_all_data) which run in a
single transaction so a failure leaves nothing half-written.
"""

import json
import logging
import os
import sqlite3
from typing import Iterable, List, Optional, Tuple

from errors import InvalidTransitionError
from models import (
    DiseaseType, FocusSession, MutationId, Plant, Seed, SessionMinutes, SessionStatus
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_SLOTS = 3


def get_db_path() -> str:
    """Get the database path from environment or default."""
    default_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'focus_garden.db')
    return os.environ.get('FOCUS_GARDEN_DB_PATH', default_path)


def get_db() -> sqlite3.Connection:
    """Get a database connection with WAL mode and foreign keys enabled."""
    db_path = get_db_path()
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Create all tables and indexes if they don't exist."""
    conn = get_db()
    cursor = conn.cursor()

    # Table: settings
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """)

    # Table: plants
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS plants (
            id TEXT PRIMARY KEY,
            species_id TEXT NOT NULL,
            slot_index INTEGER NOT NULL UNIQUE CHECK (slot_index >= 0),
            nickname TEXT,
            growth_points INTEGER NOT NULL DEFAULT 0 CHECK (growth_points >= 0),
            mutations TEXT NOT NULL DEFAULT '[]',
            planted_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL,
            water_level REAL NOT NULL,
            nutrition_level REAL NOT NULL,
            health REAL NOT NULL,
            disease_type TEXT CHECK (disease_type IN ('root_rot','pest','fungus','nutrient_def')),
            last_watered_at INTEGER,
            last_fertilized_at INTEGER,
            last_care_check_at INTEGER NOT NULL,
            is_dead BOOLEAN NOT NULL DEFAULT 0
        )
    """)

    # Table: sessions
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS sessions (
            id TEXT PRIMARY KEY,
            minutes INTEGER NOT NULL CHECK (minutes IN (10, 25, 45, 60)),
            status TEXT NOT NULL CHECK (status IN ('idle','active','completed','interrupted')),
            started_at INTEGER,
            ended_at INTEGER
        )
    """)

    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_sessions_started_at
        ON sessions(started_at)
    """)

    # Table: seeds
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS seeds (
            id TEXT PRIMARY KEY,
            species_id TEXT NOT NULL,
            obtained_at INTEGER NOT NULL
        )
    """)

    conn.commit()
    conn.close()


def seed_defaults(max_slots: int = DEFAULT_MAX_SLOTS):
    """Populate default settings if absent. Existing keys are left alone."""
    conn = get_db()
    defaults = [
        ('max_slots', str(max_slots)),
        ('gacha_free_count', '0'),
        ('gacha_last_reset', '0'),
    ]
    conn.executemany(
        "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?)",
        defaults
    )
    conn.commit()
    conn.close()


# ========================================
# Row conversion
# ========================================

def _plant_from_row(row) -> Plant:
    return Plant(
        id=row['id'],
        species_id=row['species_id'],
        slot_index=row['slot_index'],
        nickname=row['nickname'],
        growth_points=row['growth_points'],
        mutations=tuple(MutationId(m) for m in json.loads(row['mutations'])),
        planted_at=row['planted_at'],
        updated_at=row['updated_at'],
        water_level=row['water_level'],
        nutrition_level=row['nutrition_level'],
        health=row['health'],
        disease_type=DiseaseType(row['disease_type']) if row['disease_type'] else None,
        last_watered_at=row['last_watered_at'],
        last_fertilized_at=row['last_fertilized_at'],
        last_care_check_at=row['last_care_check_at'],
        is_dead=bool(row['is_dead']),
    )


def _plant_params(plant: Plant) -> tuple:
    return (
        plant.id,
        plant.species_id,
        plant.slot_index,
        plant.nickname,
        plant.growth_points,
        json.dumps([m.value for m in plant.mutations]),
        plant.planted_at,
        plant.updated_at,
        plant.water_level,
        plant.nutrition_level,
        plant.health,
        plant.disease_type.value if plant.disease_type else None,
        plant.last_watered_at,
        plant.last_fertilized_at,
        plant.last_care_check_at,
        1 if plant.is_dead else 0,
    )


# Upsert on id only: a slot_index clash must fail, never replace another plant
_UPSERT_PLANT = """
    INSERT INTO plants
    (id, species_id, slot_index, nickname, growth_points, mutations,
     planted_at, updated_at, water_level, nutrition_level, health,
     disease_type, last_watered_at, last_fertilized_at, last_care_check_at, is_dead)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(id) DO UPDATE SET
        species_id = excluded.species_id,
        slot_index = excluded.slot_index,
        nickname = excluded.nickname,
        growth_points = excluded.growth_points,
        mutations = excluded.mutations,
        planted_at = excluded.planted_at,
        updated_at = excluded.updated_at,
        water_level = excluded.water_level,
        nutrition_level = excluded.nutrition_level,
        health = excluded.health,
        disease_type = excluded.disease_type,
        last_watered_at = excluded.last_watered_at,
        last_fertilized_at = excluded.last_fertilized_at,
        last_care_check_at = excluded.last_care_check_at,
        is_dead = excluded.is_dead
"""

_UPSERT_SESSION = """
    INSERT OR REPLACE INTO sessions (id, minutes, status, started_at, ended_at)
    VALUES (?, ?, ?, ?, ?)
"""


def _session_from_row(row) -> FocusSession:
    return FocusSession(
        id=row['id'],
        minutes=SessionMinutes(row['minutes']),
        status=SessionStatus(row['status']),
        started_at=row['started_at'],
        ended_at=row['ended_at'],
    )


def _session_params(session: FocusSession) -> tuple:
    return (
        session.id,
        int(session.minutes),
        session.status.value,
        session.started_at,
        session.ended_at,
    )


def _seed_from_row(row) -> Seed:
    return Seed(id=row['id'], species_id=row['species_id'], obtained_at=row['obtained_at'])


def _set_setting(conn, key: str, value: Optional[str]):
    if value is None:
        conn.execute("DELETE FROM settings WHERE key = ?", (key,))
    else:
        conn.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            (key, value)
        )


# ========================================
# Settings
# ========================================

def get_setting(key, default=None):
    """Get a setting value by key."""
    conn = get_db()
    row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    if row:
        return row['value']
    return default


def update_setting(key, value):
    """Insert or replace a setting."""
    conn = get_db()
    _set_setting(conn, key, value)
    conn.commit()
    conn.close()


def get_max_slots() -> int:
    return int(get_setting('max_slots', str(DEFAULT_MAX_SLOTS)))


def set_max_slots(n: int):
    update_setting('max_slots', str(int(n)))


def get_gacha_counters() -> Tuple[int, int]:
    """Return (used free draws, last reset time in ms)."""
    used = int(get_setting('gacha_free_count', '0'))
    last_reset = int(get_setting('gacha_last_reset', '0'))
    return used, last_reset


def set_gacha_counters(used: int, last_reset: int):
    conn = get_db()
    _set_setting(conn, 'gacha_free_count', str(used))
    _set_setting(conn, 'gacha_last_reset', str(last_reset))
    conn.commit()
    conn.close()


# ========================================
# Plants
# ========================================

def list_plants() -> List[Plant]:
    """Retrieve all plants ordered by slot."""
    conn = get_db()
    rows = conn.execute("SELECT * FROM plants ORDER BY slot_index").fetchall()
    conn.close()
    return [_plant_from_row(r) for r in rows]


def get_plant(plant_id: str) -> Optional[Plant]:
    """Retrieve a single plant by ID."""
    conn = get_db()
    row = conn.execute("SELECT * FROM plants WHERE id = ?", (plant_id,)).fetchone()
    conn.close()
    return _plant_from_row(row) if row else None


def save_plant(plant: Plant):
    """Insert or update a plant."""
    conn = get_db()
    try:
        conn.execute(_UPSERT_PLANT, _plant_params(plant))
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


def save_plants(plants: Iterable[Plant]):
    """Insert or update several plants in one transaction."""
    conn = get_db()
    try:
        conn.executemany(_UPSERT_PLANT, [_plant_params(p) for p in plants])
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


def delete_plant(plant_id: str):
    conn = get_db()
    conn.execute("DELETE FROM plants WHERE id = ?", (plant_id,))
    conn.commit()
    conn.close()


def plant_seed(plant: Plant, seed_id: str):
    """Insert a new plant and consume its seed in one transaction."""
    conn = get_db()
    try:
        conn.execute(_UPSERT_PLANT, _plant_params(plant))
        conn.execute("DELETE FROM seeds WHERE id = ?", (seed_id,))
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


# ========================================
# Sessions
# ========================================

def list_sessions() -> List[FocusSession]:
    """Retrieve all sessions, newest first."""
    conn = get_db()
    rows = conn.execute(
        "SELECT * FROM sessions ORDER BY started_at DESC"
    ).fetchall()
    conn.close()
    return [_session_from_row(r) for r in rows]


def get_session(session_id: str) -> Optional[FocusSession]:
    conn = get_db()
    row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
    conn.close()
    return _session_from_row(row) if row else None


def save_session(session: FocusSession):
    conn = get_db()
    conn.execute(_UPSERT_SESSION, _session_params(session))
    conn.commit()
    conn.close()


def get_active_session() -> Optional[FocusSession]:
    """Return the session the active pointer refers to, if any."""
    session_id = get_setting('active_session_id')
    if not session_id:
        return None
    return get_session(session_id)


def set_active_session(session: Optional[FocusSession]):
    """Point at a session (saving it) or clear the pointer with None."""
    conn = get_db()
    try:
        if session is not None:
            conn.execute(_UPSERT_SESSION, _session_params(session))
            _set_setting(conn, 'active_session_id', session.id)
        else:
            _set_setting(conn, 'active_session_id', None)
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


_FINISH_SESSION = """
    UPDATE sessions SET status = ?, ended_at = ?
    WHERE id = ? AND status = 'active'
"""


def save_session_outcome(session: FocusSession, plants: Iterable[Plant]):
    """
    Persist a finished session and its updated plants atomically.

    Moves the stored session out of 'active', clears the active pointer
    and upserts every plant in one transaction; on failure nothing is
    written.

    Raises:
        InvalidTransitionError: the stored session is no longer active
            (another process already finished it).
    """
    conn = get_db()
    try:
        cursor = conn.execute(
            _FINISH_SESSION, (session.status.value, session.ended_at, session.id)
        )
        if cursor.rowcount != 1:
            conn.rollback()
            raise InvalidTransitionError(f"Session {session.id} is no longer active")
        _set_setting(conn, 'active_session_id', None)
        conn.executemany(_UPSERT_PLANT, [_plant_params(p) for p in plants])
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        logger.exception("Failed to save outcome of session %s", session.id)
        raise
    finally:
        conn.close()


# ========================================
# Seeds
# ========================================

def list_seeds() -> List[Seed]:
    """Retrieve all seeds, oldest first."""
    conn = get_db()
    rows = conn.execute("SELECT * FROM seeds ORDER BY obtained_at").fetchall()
    conn.close()
    return [_seed_from_row(r) for r in rows]


def get_seed(seed_id: str) -> Optional[Seed]:
    conn = get_db()
    row = conn.execute("SELECT * FROM seeds WHERE id = ?", (seed_id,)).fetchone()
    conn.close()
    return _seed_from_row(row) if row else None


def add_seed(seed: Seed):
    conn = get_db()
    conn.execute(
        "INSERT INTO seeds (id, species_id, obtained_at) VALUES (?, ?, ?)",
        (seed.id, seed.species_id, seed.obtained_at)
    )
    conn.commit()
    conn.close()


def remove_seed(seed_id: str):
    conn = get_db()
    conn.execute("DELETE FROM seeds WHERE id = ?", (seed_id,))
    conn.commit()
    conn.close()


# ========================================
# Maintenance
# ========================================

def reset_all_data(max_slots: int = DEFAULT_MAX_SLOTS):
    """Delete every plant, session, seed and setting, then restore defaults."""
    conn = get_db()
    try:
        conn.execute("DELETE FROM plants")
        conn.execute("DELETE FROM sessions")
        conn.execute("DELETE FROM seeds")
        conn.execute("DELETE FROM settings")
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
    seed_defaults(max_slots)
    logger.warning("All garden data was reset")

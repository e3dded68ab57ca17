import io
import os
import tempfile
from datetime import datetime

import pytest
from openpyxl import load_workbook

from app import create_app
from growth_rules import minutes_to_ms
from rng import FixedRNG

START = int(datetime(2026, 3, 1, 9, 0).timestamp() * 1000)


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def client(monkeypatch, tmp_path, clock):
    # Create a temporary file to isolate the database for each test
    db_fd, db_path = tempfile.mkstemp(suffix='.db')
    monkeypatch.setenv('FOCUS_GARDEN_DB_PATH', db_path)
    monkeypatch.setenv('FOCUS_GARDEN_BACKUP_DIR', str(tmp_path / 'backups'))

    app = create_app({
        'TESTING': True,
        'DATABASE': db_path,
        'SECRET_KEY': 'dev-key-for-testing',
        'WTF_CSRF_ENABLED': False,
        'GARDEN_RNG': FixedRNG(0.99),
        'GARDEN_CLOCK': clock,
    })

    with app.test_client() as client:
        yield client

    # Cleanup
    os.close(db_fd)
    for path in (db_path, db_path + '-wal', db_path + '-shm'):
        try:
            os.unlink(path)
        except (FileNotFoundError, PermissionError):
            pass


def plant_seed(client, slot_index=0):
    rv = client.post('/gacha/draw', json={'free': False})
    assert rv.status_code == 201
    seed_id = rv.get_json()['seed']['id']

    rv = client.post('/plants', json={'seed_id': seed_id, 'slot_index': slot_index})
    assert rv.status_code == 201
    return rv.get_json()


def test_homepage_loads(client):
    """The overview of an empty garden."""
    rv = client.get('/')
    assert rv.status_code == 200
    data = rv.get_json()
    assert data['plants'] == []
    assert data['max_slots'] == 3
    assert data['free_slots'] == [0, 1, 2]
    assert data['active_session'] is None
    assert data['free_draws_remaining'] == 5


def test_csrf_token(client):
    rv = client.get('/api/csrf-token')
    assert rv.status_code == 200
    assert rv.get_json()['csrf_token']


def test_settings_page(client):
    """Test that the settings page loads."""
    rv = client.get('/settings/')
    assert rv.status_code == 200
    data = rv.get_json()
    assert 'Bonsai' in data['species']
    assert data['backups'] == []


def test_gacha_draw(client):
    rv = client.post('/gacha/draw', json={})
    assert rv.status_code == 201
    data = rv.get_json()
    assert data['seed']['species_id'] == 'blue_rose'
    assert data['seed']['rarity'] == 'epic'
    assert data['free_draws_remaining'] == 4

    rv = client.get('/gacha')
    assert len(rv.get_json()['seeds']) == 1


def test_plant_and_care(client):
    plant = plant_seed(client)
    assert plant['condition'] == 'healthy'
    assert plant['growth_percentage'] == 0

    rv = client.post(f"/plants/{plant['id']}/water")
    assert rv.status_code == 200
    assert rv.get_json()['water_level'] == 100

    rv = client.post(f"/plants/{plant['id']}/cure")
    assert rv.status_code == 400
    assert rv.get_json()['error'] == "This plant is not sick."

    rv = client.get('/plants/missing')
    assert rv.status_code == 404


def test_plant_rejects_bad_slot(client):
    rv = client.post('/gacha/draw', json={'free': False})
    seed_id = rv.get_json()['seed']['id']

    rv = client.post('/plants', json={'seed_id': seed_id, 'slot_index': -1})
    assert rv.status_code == 400
    rv = client.post('/plants', json={'seed_id': seed_id, 'slot_index': 9})
    assert rv.status_code == 400


def test_session_completes_on_poll(client, clock):
    plant = plant_seed(client)

    rv = client.post('/session/start', json={'minutes': 25})
    assert rv.status_code == 201
    assert rv.get_json()['status'] == 'active'

    rv = client.post('/session/start', json={'minutes': 25})
    assert rv.status_code == 400

    clock.now += minutes_to_ms(25)
    rv = client.get('/session')
    data = rv.get_json()
    assert data['just_completed'] is True
    assert data['results'] == [
        {'plant_id': plant['id'], 'earned_gp': 2, 'new_mutation': None}
    ]

    rv = client.get('/session/results')
    data = rv.get_json()
    assert data['completed_successfully'] is True
    assert data['session']['status'] == 'completed'

    rv = client.get(f"/plants/{plant['id']}")
    assert rv.get_json()['growth_points'] == 2

    rv = client.get('/session/history')
    assert [s['status'] for s in rv.get_json()] == ['completed']


def test_session_interrupt(client, clock):
    plant_seed(client)
    client.post('/session/start', json={'minutes': 60})
    clock.now += minutes_to_ms(30)

    rv = client.post('/session/interrupt')
    assert rv.status_code == 200
    assert [r['earned_gp'] for r in rv.get_json()['results']] == [0]

    rv = client.get('/session/results')
    assert rv.get_json()['completed_successfully'] is False

    client.post('/session/results/clear')
    assert client.get('/session/results').get_json()['session'] is None


def test_invalid_session_length(client):
    plant_seed(client)
    rv = client.post('/session/start', json={'minutes': 30})
    assert rv.status_code == 400


def test_slot_settings(client):
    plant_seed(client, 2)
    rv = client.post('/settings/slots', json={'max_slots': 2})
    assert rv.status_code == 400
    rv = client.post('/settings/slots', json={'max_slots': 6})
    assert rv.get_json() == {'max_slots': 6}


def test_excel_export(client):
    plant_seed(client)
    rv = client.get('/export/excel')
    assert rv.status_code == 200

    workbook = load_workbook(io.BytesIO(rv.data))
    assert workbook.sheetnames == ['Plants', 'Sessions']
    assert workbook['Plants'].max_row == 2


def test_reset_backs_up_first(client):
    plant_seed(client)
    rv = client.post('/settings/reset')
    assert rv.status_code == 200
    assert rv.get_json()['backup']

    assert client.get('/').get_json()['plants'] == []
    assert len(client.get('/settings/').get_json()['backups']) == 1


def test_reset_keeps_configured_slot_count(monkeypatch, tmp_path, clock):
    db_path = str(tmp_path / 'garden.db')
    monkeypatch.setenv('FOCUS_GARDEN_DB_PATH', db_path)
    monkeypatch.setenv('FOCUS_GARDEN_BACKUP_DIR', str(tmp_path / 'backups'))
    monkeypatch.setenv('FOCUS_GARDEN_MAX_SLOTS', '6')

    app = create_app({
        'TESTING': True,
        'DATABASE': db_path,
        'SECRET_KEY': 'dev-key-for-testing',
        'WTF_CSRF_ENABLED': False,
        'GARDEN_RNG': FixedRNG(0.99),
        'GARDEN_CLOCK': clock,
    })
    client = app.test_client()

    assert client.get('/').get_json()['max_slots'] == 6
    rv = client.post('/settings/slots', json={'max_slots': 4})
    assert rv.status_code == 200
    assert client.get('/').get_json()['max_slots'] == 4

    rv = client.post('/settings/reset')
    assert rv.status_code == 200
    assert client.get('/').get_json()['max_slots'] == 6

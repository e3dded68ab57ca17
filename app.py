"""
app.py — Flask entry point for the focus garden application.

Initializes the Flask app, registers all route blueprints, calls
init_db() and seed_defaults() on startup, builds the GardenStore that
owns the application state, and loads i18n strings.

Run: python app.py → localhost:5000
Poll sessions and decay from a terminal: flask --app app watch
"""

import json
import logging
import os
import time

import click
from flask import Flask
from flask_wtf.csrf import CSRFProtect

import database
from clock import now_ms
from database import init_db, seed_defaults
from garden_store import GardenStore
from rng import default_rng
from routes.export import export_bp
from routes.focus import focus_bp
from routes.gacha import gacha_bp
from routes.main import main_bp
from routes.settings import settings_bp

logger = logging.getLogger(__name__)


def create_app(test_config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.secret_key = os.environ.get('FOCUS_GARDEN_SECRET_KEY', 'focus-garden-local-app-secret-key')
    app.config['WTF_CSRF_CHECK_DEFAULT'] = True
    app.config['LOG_LEVEL'] = os.environ.get('FOCUS_GARDEN_LOG_LEVEL', 'INFO')
    app.config['DEFAULT_MAX_SLOTS'] = int(os.environ.get('FOCUS_GARDEN_MAX_SLOTS', database.DEFAULT_MAX_SLOTS))
    app.config['SESSION_POLL_SECONDS'] = float(os.environ.get('SESSION_POLL_SECONDS', '1'))
    app.config['DECAY_POLL_SECONDS'] = float(os.environ.get('DECAY_POLL_SECONDS', '60'))

    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    # An explicit DATABASE wins over the environment for this process
    if app.config.get('DATABASE'):
        os.environ['FOCUS_GARDEN_DB_PATH'] = app.config['DATABASE']

    CSRFProtect(app)

    init_db()
    seed_defaults(app.config['DEFAULT_MAX_SLOTS'])

    # Tests may inject GARDEN_RNG and GARDEN_CLOCK
    store = GardenStore(
        database,
        rng=app.config.get('GARDEN_RNG') or default_rng,
        clock=app.config.get('GARDEN_CLOCK') or now_ms,
        default_max_slots=app.config['DEFAULT_MAX_SLOTS'],
    )
    store.load()
    app.extensions['garden_store'] = store

    # Load i18n strings
    base_dir = os.path.dirname(os.path.abspath(__file__))
    i18n_path = os.path.join(base_dir, 'i18n', 'en.json')
    with open(i18n_path, 'r', encoding='utf-8') as f:
        app.extensions['i18n'] = json.load(f)

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(focus_bp)
    app.register_blueprint(gacha_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(export_bp)

    @app.cli.command('watch')
    @click.option('--once', is_flag=True, help='Run a single completion and decay check, then exit.')
    def watch(once):
        """Poll the active session and plant decay on fixed intervals."""
        session_every = app.config['SESSION_POLL_SECONDS']
        decay_every = app.config['DECAY_POLL_SECONDS']
        next_decay = 0.0

        logger.info("Watching garden (session every %ss, decay every %ss)", session_every, decay_every)
        while True:
            # The web process may have changed the garden since the last pass
            store.load()
            results = store.check_session_completion()
            if results is not None:
                click.echo(f"Session complete: {sum(r.earned_gp for r in results)} GP earned")

            if time.monotonic() >= next_decay:
                for plant in store.tick_decay():
                    click.echo(f"Plant in slot {plant.slot_index + 1} has withered")
                next_decay = time.monotonic() + decay_every

            if once:
                break
            time.sleep(session_every)

    return app


if __name__ == '__main__':
    app = create_app()
    # Debug mode: enabled by default for development (auto-reload on file changes)
    # Set FLASK_DEBUG=0 to disable for production
    debug = os.environ.get('FLASK_DEBUG', '1') != '0'
    app.run(host='localhost', port=5000, debug=debug)

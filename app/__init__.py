from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import logging
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()


def _env_flag(name, default):
    return os.getenv(name, default).lower() in ('true', '1', 'yes')


def create_app(config_name='development', overrides=None):
    app = Flask(__name__)

    # Config
    database_url = os.getenv(
        'DATABASE_URL',
        'sqlite:///marketplace.db'  # Using SQLite for development
    )
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')

    # SQLite serialises writers, so the cleanup passes run one at a time there
    default_workers = 1 if database_url.startswith('sqlite') else 3
    app.config['BOOST_CLEANUP_WORKERS'] = int(os.getenv('BOOST_CLEANUP_WORKERS', default_workers))
    app.config['BOOST_CLEANUP_INTERVAL_MINUTES'] = int(os.getenv('BOOST_CLEANUP_INTERVAL_MINUTES', 5))
    app.config['SCHEDULER_ENABLED'] = _env_flag('SCHEDULER_ENABLED', 'true')

    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SCHEDULER_ENABLED'] = False

    if overrides:
        app.config.update(overrides)

    logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO').upper())

    # Initialize extensions
    db.init_app(app)
    CORS(app)

    # Create tables with error handling
    with app.app_context():
        from app import models  # noqa: F401
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning(f"Could not create database tables: {e}")

    # Register routes
    from app.routes import register_routes
    register_routes(app)

    from app.services.scheduler import init_scheduler, register_cli
    register_cli(app)
    init_scheduler(app)

    # Health check
    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}, 200

    return app

#!/usr/bin/env python
"""Database initialization script for the marketplace backend.

Creates all tables from the SQLAlchemy models and runs one boost
cleanup pass so that stale promotion flags from an old dump are cleared.

Usage:
    python init_db.py
"""

import os
import sys
from app import create_app, db
from app.services.promotion_state import StorageUnavailable, get_promotion_manager


def init_database():
    """Initialize the database by creating all tables."""

    config_name = os.getenv('FLASK_ENV', 'development')
    app = create_app(config_name, overrides={'SCHEDULER_ENABLED': False})

    print(f"\n{'='*60}")
    print(f"Database Initialization for {config_name.upper()} Environment")
    print(f"{'='*60}\n")

    with app.app_context():
        try:
            print("Creating database tables...")
            print(f"Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}\n")

            db.create_all()

            tables_info = [
                ("users", "Seller accounts and verification status"),
                ("listings", "Buy/Sell classifieds with boost flags"),
                ("ad_promotions", "Purchased featured/urgent/sticky promotions"),
            ]

            print("Created tables:")
            for table_name, description in tables_info:
                print(f"  - {table_name:<25} - {description}")

            counts = get_promotion_manager().cleanup_expired_boosts()
            print(f"\nExpired stale boosts: {counts}")

            print(f"\n{'='*60}")
            print("Database initialization complete!")
            print(f"{'='*60}\n")
            return True

        except StorageUnavailable as e:
            print(f"Tables created but boost cleanup failed: {e}\n")
            return False
        except Exception as e:
            print(f"Error creating database: {type(e).__name__}: {e}\n")
            return False


if __name__ == '__main__':
    success = init_database()
    sys.exit(0 if success else 1)

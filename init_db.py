#!/usr/bin/env python
"""Database initialization script for the chat translation backend.

Creates all tables from the SQLAlchemy models. Production databases should
use the Alembic migrations instead (flask db upgrade).

Usage:
    python init_db.py
"""

import os
import sys
from app import create_app, db


def init_database():
    """Initialize the database by creating all tables."""
    config_name = os.getenv('FLASK_ENV', 'development')
    app = create_app(config_name)
    
    print(f"\n{'='*60}")
    print(f"Database Initialization for {config_name.upper()} Environment")
    print(f"{'='*60}\n")
    
    with app.app_context():
        try:
            print(f"Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}\n")
            db.create_all()
            
            tables_info = [
                ("messages", "Chat messages (owned by the message store)"),
                ("translations", "Cached message translations"),
                ("translation_preferences", "Per-viewer original/translated toggle"),
            ]
            
            print("Created tables:")
            for table_name, description in tables_info:
                print(f"  ✓ {table_name:<25} - {description}")
            
            print("\n✅ Database initialization complete!\n")
            return True
            
        except Exception as e:
            print(f"❌ Error creating database: {type(e).__name__}: {e}\n")
            return False


if __name__ == '__main__':
    success = init_database()
    sys.exit(0 if success else 1)

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_restx import Api
import logging
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()


def _database_url():
    """Resolve the database URL, fixing the legacy postgres:// scheme."""
    url = os.getenv('DATABASE_URL', 'sqlite:///chat.db')
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def create_app(config_name='development'):
    app = Flask(__name__)
    
    # Config
    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'
    else:
        app.config['SQLALCHEMY_DATABASE_URI'] = _database_url()
    
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    
    logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO').upper())
    
    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    CORS(app, origins=os.getenv('CORS_ORIGINS', '*').split(','))
    
    # Create API (docs only; resources are plain blueprints)
    Api(app, version='1.0', title='Chat Translation API', doc='/api/docs')
    
    # Create tables with error handling
    with app.app_context():
        from app import models  # noqa: F401 - register tables
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning(f"Could not create database tables: {e}")
    
    # Register routes
    from app.routes import register_routes
    register_routes(app)
    
    # Health check
    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}, 200
    
    return app

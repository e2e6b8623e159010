"""
Application Factory
Creates and configures the Flask application
"""
import logging

from flask import Flask

from learnhub.config import config, get_config
from learnhub.errors import register_error_handlers
from learnhub.extensions import db


def create_app(config_name=None):
    """
    Application factory pattern
    Creates and configures Flask app
    """
    app = Flask(__name__)

    # Load configuration
    if config_name:
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    logging.getLogger().setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    register_error_handlers(app)
    app.json.sort_keys = False

    # Register blueprints
    from learnhub.routes import (
        assessments_bp, attempts_bp, courses_bp, grades_bp, grading_bp, users_bp
    )
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(courses_bp, url_prefix='/api/courses')
    app.register_blueprint(assessments_bp, url_prefix='/api/assessments')
    app.register_blueprint(attempts_bp, url_prefix='/api/attempts')
    app.register_blueprint(grading_bp, url_prefix='/api/grading')
    app.register_blueprint(grades_bp, url_prefix='/api/grades')

    from learnhub.cli import register_commands
    register_commands(app)

    # Create database tables
    with app.app_context():
        db.create_all()
        app.logger.info('Database tables created/verified')

    return app

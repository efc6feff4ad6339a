"""
Modle Game Server Application Package

This package contains the daily movie-guessing puzzle engine: puzzle
selection, attempt tracking, the one-puzzle-per-day lock and streaks,
exposed over a small JSON HTTP API.
"""

import json

import click
from flask import Flask
from flask_cors import CORS
from .config import Config


def register_cli(app):
    """Register maintenance commands on ``flask --app main``."""

    @app.cli.command('seed-puzzles')
    @click.argument('path', required=False)
    def seed_puzzles(path):
        """Load a JSON puzzle catalogue into MongoDB."""
        from .services import MongoPuzzleRepository, connect_mongo, seed_catalogue

        mongo_uri = app.config.get('MONGO_URI')
        if not mongo_uri:
            raise click.ClickException('MONGO_URI is not configured')

        path = path or app.config['PUZZLE_FILE']
        with open(path, 'r', encoding='utf-8') as f:
            catalogue = json.load(f)

        db = connect_mongo(mongo_uri, app.config['MONGO_DB_NAME'])
        try:
            inserted = seed_catalogue(MongoPuzzleRepository(db), catalogue)
        except ValueError as e:
            raise click.ClickException(str(e))

        for language, count in inserted.items():
            click.echo(f"{language}: {count} new puzzle(s)")
        click.echo(f"Seeded {sum(inserted.values())} puzzle(s) from {path}")


def create_app(config_class=Config):
    """
    Application factory pattern for creating Flask app instances.

    Services are initialized separately (see modle.services.initialize_services)
    so tests can inject stores and clocks.

    Args:
        config_class: Configuration class to use

    Returns:
        Flask application instance with all blueprints registered
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    origins = config_class.CORS_ORIGINS
    CORS(app, origins=origins if origins == '*' else [o.strip() for o in origins.split(',')])

    # Register blueprints
    from .controllers.modle_controller import modle_bp
    from .controllers.puzzle_controller import puzzle_bp
    from .controllers.health_controller import health_bp

    app.register_blueprint(modle_bp, url_prefix='/api/modle')
    app.register_blueprint(puzzle_bp, url_prefix='/api/puzzles')
    app.register_blueprint(health_bp, url_prefix='/api')

    register_cli(app)

    return app

"""
Modle Game Server - Main Entry Point

This is the main entry point for the Modle game server.
It initializes all services and starts the Flask application.
"""

from modle import create_app
from modle.config import Config
from modle.services import initialize_services
from modle.services.auth_service import get_auth_service
from modle.utils.game_logger import game_logger


def build_app(config_class=Config):
    """Initialize services and create the Flask app."""
    print("Initializing services...")
    session_service, status_service = initialize_services(config_class)
    print("✓ Game session service initialized successfully")
    print("✓ Status service initialized successfully")

    if get_auth_service():
        print("✓ Authentication service initialized successfully")
    else:
        print("✗ JWT Secret not configured, authenticated endpoints will fail")

    print("Creating Flask application...")
    flask_app = create_app(config_class)
    print("✓ Flask application created successfully")
    return flask_app


def main():
    """Main function to initialize services and start the server."""
    try:
        flask_app = build_app(Config)

        game_logger.logger.info("Modle Server Starting")

        print(f"\nStarting Modle Game Server on {Config.HOST}:{Config.PORT}")
        print(f"Debug mode: {Config.DEBUG}")
        print(f"Player store: {'MongoDB' if Config.MONGO_URI else 'in-memory'}")
        print(f"Puzzle source: {Config.PUZZLE_SOURCE}")
        print("=" * 50)

        flask_app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Modle Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
else:
    # `flask --app main ...` looks up a module-level `app`
    app = build_app(Config)

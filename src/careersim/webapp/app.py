"""Flask application factory."""

import logging

from flask import Flask

from careersim.content.store import ContentStore
from careersim.storage.config import StorageBackend, get_session_repository
from careersim.storage.repository import SessionRepository

from .config import Config
from .extensions import db
from .services.db_repository import DatabaseSessionRepository
from .services.session_service import EXTENSION_KEY, SessionService

logger = logging.getLogger(__name__)


def build_session_repository(app: Flask) -> SessionRepository:
    """Session store selected by SESSION_STORAGE."""
    storage = app.config.get("SESSION_STORAGE", "database")
    if storage == "database":
        return DatabaseSessionRepository()
    if storage == "memory":
        return get_session_repository(StorageBackend.MEMORY)
    if storage == "sqlite":
        return get_session_repository(StorageBackend.SQLITE)
    raise ValueError(f"Unknown SESSION_STORAGE: {storage}")


def create_app(config_class=Config, store: ContentStore | None = None):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration object
        store: Pre-loaded content store; loaded from SCENARIOS_PATH when None

    Raises:
        ContentValidationError: If CONTENT_STRICT is set and content is invalid
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Ensure instance folder exists
    config_class.INSTANCE_PATH.mkdir(parents=True, exist_ok=True)

    if store is None:
        store = ContentStore.from_directory(
            app.config["SCENARIOS_PATH"], strict=app.config["CONTENT_STRICT"]
        )

    # Initialize extensions
    db.init_app(app)
    app.extensions[EXTENSION_KEY] = SessionService(store, build_session_repository(app))

    # Register blueprints
    from .routes import health, scenario, session
    from .routes.errors import register_error_handlers

    app.register_blueprint(health.bp)
    app.register_blueprint(scenario.bp)
    app.register_blueprint(session.bp)
    register_error_handlers(app)

    # Create database tables
    with app.app_context():
        from .models.session_record import SessionRecord  # noqa: F401

        db.create_all()

    logger.info(f"CareerSim API ready with {len(store)} scenarios")
    return app


def main():
    """Entry point for `careersim-web` command."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    app.run(debug=True, host="0.0.0.0", port=5000)


if __name__ == "__main__":
    main()

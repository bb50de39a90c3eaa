"""Flask configuration."""

import os
from pathlib import Path


class Config:
    """Base configuration."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-in-prod")

    # Database - instance folder is at project root
    PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
    INSTANCE_PATH = PROJECT_ROOT / "instance"
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{INSTANCE_PATH}/careersim.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Content
    SCENARIOS_PATH = Path(
        os.environ.get("CAREERSIM_SCENARIOS_PATH", PROJECT_ROOT / "content" / "scenarios")
    )
    CONTENT_STRICT = True  # refuse to start on invalid content

    # Sessions: 'database' (Flask-SQLAlchemy), 'memory' or 'sqlite' (careersim.storage)
    SESSION_STORAGE = os.environ.get("CAREERSIM_SESSION_STORAGE", "database")


class TestConfig(Config):
    """Testing configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SESSION_STORAGE = "database"

"""Flask extensions, initialized in the app factory."""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

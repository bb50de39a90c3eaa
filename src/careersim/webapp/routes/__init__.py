"""Route blueprints for the webapp."""

from . import errors, health, scenario, session

__all__ = ["errors", "health", "scenario", "session"]

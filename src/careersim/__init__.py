"""CareerSim narrative session engine.

Validates authored scenario content, resolves player actions into
consequences and applies them to resumable player sessions.
"""

__version__ = "0.1.0"

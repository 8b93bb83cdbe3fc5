"""
API Routes Package

Centralizes route management with explicit imports.
"""

from api.routes import tasks
from api.routes import triage

__all__ = ["tasks", "triage"]

# api/services/__init__.py
"""
API Services Package

Business logic kept separate from route handlers.
"""

from api.services.task_service import TaskParsingService, get_task_service

__all__ = ["TaskParsingService", "get_task_service"]

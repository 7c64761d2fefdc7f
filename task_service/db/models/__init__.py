# task_service/db/models/__init__.py
"""
Database models package
Imports all models for easy access
"""

# Import base classes and mixins
from task_service.db.models.base import Base, TimestampMixin, IDMixin

# Import all enums
from task_service.db.models.enums import TaskStatus

# Import task models
from task_service.db.models.task import Task

__all__ = [
    'Base', 'TimestampMixin', 'IDMixin',
    'TaskStatus',
    'Task',
]

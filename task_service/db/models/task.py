# task_service/db/models/task.py
"""Task management model"""
from sqlalchemy import Column, Integer, String, Text, Boolean, Date, Index, Enum, false

from task_service.db.models.base import Base, TimestampMixin, IDMixin
from task_service.db.models.enums import TaskStatus


class Task(Base, IDMixin, TimestampMixin):
    """Project-scoped task owned by a manager and assigned to an employee"""
    __tablename__ = "tasks"

    task_code = Column(String(100), nullable=False)
    task_subject = Column(String(500), nullable=False)
    task_detail = Column(Text, nullable=True)
    task_status = Column(Enum(TaskStatus), nullable=False, default=TaskStatus.OPEN, index=True)
    assigned_date = Column(Date, nullable=False)

    project_code = Column(String(100), nullable=False, index=True)
    assigned_manager = Column(String(255), nullable=False)
    assigned_employee = Column(String(255), nullable=False)

    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        # Codes only collide among live rows; soft-deleted rows carry a rewritten code
        Index(
            'uq_task_code_active', 'task_code',
            unique=True,
            postgresql_where=(is_deleted == false()),
            sqlite_where=(is_deleted == false()),
        ),
        Index('idx_task_assignee_status', 'assigned_employee', 'task_status'),
    )

    def __repr__(self):
        return f"<Task code={self.task_code} status={self.task_status}>"

# task_service/db/models/enums.py
import enum


class TaskStatus(str, enum.Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    UAT_TEST = "UAT Testing"
    COMPLETED = "Completed"

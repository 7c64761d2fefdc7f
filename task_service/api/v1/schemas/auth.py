# task_service/api/v1/schemas/auth.py
from typing import FrozenSet
from pydantic import BaseModel, ConfigDict, Field


class Actor(BaseModel):
    """
    The acting identity for a request: username plus client roles.
    Passed explicitly into every policy and service call.
    """
    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1)
    roles: FrozenSet[str] = frozenset()

    def has_role(self, role: str) -> bool:
        return role in self.roles

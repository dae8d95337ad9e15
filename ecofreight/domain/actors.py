from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    MANAGER = "manager"
    DRIVER = "driver"
    CUSTOMER = "customer"


@dataclass(frozen=True)
class Actor:
    """The authenticated user on whose behalf an operation runs."""

    user_id: str
    role: Role

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER

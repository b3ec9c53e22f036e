# docportal/schemas/actor.py
import enum

from pydantic import BaseModel


class Role(str, enum.Enum):
    DOS = "dos"
    TEACHER = "teacher"


class Actor(BaseModel):
    """Staff member performing an operation, as asserted by the identity provider"""
    id: str
    role: Role

    @property
    def is_dos(self) -> bool:
        return self.role == Role.DOS

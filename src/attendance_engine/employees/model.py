from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Read-only view of the identity collaborator's user."""

    user_id: int
    full_name: str
    role: Role = Role.EMPLOYEE
    is_active: bool = True

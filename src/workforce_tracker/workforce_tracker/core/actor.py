"""Authenticated caller passed explicitly into every service operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .enums import Role


@dataclass(frozen=True)
class AdminActor:
    admin_id: int

    @property
    def role(self) -> Role:
        return Role.ADMIN


@dataclass(frozen=True)
class EmployeeActor:
    emp_id: int

    @property
    def role(self) -> Role:
        return Role.EMPLOYEE


Actor = Union[AdminActor, EmployeeActor]


def actor_for(role: Role, actor_id: int) -> Actor:
    if role == Role.ADMIN:
        return AdminActor(admin_id=int(actor_id))
    return EmployeeActor(emp_id=int(actor_id))

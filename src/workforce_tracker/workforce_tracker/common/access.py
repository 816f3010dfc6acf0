"""Role, ownership and active-employee checks shared by every service."""

from __future__ import annotations

from ..core.actor import Actor, AdminActor, EmployeeActor
from ..core.exceptions import AuthorizationError, NotFoundError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository


def require_admin(actor: Actor) -> AdminActor:
    if not isinstance(actor, AdminActor):
        raise AuthorizationError("Access denied")
    return actor


def require_employee(actor: Actor) -> EmployeeActor:
    if not isinstance(actor, EmployeeActor):
        raise AuthorizationError("Access denied")
    return actor


def require_active_employee(employees: EmployeeRepository, emp_id: int) -> Employee:
    employee = employees.get_by_id(int(emp_id))
    if not employee:
        raise NotFoundError("Employee not found")
    if not employee.is_active:
        raise AuthorizationError("Employee account is inactive")
    return employee


def require_existing_employee(employees: EmployeeRepository, emp_id: int) -> Employee:
    employee = employees.get_by_id(int(emp_id))
    if not employee:
        raise NotFoundError("Employee not found")
    return employee


def require_owner(resource_emp_id: int, emp_id: int, what: str) -> None:
    if int(resource_emp_id) != int(emp_id):
        raise AuthorizationError(f"You can only modify your own {what}")

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Admin, Employee, EmployeeChanges, PasswordResetToken


class EmployeeRepository(Protocol):
    """Giao diện repository cho Employee.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, emp_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def create_employee(
        self,
        *,
        full_name: str,
        username: str,
        password_hash: str,
        phone_no: Optional[str] = None,
        email_id: Optional[str] = None,
        aadhaar_no: Optional[str] = None,
        profile_picture: Optional[str] = None,
    ) -> int:
        """Insert an active employee. Duplicate username raises ConflictError."""

        raise NotImplementedError

    def update_employee(self, emp_id: int, changes: EmployeeChanges) -> bool:
        raise NotImplementedError

    def update_password(self, emp_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, emp_id: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError


class AdminRepository(Protocol):
    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Admin]:
        raise NotImplementedError

    def update_password(self, admin_id: int, password_hash: str) -> bool:
        raise NotImplementedError


class PasswordResetRepository(Protocol):
    """Storage for one-time reset codes."""

    def create(self, *, user_id: int, role: Role, otp: str, expires_at: datetime) -> int:
        raise NotImplementedError

    def find_valid(self, *, otp: str, role: Role, now: datetime) -> Optional[PasswordResetToken]:
        """Newest token with this code and role that has not expired at ``now``."""

        raise NotImplementedError

    def delete(self, token_id: int) -> bool:
        raise NotImplementedError

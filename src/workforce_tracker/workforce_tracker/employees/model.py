from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Thực thể miền (domain): Nhân viên.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    """

    emp_id: int
    full_name: str
    username: str
    password_hash: str
    phone_no: Optional[str] = None
    email_id: Optional[str] = None
    aadhaar_no: Optional[str] = None
    profile_picture: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        return {
            "emp_id": self.emp_id,
            "full_name": self.full_name,
            "username": self.username,
            "phone_no": self.phone_no,
            "email_id": self.email_id,
            "aadhaar_no": self.aadhaar_no,
            "profile_picture": self.profile_picture,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class Admin:
    admin_id: int
    username: str
    password_hash: str


@dataclass(frozen=True)
class EmployeeChanges:
    """Fields an admin may change on an employee; None means "keep"."""

    full_name: Optional[str] = None
    username: Optional[str] = None
    phone_no: Optional[str] = None
    email_id: Optional[str] = None
    aadhaar_no: Optional[str] = None
    profile_picture: Optional[str] = None
    is_active: Optional[bool] = None
    password_hash: Optional[str] = None

    def is_empty(self) -> bool:
        return all(v is None for v in self.__dict__.values())


@dataclass(frozen=True)
class PasswordResetToken:
    """A single-use reset code issued to an admin or an employee."""

    token_id: int
    user_id: int
    role: Role
    otp: str
    expires_at: datetime
    created_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

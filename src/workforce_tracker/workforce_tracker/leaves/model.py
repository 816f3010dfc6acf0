from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveApplication:
    """Thực thể miền (domain): Đơn nghỉ phép.

    Editable by its owner only while PENDING; an admin decision is terminal.
    """

    leave_id: int
    emp_id: int
    start_date: date
    end_date: date
    leave_type: str
    reason: str
    status: LeaveStatus
    leave_attachment: Optional[str] = None
    approved_by: Optional[int] = None
    approved_on: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def to_dict(self) -> dict:
        return {
            "leave_id": self.leave_id,
            "emp_id": self.emp_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days": self.days,
            "leave_type": self.leave_type,
            "reason": self.reason,
            "leave_attachment": self.leave_attachment,
            "status": self.status.value,
            "approved_by": self.approved_by,
            "approved_on": self.approved_on.isoformat(sep=" ") if self.approved_on else None,
            "created_at": self.created_at.isoformat(sep=" ") if self.created_at else None,
        }


@dataclass(frozen=True)
class LeaveReportRow:
    leave: LeaveApplication
    full_name: str

    def to_dict(self) -> dict:
        out = self.leave.to_dict()
        out["full_name"] = self.full_name
        return out


@dataclass(frozen=True)
class LeaveDetails:
    """Mutable part of a leave application."""

    start_date: date
    end_date: date
    leave_type: str
    reason: str
    leave_attachment: Optional[str] = None

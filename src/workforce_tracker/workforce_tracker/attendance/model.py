from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import AttendanceStatus


def _fmt_time(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công.

    One row per employee per calendar day; check-out fills the out_* fields in place.
    """

    attendance_id: int
    emp_id: int
    attendance_date: date
    in_time: Optional[time]
    out_time: Optional[time]
    status: AttendanceStatus
    in_location: Optional[str] = None
    in_latitude: Optional[float] = None
    in_longitude: Optional[float] = None
    in_picture: Optional[str] = None
    out_location: Optional[str] = None
    out_latitude: Optional[float] = None
    out_longitude: Optional[float] = None
    out_picture: Optional[str] = None
    remarks: Optional[str] = None

    @property
    def is_checked_in(self) -> bool:
        return self.in_time is not None

    @property
    def is_checked_out(self) -> bool:
        return self.out_time is not None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "emp_id": self.emp_id,
            "attendance_date": self.attendance_date.isoformat(),
            "in_time": _fmt_time(self.in_time),
            "in_location": self.in_location,
            "in_latitude": self.in_latitude,
            "in_longitude": self.in_longitude,
            "in_picture": self.in_picture,
            "out_time": _fmt_time(self.out_time),
            "out_location": self.out_location,
            "out_latitude": self.out_latitude,
            "out_longitude": self.out_longitude,
            "out_picture": self.out_picture,
            "status": self.status.value,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model phục vụ báo cáo/xuất file (tối ưu cho truy vấn)."""

    record: AttendanceRecord
    full_name: str

    def to_dict(self) -> dict:
        out = self.record.to_dict()
        out["full_name"] = self.full_name
        return out

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Activity:
    """Customer-visit log entry owned by one employee."""

    activity_id: int
    emp_id: int
    customer_name: str
    remarks: str
    activity_datetime: datetime
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "activity_id": self.activity_id,
            "emp_id": self.emp_id,
            "customer_name": self.customer_name,
            "remarks": self.remarks,
            "activity_datetime": self.activity_datetime.isoformat(sep=" "),
            "location": self.location,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


@dataclass(frozen=True)
class ActivityReportRow:
    activity: Activity
    full_name: str

    def to_dict(self) -> dict:
        out = self.activity.to_dict()
        out["full_name"] = self.full_name
        return out


@dataclass(frozen=True)
class ActivityChanges:
    """None means "keep the stored value"."""

    customer_name: Optional[str] = None
    remarks: Optional[str] = None
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def is_empty(self) -> bool:
        return all(v is None for v in self.__dict__.values())

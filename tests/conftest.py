from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.workforce_tracker.workforce_tracker.activities.model import Activity, ActivityChanges, ActivityReportRow
from src.workforce_tracker.workforce_tracker.attendance.model import AttendanceRecord, AttendanceReportRow
from src.workforce_tracker.workforce_tracker.container import assemble
from src.workforce_tracker.workforce_tracker.core.enums import AttendanceStatus, LeaveStatus, Role
from src.workforce_tracker.workforce_tracker.core.exceptions import ConflictError
from src.workforce_tracker.workforce_tracker.employees.model import Admin, Employee, EmployeeChanges, PasswordResetToken
from src.workforce_tracker.workforce_tracker.leaves.model import LeaveApplication, LeaveDetails, LeaveReportRow


class InMemoryEmployees:
    def __init__(self):
        self.by_id: dict[int, Employee] = {}
        self._id = 0

    def add(self, full_name: str, username: str, password: str = "secret1", *, emp_id: Optional[int] = None, is_active: bool = True, profile_picture: Optional[str] = None, email_id: Optional[str] = None) -> Employee:
        if emp_id is None:
            self._id += 1
            emp_id = self._id
        else:
            self._id = max(self._id, emp_id)
        emp = Employee(
            emp_id=emp_id,
            full_name=full_name,
            username=username,
            password_hash=generate_password_hash(password),
            email_id=email_id,
            is_active=is_active,
            profile_picture=profile_picture,
        )
        self.by_id[emp_id] = emp
        return emp

    def get_by_id(self, emp_id: int) -> Optional[Employee]:
        return self.by_id.get(int(emp_id))

    def get_by_username(self, username: str) -> Optional[Employee]:
        return next((e for e in self.by_id.values() if e.username == username), None)

    def get_by_email(self, email_id: str) -> Optional[Employee]:
        return next((e for e in self.by_id.values() if e.email_id == email_id), None)

    def create_employee(self, *, full_name, username, password_hash, phone_no=None, email_id=None, aadhaar_no=None, profile_picture=None) -> int:
        if self.get_by_username(username):
            raise ConflictError("Username already exists")
        self._id += 1
        self.by_id[self._id] = Employee(
            emp_id=self._id,
            full_name=full_name,
            username=username,
            password_hash=password_hash,
            phone_no=phone_no,
            email_id=email_id,
            aadhaar_no=aadhaar_no,
            profile_picture=profile_picture,
        )
        return self._id

    def update_employee(self, emp_id: int, changes: EmployeeChanges) -> bool:
        emp = self.by_id.get(int(emp_id))
        if not emp:
            return False
        fields = {k: v for k, v in changes.__dict__.items() if v is not None}
        self.by_id[emp.emp_id] = replace(emp, **fields)
        return True

    def update_password(self, emp_id: int, password_hash: str) -> bool:
        return self.update_employee(emp_id, EmployeeChanges(password_hash=password_hash))

    def delete_by_id(self, emp_id: int) -> bool:
        return self.by_id.pop(int(emp_id), None) is not None

    def list_all(self):
        return sorted(self.by_id.values(), key=lambda e: e.emp_id, reverse=True)


class InMemoryAdmins:
    def __init__(self):
        self.by_id: dict[int, Admin] = {}

    def add(self, admin_id: int, username: str, password: str) -> Admin:
        admin = Admin(admin_id=admin_id, username=username, password_hash=generate_password_hash(password))
        self.by_id[admin_id] = admin
        return admin

    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        return self.by_id.get(int(admin_id))

    def get_by_username(self, username: str) -> Optional[Admin]:
        return next((a for a in self.by_id.values() if a.username == username), None)

    def update_password(self, admin_id: int, password_hash: str) -> bool:
        admin = self.by_id.get(int(admin_id))
        if not admin:
            return False
        self.by_id[admin.admin_id] = replace(admin, password_hash=password_hash)
        return True


def _in_range(day: date, start: Optional[date], end: Optional[date]) -> bool:
    return (start is None or day >= start) and (end is None or day <= end)


class InMemoryAttendance:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.by_id: dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.by_id.get(int(attendance_id))

    def get_for_employee_and_date(self, emp_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self.by_id.values() if r.emp_id == emp_id and r.attendance_date == attendance_date),
            None,
        )

    def list_for_employee(self, emp_id: int, *, start_date=None, end_date=None):
        rows = [r for r in self.by_id.values() if r.emp_id == emp_id and _in_range(r.attendance_date, start_date, end_date)]
        return sorted(rows, key=lambda r: r.attendance_date)

    def create_in_time(self, *, emp_id, attendance_date, in_time, status, location=None, latitude=None, longitude=None, photo_ref=None) -> int:
        if self.get_for_employee_and_date(emp_id, attendance_date):
            raise ConflictError("In-time already recorded for today")
        self._id += 1
        self.by_id[self._id] = AttendanceRecord(
            attendance_id=self._id,
            emp_id=emp_id,
            attendance_date=attendance_date,
            in_time=in_time,
            out_time=None,
            status=status,
            in_location=location,
            in_latitude=latitude,
            in_longitude=longitude,
            in_picture=photo_ref,
        )
        return self._id

    def update_out_time(self, *, attendance_id, out_time, location=None, latitude=None, longitude=None, photo_ref=None) -> bool:
        rec = self.by_id.get(int(attendance_id))
        if not rec or rec.out_time is not None:
            return False
        self.by_id[rec.attendance_id] = replace(
            rec,
            out_time=out_time,
            out_location=location,
            out_latitude=latitude,
            out_longitude=longitude,
            out_picture=photo_ref,
        )
        return True

    def reject(self, *, attendance_id, remarks) -> bool:
        rec = self.by_id.get(int(attendance_id))
        if not rec:
            return False
        self.by_id[rec.attendance_id] = replace(rec, status=AttendanceStatus.REJECTED, remarks=remarks)
        return True

    def get_report_rows(self, *, start_date=None, end_date=None, emp_id=None):
        rows = [
            r
            for r in self.by_id.values()
            if _in_range(r.attendance_date, start_date, end_date) and (emp_id is None or r.emp_id == emp_id)
        ]
        rows.sort(key=lambda r: (r.attendance_date, r.emp_id))
        return [AttendanceReportRow(record=r, full_name=self._employees.by_id[r.emp_id].full_name) for r in rows]


class InMemoryActivities:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.by_id: dict[int, Activity] = {}
        self._id = 0

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        return self.by_id.get(int(activity_id))

    def create(self, *, emp_id, customer_name, remarks, activity_datetime, location=None, latitude=None, longitude=None) -> int:
        self._id += 1
        self.by_id[self._id] = Activity(
            activity_id=self._id,
            emp_id=emp_id,
            customer_name=customer_name,
            remarks=remarks,
            activity_datetime=activity_datetime,
            location=location,
            latitude=latitude,
            longitude=longitude,
        )
        return self._id

    def update(self, activity_id: int, changes: ActivityChanges) -> bool:
        act = self.by_id.get(int(activity_id))
        if not act:
            return False
        fields = {k: v for k, v in changes.__dict__.items() if v is not None}
        self.by_id[act.activity_id] = replace(act, **fields)
        return True

    def delete(self, activity_id: int) -> bool:
        return self.by_id.pop(int(activity_id), None) is not None

    def list_for_employee(self, emp_id: int, *, start_date=None, end_date=None):
        rows = [
            a
            for a in self.by_id.values()
            if a.emp_id == emp_id and _in_range(a.activity_datetime.date(), start_date, end_date)
        ]
        return sorted(rows, key=lambda a: a.activity_datetime)

    def get_report_rows(self, *, start_date=None, end_date=None, emp_id=None):
        rows = [
            a
            for a in self.by_id.values()
            if _in_range(a.activity_datetime.date(), start_date, end_date) and (emp_id is None or a.emp_id == emp_id)
        ]
        rows.sort(key=lambda a: a.activity_datetime)
        return [ActivityReportRow(activity=a, full_name=self._employees.by_id[a.emp_id].full_name) for a in rows]


class InMemoryLeaves:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.by_id: dict[int, LeaveApplication] = {}
        self._id = 0

    def create(self, *, emp_id: int, details: LeaveDetails) -> int:
        self._id += 1
        self.by_id[self._id] = LeaveApplication(
            leave_id=self._id,
            emp_id=emp_id,
            start_date=details.start_date,
            end_date=details.end_date,
            leave_type=details.leave_type,
            reason=details.reason,
            status=LeaveStatus.PENDING,
            leave_attachment=details.leave_attachment,
            created_at=datetime(2026, 3, 1, 9, 0, 0),
        )
        return self._id

    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        return self.by_id.get(int(leave_id))

    def update_pending(self, leave_id: int, details: LeaveDetails) -> bool:
        leave = self.by_id.get(int(leave_id))
        if not leave or leave.status != LeaveStatus.PENDING:
            return False
        self.by_id[leave.leave_id] = replace(leave, **details.__dict__)
        return True

    def delete(self, leave_id: int, *, only_pending: bool) -> bool:
        leave = self.by_id.get(int(leave_id))
        if not leave or (only_pending and leave.status != LeaveStatus.PENDING):
            return False
        del self.by_id[leave.leave_id]
        return True

    def decide(self, *, leave_id, status, approved_by, approved_on) -> bool:
        leave = self.by_id.get(int(leave_id))
        if not leave or leave.status != LeaveStatus.PENDING:
            return False
        self.by_id[leave.leave_id] = replace(leave, status=status, approved_by=approved_by, approved_on=approved_on)
        return True

    def _matches(self, leave: LeaveApplication, *, status=None, start_date=None, end_date=None, emp_id=None) -> bool:
        if emp_id is not None and leave.emp_id != emp_id:
            return False
        if status is not None and leave.status != status:
            return False
        if start_date is not None and leave.end_date < start_date:
            return False
        if end_date is not None and leave.start_date > end_date:
            return False
        return True

    def list_for_employee(self, emp_id: int, *, start_date=None, end_date=None):
        rows = [l for l in self.by_id.values() if self._matches(l, emp_id=emp_id, start_date=start_date, end_date=end_date)]
        return sorted(rows, key=lambda l: (l.start_date, l.leave_id))

    def get_report_rows(self, *, status=None, start_date=None, end_date=None, emp_id=None):
        rows = [
            l
            for l in self.by_id.values()
            if self._matches(l, status=status, start_date=start_date, end_date=end_date, emp_id=emp_id)
        ]
        rows.sort(key=lambda l: (l.start_date, l.leave_id))
        return [LeaveReportRow(leave=l, full_name=self._employees.by_id[l.emp_id].full_name) for l in rows]


class InMemoryBlobs:
    def __init__(self):
        self.blobs: dict[str, bytes] = {}
        self._id = 0

    def store(self, data: bytes, content_type: str, *, folder: str, filename: Optional[str] = None) -> str:
        self._id += 1
        ref = f"{folder}/{self._id}-{filename or 'blob'}"
        self.blobs[ref] = data
        return ref

    def delete(self, ref: str) -> bool:
        return self.blobs.pop(ref, None) is not None


class InMemoryResets:
    def __init__(self):
        self.by_id: dict[int, PasswordResetToken] = {}
        self._id = 0

    def create(self, *, user_id: int, role: Role, otp: str, expires_at: datetime) -> int:
        self._id += 1
        self.by_id[self._id] = PasswordResetToken(token_id=self._id, user_id=user_id, role=role, otp=otp, expires_at=expires_at)
        return self._id

    def find_valid(self, *, otp: str, role: Role, now: datetime) -> Optional[PasswordResetToken]:
        matches = [t for t in self.by_id.values() if t.otp == otp and t.role == role and t.expires_at > now]
        return max(matches, key=lambda t: t.token_id) if matches else None

    def delete(self, token_id: int) -> bool:
        return self.by_id.pop(int(token_id), None) is not None


class RecordingNotifier:
    def __init__(self):
        self.sent: list[dict] = []

    def send_reset_code(self, **kwargs) -> None:
        self.sent.append(kwargs)

    @property
    def last_otp(self) -> str:
        return self.sent[-1]["otp"]


class Fakes:
    def __init__(self):
        self.employees = InMemoryEmployees()
        self.admins = InMemoryAdmins()
        self.attendance = InMemoryAttendance(self.employees)
        self.activities = InMemoryActivities(self.employees)
        self.leaves = InMemoryLeaves(self.employees)
        self.resets = InMemoryResets()
        self.notifier = RecordingNotifier()
        self.blobs = InMemoryBlobs()

    def container(self):
        return assemble(
            employees_repo=self.employees,
            admins_repo=self.admins,
            attendance_repo=self.attendance,
            activities_repo=self.activities,
            leaves_repo=self.leaves,
            resets_repo=self.resets,
            blobs=self.blobs,
            notifier=self.notifier,
        )


@pytest.fixture()
def fakes() -> Fakes:
    return Fakes()


@pytest.fixture()
def container(fakes):
    return fakes.container()
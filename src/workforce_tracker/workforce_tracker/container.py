from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.repository import ActivityRepository
from .activities.service import ActivityService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_admin_repository import MySQLAdminRepository
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.mysql_password_reset_repository import MySQLPasswordResetRepository
from .employees.notifier import ResetCodeNotifier
from .employees.repository import AdminRepository, EmployeeRepository, PasswordResetRepository
from .employees.service import AuthService, EmployeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .reports.service import ReportService
from .storage.blob_store import BlobStore, LocalBlobStore


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    admins_repo: AdminRepository
    attendance_repo: AttendanceRepository
    activities_repo: ActivityRepository
    leaves_repo: LeaveRepository
    resets_repo: PasswordResetRepository
    blobs: BlobStore

    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    activity_service: ActivityService
    leave_service: LeaveService
    report_service: ReportService


def assemble(
    *,
    employees_repo: EmployeeRepository,
    admins_repo: AdminRepository,
    attendance_repo: AttendanceRepository,
    activities_repo: ActivityRepository,
    leaves_repo: LeaveRepository,
    resets_repo: PasswordResetRepository,
    blobs: BlobStore,
    notifier: Optional[ResetCodeNotifier] = None,
) -> Container:
    """Wire services on top of any set of repositories (MySQL in production, fakes in tests)."""

    leave_service = LeaveService(leaves_repo, employees_repo, blobs)
    return Container(
        employees_repo=employees_repo,
        admins_repo=admins_repo,
        attendance_repo=attendance_repo,
        activities_repo=activities_repo,
        leaves_repo=leaves_repo,
        resets_repo=resets_repo,
        blobs=blobs,
        auth_service=AuthService(employees_repo, admins_repo, resets_repo, notifier),
        employee_service=EmployeeService(employees_repo, blobs),
        attendance_service=AttendanceService(attendance_repo, employees_repo),
        activity_service=ActivityService(activities_repo, employees_repo),
        leave_service=leave_service,
        report_service=ReportService(attendance_repo, activities_repo, leave_service),
    )


def build_container(*, db_config: dict, upload_root: str | Path) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        employees_repo=MySQLEmployeeRepository(conn),
        admins_repo=MySQLAdminRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        activities_repo=MySQLActivityRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        resets_repo=MySQLPasswordResetRepository(conn),
        blobs=LocalBlobStore(upload_root),
    )

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.access import require_active_employee, require_admin, require_employee, require_owner
from ..common.datetime_utils import now_local, validate_range
from ..common.validators import require_non_empty
from ..core.actor import Actor
from ..core.enums import LeaveStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..storage.blob_store import BlobStore
from .model import LeaveApplication, LeaveDetails, LeaveReportRow
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveExport:
    rows: Sequence[LeaveReportRow]
    filters: dict = field(default_factory=dict)


def _parse_status(status: LeaveStatus | str | None) -> Optional[LeaveStatus]:
    if status is None or isinstance(status, LeaveStatus):
        return status
    if not isinstance(status, str):
        raise ValidationError("Leave status must be a string")
    value = status.strip().upper()
    if not value:
        return None
    try:
        return LeaveStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown leave status {status!r}")


class LeaveService:
    """Leave workflow: PENDING -> APPROVED | REJECTED, decisions are admin-only and terminal."""

    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository, blobs: BlobStore):
        self._leaves = leaves
        self._employees = employees
        self._blobs = blobs

    def apply_leave(
        self,
        actor: Actor,
        *,
        start_date: Optional[date],
        end_date: Optional[date],
        leave_type: str,
        reason: str,
        attachment_ref: Optional[str] = None,
    ) -> LeaveApplication:
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)

        details = self._validated_details(
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type,
            reason=reason,
            leave_attachment=attachment_ref,
        )
        leave_id = self._leaves.create(emp_id=emp_id, details=details)
        logger.info("Employee %s applied for leave %s (%s..%s)", emp_id, leave_id, details.start_date, details.end_date)
        return self._get(leave_id)

    def edit_leave_application(
        self,
        actor: Actor,
        leave_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        leave_type: Optional[str] = None,
        reason: Optional[str] = None,
        attachment_ref: Optional[str] = None,
    ) -> LeaveApplication:
        leave = self._get_pending_owned(actor, leave_id)

        details = self._validated_details(
            start_date=start_date or leave.start_date,
            end_date=end_date or leave.end_date,
            leave_type=leave_type if leave_type is not None else leave.leave_type,
            reason=reason if reason is not None else leave.reason,
            leave_attachment=attachment_ref or leave.leave_attachment,
        )

        # Old attachment goes first; this is not atomic with the row update.
        if attachment_ref and leave.leave_attachment and attachment_ref != leave.leave_attachment:
            self._release(leave.leave_attachment)

        if not self._leaves.update_pending(leave.leave_id, details):
            raise AuthorizationError("Leave application can no longer be edited")
        return self._get(leave.leave_id)

    def delete_leave_application(self, actor: Actor, leave_id: int) -> None:
        leave = self._get_pending_owned(actor, leave_id)
        if leave.leave_attachment:
            self._release(leave.leave_attachment)
        if not self._leaves.delete(leave.leave_id, only_pending=True):
            raise AuthorizationError("Leave application can no longer be deleted")

    def admin_delete_leave_application(self, actor: Actor, leave_id: int) -> None:
        admin = require_admin(actor)
        leave = self._get(int(leave_id))
        if leave.leave_attachment:
            self._release(leave.leave_attachment)
        if not self._leaves.delete(leave.leave_id, only_pending=False):
            raise NotFoundError("Leave application not found")
        logger.info("Leave %s deleted by admin %s", leave.leave_id, admin.admin_id)

    def update_leave_status(
        self,
        actor: Actor,
        leave_id: int,
        *,
        status: LeaveStatus | str,
        now: Optional[datetime] = None,
    ) -> LeaveApplication:
        admin = require_admin(actor)
        new_status = _parse_status(status)
        if new_status not in {LeaveStatus.APPROVED, LeaveStatus.REJECTED}:
            raise ValidationError("Status must be APPROVED or REJECTED")

        leave = self._get(int(leave_id))
        if leave.status.is_decided:
            raise ConflictError(f"Leave application is already {leave.status.value}")

        decided = self._leaves.decide(
            leave_id=leave.leave_id,
            status=new_status,
            approved_by=admin.admin_id,
            approved_on=(now or now_local()).replace(microsecond=0),
        )
        if not decided:
            raise ConflictError("Leave application was decided by another request")

        logger.info("Leave %s %s by admin %s", leave.leave_id, new_status.value, admin.admin_id)
        return self._get(leave.leave_id)

    def get_employee_leaves(
        self,
        actor: Actor,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[LeaveApplication]:
        validate_range(start, end)
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)
        return self._leaves.list_for_employee(emp_id, start_date=start, end_date=end)

    def get_by_id(self, actor: Actor, leave_id: int) -> LeaveApplication:
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)

        leave = self._leaves.get_by_id(int(leave_id))
        if not leave or leave.emp_id != emp_id:
            raise NotFoundError("Leave application not found")
        return leave

    def get_all_leave_applications(
        self,
        actor: Actor,
        *,
        status: LeaveStatus | str | None = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> Sequence[LeaveReportRow]:
        require_admin(actor)
        validate_range(start, end)
        return self._leaves.get_report_rows(
            status=_parse_status(status),
            start_date=start,
            end_date=end,
            emp_id=emp_id,
        )

    def download_leave_applications(
        self,
        actor: Actor,
        *,
        status: LeaveStatus | str | None = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> LeaveExport:
        parsed = _parse_status(status)
        rows = self.get_all_leave_applications(actor, status=parsed, start=start, end=end)
        filters = {
            "status": parsed.value if parsed else "ALL",
            "start_date": start.isoformat() if start else "-",
            "end_date": end.isoformat() if end else "-",
        }
        return LeaveExport(rows=rows, filters=filters)

    def _validated_details(
        self,
        *,
        start_date: Optional[date],
        end_date: Optional[date],
        leave_type: Optional[str],
        reason: Optional[str],
        leave_attachment: Optional[str],
    ) -> LeaveDetails:
        if start_date is None or end_date is None:
            raise ValidationError("Start date and end date are required")
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        return LeaveDetails(
            start_date=start_date,
            end_date=end_date,
            leave_type=require_non_empty(leave_type, "Leave type").upper(),
            reason=require_non_empty(reason, "Reason"),
            leave_attachment=leave_attachment,
        )

    def _get_pending_owned(self, actor: Actor, leave_id: int) -> LeaveApplication:
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)

        leave = self._get(int(leave_id))
        require_owner(leave.emp_id, emp_id, "leave applications")
        if leave.status != LeaveStatus.PENDING:
            raise AuthorizationError(f"Leave application is already {leave.status.value}")
        return leave

    def _get(self, leave_id: int) -> LeaveApplication:
        leave = self._leaves.get_by_id(leave_id)
        if not leave:
            raise NotFoundError("Leave application not found")
        return leave

    def _release(self, ref: str) -> None:
        if not self._blobs.delete(ref):
            logger.warning("Leave attachment %s was already gone", ref)

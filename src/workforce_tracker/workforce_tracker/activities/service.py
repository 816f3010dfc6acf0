from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.access import require_active_employee, require_admin, require_employee, require_owner
from ..common.datetime_utils import now_local, validate_range
from ..common.validators import optional_text, require_non_empty
from ..core.actor import Actor, AdminActor
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import Activity, ActivityChanges, ActivityReportRow
from .repository import ActivityRepository

logger = logging.getLogger(__name__)


class ActivityService:
    """Append-only visit log; employees touch only their own entries, admins any."""

    def __init__(self, activities: ActivityRepository, employees: EmployeeRepository):
        self._activities = activities
        self._employees = employees

    def submit(
        self,
        actor: Actor,
        *,
        customer_name: str,
        remarks: str,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Activity:
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)

        activity_id = self._activities.create(
            emp_id=emp_id,
            customer_name=require_non_empty(customer_name, "Customer name"),
            remarks=require_non_empty(remarks, "Remarks"),
            activity_datetime=(now or now_local()).replace(microsecond=0),
            location=optional_text(location),
            latitude=latitude,
            longitude=longitude,
        )
        return self._get(activity_id)

    def edit(
        self,
        actor: Actor,
        activity_id: int,
        *,
        customer_name: Optional[str] = None,
        remarks: Optional[str] = None,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> Activity:
        activity = self._get_for_mutation(actor, activity_id)

        changes = ActivityChanges(
            customer_name=require_non_empty(customer_name, "Customer name") if customer_name is not None else None,
            remarks=require_non_empty(remarks, "Remarks") if remarks is not None else None,
            location=optional_text(location),
            latitude=latitude,
            longitude=longitude,
        )
        if changes.is_empty():
            raise ValidationError("Nothing to update")

        self._activities.update(activity.activity_id, changes)
        return self._get(activity.activity_id)

    def delete(self, actor: Actor, activity_id: int) -> None:
        activity = self._get_for_mutation(actor, activity_id)
        if not self._activities.delete(activity.activity_id):
            raise NotFoundError("Activity not found")
        if isinstance(actor, AdminActor):
            logger.info("Activity %s deleted by admin %s", activity.activity_id, actor.admin_id)

    def list_by_employee(
        self,
        actor: Actor,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Activity]:
        validate_range(start, end)
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)
        return self._activities.list_for_employee(emp_id, start_date=start, end_date=end)

    def get_by_id(self, actor: Actor, activity_id: int) -> Activity:
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)

        activity = self._activities.get_by_id(int(activity_id))
        # Other employees' entries look exactly like missing ones.
        if not activity or activity.emp_id != emp_id:
            raise NotFoundError("Activity not found")
        return activity

    def list_reports(
        self,
        actor: Actor,
        *,
        day: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> Sequence[ActivityReportRow]:
        require_admin(actor)
        if day is not None:
            if start is not None or end is not None:
                raise ValidationError("Use either date or start_date/end_date, not both")
            start = end = day
        validate_range(start, end)
        return self._activities.get_report_rows(start_date=start, end_date=end, emp_id=emp_id)

    def _get_for_mutation(self, actor: Actor, activity_id: int) -> Activity:
        if not isinstance(actor, AdminActor):
            emp_id = require_employee(actor).emp_id
            require_active_employee(self._employees, emp_id)

        activity = self._activities.get_by_id(int(activity_id))
        if not activity:
            raise NotFoundError("Activity not found")
        if not isinstance(actor, AdminActor):
            require_owner(activity.emp_id, actor.emp_id, "activity reports")
        return activity

    def _get(self, activity_id: int) -> Activity:
        activity = self._activities.get_by_id(activity_id)
        if not activity:
            raise NotFoundError("Activity not found")
        return activity

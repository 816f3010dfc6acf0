from __future__ import annotations

from datetime import date, datetime

import pytest

from src.workforce_tracker.workforce_tracker.core.actor import AdminActor, EmployeeActor
from src.workforce_tracker.workforce_tracker.core.enums import LeaveStatus
from src.workforce_tracker.workforce_tracker.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

ADMIN = AdminActor(1)


@pytest.fixture()
def svc(container):
    return container.leave_service


@pytest.fixture()
def emp(fakes):
    return EmployeeActor(fakes.employees.add("Hoa", "hoa", emp_id=42).emp_id)


def _apply(svc, actor, start=date(2026, 4, 1), end=date(2026, 4, 2), **kw):
    return svc.apply_leave(actor, start_date=start, end_date=end, leave_type=kw.pop("leave_type", "sick"), reason=kw.pop("reason", "Fever"), **kw)


def test_sick_leave_approved_then_locked(svc, emp):
    leave = _apply(svc, emp)
    assert leave.status == LeaveStatus.PENDING
    assert leave.leave_type == "SICK"
    assert leave.days == 2

    decided = svc.update_leave_status(ADMIN, leave.leave_id, status="approved", now=datetime(2026, 3, 30, 10, 0, 5, 123))
    assert decided.status == LeaveStatus.APPROVED
    assert decided.approved_by == ADMIN.admin_id
    assert decided.approved_on == datetime(2026, 3, 30, 10, 0, 5)

    with pytest.raises(AuthorizationError):
        svc.edit_leave_application(emp, leave.leave_id, reason="Still sick")
    with pytest.raises(AuthorizationError):
        svc.delete_leave_application(emp, leave.leave_id)


def test_pending_leave_edit_by_owner(svc, emp):
    leave = _apply(svc, emp)

    edited = svc.edit_leave_application(emp, leave.leave_id, end_date=date(2026, 4, 5), reason="Surgery")

    assert edited.end_date == date(2026, 4, 5)
    assert edited.reason == "Surgery"
    assert edited.start_date == leave.start_date


def test_edit_by_other_employee_forbidden(fakes, svc, emp):
    leave = _apply(svc, emp)
    other = EmployeeActor(fakes.employees.add("Tuan", "tuan").emp_id)

    with pytest.raises(AuthorizationError):
        svc.edit_leave_application(other, leave.leave_id, reason="mine now")
    with pytest.raises(AuthorizationError):
        svc.delete_leave_application(other, leave.leave_id)


def test_employee_cannot_decide_in_any_state(svc, emp):
    leave = _apply(svc, emp)

    with pytest.raises(AuthorizationError):
        svc.update_leave_status(emp, leave.leave_id, status="APPROVED")

    svc.update_leave_status(ADMIN, leave.leave_id, status="REJECTED")
    with pytest.raises(AuthorizationError):
        svc.update_leave_status(emp, leave.leave_id, status="APPROVED")


def test_decision_is_terminal(svc, emp):
    leave = _apply(svc, emp)
    svc.update_leave_status(ADMIN, leave.leave_id, status="REJECTED")

    with pytest.raises(ConflictError):
        svc.update_leave_status(ADMIN, leave.leave_id, status="APPROVED")


@pytest.mark.parametrize("status", ["PENDING", "maybe", ""])
def test_decision_status_must_be_final(svc, emp, status):
    leave = _apply(svc, emp)

    with pytest.raises(ValidationError):
        svc.update_leave_status(ADMIN, leave.leave_id, status=status)


def test_end_before_start_rejected(svc, emp):
    with pytest.raises(ValidationError):
        _apply(svc, emp, start=date(2026, 4, 3), end=date(2026, 4, 1))


def test_missing_reason_rejected(svc, emp):
    with pytest.raises(ValidationError):
        _apply(svc, emp, reason="   ")


def test_inactive_employee_cannot_apply(fakes, svc):
    emp = EmployeeActor(fakes.employees.add("Gone", "gone", is_active=False).emp_id)

    with pytest.raises(AuthorizationError):
        _apply(svc, emp)
    assert fakes.leaves.by_id == {}


def test_replacing_attachment_releases_old_blob(fakes, svc, emp):
    old_ref = fakes.blobs.store(b"%PDF-old", "application/pdf", folder="leave_attachments", filename="a.pdf")
    new_ref = fakes.blobs.store(b"%PDF-new", "application/pdf", folder="leave_attachments", filename="b.pdf")
    leave = _apply(svc, emp, attachment_ref=old_ref)

    edited = svc.edit_leave_application(emp, leave.leave_id, attachment_ref=new_ref)

    assert edited.leave_attachment == new_ref
    assert old_ref not in fakes.blobs.blobs
    assert new_ref in fakes.blobs.blobs


def test_delete_pending_releases_attachment(fakes, svc, emp):
    ref = fakes.blobs.store(b"img", "image/png", folder="leave_attachments", filename="x.png")
    leave = _apply(svc, emp, attachment_ref=ref)

    svc.delete_leave_application(emp, leave.leave_id)

    assert fakes.leaves.by_id == {}
    assert ref not in fakes.blobs.blobs


def test_admin_may_delete_decided_leave(fakes, svc, emp):
    leave = _apply(svc, emp)
    svc.update_leave_status(ADMIN, leave.leave_id, status="APPROVED")

    svc.admin_delete_leave_application(ADMIN, leave.leave_id)

    assert fakes.leaves.by_id == {}
    with pytest.raises(NotFoundError):
        svc.admin_delete_leave_application(ADMIN, leave.leave_id)


def test_get_by_id_hides_other_employees_leaves(fakes, svc, emp):
    leave = _apply(svc, emp)
    other = EmployeeActor(fakes.employees.add("Tuan", "tuan").emp_id)

    assert svc.get_by_id(emp, leave.leave_id).leave_id == leave.leave_id
    with pytest.raises(NotFoundError):
        svc.get_by_id(other, leave.leave_id)


def test_range_filter_uses_overlap(svc, emp):
    _apply(svc, emp, start=date(2026, 4, 1), end=date(2026, 4, 3))
    _apply(svc, emp, start=date(2026, 4, 10), end=date(2026, 4, 12))

    hits = svc.get_employee_leaves(emp, start=date(2026, 4, 3), end=date(2026, 4, 9))

    assert [l.start_date for l in hits] == [date(2026, 4, 1)]
    with pytest.raises(ValidationError):
        svc.get_employee_leaves(emp, start=date(2026, 4, 9), end=date(2026, 4, 3))


def test_admin_listing_by_status(fakes, svc, emp):
    first = _apply(svc, emp)
    _apply(svc, emp, start=date(2026, 5, 1), end=date(2026, 5, 1))
    svc.update_leave_status(ADMIN, first.leave_id, status="APPROVED")

    pending = svc.get_all_leave_applications(ADMIN, status="pending")

    assert [r.leave.start_date for r in pending] == [date(2026, 5, 1)]
    assert pending[0].full_name == "Hoa"
    with pytest.raises(ValidationError):
        svc.get_all_leave_applications(ADMIN, status="SOMETIMES")


def test_download_reports_filters(svc, emp):
    _apply(svc, emp)

    export = svc.download_leave_applications(ADMIN, start=date(2026, 4, 1))

    assert export.filters == {"status": "ALL", "start_date": "2026-04-01", "end_date": "-"}
    assert len(export.rows) == 1

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.workforce_tracker.workforce_tracker.core.actor import AdminActor, EmployeeActor
from src.workforce_tracker.workforce_tracker.core.enums import AttendanceStatus
from src.workforce_tracker.workforce_tracker.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.workforce_tracker.workforce_tracker.attendance.service import month_bounds

DAY = date(2026, 3, 2)


def _now(hh: int, mm: int = 0) -> datetime:
    return datetime.combine(DAY, time(hh, mm))


@pytest.fixture()
def svc(container):
    return container.attendance_service


@pytest.fixture()
def emp(fakes):
    return EmployeeActor(fakes.employees.add("Lan", "lan", emp_id=7).emp_id)


def test_second_in_time_same_day_conflicts(svc, emp):
    rec = svc.record_in_time(emp, now=_now(9), location="HQ", latitude=10.77, longitude=106.7)

    assert rec.in_time == time(9, 0)
    assert rec.attendance_date == DAY
    assert rec.status == AttendanceStatus.APPROVED
    assert rec.in_latitude == pytest.approx(10.77)

    with pytest.raises(ConflictError):
        svc.record_in_time(emp, now=_now(9, 5))


def test_explicit_in_time_overrides_clock(svc, emp):
    rec = svc.record_in_time(emp, in_time=time(8, 45), now=_now(9))

    assert rec.in_time == time(8, 45)


def test_check_status_follows_the_day(svc, emp):
    assert svc.check_in_status(emp, now=_now(8)) is False

    svc.record_in_time(emp, now=_now(9))
    assert svc.check_in_status(emp, now=_now(12)) is True
    assert svc.check_out_status(emp, now=_now(12)) is False

    svc.record_out_time(emp, now=_now(18))
    assert svc.check_out_status(emp, now=_now(18, 1)) is True

    # Next morning starts clean.
    tomorrow = datetime(2026, 3, 3, 8, 0)
    assert svc.check_in_status(emp, now=tomorrow) is False


def test_out_time_without_in_time_is_not_found(svc, emp):
    with pytest.raises(NotFoundError):
        svc.record_out_time(emp, now=_now(18))


def test_second_out_time_conflicts(svc, emp):
    svc.record_in_time(emp, now=_now(9))
    first = svc.record_out_time(emp, now=_now(17, 30), location="Client site")

    assert first.out_time == time(17, 30)
    assert first.out_location == "Client site"

    with pytest.raises(ConflictError):
        svc.record_out_time(emp, now=_now(19))
    assert svc.get_daily(emp, now=_now(19))[0].out_time == time(17, 30)


def test_out_time_before_in_time_rejected(svc, emp):
    svc.record_in_time(emp, now=_now(9))

    with pytest.raises(ValidationError):
        svc.record_out_time(emp, out_time=time(8, 0), now=_now(10))


def test_inactive_employee_cannot_check_in(fakes, svc):
    emp = EmployeeActor(fakes.employees.add("Old", "old", is_active=False).emp_id)

    with pytest.raises(AuthorizationError):
        svc.record_in_time(emp, now=_now(9))
    assert fakes.attendance.by_id == {}


def test_admin_cannot_punch(svc):
    with pytest.raises(AuthorizationError):
        svc.record_in_time(AdminActor(1), now=_now(9))


def test_range_rejects_inverted_bounds(svc, emp):
    with pytest.raises(ValidationError):
        svc.get_range(emp, start=date(2026, 3, 5), end=date(2026, 3, 1))


def test_range_with_one_open_bound(fakes, svc, emp):
    for d in (1, 2, 3):
        svc.record_in_time(emp, now=datetime(2026, 3, d, 9, 0))

    since_second = svc.get_range(emp, start=date(2026, 3, 2))
    until_second = svc.get_range(emp, end=date(2026, 3, 2))

    assert [r.attendance_date.day for r in since_second] == [2, 3]
    assert [r.attendance_date.day for r in until_second] == [1, 2]


def test_reject_marks_row_and_keeps_it(fakes, svc, emp):
    rec = svc.record_in_time(emp, now=_now(9))

    rejected = svc.reject_attendance(AdminActor(1), attendance_id=rec.attendance_id, remarks="  GPS spoofed ")

    assert rejected.status == AttendanceStatus.REJECTED
    assert rejected.remarks == "GPS spoofed"
    assert len(fakes.attendance.by_id) == 1


def test_reject_unknown_attendance(svc):
    with pytest.raises(NotFoundError):
        svc.reject_attendance(AdminActor(1), attendance_id=999)


def test_employee_cannot_reject(svc, emp):
    rec = svc.record_in_time(emp, now=_now(9))

    with pytest.raises(AuthorizationError):
        svc.reject_attendance(emp, attendance_id=rec.attendance_id)


def test_monthly_requires_month_and_year(svc):
    with pytest.raises(ValidationError):
        svc.monthly_for_all(AdminActor(1), month=3, year=None)


def test_monthly_lists_only_that_month(fakes, svc, emp):
    svc.record_in_time(emp, now=datetime(2026, 2, 28, 9, 0))
    svc.record_in_time(emp, now=datetime(2026, 3, 31, 9, 0))

    rows = svc.monthly_for_all(AdminActor(1), month=3, year=2026)

    assert [r.record.attendance_date for r in rows] == [date(2026, 3, 31)]
    assert rows[0].full_name == "Lan"


def test_month_bounds_handles_leap_february():
    assert month_bounds(2, 2028) == (date(2028, 2, 1), date(2028, 2, 29))
    with pytest.raises(ValidationError):
        month_bounds(13, 2026)


def test_employee_report_unknown_employee(svc):
    with pytest.raises(NotFoundError):
        svc.employee_report(AdminActor(1), 404)


def test_daily_for_all_defaults_to_given_day(fakes, svc, emp):
    other = EmployeeActor(fakes.employees.add("Minh", "minh").emp_id)
    svc.record_in_time(emp, now=_now(9))
    svc.record_in_time(other, now=_now(9, 10))

    rows = svc.daily_for_all(AdminActor(1), day=DAY)

    assert {r.record.emp_id for r in rows} == {emp.emp_id, other.emp_id}


def test_range_for_all_filters_employee(fakes, svc, emp):
    other = EmployeeActor(fakes.employees.add("Minh", "minh").emp_id)
    svc.record_in_time(emp, now=_now(9))
    svc.record_in_time(other, now=_now(9))

    rows = svc.range_for_all(AdminActor(1), start=DAY, end=DAY, emp_id=other.emp_id)

    assert [r.full_name for r in rows] == ["Minh"]

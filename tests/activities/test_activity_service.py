from __future__ import annotations

from datetime import date, datetime

import pytest

from src.workforce_tracker.workforce_tracker.core.actor import AdminActor, EmployeeActor
from src.workforce_tracker.workforce_tracker.core.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.fixture()
def svc(container):
    return container.activity_service


@pytest.fixture()
def emp(fakes):
    return EmployeeActor(fakes.employees.add("Khoa", "khoa").emp_id)


@pytest.fixture()
def other(fakes):
    return EmployeeActor(fakes.employees.add("Vy", "vy").emp_id)


def _submit(svc, actor, when=datetime(2026, 3, 2, 10, 15, 30, 999), **kw):
    return svc.submit(actor, customer_name=kw.pop("customer_name", "Acme"), remarks=kw.pop("remarks", "Demo done"), now=when, **kw)


def test_submit_stamps_time_and_location(svc, emp):
    act = _submit(svc, emp, location=" Warehouse 3 ", latitude=21.0, longitude=105.8)

    assert act.activity_datetime == datetime(2026, 3, 2, 10, 15, 30)
    assert act.location == "Warehouse 3"
    assert act.latitude == 21.0


@pytest.mark.parametrize("field", ["customer_name", "remarks"])
def test_submit_requires_text(svc, emp, field):
    with pytest.raises(ValidationError):
        _submit(svc, emp, **{field: "  "})


def test_inactive_employee_cannot_submit(fakes, svc):
    emp = EmployeeActor(fakes.employees.add("Idle", "idle", is_active=False).emp_id)

    with pytest.raises(AuthorizationError):
        _submit(svc, emp)
    assert fakes.activities.by_id == {}


def test_owner_edits_own_entry(svc, emp):
    act = _submit(svc, emp)

    edited = svc.edit(emp, act.activity_id, remarks="Signed contract")

    assert edited.remarks == "Signed contract"
    assert edited.customer_name == "Acme"


def test_edit_needs_some_change(svc, emp):
    act = _submit(svc, emp)

    with pytest.raises(ValidationError):
        svc.edit(emp, act.activity_id)


def test_other_employee_cannot_edit_or_delete(svc, emp, other):
    act = _submit(svc, emp)

    with pytest.raises(AuthorizationError):
        svc.edit(other, act.activity_id, remarks="x")
    with pytest.raises(AuthorizationError):
        svc.delete(other, act.activity_id)


def test_admin_edits_and_deletes_any_entry(fakes, svc, emp):
    act = _submit(svc, emp)

    svc.edit(AdminActor(1), act.activity_id, customer_name="Acme Ltd")
    assert fakes.activities.by_id[act.activity_id].customer_name == "Acme Ltd"

    svc.delete(AdminActor(1), act.activity_id)
    assert fakes.activities.by_id == {}


def test_delete_unknown_is_not_found(svc, emp):
    with pytest.raises(NotFoundError):
        svc.delete(emp, 999)


def test_get_by_id_does_not_leak_other_entries(svc, emp, other):
    act = _submit(svc, emp)

    with pytest.raises(NotFoundError):
        svc.get_by_id(other, act.activity_id)


def test_list_by_employee_range_on_calendar_day(svc, emp, other):
    _submit(svc, emp, when=datetime(2026, 3, 1, 23, 59))
    _submit(svc, emp, when=datetime(2026, 3, 2, 8, 0))
    _submit(svc, other, when=datetime(2026, 3, 2, 9, 0))

    rows = svc.list_by_employee(emp, start=date(2026, 3, 2), end=date(2026, 3, 2))

    assert [a.activity_datetime.hour for a in rows] == [8]
    with pytest.raises(ValidationError):
        svc.list_by_employee(emp, start=date(2026, 3, 3), end=date(2026, 3, 2))


def test_list_reports_for_day_is_admin_only(svc, emp, other):
    _submit(svc, emp, when=datetime(2026, 3, 2, 8, 0))
    _submit(svc, other, when=datetime(2026, 3, 2, 9, 0))

    rows = svc.list_reports(AdminActor(1), day=date(2026, 3, 2))

    assert [r.full_name for r in rows] == ["Khoa", "Vy"]
    with pytest.raises(AuthorizationError):
        svc.list_reports(emp)


def test_list_reports_rejects_day_with_range(svc):
    with pytest.raises(ValidationError):
        svc.list_reports(AdminActor(1), day=date(2026, 3, 2), start=date(2026, 3, 1))
    with pytest.raises(ValidationError):
        svc.list_reports(AdminActor(1), day=date(2026, 3, 2), end=date(2026, 3, 5))

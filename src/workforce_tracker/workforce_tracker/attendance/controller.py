from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_clock_time, parse_optional_date
from ..common.http import admin_required, csv_response, current_actor, employee_required, payload, query_date, query_int
from ..common.validators import optional_latitude, optional_longitude
from ..container import Container
from ..reports.export import rows_to_csv
from ..reports.service import ATTENDANCE_FIELDS
from ..storage.uploads import SELFIE_POLICY, staged_upload


def register(app: Flask, container: Container) -> None:
    def _punch_fields(prefix: str) -> dict:
        data = payload()
        return {
            "location": data.get(f"{prefix}_location"),
            "latitude": optional_latitude(data.get(f"{prefix}_latitude")),
            "longitude": optional_longitude(data.get(f"{prefix}_longitude")),
            "clock": parse_clock_time(data.get(f"{prefix}_time")),
        }

    @app.route("/api/attendance/in", methods=["POST"], endpoint="attendance_in")
    @employee_required
    def attendance_in():
        fields = _punch_fields("in")
        with staged_upload(request.files.get("in_picture"), SELFIE_POLICY, container.blobs) as ref:
            record = container.attendance_service.record_in_time(
                current_actor(),
                in_time=fields["clock"],
                location=fields["location"],
                latitude=fields["latitude"],
                longitude=fields["longitude"],
                photo_ref=ref,
            )
        return jsonify({"message": "In-time recorded", "attendance": record.to_dict()}), 201

    @app.route("/api/attendance/out", methods=["POST"], endpoint="attendance_out")
    @employee_required
    def attendance_out():
        fields = _punch_fields("out")
        with staged_upload(request.files.get("out_picture"), SELFIE_POLICY, container.blobs) as ref:
            record = container.attendance_service.record_out_time(
                current_actor(),
                out_time=fields["clock"],
                location=fields["location"],
                latitude=fields["latitude"],
                longitude=fields["longitude"],
                photo_ref=ref,
            )
        return jsonify({"message": "Out-time recorded", "attendance": record.to_dict()})

    @app.route("/api/attendance/daily", methods=["GET"], endpoint="attendance_daily")
    @employee_required
    def attendance_daily():
        records = container.attendance_service.get_daily(current_actor())
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/attendance/range", methods=["GET"], endpoint="attendance_range")
    @employee_required
    def attendance_range():
        records = container.attendance_service.get_range(
            current_actor(),
            start=query_date("start_date"),
            end=query_date("end_date"),
        )
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/attendance/check/in", methods=["GET"], endpoint="attendance_check_in")
    @employee_required
    def attendance_check_in():
        return jsonify({"checkedIn": container.attendance_service.check_in_status(current_actor())})

    @app.route("/api/attendance/check/out", methods=["GET"], endpoint="attendance_check_out")
    @employee_required
    def attendance_check_out():
        return jsonify({"checkedOut": container.attendance_service.check_out_status(current_actor())})

    # Admin
    @app.route("/api/admin/attendance/daily", methods=["GET"], endpoint="admin_attendance_daily")
    @admin_required
    def admin_attendance_daily():
        rows = container.attendance_service.daily_for_all(current_actor(), day=query_date("date"))
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/admin/attendance/<int:attendance_id>/reject", methods=["PUT"], endpoint="admin_attendance_reject")
    @admin_required
    def admin_attendance_reject(attendance_id: int):
        record = container.attendance_service.reject_attendance(
            current_actor(),
            attendance_id=attendance_id,
            remarks=payload().get("remarks"),
        )
        return jsonify({"message": "Attendance rejected", "attendance": record.to_dict()})

    @app.route("/api/admin/attendance/monthly", methods=["GET"], endpoint="admin_attendance_monthly")
    @admin_required
    def admin_attendance_monthly():
        rows = container.attendance_service.monthly_for_all(
            current_actor(),
            month=query_int("month"),
            year=query_int("year"),
        )
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/admin/attendance/range", methods=["GET"], endpoint="admin_attendance_range")
    @admin_required
    def admin_attendance_range():
        rows = container.attendance_service.range_for_all(
            current_actor(),
            start=query_date("start_date"),
            end=query_date("end_date"),
            emp_id=query_int("emp_id"),
        )
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/admin/attendance/employee/<int:emp_id>", methods=["GET"], endpoint="admin_attendance_employee")
    @admin_required
    def admin_attendance_employee(emp_id: int):
        records = container.attendance_service.employee_report(
            current_actor(),
            emp_id,
            start=query_date("start_date"),
            end=query_date("end_date"),
        )
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/admin/attendance/daily/download", methods=["GET"], endpoint="admin_attendance_daily_download")
    @admin_required
    def admin_attendance_daily_download():
        day = parse_optional_date(request.args.get("date"))
        report = container.report_service.daily_attendance_report(current_actor(), day=day)
        filename = f"attendance_{report.filters['date'].replace('-', '')}.csv"
        return csv_response(app, rows_to_csv(ATTENDANCE_FIELDS, report.rows, filters=report.filters), filename)

    @app.route("/api/admin/attendance/range/download", methods=["GET"], endpoint="admin_attendance_range_download")
    @admin_required
    def admin_attendance_range_download():
        start = query_date("start_date")
        end = query_date("end_date")
        report = container.report_service.attendance_report(
            current_actor(),
            start=start,
            end=end,
            emp_id=query_int("emp_id"),
        )
        span = f"{start.strftime('%Y%m%d') if start else 'begin'}_{end.strftime('%Y%m%d') if end else 'now'}"
        return csv_response(
            app,
            rows_to_csv(ATTENDANCE_FIELDS, report.rows, filters=report.filters),
            f"attendance_report_{span}.csv",
        )

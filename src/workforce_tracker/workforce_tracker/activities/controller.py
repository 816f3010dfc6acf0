from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, csv_response, current_actor, employee_required, payload, query_date, query_int
from ..common.validators import optional_latitude, optional_longitude
from ..container import Container
from ..reports.export import rows_to_csv
from ..reports.service import ACTIVITY_FIELDS


def register(app: Flask, container: Container) -> None:
    def _changes() -> dict:
        data = payload()
        return {
            "customer_name": data.get("customer_name"),
            "remarks": data.get("remarks"),
            "location": data.get("location"),
            "latitude": optional_latitude(data.get("latitude")),
            "longitude": optional_longitude(data.get("longitude")),
        }

    @app.route("/api/activity", methods=["POST"], endpoint="activity_submit")
    @employee_required
    def activity_submit():
        fields = _changes()
        activity = container.activity_service.submit(
            current_actor(),
            customer_name=fields["customer_name"] or "",
            remarks=fields["remarks"] or "",
            location=fields["location"],
            latitude=fields["latitude"],
            longitude=fields["longitude"],
        )
        return jsonify({"activity_id": activity.activity_id, "message": "Activity report submitted"}), 201

    @app.route("/api/activity/<int:activity_id>", methods=["PUT"], endpoint="activity_edit")
    @employee_required
    def activity_edit(activity_id: int):
        activity = container.activity_service.edit(current_actor(), activity_id, **_changes())
        return jsonify({"message": "Activity report updated", "activity": activity.to_dict()})

    @app.route("/api/activity/<int:activity_id>", methods=["DELETE"], endpoint="activity_delete")
    @employee_required
    def activity_delete(activity_id: int):
        container.activity_service.delete(current_actor(), activity_id)
        return jsonify({"message": "Activity report deleted"})

    @app.route("/api/employee/activity", methods=["GET"], endpoint="activity_list")
    @employee_required
    def activity_list():
        activities = container.activity_service.list_by_employee(current_actor())
        return jsonify([a.to_dict() for a in activities])

    @app.route("/api/employee/activity/range", methods=["GET"], endpoint="activity_range")
    @employee_required
    def activity_range():
        activities = container.activity_service.list_by_employee(
            current_actor(),
            start=query_date("start_date"),
            end=query_date("end_date"),
        )
        return jsonify([a.to_dict() for a in activities])

    @app.route("/api/employee/activity/<int:activity_id>", methods=["GET"], endpoint="activity_get")
    @employee_required
    def activity_get(activity_id: int):
        return jsonify(container.activity_service.get_by_id(current_actor(), activity_id).to_dict())

    # Admin
    @app.route("/api/admin/activity", methods=["GET"], endpoint="admin_activity_list")
    @admin_required
    def admin_activity_list():
        rows = container.activity_service.list_reports(
            current_actor(),
            day=query_date("date"),
            start=query_date("start_date"),
            end=query_date("end_date"),
            emp_id=query_int("emp_id"),
        )
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/admin/activity/download", methods=["GET"], endpoint="admin_activity_download")
    @admin_required
    def admin_activity_download():
        day = query_date("date")
        report = container.report_service.activity_report(current_actor(), day=day)
        filename = f"activity_reports_{day.strftime('%Y%m%d') if day else 'all'}.csv"
        return csv_response(app, rows_to_csv(ACTIVITY_FIELDS, report.rows, filters=report.filters), filename)

    @app.route("/api/admin/activity/<int:activity_id>", methods=["PUT"], endpoint="admin_activity_edit")
    @admin_required
    def admin_activity_edit(activity_id: int):
        activity = container.activity_service.edit(current_actor(), activity_id, **_changes())
        return jsonify({"message": "Activity report updated", "activity": activity.to_dict()})

    @app.route("/api/admin/activity/<int:activity_id>", methods=["DELETE"], endpoint="admin_activity_delete")
    @admin_required
    def admin_activity_delete(activity_id: int):
        container.activity_service.delete(current_actor(), activity_id)
        return jsonify({"message": "Activity report deleted"})

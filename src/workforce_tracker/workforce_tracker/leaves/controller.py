from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import admin_required, csv_response, current_actor, employee_required, payload, query_date
from ..container import Container
from ..reports.export import rows_to_csv
from ..reports.service import LEAVE_FIELDS
from ..storage.uploads import LEAVE_ATTACHMENT_POLICY, staged_upload


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leave", methods=["POST"], endpoint="leave_apply")
    @employee_required
    def leave_apply():
        data = payload()
        with staged_upload(request.files.get("leave_attachment"), LEAVE_ATTACHMENT_POLICY, container.blobs) as ref:
            leave = container.leave_service.apply_leave(
                current_actor(),
                start_date=parse_optional_date(data.get("start_date")),
                end_date=parse_optional_date(data.get("end_date")),
                leave_type=data.get("leave_type", ""),
                reason=data.get("reason", ""),
                attachment_ref=ref,
            )
        return jsonify({"leave_id": leave.leave_id, "message": "Leave application submitted"}), 201

    @app.route("/api/leave/<int:leave_id>", methods=["PUT"], endpoint="leave_edit")
    @employee_required
    def leave_edit(leave_id: int):
        data = payload()
        with staged_upload(request.files.get("leave_attachment"), LEAVE_ATTACHMENT_POLICY, container.blobs) as ref:
            leave = container.leave_service.edit_leave_application(
                current_actor(),
                leave_id,
                start_date=parse_optional_date(data.get("start_date")),
                end_date=parse_optional_date(data.get("end_date")),
                leave_type=data.get("leave_type"),
                reason=data.get("reason"),
                attachment_ref=ref,
            )
        return jsonify({"message": "Leave application updated", "leave": leave.to_dict()})

    @app.route("/api/leave/<int:leave_id>", methods=["DELETE"], endpoint="leave_delete")
    @employee_required
    def leave_delete(leave_id: int):
        container.leave_service.delete_leave_application(current_actor(), leave_id)
        return jsonify({"message": "Leave application deleted"})

    @app.route("/api/leave/<int:leave_id>", methods=["GET"], endpoint="leave_get")
    @employee_required
    def leave_get(leave_id: int):
        return jsonify(container.leave_service.get_by_id(current_actor(), leave_id).to_dict())

    @app.route("/api/leaves", methods=["GET"], endpoint="leave_list")
    @employee_required
    def leave_list():
        leaves = container.leave_service.get_employee_leaves(current_actor())
        return jsonify([leave.to_dict() for leave in leaves])

    @app.route("/api/leaves/range", methods=["GET"], endpoint="leave_range")
    @employee_required
    def leave_range():
        leaves = container.leave_service.get_employee_leaves(
            current_actor(),
            start=query_date("start_date"),
            end=query_date("end_date"),
        )
        return jsonify([leave.to_dict() for leave in leaves])

    # Admin
    @app.route("/api/admin/leaves", methods=["GET"], endpoint="admin_leave_list")
    @admin_required
    def admin_leave_list():
        rows = container.leave_service.get_all_leave_applications(
            current_actor(),
            status=request.args.get("status"),
            start=query_date("start_date"),
            end=query_date("end_date"),
        )
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/admin/leaves/employee/<int:emp_id>", methods=["GET"], endpoint="admin_leave_employee")
    @admin_required
    def admin_leave_employee(emp_id: int):
        container.employee_service.get_employee(current_actor(), emp_id)
        rows = container.leave_service.get_all_leave_applications(
            current_actor(),
            status=request.args.get("status"),
            start=query_date("start_date"),
            end=query_date("end_date"),
            emp_id=emp_id,
        )
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/admin/leaves/<int:leave_id>", methods=["PUT"], endpoint="admin_leave_decide")
    @admin_required
    def admin_leave_decide(leave_id: int):
        leave = container.leave_service.update_leave_status(
            current_actor(),
            leave_id,
            status=payload().get("status") or "",
        )
        return jsonify({"message": f"Leave application {leave.status.value.lower()}", "leave": leave.to_dict()})

    @app.route("/api/admin/leaves/<int:leave_id>", methods=["DELETE"], endpoint="admin_leave_delete")
    @admin_required
    def admin_leave_delete(leave_id: int):
        container.leave_service.admin_delete_leave_application(current_actor(), leave_id)
        return jsonify({"message": "Leave application deleted"})

    @app.route("/api/admin/leaves/download", methods=["GET"], endpoint="admin_leave_download")
    @admin_required
    def admin_leave_download():
        report = container.report_service.leave_report(
            current_actor(),
            status=request.args.get("status"),
            start=query_date("start_date"),
            end=query_date("end_date"),
        )
        filename = f"leave_applications_{report.filters['status'].lower()}.csv"
        return csv_response(app, rows_to_csv(LEAVE_FIELDS, report.rows, filters=report.filters), filename)

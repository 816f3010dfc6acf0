from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import admin_required, current_actor, employee_required, login_required, optional_bool, payload
from ..common.validators import optional_str, optional_text
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..storage.uploads import PROFILE_PICTURE_POLICY, staged_upload


def _parse_role(value, message: str) -> Role:
    raw = optional_str(value, "Role") or ""
    try:
        return Role(raw.strip().lower())
    except ValueError:
        raise ValidationError(message)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = payload()
        role = _parse_role(data.get("role"), "Missing username, password, or role in request body")

        s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""), role)

        session.clear()
        session.permanent = True
        session["actor_id"] = s_user.actor_id
        session["role"] = s_user.role.value
        session["name"] = s_user.full_name or s_user.username

        return jsonify(
            {
                "role": s_user.role.value,
                "user": {"id": s_user.actor_id, "username": s_user.username, "full_name": s_user.full_name},
            }
        )

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/change-password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        data = payload()
        container.auth_service.change_password(
            current_actor(),
            old_password=data.get("oldPassword") or data.get("old_password") or "",
            new_password=data.get("newPassword") or data.get("new_password") or "",
        )
        return jsonify({"message": "Password changed successfully"})

    @app.route("/api/forgot-password", methods=["POST"], endpoint="forgot_password")
    def forgot_password():
        data = payload()
        role = _parse_role(data.get("role"), "Missing email or role in request body")
        expires_at = container.auth_service.request_password_reset(
            data.get("email") or data.get("username") or "",
            role,
        )
        return jsonify({"message": "OTP sent", "expires_at": expires_at.isoformat(timespec="seconds")})

    @app.route("/api/reset-password", methods=["POST"], endpoint="reset_password")
    def reset_password():
        data = payload()
        role = _parse_role(data.get("role"), "Missing OTP, new password, or role in request body")
        container.auth_service.reset_password(
            data.get("otp") or "",
            data.get("newPassword") or data.get("new_password") or "",
            role,
        )
        return jsonify({"message": "Password reset successfully"})

    @app.route("/api/employee", methods=["GET"], endpoint="employee_profile")
    @employee_required
    def employee_profile():
        employee = container.employee_service.get_profile(current_actor())
        return jsonify(employee.to_public_dict())

    # Admin: employee directory
    @app.route("/api/admin/employee", methods=["POST"], endpoint="admin_add_employee")
    @admin_required
    def admin_add_employee():
        data = payload()
        with staged_upload(request.files.get("profile_picture"), PROFILE_PICTURE_POLICY, container.blobs) as ref:
            emp_id = container.employee_service.add_employee(
                current_actor(),
                full_name=data.get("full_name", ""),
                username=data.get("username", ""),
                password=data.get("password", ""),
                phone_no=data.get("phone_no"),
                email_id=data.get("email_id"),
                aadhaar_no=data.get("aadhaar_no"),
                profile_picture=ref,
            )
        return jsonify({"emp_id": emp_id, "message": "Employee added successfully"}), 201

    @app.route("/api/admin/all-employees", methods=["GET"], endpoint="admin_list_employees")
    @admin_required
    def admin_list_employees():
        employees = container.employee_service.list_employees(current_actor())
        return jsonify([e.to_public_dict() for e in employees])

    @app.route("/api/admin/employee/<int:emp_id>", methods=["GET"], endpoint="admin_get_employee")
    @admin_required
    def admin_get_employee(emp_id: int):
        return jsonify(container.employee_service.get_employee(current_actor(), emp_id).to_public_dict())

    @app.route("/api/admin/employee/<int:emp_id>", methods=["PUT"], endpoint="admin_update_employee")
    @admin_required
    def admin_update_employee(emp_id: int):
        data = payload()
        with staged_upload(request.files.get("profile_picture"), PROFILE_PICTURE_POLICY, container.blobs) as ref:
            employee = container.employee_service.update_employee(
                current_actor(),
                emp_id,
                full_name=data.get("full_name"),
                username=data.get("username"),
                phone_no=optional_text(data.get("phone_no")),
                email_id=optional_text(data.get("email_id")),
                aadhaar_no=optional_text(data.get("aadhaar_no")),
                profile_picture=ref,
                is_active=optional_bool(data.get("is_active")),
                password=data.get("password") or None,
            )
        return jsonify({"message": "Employee updated successfully", "employee": employee.to_public_dict()})

    @app.route("/api/admin/employee/<int:emp_id>", methods=["DELETE"], endpoint="admin_delete_employee")
    @admin_required
    def admin_delete_employee(emp_id: int):
        container.employee_service.delete_employee(current_actor(), emp_id)
        return jsonify({"message": "Employee deleted successfully"})

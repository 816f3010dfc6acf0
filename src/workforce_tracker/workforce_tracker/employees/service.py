from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.access import require_admin, require_employee, require_existing_employee
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_min_length, require_non_empty
from ..core.actor import Actor, AdminActor, EmployeeActor
from ..core.constants import MIN_PASSWORD_LENGTH, PASSWORD_RESET_TTL_MINUTES, RESET_OTP_DIGITS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..storage.blob_store import BlobStore
from .model import Employee, EmployeeChanges
from .notifier import LoggingResetCodeNotifier, ResetCodeNotifier
from .repository import AdminRepository, EmployeeRepository, PasswordResetRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    actor_id: int
    username: str
    role: Role
    full_name: Optional[str] = None


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (TypeError, ValueError):
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class AuthService:
    """Use case: authenticate admins/employees, change and reset passwords."""

    def __init__(
        self,
        employees: EmployeeRepository,
        admins: AdminRepository,
        resets: PasswordResetRepository,
        notifier: Optional[ResetCodeNotifier] = None,
    ):
        self._employees = employees
        self._admins = admins
        self._resets = resets
        self._notifier = notifier or LoggingResetCodeNotifier()

    def authenticate(self, username: str, password: str, role: Role) -> SessionUser:
        username = require_non_empty(username, "Username")
        require_non_empty(password, "Password")

        if role == Role.ADMIN:
            admin = self._admins.get_by_username(username)
            if not admin or not _password_matches(admin.password_hash, password):
                raise AuthenticationError("Invalid username or password")
            return SessionUser(actor_id=admin.admin_id, username=admin.username, role=Role.ADMIN)

        employee = self._employees.get_by_username(username)
        if not employee or not _password_matches(employee.password_hash, password):
            raise AuthenticationError("Invalid username or password")
        if not employee.is_active:
            raise AuthorizationError("Employee account is inactive")

        return SessionUser(
            actor_id=employee.emp_id,
            username=employee.username,
            role=Role.EMPLOYEE,
            full_name=employee.full_name,
        )

    def change_password(self, actor: Actor, *, old_password: str, new_password: str) -> None:
        require_non_empty(old_password, "Old password")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)

        if isinstance(actor, AdminActor):
            admin = self._admins.get_by_id(actor.admin_id)
            if not admin:
                raise NotFoundError("User not found")
            if not _password_matches(admin.password_hash, old_password):
                raise AuthenticationError("Invalid old password")
            self._admins.update_password(admin.admin_id, generate_password_hash(new_password))
            return

        employee = self._employees.get_by_id(actor.emp_id)
        if not employee:
            raise NotFoundError("Employee not found")
        if not _password_matches(employee.password_hash, old_password):
            raise AuthenticationError("Invalid old password")
        self._employees.update_password(employee.emp_id, generate_password_hash(new_password))

    # Quên mật khẩu: cấp mã OTP dùng một lần rồi đổi mật khẩu bằng mã đó.
    def request_password_reset(self, identifier: str, role: Role, *, now: Optional[datetime] = None) -> datetime:
        """Issue a reset code for the account and hand it to the notifier.

        Admins are looked up by username; employees by email, falling back to username.
        Returns the expiry of the issued code.
        """
        identifier = require_non_empty(identifier, "Email or username")
        now = now or now_local()

        if role == Role.ADMIN:
            admin = self._admins.get_by_username(identifier)
            if not admin:
                raise NotFoundError("User not found")
            user_id, recipient = admin.admin_id, admin.username
        else:
            employee = self._employees.get_by_email(identifier) or self._employees.get_by_username(identifier)
            if not employee:
                raise NotFoundError("User not found")
            if not employee.is_active:
                raise AuthorizationError("Employee account is inactive")
            user_id, recipient = employee.emp_id, employee.email_id or employee.username

        otp = _generate_otp()
        expires_at = now + timedelta(minutes=PASSWORD_RESET_TTL_MINUTES)
        self._resets.create(user_id=user_id, role=role, otp=otp, expires_at=expires_at)
        self._notifier.send_reset_code(role=role, user_id=user_id, recipient=recipient, otp=otp, expires_at=expires_at)
        logger.info("Password reset requested for %s %s", role.value, user_id)
        return expires_at

    def reset_password(self, otp: str, new_password: str, role: Role, *, now: Optional[datetime] = None) -> None:
        otp = require_non_empty(otp, "OTP")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        now = now or now_local()

        token = self._resets.find_valid(otp=otp, role=role, now=now)
        if not token or token.is_expired(now):
            raise ValidationError("Invalid or expired OTP")
        # Token is consumed before the password changes; a replay finds nothing.
        if not self._resets.delete(token.token_id):
            raise ValidationError("Invalid or expired OTP")

        password_hash = generate_password_hash(new_password)
        if role == Role.ADMIN:
            updated = self._admins.update_password(token.user_id, password_hash)
        else:
            updated = self._employees.update_password(token.user_id, password_hash)
        if not updated:
            raise NotFoundError("User not found")
        logger.info("Password reset completed for %s %s", role.value, token.user_id)


def _generate_otp() -> str:
    low = 10 ** (RESET_OTP_DIGITS - 1)
    return str(low + secrets.randbelow(9 * low))


class EmployeeService:
    """Use case: manage the employee directory (admin) and self profile (employee)."""

    def __init__(self, employees: EmployeeRepository, blobs: BlobStore):
        self._employees = employees
        self._blobs = blobs

    def add_employee(
        self,
        actor: Actor,
        *,
        full_name: str,
        username: str,
        password: str,
        phone_no: Optional[str] = None,
        email_id: Optional[str] = None,
        aadhaar_no: Optional[str] = None,
        profile_picture: Optional[str] = None,
    ) -> int:
        require_admin(actor)
        full_name = require_non_empty(full_name, "Full name")
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._employees.get_by_username(username):
            raise ConflictError("Username already exists")

        emp_id = self._employees.create_employee(
            full_name=full_name,
            username=username,
            password_hash=generate_password_hash(password),
            phone_no=optional_text(phone_no),
            email_id=optional_text(email_id),
            aadhaar_no=optional_text(aadhaar_no),
            profile_picture=profile_picture,
        )
        logger.info("Employee %s created (username=%s)", emp_id, username)
        return emp_id

    def list_employees(self, actor: Actor) -> Sequence[Employee]:
        require_admin(actor)
        return self._employees.list_all()

    def get_employee(self, actor: Actor, emp_id: int) -> Employee:
        require_admin(actor)
        return require_existing_employee(self._employees, emp_id)

    def get_profile(self, actor: Actor) -> Employee:
        """Employee self view; inactive accounts may still read their profile."""
        employee_actor = require_employee(actor)
        return require_existing_employee(self._employees, employee_actor.emp_id)

    def update_employee(
        self,
        actor: Actor,
        emp_id: int,
        *,
        full_name: Optional[str] = None,
        username: Optional[str] = None,
        phone_no: Optional[str] = None,
        email_id: Optional[str] = None,
        aadhaar_no: Optional[str] = None,
        profile_picture: Optional[str] = None,
        is_active: Optional[bool] = None,
        password: Optional[str] = None,
    ) -> Employee:
        require_admin(actor)
        current = require_existing_employee(self._employees, emp_id)

        if full_name is not None:
            full_name = require_non_empty(full_name, "Full name")
        if username is not None:
            username = require_non_empty(username, "Username")
            other = self._employees.get_by_username(username)
            if other and other.emp_id != current.emp_id:
                raise ConflictError("Username already exists")

        password_hash = None
        if password:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            password_hash = generate_password_hash(password)

        changes = EmployeeChanges(
            full_name=full_name,
            username=username,
            phone_no=phone_no,
            email_id=email_id,
            aadhaar_no=aadhaar_no,
            profile_picture=profile_picture,
            is_active=is_active,
            password_hash=password_hash,
        )
        if changes.is_empty():
            raise ValidationError("Nothing to update")

        if profile_picture and current.profile_picture and profile_picture != current.profile_picture:
            self._release(current.profile_picture)

        self._employees.update_employee(current.emp_id, changes)
        if is_active is not None and is_active != current.is_active:
            logger.info("Employee %s is_active -> %s", current.emp_id, is_active)

        updated = self._employees.get_by_id(current.emp_id)
        if not updated:
            raise NotFoundError("Employee not found")
        return updated

    def set_active(self, actor: Actor, emp_id: int, *, is_active: bool) -> Employee:
        return self.update_employee(actor, emp_id, is_active=is_active)

    def delete_employee(self, actor: Actor, emp_id: int) -> None:
        """Hard delete; attendance, activity and leave rows cascade in the store."""
        require_admin(actor)
        employee = require_existing_employee(self._employees, emp_id)

        if not self._employees.delete_by_id(employee.emp_id):
            raise NotFoundError("Employee not found")
        if employee.profile_picture:
            self._release(employee.profile_picture)
        logger.info("Employee %s deleted", employee.emp_id)

    def _release(self, ref: str) -> None:
        if not self._blobs.delete(ref):
            logger.warning("Blob %s was already gone", ref)

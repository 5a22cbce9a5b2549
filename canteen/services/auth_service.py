import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Optional, Tuple

from tortoise import timezone
from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from canteen.core import config
from canteen.core.db import storage_bound
from canteen.core.errors import Conflict, NotAuthenticated, NotFound, ValidationError
from canteen.core.security import create_access_token, hash_password, verify_password
from canteen.models.catalog import Branch
from canteen.models.employee import Employee, Role
from canteen.schemas.auth import EmployeeProfile, LoginRequest, RegisterRequest, TokenResponse
from canteen.services.notifications import ResetMailer

log = logging.getLogger(__name__)

# Branch id reported when the employee's branch name has no catalog entry
DEFAULT_BRANCH_ID = 1
RESET_TOKEN_BYTES = 32


async def resolve_branch_id(branch_name: str) -> int:
    branch = await Branch.filter(name=branch_name).first()
    return branch.id if branch else DEFAULT_BRANCH_ID


async def _profile(employee: Employee) -> EmployeeProfile:
    return EmployeeProfile(
        employee_id=employee.employee_id,
        full_name=employee.full_name,
        email=employee.email,
        branch=employee.branch,
        branch_id=await resolve_branch_id(employee.branch),
        role=employee.role.value,
    )


@storage_bound
async def register_employee(data: RegisterRequest, role: Role = Role.EMPLOYEE) -> EmployeeProfile:
    if await Employee.filter(Q(employee_id=data.employee_id) | Q(email=data.email)).exists():
        raise Conflict("Employee ID or Email already registered.")
    try:
        employee = await Employee.create(
            employee_id=data.employee_id,
            full_name=data.full_name,
            email=data.email,
            phone=data.phone,
            branch=data.branch,
            password_hash=await hash_password(data.password),
            role=role,
        )
    except IntegrityError as e:
        raise Conflict("Employee ID or Email already registered.") from e
    log.info(f"Employee {employee.employee_id} registered")
    return await _profile(employee)


@storage_bound
async def login(data: LoginRequest) -> TokenResponse:
    employee = await Employee.get_or_none(employee_id=data.employee_id)
    # Same message for unknown id and wrong password
    if not employee or not await verify_password(employee.password_hash, data.password):
        raise NotAuthenticated("Invalid Employee ID or password.")
    token = create_access_token(employee.employee_id, employee.role)
    return TokenResponse(token=token, user=await _profile(employee))


@storage_bound
async def get_profile(employee_id: str) -> EmployeeProfile:
    employee = await Employee.get_or_none(employee_id=employee_id)
    if not employee:
        raise NotFound("Employee not found")
    return await _profile(employee)


# ----------- Password reset -----------

def _token_digest(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


@storage_bound
async def _issue_reset_token(employee_id: str) -> Optional[Tuple[str, str]]:
    """Stores a fresh reset token for the employee. Returns (email, reset_link), or None if unknown."""
    employee = await Employee.get_or_none(employee_id=employee_id)
    if not employee:
        return None
    token = secrets.token_hex(RESET_TOKEN_BYTES)
    employee.reset_token = _token_digest(token)
    employee.reset_expires = timezone.now() + timedelta(minutes=config.RESET_TOKEN_TTL_MINUTES)
    await employee.save(update_fields=["reset_token", "reset_expires"])
    return employee.email, f"{config.PASSWORD_RESET_URL}?token={token}"


async def request_password_reset(employee_id: str, mailer: ResetMailer) -> None:
    """
    Issues a one-hour reset token and mails the link. The caller sees the same
    outcome whether or not the employee exists.
    """
    issued = await _issue_reset_token(employee_id)
    if issued is None:
        log.info(f"Password reset requested for unknown employee {employee_id}")
        return
    email, reset_link = issued
    try:
        await mailer.send_reset_email(email, reset_link)
    except Exception:
        log.exception(f"Could not send password reset email for employee {employee_id}")


@storage_bound
async def reset_password(token: str, new_password: str) -> None:
    employee = await Employee.filter(reset_token=_token_digest(token), reset_expires__gt=timezone.now()).first()
    if not employee:
        raise ValidationError("Invalid or expired token.")
    employee.password_hash = await hash_password(new_password)
    employee.reset_token = None
    employee.reset_expires = None
    await employee.save(update_fields=["password_hash", "reset_token", "reset_expires"])
    log.info(f"Password reset for employee {employee.employee_id}")

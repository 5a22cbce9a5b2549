from pydantic import Field

from canteen.schemas.base import CamelModel


class RegisterRequest(CamelModel):
    full_name: str = Field(..., min_length=1)
    employee_id: str = Field(..., min_length=1)
    email: str = Field(..., pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    branch: str = Field(..., min_length=1)


class LoginRequest(CamelModel):
    employee_id: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class EmployeeProfile(CamelModel):
    employee_id: str
    full_name: str
    email: str
    branch: str
    branch_id: int
    role: str


class TokenResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: EmployeeProfile


class ForgotPasswordRequest(CamelModel):
    employee_id: str = Field(..., min_length=1)


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)

from enum import Enum
from tortoise import fields, models


class Role(str, Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"


class Employee(models.Model):
    id = fields.IntField(primary_key=True)
    employee_id = fields.CharField(max_length=64, unique=True)
    full_name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, unique=True)
    phone = fields.CharField(max_length=32)
    branch = fields.CharField(max_length=255)
    password_hash = fields.CharField(max_length=255)
    role = fields.CharEnumField(Role, default=Role.EMPLOYEE)
    # sha256 of the emailed reset token; cleared once used
    reset_token = fields.CharField(max_length=64, null=True)
    reset_expires = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "employees"
        indexes = [
            ("reset_token",),            # Reset link lookup
        ]

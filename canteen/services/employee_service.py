from tortoise.functions import Count

from canteen.core.db import storage_bound
from canteen.models.employee import Employee
from canteen.schemas.employee import BranchHeadcount, EmployeeStats


@storage_bound
async def employee_stats() -> EmployeeStats:
    """Headcount overall and per branch name, largest branch first."""
    total = await Employee.all().count()
    rows = (
        await Employee.annotate(count=Count("id"))
        .group_by("branch")
        .order_by("-count", "branch")
        .values("branch", "count")
    )
    return EmployeeStats(
        total_employees=total,
        branch_stats=[BranchHeadcount(branch=row["branch"], count=row["count"]) for row in rows],
    )

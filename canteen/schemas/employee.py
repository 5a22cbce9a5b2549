from typing import List

from canteen.schemas.base import CamelModel


class BranchHeadcount(CamelModel):
    branch: str
    count: int


class EmployeeStats(CamelModel):
    total_employees: int
    branch_stats: List[BranchHeadcount]

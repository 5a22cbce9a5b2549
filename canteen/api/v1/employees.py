from fastapi import APIRouter, Depends

from canteen.core.security import Identity, require_admin
from canteen.schemas.response import SuccessResponse
from canteen.services.employee_service import employee_stats

router = APIRouter()


@router.get("/stats", response_model=SuccessResponse)
async def employee_stats_endpoint(admin: Identity = Depends(require_admin)):
    """Employee headcount by branch. Administrators only."""
    stats = await employee_stats()
    return SuccessResponse(data=stats.to_api())

"""
Dashboard Endpoints.

Headline numbers shown on a company's dashboard home page.
"""

from fastapi import APIRouter

from lyriq.core.models.io.dashboard import DashboardOverview
from lyriq.server.services.dashboard import DashboardService
from lyriq.server.services.deps import SessionDep

router = APIRouter()


@router.get(
    "/overview",
    response_model=DashboardOverview,
    summary="Get Dashboard Overview",
    description="Counts of agents, workflows, calls, chat sessions and knowledge entries of a company.",
    response_description="Aggregated counts.",
)
async def get_overview(company_id: int, session: SessionDep) -> DashboardOverview:
    """
    Get the dashboard overview.

    - **calls.active**: Calls that are queued, ringing or in progress.
    - **calls.average_duration_seconds**: Mean duration of calls with both a start
      and an end time; null when there are none.
    """
    return await DashboardService(session).overview(company_id)

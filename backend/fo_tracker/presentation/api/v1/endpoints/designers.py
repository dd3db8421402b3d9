"""Designer roster endpoint."""

from fastapi import APIRouter, Depends

from fo_tracker.application.schemas import DesignerResponse
from fo_tracker.application.services import JobSession
from fo_tracker.infrastructure.dependencies import get_job_session

router = APIRouter(prefix="/designers", tags=["Designers"])


@router.get("", response_model=list[DesignerResponse])
async def list_designers(
    session: JobSession = Depends(get_job_session),
) -> list[DesignerResponse]:
    """Active designers as loaded into the caller's edit session."""
    return [DesignerResponse.model_validate(d, from_attributes=True) for d in session.designers]

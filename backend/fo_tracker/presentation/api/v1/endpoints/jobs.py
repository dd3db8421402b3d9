"""Job table endpoints: the caller's edit session over HTTP.

Every route except the event stream works on the edit session named by the
``X-Edit-Session`` header. Edits are staged locally and only reach the
database on ``POST /jobs/save``.
"""

from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from fastapi.responses import StreamingResponse

from fo_tracker.application.schemas import (
    EditOutcomeResponse,
    FlushReportResponse,
    JobCreate,
    JobEditRequest,
    JobResponse,
)
from fo_tracker.application.services import (
    JobChangeBroadcaster,
    JobFilter,
    JobSession,
    JobSessionRegistry,
    SortDirection,
)
from fo_tracker.domain.entities import Accepted, Job, JobField
from fo_tracker.domain.exceptions import (
    DuplicateWorkOrderError,
    EntityNotFoundError,
    RemoteError,
    ValidationError,
)
from fo_tracker.infrastructure.dependencies import (
    DEFAULT_SESSION_ID,
    get_job_change_broadcaster,
    get_job_session,
    get_session_registry,
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def _to_response(job: Job, session: JobSession) -> JobResponse:
    return JobResponse(**job.to_record(), has_pending_edits=session.overlay.has(job.id))


@router.get("", response_model=list[JobResponse])
async def list_jobs(
    open_only: bool = True,
    fo: str = "",
    item: str = "",
    sort: JobField = JobField.CREATED_AT,
    direction: SortDirection = SortDirection.DESC,
    session: JobSession = Depends(get_job_session),
) -> list[JobResponse]:
    """Filtered, sorted job rows with unsaved edits applied."""
    job_filter = JobFilter(open_only=open_only, work_order_query=fo, item_query=item)
    rows = session.view(job_filter, sort_column=sort, direction=direction)
    return [_to_response(job, session) for job in rows]


@router.post("", response_model=list[JobResponse], status_code=status.HTTP_201_CREATED)
async def create_jobs(
    data: JobCreate,
    session: JobSession = Depends(get_job_session),
) -> list[JobResponse]:
    """Open a work order with one job per item."""
    try:
        created = await session.create_jobs(data.work_order_number, data.items)
    except DuplicateWorkOrderError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)
    except RemoteError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return [_to_response(job, session) for job in created]


@router.get("/events")
async def stream_job_events(
    broadcaster: JobChangeBroadcaster = Depends(get_job_change_broadcaster),
) -> StreamingResponse:
    """Server-sent events for every insert, update and delete on the jobs table."""
    return StreamingResponse(
        broadcaster.stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/pending")
async def list_pending_edits(
    session: JobSession = Depends(get_job_session),
) -> dict[str, dict[str, Any]]:
    """Unsaved field values keyed by job id."""
    return session.overlay.all()


@router.delete("/pending", status_code=status.HTTP_204_NO_CONTENT)
async def discard_all_pending_edits(
    session: JobSession = Depends(get_job_session),
) -> Response:
    session.discard_all()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/save", response_model=FlushReportResponse)
async def save_pending_edits(
    session: JobSession = Depends(get_job_session),
) -> FlushReportResponse:
    """Write every pending edit, skipping rows changed by someone else."""
    if session.flush_in_progress:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="a save is already in progress",
        )
    report = await session.save()
    return FlushReportResponse.model_validate(report, from_attributes=True)


@router.post("/refresh", status_code=status.HTTP_204_NO_CONTENT)
async def refresh_jobs(
    session: JobSession = Depends(get_job_session),
) -> Response:
    """Reload designers and jobs from the database; pending edits are kept."""
    try:
        await session.refresh()
    except RemoteError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def close_edit_session(
    x_edit_session: str = Header(DEFAULT_SESSION_ID),
    registry: JobSessionRegistry = Depends(get_session_registry),
) -> Response:
    """End the caller's edit session; unsaved edits are discarded."""
    await registry.close(x_edit_session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{job_id}", response_model=EditOutcomeResponse)
async def edit_job(
    job_id: str,
    data: JobEditRequest,
    session: JobSession = Depends(get_job_session),
) -> EditOutcomeResponse:
    """Stage a single field change. A rule rejection is returned, not raised."""
    try:
        outcome = session.edit(job_id, data.field, data.value)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)

    if isinstance(outcome, Accepted):
        return EditOutcomeResponse(
            accepted=True,
            updates=outcome.updates,
            warning=outcome.warning,
        )
    return EditOutcomeResponse(accepted=False, reason=outcome.reason)


@router.delete("/{job_id}/pending", status_code=status.HTTP_204_NO_CONTENT)
async def discard_pending_edits(
    job_id: str,
    session: JobSession = Depends(get_job_session),
) -> Response:
    session.discard(job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(
    job_id: str,
    session: JobSession = Depends(get_job_session),
) -> Response:
    """Delete a job immediately; its unsaved edits are dropped with it."""
    try:
        await session.delete_job(job_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except RemoteError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

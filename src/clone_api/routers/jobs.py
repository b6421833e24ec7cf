import json
import logging
import re
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from clone_api.adapters.queue import BaseQueue
from clone_api.adapters.status_store import BaseStatusStore
from clone_api.dependencies import get_job_queue, get_rate_limiter, get_status_store
from clone_api.errors import InternalError, NotFoundError, RateLimitError, ValidationError
from clone_api.rate_limit import FixedWindowRateLimiter
from clone_api.schemas import (
    CreateJobRequest,
    CreateJobResponse,
    ErrorResponse,
    Job,
    JobStatus,
    JobStatusRecord,
)
from clone_api.utils.clock import now_ms

logger = logging.getLogger(__name__)

router = APIRouter()

JOB_ID_PATTERN = re.compile(r"[0-9a-f-]{36}", re.IGNORECASE)


async def read_json_body(request: Request):
    """Decode the request body as JSON; anything undecodable counts as an empty object."""
    try:
        return await request.json()
    except ValueError:
        return {}


@router.post(
    "/jobs",
    response_model=CreateJobResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "`fileUrl` or `voiceName` missing."},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse, "description": "Per-user job quota spent."},
    },
)
async def create_job(
    request: Request,
    status_store: BaseStatusStore = Depends(get_status_store),
    job_queue: BaseQueue = Depends(get_job_queue),
    rate_limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> CreateJobResponse:
    """
    Admit a cloning job: validate, rate-limit, record it as queued, then enqueue it.

    The status record is written before the queue send so that a client
    polling right after this returns always finds the job.
    """
    payload = CreateJobRequest.from_payload(await read_json_body(request))
    if not payload.is_complete:
        raise ValidationError("fileUrl and voiceName required")

    if not await rate_limiter.allow(payload.user_id):
        raise RateLimitError()

    job = Job(
        jobId=str(uuid.uuid4()),
        fileUrl=payload.file_url,
        voiceName=payload.voice_name,
        userId=payload.user_id,
        consent=payload.consent,
        createdAt=now_ms(),
    )
    record = JobStatusRecord(status=JobStatus.QUEUED.value, job=job)

    await status_store.put(job.job_id, json.dumps(record.to_document()))
    await job_queue.send(job.to_message())

    logger.info("Queued job %s for user %s (voice %s)", job.job_id, job.user_id, job.voice_name)
    return CreateJobResponse(jobId=job.job_id)


@router.get(
    "/jobs/{job_id}",
    responses={
        status.HTTP_200_OK: {"description": "The stored status record, spread next to `ok: true`."},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "No record for this job id."},
    },
)
async def get_job_status(
    job_id: str,
    status_store: BaseStatusStore = Depends(get_status_store),
) -> JSONResponse:
    """Return the current status record of a job."""
    if not JOB_ID_PATTERN.fullmatch(job_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

    raw = await status_store.get(job_id)
    if raw is None:
        raise NotFoundError()

    try:
        record = json.loads(raw) if raw else None
    except json.JSONDecodeError as exc:
        raise InternalError(f"corrupt status record for job {job_id}") from exc
    if not record:
        raise NotFoundError()
    if not isinstance(record, dict):
        raise InternalError(f"corrupt status record for job {job_id}")
    return JSONResponse(content={"ok": True, **record})

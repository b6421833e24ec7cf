import logging
from textwrap import dedent

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from clone_api.adapters.queue import BaseQueue, QueueFactory
from clone_api.adapters.status_store import BaseStatusStore, StatusStoreFactory
from clone_api.adapters.storage import BaseBlobStore, BlobStoreFactory
from clone_api.config.settings import Settings
from clone_api.cors import handle_cors
from clone_api.errors import (
    CloneApiError,
    handle_broad_exceptions,
    handle_clone_api_errors,
    handle_http_exceptions,
    handle_request_validation_errors,
)
from clone_api.rate_limit import FixedWindowRateLimiter
from clone_api.routers.health import router as health_router
from clone_api.routers.jobs import router as jobs_router
from clone_api.routers.uploads import router as uploads_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    blob_store: BaseBlobStore | None = None,
    status_store: BaseStatusStore | None = None,
    job_queue: BaseQueue | None = None,
) -> FastAPI:
    """Create a FastAPI application.

    Adapters not passed in are built from `settings.deployment_mode`.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Voice Clone API",
        summary="Upload audio clips and queue voice-cloning jobs",
        version="v1",
        description=dedent(
            """\
        | Endpoint | Notes |
        | --- | --- |
        | `POST /upload` | multipart field `file`; returns `fileKey` and `fileUrl` |
        | `POST /jobs` | JSON `{fileUrl, voiceName, userId?, consent?}`; rate limited per user |
        | `GET /jobs/{jobId}` | poll the job's status record |
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.state.settings = settings
    app.state.blob_store = blob_store or BlobStoreFactory.get_blob_store(settings)
    app.state.status_store = status_store or StatusStoreFactory.get_status_store(settings)
    app.state.job_queue = job_queue or QueueFactory.get_queue_handler(settings)
    app.state.rate_limiter = FixedWindowRateLimiter.from_settings(app.state.status_store, settings)
    logger.info(f"Voice Clone API configured in {settings.deployment_mode} mode")

    app.include_router(health_router, tags=["health"])
    app.include_router(uploads_router, tags=["uploads"])
    app.include_router(jobs_router, tags=["jobs"])

    app.add_exception_handler(CloneApiError, handle_clone_api_errors)
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
    app.add_exception_handler(StarletteHTTPException, handle_http_exceptions)

    # The last middleware registered runs outermost: CORS must wrap the broad handler's 500s.
    app.middleware("http")(handle_broad_exceptions)
    app.middleware("http")(handle_cors)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""FastAPI dependencies that hand the app's adapters to route handlers."""
from fastapi import Request

from clone_api.adapters.queue import BaseQueue
from clone_api.adapters.status_store import BaseStatusStore
from clone_api.adapters.storage import BaseBlobStore
from clone_api.config.settings import Settings
from clone_api.rate_limit import FixedWindowRateLimiter


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_blob_store(request: Request) -> BaseBlobStore:
    return request.app.state.blob_store


def get_status_store(request: Request) -> BaseStatusStore:
    return request.app.state.status_store


def get_job_queue(request: Request) -> BaseQueue:
    return request.app.state.job_queue


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.rate_limiter

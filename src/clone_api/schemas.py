####################################
# --- Request/response schemas --- #
####################################

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_USER_ID = "anon"
DEFAULT_UPLOAD_FILENAME = "clip.wav"
DEFAULT_UPLOAD_CONTENT_TYPE = "audio/wav"


class JobStatus(str, Enum):
    """Statuses this service writes. Downstream workers may write others."""
    QUEUED = "queued"


def _coerce_str(value: Any, default: str = "") -> str:
    """Loose string coercion for JSON values: falsy becomes the default."""
    if not value:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true"
    if isinstance(value, float) and value.is_integer():
        # 1.0 -> "1", as JSON numbers have no int/float distinction
        return str(int(value))
    return str(value)


class CreateJobRequest(BaseModel):
    """Body of `POST /jobs` after lenient coercion of the raw JSON object."""
    file_url: str = Field(alias="fileUrl")
    voice_name: str = Field(alias="voiceName")
    user_id: str = Field(DEFAULT_USER_ID, alias="userId")
    consent: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateJobRequest":
        """Build a request from any decoded JSON; non-objects count as `{}`."""
        if not isinstance(payload, dict):
            payload = {}
        return cls(
            fileUrl=_coerce_str(payload.get("fileUrl")),
            voiceName=_coerce_str(payload.get("voiceName")),
            userId=_coerce_str(payload.get("userId"), DEFAULT_USER_ID),
            consent=bool(payload.get("consent")),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.file_url and self.voice_name)


class Job(BaseModel):
    """A unit of cloning work handed to the downstream worker."""
    job_id: str = Field(alias="jobId")
    file_url: str = Field(alias="fileUrl")
    voice_name: str = Field(alias="voiceName")
    user_id: str = Field(DEFAULT_USER_ID, alias="userId")
    consent: bool = False
    created_at: int = Field(alias="createdAt", description="Epoch milliseconds")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "jobId": "0b8f3c4e-2a53-4f7e-9d57-3f6a1c2b9e10",
                "fileUrl": "https://bot.example.com/file/u%2F0b8f..._clip.wav",
                "voiceName": "narrator",
                "userId": "anon",
                "consent": True,
                "createdAt": 1700000000000,
            }
        },
    )

    def to_message(self) -> Dict[str, Any]:
        """Wire form used for both the status record and the queue message."""
        return self.model_dump(by_alias=True)


class JobStatusRecord(BaseModel):
    """Stored under the raw job id in the status store."""
    status: str
    job: Job

    def to_document(self) -> Dict[str, Any]:
        return {"status": self.status, "job": self.job.to_message()}


class UploadResponse(BaseModel):
    """Response model for `POST /upload`."""
    ok: bool = True
    file_key: str = Field(alias="fileKey", json_schema_extra={"example": "u/0b8f3c4e-2a53-4f7e-9d57-3f6a1c2b9e10_clip.wav"})
    file_url: str = Field(alias="fileUrl")

    model_config = ConfigDict(populate_by_name=True)


class CreateJobResponse(BaseModel):
    """Response model for `POST /jobs`."""
    ok: bool = True
    job_id: str = Field(alias="jobId")

    model_config = ConfigDict(populate_by_name=True)


class PingResponse(BaseModel):
    ok: bool = True
    ts: int = Field(description="Server time in epoch milliseconds")


class ErrorResponse(BaseModel):
    """Uniform error envelope."""
    ok: bool = False
    error: str

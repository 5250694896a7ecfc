from __future__ import annotations

import uuid
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from utils.errors import FilingsError

T = TypeVar("T")


class ApiError(BaseModel):
    """Standard error payload for API responses."""

    code: str = Field(default="error")
    message: str
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")


class ApiMeta(BaseModel):
    """Metadata attached to responses."""

    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex)

    model_config = ConfigDict(extra="ignore")


class ApiResponse(BaseModel, Generic[T]):
    """Standard envelope for all API responses."""

    ok: bool
    data: Optional[T] = None
    error: Optional[ApiError] = None
    meta: ApiMeta = Field(default_factory=ApiMeta)

    model_config = ConfigDict(extra="ignore")


def ok(data: T = None, *, meta: Optional[ApiMeta] = None) -> Dict[str, Any]:
    """Create a success envelope as a JSON-serializable dict."""

    payload = ApiResponse[Any](ok=True, data=data, error=None, meta=meta or ApiMeta())
    return payload.model_dump(mode="json")


def fail(
    message: str,
    *,
    code: str = "error",
    details: Optional[Dict[str, Any]] = None,
    meta: Optional[ApiMeta] = None,
) -> Dict[str, Any]:
    """Create an error envelope as a JSON-serializable dict."""

    payload = ApiResponse[None](
        ok=False,
        data=None,
        error=ApiError(code=code, message=message, details=details),
        meta=meta or ApiMeta(),
    )
    return payload.model_dump(mode="json")


def fail_from_error(err: FilingsError) -> tuple[Dict[str, Any], int]:
    """Envelope + HTTP status for a pipeline error."""

    return fail(err.message, code=err.code, details=err.details), err.status_code

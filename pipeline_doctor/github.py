"""Verification and parsing of GitHub workflow-job webhooks."""

from __future__ import annotations

import hashlib
import hmac
import json
from collections.abc import Mapping
from typing import Any

from .errors import BadRequest, Unauthorized
from .event import EventType, NormalizedEvent, Platform

_SIGNATURE_PREFIX = "sha256="
_U32_MAX = 2**32 - 1


class _SchemaError(ValueError):
    """The payload parsed as JSON but does not have the expected shape."""


def verify_signature(payload: bytes, signature: str, secret: str) -> None:
    """Check an ``X-Hub-Signature-256`` value against the payload.

    Raises Unauthorized when the prefix is missing or the digest differs.
    """
    mac = hmac.new(secret.encode(), payload, hashlib.sha256)
    if not signature.startswith(_SIGNATURE_PREFIX):
        raise Unauthorized()
    provided = signature[len(_SIGNATURE_PREFIX):]
    if not hmac.compare_digest(mac.hexdigest().encode(), provided.encode()):
        raise Unauthorized()


def _require(obj: Mapping[str, Any], key: str) -> Any:
    if key not in obj:
        raise _SchemaError(f"missing field `{key}`")
    return obj[key]


def _mapping(obj: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = _require(obj, key)
    if not isinstance(value, Mapping):
        raise _SchemaError(f"{key}: expected an object")
    return value


def _string(obj: Mapping[str, Any], key: str) -> str:
    value = _require(obj, key)
    if not isinstance(value, str):
        raise _SchemaError(f"{key}: expected a string")
    return value


def _optional_string(obj: Mapping[str, Any], key: str) -> str | None:
    value = obj.get(key)
    if value is None or isinstance(value, str):
        return value
    raise _SchemaError(f"{key}: expected a string")


def _optional_u32(obj: Mapping[str, Any], key: str) -> int | None:
    value = obj.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U32_MAX:
        raise _SchemaError(f"{key}: expected an unsigned 32-bit integer")
    return value


def _event_type(status: str, conclusion: str | None) -> EventType:
    if status in ("queued", "in_progress"):
        return EventType.JOB_STARTED
    if status == "completed" and conclusion == "success":
        return EventType.JOB_SUCCEEDED
    return EventType.JOB_FAILED


def parse_github_payload(payload: bytes) -> NormalizedEvent:
    """Turn a ``workflow_job`` webhook body into a NormalizedEvent."""
    try:
        data = json.loads(payload)
        if not isinstance(data, Mapping):
            raise _SchemaError("expected a JSON object")
        job = _mapping(data, "workflow_job")
        repository = _mapping(data, "repository")
        full_name = _string(repository, "full_name")
        job_id = _string(job, "id")
        run_id = _string(job, "run_id")
        run_attempt = _optional_u32(job, "run_attempt")
        status = _string(job, "status")
        conclusion = _optional_string(job, "conclusion")
        logs_url = _string(job, "logs_url")
        head_sha = _string(job, "head_sha")
    except ValueError as exc:
        raise BadRequest(f"Invalid payload: {exc}") from exc

    event = NormalizedEvent(
        platform=Platform.GITHUB,
        pipeline_id=run_id,
        job_id=job_id,
        event_type=_event_type(status, conclusion),
        logs_uri=logs_url,
    )
    event.metadata["repository"] = full_name
    event.metadata["commit_sha"] = head_sha
    if run_attempt is not None:
        event.metadata["run_attempt"] = str(run_attempt)
    return event
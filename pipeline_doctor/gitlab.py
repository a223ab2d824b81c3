"""Verification and parsing of GitLab job webhooks."""

from __future__ import annotations

import hmac
import json
from collections.abc import Mapping
from typing import Any

from .errors import BadRequest, Unauthorized
from .event import EventType, NormalizedEvent, Platform


class _SchemaError(ValueError):
    """The payload parsed as JSON but does not have the expected shape."""


def verify_token(token: str, expected_token: str) -> None:
    """Raise Unauthorized unless the webhook token matches."""
    if not hmac.compare_digest(token.encode(), expected_token.encode()):
        raise Unauthorized()


def _mapping(obj: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    if key not in obj:
        raise _SchemaError(f"missing field `{key}`")
    value = obj[key]
    if not isinstance(value, Mapping):
        raise _SchemaError(f"{key}: expected an object")
    return value


def _string(obj: Mapping[str, Any], key: str) -> str:
    if key not in obj:
        raise _SchemaError(f"missing field `{key}`")
    value = obj[key]
    if not isinstance(value, str):
        raise _SchemaError(f"{key}: expected a string")
    return value


def _event_type(status: str) -> EventType:
    if status in ("pending", "running"):
        return EventType.JOB_STARTED
    if status == "success":
        return EventType.JOB_SUCCEEDED
    return EventType.JOB_FAILED


def parse_gitlab_payload(payload: bytes) -> NormalizedEvent:
    """Turn a GitLab job webhook body into a NormalizedEvent."""
    try:
        data = json.loads(payload)
        if not isinstance(data, Mapping):
            raise _SchemaError("expected a JSON object")
        attributes = _mapping(data, "object_attributes")
        project = _mapping(data, "project")
        commit = _mapping(data, "commit")
        job_id = _string(attributes, "id")
        pipeline_id = _string(attributes, "pipeline_id")
        status = _string(attributes, "status")
        name = _string(attributes, "name")
        stage = _string(attributes, "stage")
        web_url = _string(project, "web_url")
        path = _string(project, "path_with_namespace")
        commit_id = _string(commit, "id")
    except ValueError as exc:
        raise BadRequest(f"Invalid GitLab payload: {exc}") from exc

    event = NormalizedEvent(
        platform=Platform.GITLAB,
        pipeline_id=pipeline_id,
        job_id=job_id,
        event_type=_event_type(status),
        logs_uri=f"{web_url}/-/jobs/{job_id}",
    )
    event.metadata["project"] = path
    event.metadata["commit_sha"] = commit_id
    event.metadata["job_name"] = name
    event.metadata["stage"] = stage
    return event
"""The platform-neutral event that flows from webhooks into the agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Platform(Enum):
    """CI platform an event came from."""

    GITHUB = "github"
    GITLAB = "gitlab"


class EventType(Enum):
    """What happened in the pipeline."""

    JOB_STARTED = "job_started"
    JOB_SUCCEEDED = "job_succeeded"
    JOB_FAILED = "job_failed"
    PIPELINE_COMPLETED = "pipeline_completed"
    TEST_FAILURE = "test_failure"
    DEPENDENCY_ISSUE = "dependency_issue"
    PIPELINE_ERRORED = "pipeline_errored"
    UNKNOWN = "unknown"


@dataclass
class NormalizedEvent:
    """A pipeline or job event, independent of the platform that sent it."""

    platform: Platform
    pipeline_id: str
    job_id: str | None
    event_type: EventType
    logs_uri: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    raw_event_type: str | None = None
    trigger_source: str | None = None
    platform_id: str = field(init=False)

    def __post_init__(self) -> None:
        self.platform_id = f"{self.platform.value}#{self.pipeline_id}"
"""Turn diagnoses into a list of actions to take."""

from __future__ import annotations

from collections.abc import Iterable

from .config import Config
from .diagnosis import (
    ActionPlan,
    CacheMiss,
    CommentOnPR,
    ConfigurationViolation,
    Diagnosis,
    FlakyTest,
    InefficientJobOrder,
    InfraFailure,
    LongRuntime,
    RetryJob,
)
from .event import NormalizedEvent


def _retry(event: NormalizedEvent) -> list[ActionPlan]:
    return [] if event.job_id is None else [RetryJob(job_id=event.job_id)]


def _actions_for(
    event: NormalizedEvent, diagnosis: Diagnosis, config: Config
) -> list[ActionPlan]:
    match diagnosis:
        case FlakyTest(test_name=test_name, reason=reason):
            actions = _retry(event) if config.allow_flaky_retry else []
            repo = event.metadata.get("repository", "<repo>")
            actions.append(
                CommentOnPR(
                    f"⚠️ Flaky test detected: `{test_name}`\nReason: {reason}\nRepo: {repo}"
                )
            )
            return actions
        case LongRuntime(job_name=job_name, duration=duration):
            return [
                CommentOnPR(
                    f"⏱️ Job `{job_name}` took too long ({duration}s). "
                    "Consider caching or splitting steps."
                )
            ]
        case InefficientJobOrder(recommendation=recommendation):
            return [CommentOnPR(f"🔀 Job ordering could be improved: {recommendation}")]
        case CacheMiss(step=step):
            return [
                CommentOnPR(
                    f"📦 Cache miss detected at step: `{step}`. Consider persistent caching."
                )
            ]
        case ConfigurationViolation(description=description):
            return [CommentOnPR(f"🚨 Config violation: {description}")]
        case InfraFailure():
            return [
                *_retry(event),
                CommentOnPR("⚙️ Infrastructure failure detected. Retrying job..."),
            ]
    raise TypeError(f"unsupported diagnosis: {diagnosis!r}")


def plan_actions(
    event: NormalizedEvent, diagnoses: Iterable[Diagnosis], config: Config
) -> list[ActionPlan]:
    """Plan the actions for each diagnosis, in order."""
    return [
        action
        for diagnosis in diagnoses
        for action in _actions_for(event, diagnosis, config)
    ]
"""Findings produced by analysis and the actions planned in response."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class FlakyTest:
    """A test that failed in a way that looks intermittent."""

    test_name: str
    reason: str


@dataclass(frozen=True)
class LongRuntime:
    """A job that ran longer than it should; duration is in seconds."""

    job_name: str
    duration: int

    def __post_init__(self) -> None:
        if self.duration < 0:
            raise ValueError("duration must not be negative")


@dataclass(frozen=True)
class CacheMiss:
    """A step whose cache was not hit."""

    step: str


@dataclass(frozen=True)
class InfraFailure:
    """A failure caused by the CI infrastructure rather than the code."""


@dataclass(frozen=True)
class InefficientJobOrder:
    """Jobs that could be ordered better."""

    recommendation: str


@dataclass(frozen=True)
class ConfigurationViolation:
    """The pipeline breaks a configured rule."""

    description: str


Diagnosis = Union[
    FlakyTest,
    LongRuntime,
    CacheMiss,
    InfraFailure,
    InefficientJobOrder,
    ConfigurationViolation,
]


@dataclass(frozen=True)
class RetryJob:
    """Re-run a job."""

    job_id: str


@dataclass(frozen=True)
class CommentOnPR:
    """Post a comment on the pull or merge request."""

    message: str


@dataclass(frozen=True)
class SendEmail:
    """Send an e-mail notification."""

    subject: str
    body: str


@dataclass(frozen=True)
class SendSlack:
    """Post a message to a chat channel."""

    channel: str
    message: str


ActionPlan = Union[RetryJob, CommentOnPR, SendEmail, SendSlack]
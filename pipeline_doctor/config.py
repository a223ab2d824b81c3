"""Per-repository optimizer settings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import ConfigError


@dataclass(frozen=True)
class Config:
    """Settings read from a repository's optimizer file."""

    allow_flaky_retry: bool = True
    max_job_duration: int = 3600

    @classmethod
    def from_mapping(cls, data: Any) -> "Config":
        """Build a config from parsed data; both fields are required."""
        if not isinstance(data, Mapping):
            raise ConfigError("config must be a mapping")
        try:
            allow = data["allow_flaky_retry"]
        except KeyError:
            raise ConfigError("missing field `allow_flaky_retry`") from None
        try:
            duration = data["max_job_duration"]
        except KeyError:
            raise ConfigError("missing field `max_job_duration`") from None
        if not isinstance(allow, bool):
            raise ConfigError("allow_flaky_retry: expected a boolean")
        if isinstance(duration, bool) or not isinstance(duration, int):
            raise ConfigError("max_job_duration: expected an integer")
        if duration < 0:
            raise ConfigError("max_job_duration: expected a non-negative integer")
        return cls(allow_flaky_retry=allow, max_job_duration=duration)
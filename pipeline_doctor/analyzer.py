"""Fetch job logs and diagnose problems in them."""

from __future__ import annotations

import os
import re
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

import httpx

from .config import Config
from .diagnosis import Diagnosis, FlakyTest
from .errors import BadRequest, HttpClientError
from .event import EventType, NormalizedEvent

_TEST_FAILURE = re.compile(r"(test|spec).*failed")
_FLAKY_REASON = "Test matched failure pattern"
_UNKNOWN_TEST = "unknown_test"


@asynccontextmanager
async def _client_scope(client: httpx.AsyncClient | None) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient() as owned:
        yield owned


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


async def fetch_log_lines(
    logs_uri: str, client: httpx.AsyncClient | None = None
) -> list[str]:
    """Download a job log and return it line by line.

    GitHub URLs are fetched with ``GITHUB_TOKEN`` as a bearer token when set.
    """
    headers = {}
    if "github.com" in logs_uri:
        token = os.environ.get("GITHUB_TOKEN")
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"

    async with _client_scope(client) as http:
        try:
            response = await http.get(logs_uri, headers=headers)
        except httpx.HTTPError as exc:
            raise HttpClientError(f"Failed to fetch logs: {exc}") from exc

        if not response.is_success:
            raise BadRequest(
                f"Failed to fetch logs: HTTP {response.status_code} {response.reason_phrase}"
            )

        try:
            text = response.text
        except (httpx.HTTPError, UnicodeDecodeError) as exc:
            raise HttpClientError(f"Failed to read logs: {exc}") from exc

    return _split_lines(text)


def extract_test_name(line: str) -> str:
    """Return the first word of a log line, or ``unknown_test``."""
    words = line.split()
    return words[0] if words else _UNKNOWN_TEST


def detect_flaky_test(log_lines: Iterable[str]) -> tuple[str, str] | None:
    """Find the first line that looks like a failed test.

    Returns the test name and the reason, or None when nothing matched.
    """
    for line in log_lines:
        if _TEST_FAILURE.search(line.lower()):
            return extract_test_name(line), _FLAKY_REASON
    return None


async def analyze_event(
    event: NormalizedEvent,
    config: Config,
    client: httpx.AsyncClient | None = None,
) -> list[Diagnosis]:
    """Diagnose an event by reading its logs, if it has any."""
    diagnoses: list[Diagnosis] = []
    if event.logs_uri is None:
        return diagnoses

    log_lines = await fetch_log_lines(event.logs_uri, client)
    if event.event_type is EventType.JOB_FAILED:
        found = detect_flaky_test(log_lines)
        if found is not None:
            test_name, reason = found
            diagnoses.append(FlakyTest(test_name=test_name, reason=reason))
    return diagnoses
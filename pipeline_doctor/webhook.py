"""Authenticate incoming webhooks and turn them into events."""

from __future__ import annotations

import os
from collections.abc import Mapping

from .errors import ConfigError, Unauthorized
from .event import NormalizedEvent
from .github import parse_github_payload, verify_signature
from .gitlab import parse_gitlab_payload, verify_token

GITHUB_SIGNATURE_HEADER = "X-Hub-Signature-256"
GITLAB_TOKEN_HEADER = "X-Gitlab-Token"


def _is_visible_ascii(value: str) -> bool:
    return all(ch == "\t" or " " <= ch <= "~" for ch in value)


def _header(headers: Mapping[str, object], name: str) -> str | None:
    """Return the first value of a header, matched case-insensitively.

    Values that are not visible ASCII are treated as absent.
    """
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() != wanted:
            continue
        if isinstance(value, bytes):
            try:
                value = value.decode("ascii")
            except UnicodeDecodeError:
                return None
        if not isinstance(value, str) or not _is_visible_ascii(value):
            return None
        return value
    return None


async def process_github(headers: Mapping[str, object], body: bytes) -> NormalizedEvent:
    """Verify a GitHub webhook's signature and parse its body."""
    signature = _header(headers, GITHUB_SIGNATURE_HEADER)
    if signature is None:
        raise Unauthorized()
    secret = os.environ.get("GITHUB_WEBHOOK_SECRET")
    if secret is None:
        raise ConfigError("Missing GITHUB_WEBHOOK_SECRET")
    verify_signature(body, signature, secret)
    return parse_github_payload(body)


async def process_gitlab(headers: Mapping[str, object], body: bytes) -> NormalizedEvent:
    """Check a GitLab webhook's token and parse its body."""
    token = _header(headers, GITLAB_TOKEN_HEADER)
    if token is None:
        raise Unauthorized()
    expected = os.environ.get("GITLAB_WEBHOOK_TOKEN")
    if expected is None:
        raise ConfigError("Missing GITLAB_WEBHOOK_TOKEN")
    verify_token(token, expected)
    return parse_gitlab_payload(body)
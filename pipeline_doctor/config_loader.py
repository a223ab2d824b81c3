"""Load a repository's optimizer config from GitHub or GitLab."""

from __future__ import annotations

import base64
import binascii
import json
import os
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import quote

import httpx
import yaml

from .config import Config
from .errors import BadRequest, ConfigError
from .event import NormalizedEvent, Platform

GITHUB_API = "https://api.github.com"
GITLAB_API = "https://gitlab.com/api/v4"
CONFIG_PATHS = (".optimizer.yml", ".optimizer.json")


@asynccontextmanager
async def _client_scope(client: httpx.AsyncClient | None) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient() as owned:
        yield owned


def parse_config_bytes(data: bytes, path: str) -> Config:
    """Parse config file contents: YAML for ``.yml`` paths, JSON otherwise."""
    try:
        if path.endswith(".yml"):
            parsed = yaml.safe_load(data)
        else:
            parsed = json.loads(data)
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc
    return Config.from_mapping(parsed)


def _require(event: NormalizedEvent, key: str, what: str) -> str:
    value = event.metadata.get(key)
    if value is None:
        raise BadRequest(f"Missing {what} metadata")
    return value


def _content_of(payload: Any) -> str | None:
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if isinstance(payload, Mapping) and isinstance(payload.get("content"), str):
        return payload["content"]
    return None


def _decode(content: str) -> bytes:
    try:
        return base64.b64decode(content.replace("\n", ""), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigError(str(exc)) from exc


async def _fetch_content(
    client: httpx.AsyncClient, url: str, params: dict[str, str], headers: dict[str, str]
) -> str | None:
    try:
        response = await client.get(url, params=params, headers=headers)
    except httpx.HTTPError:
        return None
    if not response.is_success:
        return None
    try:
        payload = response.json()
    except ValueError:
        return None
    return _content_of(payload)


async def _load_from_github(event: NormalizedEvent, client: httpx.AsyncClient) -> Config:
    repo = _require(event, "repository", "repository")
    sha = _require(event, "commit_sha", "commit_sha")
    parts = repo.split("/")
    if len(parts) != 2:
        raise BadRequest("Invalid repository format")
    owner, name = parts

    for path in CONFIG_PATHS:
        url = f"{GITHUB_API}/repos/{owner}/{name}/contents/{path}"
        content = await _fetch_content(client, url, {"ref": sha}, {})
        if content is not None:
            return parse_config_bytes(_decode(content), path)
    return Config()


async def _load_from_gitlab(event: NormalizedEvent, client: httpx.AsyncClient) -> Config:
    project = _require(event, "project", "GitLab project")
    sha = _require(event, "commit_sha", "commit_sha")
    token = os.environ.get("GITLAB_TOKEN")
    if token is None:
        raise ConfigError("Missing GITLAB_TOKEN")

    headers = {"PRIVATE-TOKEN": token}
    for path in CONFIG_PATHS:
        url = (
            f"{GITLAB_API}/projects/{quote(project, safe='')}"
            f"/repository/files/{quote(path, safe='')}"
        )
        content = await _fetch_content(client, url, {"ref": sha}, headers)
        if content is not None:
            return parse_config_bytes(_decode(content), path)
    return Config()


async def load_for_event(
    event: NormalizedEvent, client: httpx.AsyncClient | None = None
) -> Config:
    """Fetch the optimizer config at the event's commit, or the defaults."""
    async with _client_scope(client) as http:
        if event.platform is Platform.GITHUB:
            return await _load_from_github(event, http)
        return await _load_from_gitlab(event, http)
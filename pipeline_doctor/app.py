"""The HTTP service that receives CI webhooks and feeds the agent."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import os
import sys
from collections.abc import Awaitable, Callable, Mapping, Sequence

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

from .agent import Agent
from .errors import AppError, ConfigError, InternalError
from .event import NormalizedEvent
from .webhook import process_github, process_gitlab

logger = logging.getLogger(__name__)

QUEUE_SIZE = 100
REQUIRED_SECRETS = ("GITHUB_WEBHOOK_SECRET", "GITLAB_WEBHOOK_TOKEN")

_Processor = Callable[[Mapping[str, object], bytes], Awaitable[NormalizedEvent]]


def validate_secrets(environ: Mapping[str, str] | None = None) -> None:
    """Raise ConfigError unless every webhook secret is set."""
    env = os.environ if environ is None else environ
    for name in REQUIRED_SECRETS:
        if name not in env:
            raise ConfigError(f"{name} environment variable is required")


def _error_response(exc: AppError) -> Response:
    return PlainTextResponse(exc.message, status_code=int(exc.status_code))


async def _handle(
    request: Request,
    queue: asyncio.Queue[NormalizedEvent | None],
    processor: _Processor,
) -> Response:
    try:
        body = await request.body()
        event = await processor(request.headers, body)
        await queue.put(event)
    except AppError as exc:
        return _error_response(exc)
    except Exception as exc:
        logger.exception("Unexpected failure handling webhook")
        return _error_response(InternalError(exc))
    return Response(status_code=202)


def create_app(queue: asyncio.Queue[NormalizedEvent | None]) -> Starlette:
    """Build the web application; accepted events are put on ``queue``."""

    async def github_webhook(request: Request) -> Response:
        return await _handle(request, queue, process_github)

    async def gitlab_webhook(request: Request) -> Response:
        return await _handle(request, queue, process_gitlab)

    return Starlette(
        routes=[
            Route("/github/webhook", github_webhook, methods=["POST"]),
            Route("/gitlab/webhook", gitlab_webhook, methods=["POST"]),
        ]
    )


async def _serve(host: str, port: int) -> None:
    queue: asyncio.Queue[NormalizedEvent | None] = asyncio.Queue(maxsize=QUEUE_SIZE)
    agent_task = asyncio.create_task(Agent(queue).run())
    server = uvicorn.Server(uvicorn.Config(create_app(queue), host=host, port=port))
    try:
        await server.serve()
    finally:
        agent_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await agent_task


def main(argv: Sequence[str] | None = None) -> int:
    """Check the environment, then serve webhooks and run the agent."""
    parser = argparse.ArgumentParser(
        prog="pipeline-doctor", description="Diagnose CI pipeline events."
    )
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=3000, help="port to listen on")
    args = parser.parse_args(argv)

    try:
        validate_secrets()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO)
    asyncio.run(_serve(args.host, args.port))
    return 0
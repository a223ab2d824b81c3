"""The background worker that diagnoses events and plans responses."""

from __future__ import annotations

import asyncio
import logging

import httpx

from .analyzer import analyze_event
from .config_loader import load_for_event
from .diagnosis import ActionPlan
from .event import NormalizedEvent
from .planner import plan_actions

logger = logging.getLogger(__name__)


class Agent:
    """Consume events from a queue and handle each one in turn.

    Putting ``None`` on the queue closes it: ``run`` returns once it is read.
    """

    def __init__(
        self,
        queue: asyncio.Queue[NormalizedEvent | None],
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._queue = queue
        self._client = client

    async def run(self) -> None:
        """Handle events until the queue is closed, logging any failures."""
        while True:
            event = await self._queue.get()
            try:
                if event is None:
                    return
                try:
                    await self.process_event(event)
                except Exception as exc:
                    logger.error("Error processing event: %s", exc)
            finally:
                self._queue.task_done()

    async def process_event(self, event: NormalizedEvent) -> list[ActionPlan]:
        """Load the repository config, analyse the event and plan actions."""
        logger.info("Processing event: %r", event)
        config = await load_for_event(event, self._client)
        diagnoses = await analyze_event(event, config, self._client)
        actions = plan_actions(event, diagnoses, config)
        for action in actions:
            logger.info("Planned action: %r", action)
        return actions
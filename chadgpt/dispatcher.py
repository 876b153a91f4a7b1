"""ChadGPT - Dispatcher. One ordered event stream, one consumer.

Protocol events are handled strictly in arrival order. A matched channel
message spawns an independent completion task; the task posts its result back
onto the same stream, so replies are sent from the dispatcher loop too. Replies
are unordered relative to each other.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Protocol

from .error_reporter import format_error, report_failure
from .events import (
    ChannelActions,
    ChannelMessage,
    CompletionFinished,
    Event,
    NickChanged,
    NickInUse,
    ParticipantQuit,
    Registered,
)
from .identity import IdentityManager
from .ignore_filter import is_ignored
from .message_utils import DEFAULT_MAX_LINES, format_completion
from .models import CompletionRequest, CompletionResult, IncomingMessage, PromptTemplate
from .prompt_builder import build_context, render_prompts

logger = logging.getLogger("chadgpt.dispatcher")


class CompletionGateway(Protocol):
    async def complete(self, request: CompletionRequest) -> CompletionResult: ...


class Dispatcher:
    def __init__(
        self,
        identity: IdentityManager,
        gateway: CompletionGateway,
        actions: ChannelActions,
        templates: Iterable[PromptTemplate],
        model: str,
        sampling: Optional[dict] = None,
        ignored_nicks: Iterable[str] = (),
        max_lines: int = DEFAULT_MAX_LINES,
        backend_name: str = "Anthropic",
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.identity = identity
        self.gateway = gateway
        self.actions = actions
        self.templates = list(templates)
        self.model = model
        self.sampling = dict(sampling or {})
        self.ignored_nicks = list(ignored_nicks)
        self.max_lines = max_lines
        self.backend_name = backend_name
        self.clock = clock
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._inflight: set[asyncio.Task] = set()

    @property
    def session(self):
        return self.identity.session

    def post(self, event: Event) -> None:
        self._queue.put_nowait(event)

    async def run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.handle(event)
            except Exception:
                logger.exception("Dispatcher failed to handle %r", event)
            finally:
                self._queue.task_done()

    async def handle(self, event: Event) -> None:
        logger.debug("%r", event)
        if isinstance(event, ChannelMessage):
            self._on_channel_message(event)
        elif isinstance(event, CompletionFinished):
            await self._on_completion(event)
        elif isinstance(event, Registered):
            await self.identity.on_registered(event)
        elif isinstance(event, NickInUse):
            await self.identity.on_nick_in_use(event)
        elif isinstance(event, NickChanged):
            await self.identity.on_nick_changed(event)
        elif isinstance(event, ParticipantQuit):
            await self.identity.on_participant_quit(event)
        else:
            logger.warning("Unknown event type: %s", type(event).__name__)

    def build_request(self, message: IncomingMessage, payload: str) -> CompletionRequest:
        context = build_context(message, payload, now=self.clock())
        return CompletionRequest(
            model=self.model,
            messages=render_prompts(self.templates, context),
            **self.sampling,
        )

    def _on_channel_message(self, event: ChannelMessage) -> None:
        # Never suspends; the backend call runs in its own task.
        if is_ignored(event.nick, self.ignored_nicks):
            return
        payload = self.session.addressed_payload(event.message)
        if payload is None:
            return

        message = event.to_incoming()
        request = self.build_request(message, payload)
        logger.debug("Requesting completion using instructions: %s", [m.model_dump() for m in request.messages])
        task = asyncio.create_task(
            self._complete(message, request),
            name=f"completion-{message.target_channel}-{message.sender_nick}",
        )
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _complete(self, message: IncomingMessage, request: CompletionRequest) -> None:
        try:
            result = await self.gateway.complete(request)
        except Exception as exc:
            logger.exception("Completion gateway raised for %s in %s", message.sender_nick, message.target_channel)
            result = CompletionResult.failure(str(exc) or type(exc).__name__)
        self.post(CompletionFinished(message=message, result=result))

    async def _on_completion(self, event: CompletionFinished) -> None:
        message, result = event.message, event.result
        try:
            lines = format_completion(result, message.sender_nick, self.max_lines)
        except Exception as exc:
            logger.exception("Failed to format reply for %s in %s", message.sender_nick, message.target_channel)
            lines = [format_error(message.sender_nick, self.backend_name, str(exc) or type(exc).__name__)]
        if lines is None:
            logger.warning(
                "%s error for %s in %s: %s",
                self.backend_name,
                message.sender_nick,
                message.target_channel,
                result.error,
            )
            lines = report_failure(result, message.sender_nick, self.backend_name)
        elif not lines:
            logger.info("Empty completion for %s in %s - nothing to say", message.sender_nick, message.target_channel)
            return
        for line in lines:
            await self.actions.say(message.target_channel, line)

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    async def wait_idle(self) -> None:
        """Block until no events are queued and no completion is outstanding."""
        while True:
            await self._queue.join()
            if not self._inflight:
                return
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def shutdown(self) -> None:
        tasks = list(self._inflight)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._inflight.clear()


async def run_dispatcher(dispatcher: Dispatcher) -> None:
    try:
        await dispatcher.run()
    finally:
        with suppress(asyncio.CancelledError):
            await dispatcher.shutdown()

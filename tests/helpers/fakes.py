"""Fake collaborators for dispatcher and identity tests."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from chadgpt.dispatcher import Dispatcher
from chadgpt.identity import IdentityManager
from chadgpt.models import CompletionRequest, CompletionResult, PromptTemplate

FIXED_NOW = datetime(2024, 3, 5, 12, 0, 0, tzinfo=timezone.utc)


class RecordingActions:
    def __init__(self):
        self.calls: list[tuple] = []

    async def join(self, channel: str) -> None:
        self.calls.append(("join", channel))

    async def say(self, channel: str, line: str) -> None:
        self.calls.append(("say", channel, line))

    async def change_nick(self, new_nick: str) -> None:
        self.calls.append(("nick", new_nick))

    def said(self) -> list[tuple[str, str]]:
        return [(call[1], call[2]) for call in self.calls if call[0] == "say"]


class ScriptedGateway:
    """Resolves each request with a preset result, optionally gated by an event."""

    def __init__(self, results: list[CompletionResult] | None = None):
        self.requests: list[CompletionRequest] = []
        self._results = list(results or [])
        self.gates: dict[int, asyncio.Event] = {}

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        index = len(self.requests)
        self.requests.append(request)
        gate = self.gates.get(index)
        if gate is not None:
            await gate.wait()
        if index < len(self._results):
            return self._results[index]
        return CompletionResult.success(["ok"])


def make_dispatcher(
    gateway,
    actions: RecordingActions | None = None,
    nick: str = "BotName",
    channels: list[str] | None = None,
    ignored_nicks: list[str] | None = None,
    templates: list[PromptTemplate] | None = None,
    keepnick: bool = False,
) -> Dispatcher:
    actions = actions or RecordingActions()
    identity = IdentityManager(
        actions,
        preferred_nick=nick,
        channels=channels or ["#chan"],
        keepnick=keepnick,
    )
    return Dispatcher(
        identity=identity,
        gateway=gateway,
        actions=actions,
        templates=templates or [PromptTemplate(role="user", content="{{message}}")],
        model="claude-test",
        sampling={"temperature": 0.5, "max_tokens": 64},
        ignored_nicks=ignored_nicks or [],
        max_lines=7,
        backend_name="Anthropic",
        clock=lambda: FIXED_NOW,
    )

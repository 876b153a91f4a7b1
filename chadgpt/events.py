"""ChadGPT - Events carried on the dispatcher's ordered stream, and the outbound action surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from .models import CompletionResult, IncomingMessage


@dataclass(frozen=True)
class Registered:
    nick: str


@dataclass(frozen=True)
class NickInUse:
    nick: str


@dataclass(frozen=True)
class NickChanged:
    nick: str
    new_nick: str


@dataclass(frozen=True)
class ChannelMessage:
    nick: str
    target: str
    message: str

    def to_incoming(self) -> IncomingMessage:
        return IncomingMessage(sender_nick=self.nick, target_channel=self.target, raw_text=self.message)


@dataclass(frozen=True)
class ParticipantQuit:
    nick: str


@dataclass(frozen=True)
class CompletionFinished:
    """Posted by a completion task when the backend call resolves."""

    message: IncomingMessage
    result: CompletionResult


Event = Union[Registered, NickInUse, NickChanged, ChannelMessage, ParticipantQuit, CompletionFinished]


class ChannelActions(Protocol):
    """Outbound protocol actions. None of them wait for delivery confirmation."""

    async def join(self, channel: str) -> None: ...

    async def say(self, channel: str, line: str) -> None: ...

    async def change_nick(self, new_nick: str) -> None: ...

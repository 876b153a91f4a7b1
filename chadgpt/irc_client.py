"""ChadGPT - IRC adapter over pydle.

Translates pydle callbacks into dispatcher events and implements the outbound
actions. Wire framing, handshake and parsing all stay inside pydle.
"""

from __future__ import annotations

import logging
from typing import Callable

import pydle

from .config import IRCConfig
from .events import ChannelMessage, Event, NickChanged, NickInUse, ParticipantQuit, Registered

logger = logging.getLogger("chadgpt.irc")


class IRCClient(pydle.Client):
    """Pydle client that posts protocol events onto the dispatcher stream."""

    # Reconnecting is left to whatever supervises the process; serve() returns on disconnect.
    RECONNECT_ON_ERROR = False

    def __init__(self, irc: IRCConfig, post: Callable[[Event], None], **kwargs):
        super().__init__(
            irc.nick,
            username=irc.username or irc.nick,
            realname=irc.realname or irc.nick,
            **kwargs,
        )
        self._irc = irc
        self._post = post

    async def start(self) -> None:
        logger.info("Connecting to %s:%d ..", self._irc.host, self._irc.port)
        await self.connect(
            hostname=self._irc.host,
            port=self._irc.port,
            tls=self._irc.tls,
            tls_verify=self._irc.tls_verify,
            password=self._irc.password,
        )

    async def on_raw(self, message):
        logger.debug("%s", message)
        await super().on_raw(message)

    async def on_connect(self):
        await super().on_connect()
        self._post(Registered(nick=self.nickname))

    async def on_raw_433(self, message):
        # Collision policy belongs to the identity manager, not pydle's fallback list.
        params = list(getattr(message, "params", []) or [])
        rejected = params[1] if len(params) > 1 else self.nickname
        self._post(NickInUse(nick=rejected))

    async def on_nick_change(self, old, new):
        await super().on_nick_change(old, new)
        self._post(NickChanged(nick=old, new_nick=new))

    async def on_channel_message(self, target, by, message):
        await super().on_channel_message(target, by, message)
        self._post(ChannelMessage(nick=by, target=target, message=message))

    async def on_quit(self, user, message=None):
        await super().on_quit(user, message)
        self._post(ParticipantQuit(nick=user))


class IRCActions:
    """ChannelActions backed by an IRCClient."""

    def __init__(self, client: IRCClient):
        self.client = client

    async def join(self, channel: str) -> None:
        await self.client.join(channel)

    async def say(self, channel: str, line: str) -> None:
        await self.client.message(channel, line)

    async def change_nick(self, new_nick: str) -> None:
        await self.client.set_nickname(new_nick)

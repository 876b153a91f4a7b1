"""ChadGPT - Identity lifecycle: nickname collisions, renames and reclaiming the preferred nick."""

from __future__ import annotations

import logging
from typing import Iterable

from .events import ChannelActions, NickChanged, NickInUse, ParticipantQuit, Registered
from .session import Session

logger = logging.getLogger("chadgpt.identity")

FALLBACK_SUFFIX = "_"


def fallback_nick(nick: str) -> str:
    return f"{nick}{FALLBACK_SUFFIX}"


class IdentityManager:
    """Sole owner and writer of the Session.

    Only protocol confirmations (registration, own rename) change the
    session; requests the manager sends out are never recorded optimistically.
    """

    def __init__(
        self,
        actions: ChannelActions,
        preferred_nick: str,
        channels: Iterable[str] = (),
        keepnick: bool = False,
        max_nick_attempts: int = 0,
        session: Session | None = None,
    ):
        self.actions = actions
        self.preferred_nick = preferred_nick
        self.channels = list(channels)
        self.keepnick = keepnick
        self.max_nick_attempts = max(0, int(max_nick_attempts or 0))
        self.session = session or Session()
        self._collisions = 0

    async def on_nick_in_use(self, event: NickInUse) -> None:
        # The attempt bound only guards registration; a failed reclaim later is always resubmitted.
        if not self.session.registered:
            self._collisions += 1
            if self.max_nick_attempts and self._collisions > self.max_nick_attempts:
                logger.error(
                    "Nick `%s' is already in use and %s fallback attempts are exhausted - giving up",
                    event.nick,
                    self.max_nick_attempts,
                )
                return
        new_nick = fallback_nick(event.nick)
        logger.info("Nick `%s' is already in use - switching to `%s'", event.nick, new_nick)
        await self.actions.change_nick(new_nick)

    async def on_registered(self, event: Registered) -> None:
        logger.info("Connected and registered with nick `%s'", event.nick)
        self.session.mark_registered(event.nick)
        self._collisions = 0
        for channel in self.channels:
            logger.info("Joining channel `%s'", channel)
            await self.actions.join(channel)

    async def on_nick_changed(self, event: NickChanged) -> None:
        if self.session.nickname is not None and event.nick == self.session.nickname:
            logger.info("I changed nickname to `%s'", event.new_nick)
            self.session.confirm_nickname(event.new_nick)
            return

        logger.info("`%s' changed nick to `%s'", event.nick, event.new_nick)
        if self._should_reclaim(event.nick):
            logger.info(
                "`%s' just changed nickname to `%s' - trying to take over the old nickname!",
                event.nick,
                event.new_nick,
            )
            await self.actions.change_nick(self.preferred_nick)

    async def on_participant_quit(self, event: ParticipantQuit) -> None:
        if self._should_reclaim(event.nick):
            logger.info("`%s' just quit - trying to take over the nickname!", event.nick)
            await self.actions.change_nick(self.preferred_nick)

    def _should_reclaim(self, departed_nick: str) -> bool:
        return (
            self.keepnick
            and self.session.registered
            and self.session.nickname != self.preferred_nick
            and departed_nick == self.preferred_nick
        )

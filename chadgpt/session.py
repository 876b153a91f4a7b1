"""ChadGPT - Session state: confirmed nickname, phase and highlight pattern."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Pattern

from .highlight import compile_highlight, extract_payload


class Phase(str, Enum):
    CONNECTING = "connecting"
    REGISTERED = "registered"


@dataclass
class Session:
    nickname: Optional[str] = None
    phase: Phase = Phase.CONNECTING
    highlight: Optional[Pattern[str]] = field(default=None, repr=False)

    @property
    def registered(self) -> bool:
        return self.phase is Phase.REGISTERED

    def confirm_nickname(self, nick: str) -> None:
        """Record a protocol-confirmed nickname and rebuild the highlight with it."""
        pattern = compile_highlight(nick)
        self.nickname = nick
        self.highlight = pattern

    def mark_registered(self, nick: str) -> None:
        self.confirm_nickname(nick)
        self.phase = Phase.REGISTERED

    def addressed_payload(self, text: str) -> Optional[str]:
        return extract_payload(self.highlight, text)

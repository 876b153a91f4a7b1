"""ChadGPT - Highlight matcher. Recognizes lines addressed to the bot."""

import re
from typing import Optional, Pattern


def compile_highlight(nick: str) -> Pattern[str]:
    # IRC nicks may contain regex metacharacters such as [ ] \ ^ { } |
    return re.compile(rf"^{re.escape(nick)}[,:] (?P<msg>.*)")


def extract_payload(pattern: Optional[Pattern[str]], text: str) -> Optional[str]:
    """Return the utterance after the address prefix, or None if not addressed.

    A missing pattern means the bot has not registered yet; nothing matches.
    """
    if pattern is None or not text:
        return None
    match = pattern.match(text)
    if not match:
        return None
    return match.group("msg")

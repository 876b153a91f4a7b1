"""ChadGPT - Ignore filter over glob patterns of nicknames."""

import re
from functools import lru_cache
from typing import Iterable, Pattern


@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> Pattern[str]:
    # Only * and ? are wildcards; brackets are ordinary nick characters.
    parts = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.DOTALL)


def glob_match(pattern: str, nick: str) -> bool:
    return _compile_glob(pattern).fullmatch(nick or "") is not None


def is_ignored(nick: str, patterns: Iterable[str]) -> bool:
    return any(glob_match(pattern, nick) for pattern in patterns or [])

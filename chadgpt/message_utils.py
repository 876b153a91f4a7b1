"""ChadGPT - Response shaping: markdown to plain text, blank-line collapsing, line caps."""

from __future__ import annotations

import re
from typing import Optional

from .models import CompletionResult

DEFAULT_MAX_LINES = 7

_FENCE = re.compile(r"^[ \t]*(```|~~~)[^\n]*\n(.*?)^[ \t]*\1[ \t]*$", re.MULTILINE | re.DOTALL)
_INLINE_CODE = re.compile(r"`([^`\n]+)`")
_IMAGE = re.compile(r"!\[([^\]]*)\]\(([^)\s]*)(?:\s+\"[^\"]*\")?\)")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]*)(?:\s+\"[^\"]*\")?\)")
_AUTOLINK = re.compile(r"<((?:https?|ftp|mailto):[^>\s]+)>")
_HEADING = re.compile(r"^[ \t]{0,3}#{1,6}[ \t]+(.*?)[ \t]*#*[ \t]*$", re.MULTILINE)
_SETEXT = re.compile(r"^(.+)\n[ \t]*(?:=+|-+)[ \t]*$", re.MULTILINE)
_RULE = re.compile(r"^[ \t]{0,3}(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$", re.MULTILINE)
_BLOCKQUOTE = re.compile(r"^[ \t]{0,3}>[ \t]?", re.MULTILINE)
_BULLET = re.compile(r"^([ \t]*)[*+-][ \t]+", re.MULTILINE)
_STAR_BOLD = re.compile(r"(?<![\w*])\*\*(?=\S)(.+?)(?<=\S)\*\*(?![\w*])", re.DOTALL)
_UNDERSCORE_BOLD = re.compile(r"(?<![\w_])__(?=\S)(.+?)(?<=\S)__(?![\w_])", re.DOTALL)
_STAR_ITALIC = re.compile(r"(?<![\w*])\*(?=\S)(.+?)(?<=\S)\*(?![\w*])")
_UNDERSCORE_ITALIC = re.compile(r"(?<![\w_])_(?=[^\s_])(.+?)(?<=[^\s_])_(?![\w_])")
_STRIKE = re.compile(r"~~(?=\S)(.+?)(?<=\S)~~")
_HTML_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
# Only tags models actually emit; `List<String>` and the like are prose.
_HTML_TAG = re.compile(r"</?(?:b|i|u|s|em|strong|p|span|div|code|pre|a|sub|sup|kbd)(?:\s[^<>]*)?/?>")
_STASHED = re.compile(r"\x00(\d+)\x00")
_ESCAPED = re.compile(r"\\([\\`*_{}\[\]()#+\-.!>~|])")
_REDUNDANT_BLANKS = re.compile(r"\n(?:[ \t]*\n){2,}")

_HTML_ENTITIES = {
    "&nbsp;": " ",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&amp;": "&",
}


def _link_text(match: re.Match) -> str:
    label, url = match.group(1), match.group(2)
    if not url or label == url:
        return label or url
    return f"{label} ({url})"


def _underscore_bold(match: re.Match) -> str:
    # __init__ and friends are identifiers, not emphasis.
    inner = match.group(1)
    return match.group(0) if re.fullmatch(r"\w+", inner) else inner


def markdown_to_text(text: str) -> str:
    """Flatten markdown into text that reads well in a plain-text channel."""
    if not text:
        return ""
    out = text.replace("\r\n", "\n").replace("\r", "\n")

    # Code first so its contents are left alone by the inline rules below.
    stash: list[str] = []

    def _keep(body: str) -> str:
        stash.append(body)
        return f"\x00{len(stash) - 1}\x00"

    out = _FENCE.sub(lambda m: _keep(m.group(2).rstrip("\n")), out)
    out = _INLINE_CODE.sub(lambda m: _keep(m.group(1)), out)

    out = _IMAGE.sub(lambda m: m.group(1) or m.group(2), out)
    out = _LINK.sub(_link_text, out)
    out = _AUTOLINK.sub(r"\1", out)
    out = _RULE.sub("", out)
    out = _HEADING.sub(r"\1", out)
    out = _SETEXT.sub(r"\1", out)
    out = _BLOCKQUOTE.sub("", out)
    out = _BULLET.sub(r"\1- ", out)
    out = _STAR_BOLD.sub(r"\1", out)
    out = _UNDERSCORE_BOLD.sub(_underscore_bold, out)
    out = _STAR_ITALIC.sub(r"\1", out)
    out = _UNDERSCORE_ITALIC.sub(r"\1", out)
    out = _STRIKE.sub(r"\1", out)
    out = _HTML_BREAK.sub("\n", out)
    out = _HTML_TAG.sub("", out)
    for entity, char in _HTML_ENTITIES.items():
        out = out.replace(entity, char)
    out = _ESCAPED.sub(r"\1", out)

    def _restore(match: re.Match) -> str:
        index = int(match.group(1))
        return stash[index] if index < len(stash) else match.group(0)

    return _STASHED.sub(_restore, out)


def remove_redundant_newlines(text: str) -> str:
    return _REDUNDANT_BLANKS.sub("\n\n", text or "")


def prefix_line(nick: str, line: str) -> str:
    return f"{nick}: {line}"


def truncation_notice(nick: str, omitted: int) -> str:
    return prefix_line(nick, f".. ({omitted} lines truncated from response)")


def format_reply(text: str, nick: str, max_lines: int = DEFAULT_MAX_LINES) -> list[str]:
    cleaned = remove_redundant_newlines(markdown_to_text(text)).strip()
    if not cleaned:
        return []
    lines = cleaned.split("\n")
    limit = max(1, int(max_lines))
    reply = [prefix_line(nick, line.rstrip()) for line in lines[:limit]]
    if len(lines) > limit:
        reply.append(truncation_notice(nick, len(lines) - limit))
    return reply


def format_completion(
    result: CompletionResult,
    nick: str,
    max_lines: int = DEFAULT_MAX_LINES,
) -> Optional[list[str]]:
    """Shape a successful result into channel lines.

    Returns None for failures (the error reporter handles those) and an empty
    list when the backend sent no content blocks.
    """
    if not result.ok:
        return None
    if not result.content:
        return []
    return format_reply(result.content[0], nick, max_lines)

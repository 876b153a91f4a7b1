"""ChadGPT - Prompt builder. Renders the configured prompt templates."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Iterable, Optional

from .models import IncomingMessage, PromptTemplate, RenderedPrompt

_VARIABLE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def _local_date_string(moment: datetime) -> str:
    local = moment.astimezone()
    offset = local.strftime("%z") or "+0000"
    zone = local.tzname() or "UTC"
    return local.strftime("%a %b %d %Y %H:%M:%S") + f" GMT{offset} ({zone})"


def _iso_date_string(moment: datetime) -> str:
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc.microsecond // 1000:03d}Z"


def _utc_date_string(moment: datetime) -> str:
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def build_context(
    message: IncomingMessage,
    payload: str,
    now: Optional[datetime] = None,
) -> dict[str, str]:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return {
        "nick": message.sender_nick,
        "channel": message.target_channel,
        "message": payload,
        "rawMessage": message.raw_text,
        "dateString": _local_date_string(moment),
        "dateISOString": _iso_date_string(moment),
        "dateUTCString": _utc_date_string(moment),
    }


def render_template(template: str, context: dict[str, str]) -> str:
    """Substitute {{variable}} markers. Unknown variables render empty."""
    return _VARIABLE.sub(lambda m: str(context.get(m.group(1), "")), template or "")


def render_prompts(
    templates: Iterable[PromptTemplate],
    context: dict[str, str],
) -> list[RenderedPrompt]:
    return [
        RenderedPrompt(role=template.role, content=render_template(template.content, context))
        for template in templates
    ]

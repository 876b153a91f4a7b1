"""ChadGPT - Error reporter. Turns a failed completion into one channel line."""

from .message_utils import prefix_line
from .models import CompletionResult


def format_error(nick: str, backend_name: str, error: str) -> str:
    message = " ".join((error or "").split()) or "unknown error"
    return prefix_line(nick, f"{backend_name} error: {message}")


def report_failure(result: CompletionResult, nick: str, backend_name: str) -> list[str]:
    if result.ok:
        return []
    return [format_error(nick, backend_name, result.error or "")]

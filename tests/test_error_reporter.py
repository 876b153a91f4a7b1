from chadgpt.error_reporter import format_error, report_failure
from chadgpt.models import CompletionResult


def test_error_line_names_sender_and_backend():
    assert format_error("alice", "Anthropic", "rate limited") == "alice: Anthropic error: rate limited"


def test_multiline_error_collapses_to_one_line():
    line = format_error("alice", "Anthropic", "rate\n  limited\t(try later)\n")
    assert line == "alice: Anthropic error: rate limited (try later)"


def test_blank_error_falls_back_to_unknown_error():
    for error in ["", "   ", "\n\t", None]:
        assert format_error("alice", "Anthropic", error) == "alice: Anthropic error: unknown error"


def test_report_failure_only_reports_failures():
    assert report_failure(CompletionResult.success(["fine"]), "alice", "Anthropic") == []
    assert report_failure(CompletionResult.failure("HTTP 529: overloaded"), "bob", "Claude") == [
        "bob: Claude error: HTTP 529: overloaded"
    ]

from chadgpt.message_utils import (
    format_completion,
    format_reply,
    markdown_to_text,
    remove_redundant_newlines,
)
from chadgpt.models import CompletionResult


def test_three_plain_lines_pass_through_without_notice():
    lines = format_reply("one\ntwo\nthree", "alice", max_lines=7)
    assert lines == ["alice: one", "alice: two", "alice: three"]


def test_nine_lines_are_capped_at_seven_with_truncation_notice():
    text = "\n".join(f"line {i}" for i in range(1, 10))
    lines = format_reply(text, "alice", max_lines=7)
    assert len(lines) == 8
    assert lines[:7] == [f"alice: line {i}" for i in range(1, 8)]
    assert lines[7] == "alice: .. (2 lines truncated from response)"


def test_exactly_max_lines_has_no_notice():
    text = "\n".join(str(i) for i in range(7))
    assert len(format_reply(text, "bob", max_lines=7)) == 7


def test_single_line_reply():
    assert format_reply("It is noon.", "alice") == ["alice: It is noon."]


def test_runs_of_blank_lines_collapse_to_one():
    assert remove_redundant_newlines("a\n\n\n\nb") == "a\n\nb"
    assert remove_redundant_newlines("a\n\nb") == "a\n\nb"
    assert remove_redundant_newlines("a\n  \n\t\n\nb") == "a\n\nb"


def test_reply_is_trimmed_and_collapsed_before_counting():
    lines = format_reply("\n\n  first\n\n\n\nsecond  \n\n", "alice")
    assert lines == ["alice: first", "alice: ", "alice: second"]


def test_markdown_emphasis_and_headings_become_plain():
    text = "# Title\n\nSome **bold**, *italic*, __very strong__ and ~~gone~~ text."
    assert markdown_to_text(text) == "Title\n\nSome bold, italic, very strong and gone text."


def test_markdown_links_and_code():
    text = "See [docs](https://example.com) and run `pip install x`."
    assert markdown_to_text(text) == "See docs (https://example.com) and run pip install x."


def test_fenced_code_keeps_its_contents_verbatim():
    text = "Try:\n```python\nprint(a*b*c)\n```\nDone."
    assert markdown_to_text(text) == "Try:\nprint(a*b*c)\nDone."


def test_lists_and_quotes_are_flattened():
    text = "> quoted\n* one\n+ two\n- three"
    assert markdown_to_text(text) == "quoted\n- one\n- two\n- three"


def test_snake_case_words_survive():
    assert markdown_to_text("use snake_case_names here") == "use snake_case_names here"


def test_dunder_names_are_not_emphasis():
    assert markdown_to_text("call __init__ and __main__") == "call __init__ and __main__"


def test_angle_brackets_in_prose_survive_while_html_tags_strip():
    assert markdown_to_text("Use List<String> here") == "Use List<String> here"
    assert markdown_to_text("<b>x</b> and <em>y</em>") == "x and y"


def test_placeholder_lookalikes_in_backend_text_do_not_break_formatting():
    assert markdown_to_text("see \x000\x00 here") == "see \x000\x00 here"
    assert markdown_to_text("`a` then \x005\x00") == "a then \x005\x00"


def test_empty_content_blocks_are_a_silent_no_op():
    assert format_completion(CompletionResult.success([]), "alice") == []


def test_only_first_content_block_is_used():
    result = CompletionResult.success(["first block", "second block"])
    assert format_completion(result, "alice") == ["alice: first block"]


def test_failures_are_left_to_the_error_reporter():
    assert format_completion(CompletionResult.failure("boom"), "alice") is None

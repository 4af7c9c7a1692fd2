from __future__ import annotations

from signal_plan.core.tokenizer import flatten_tokens, tokenize_page, tokenize_pages


def test_tokenize_page_collapses_whitespace_and_drops_blank_lines() -> None:
    text = "  時間   08:00\t09:00 \r\n\n   \n時制 01  02  "

    rows = tokenize_page(text)

    assert rows == [["時間", "08:00", "09:00"], ["時制", "01", "02"]]


def test_tokenize_page_handles_missing_text() -> None:
    assert tokenize_page(None) == []
    assert tokenize_page("") == []


def test_tokenize_pages_concatenates_in_page_order() -> None:
    rows = tokenize_pages(["a b\nc", None, "d"])

    assert rows == [["a", "b"], ["c"], ["d"]]


def test_flatten_tokens_reads_whole_page_as_one_stream() -> None:
    assert flatten_tokens("36 分相：01\n分相：02  ") == ["36", "分相：01", "分相：02"]
    assert flatten_tokens(None) == []

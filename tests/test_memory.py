import pytest

from codesphere.memory import (
    SessionMemory,
    tokenize,
    truncate_plain,
    truncate_with_ellipsis,
    word_overlap_count,
)


def seeded():
    memory = SessionMemory()
    memory.record_exchange("create a calculator function", "Generated a JavaScript calculator function")
    memory.record_exchange("make a to-do list app", "Created a Todo class with add, remove, and list methods")
    memory.record_exchange("write a recursive factorial function", "Created a factorial function using recursion")
    return memory


def test_tokenize_lowercases_and_splits_on_whitespace_runs():
    assert tokenize("  Make\ta   TODO\nlist ") == ["make", "a", "todo", "list"]
    assert tokenize("") == []


def test_word_overlap_counts_repeated_query_words():
    assert word_overlap_count("calc calc calc", "build a calc") == 3
    assert word_overlap_count("Calculator", "create a calculator function") == 1
    assert word_overlap_count("weather forecast", "create a calculator function") == 0


def test_truncation_policies_differ():
    assert truncate_plain("x" * 500) == "x" * 500
    assert truncate_plain("x" * 501) == "x" * 500
    assert truncate_with_ellipsis("x" * 500) == "x" * 500
    assert truncate_with_ellipsis("x" * 501) == "x" * 500 + "..."


def test_exchange_capacity_is_fifo():
    memory = SessionMemory()
    for i in range(12):
        memory.record_exchange(f"prompt {i}", f"response {i}")
        assert len(memory.exchanges) <= 10

    prompts = [e.prompt for e in memory.exchanges]
    assert prompts == [f"prompt {i}" for i in range(2, 12)]
    assert memory.exchanges[0].prompt == "prompt 2"


def test_file_capacity_is_fifo():
    memory = SessionMemory()
    for i in range(25):
        memory.record_file(f"f{i}.js", "code", f"prompt {i}")

    paths = [f.path for f in memory.file_records]
    assert paths == [f"f{i}.js" for i in range(5, 25)]


def test_exchange_response_is_cut_without_suffix():
    memory = SessionMemory()
    memory.record_exchange("p", "r" * 800)
    memory.record_exchange("q", "short")

    first, second = memory.exchanges
    assert first.response == "r" * 500
    assert second.response == "short"


def test_file_snippet_gets_ellipsis_only_when_cut():
    memory = SessionMemory()
    memory.record_file("big.py", "c" * 600, "big one")
    memory.record_file("small.py", "print(1)", "small one")

    big, small = memory.file_records
    assert big.content_snippet == "c" * 500 + "..."
    assert small.content_snippet == "print(1)"
    assert big.source_prompt == "big one"


def test_empty_strings_are_accepted():
    memory = SessionMemory()
    memory.record_exchange("", "")
    memory.record_file("", "", "")

    assert memory.exchanges[0].prompt == ""
    assert memory.file_records[0].content_snippet == ""
    assert memory.relevant_context("").is_empty()


def test_relevant_context_includes_calculator_exchange():
    memory = seeded()
    ctx = memory.relevant_context("I need a simple calculator with add and subtract")

    prompts = [e.prompt for e in ctx.exchanges]
    assert "create a calculator function" in prompts
    # "a" is shared too: no stopword filtering
    assert prompts == [
        "create a calculator function",
        "make a to-do list app",
        "write a recursive factorial function",
    ]


def test_relevant_context_excludes_unrelated_prompts():
    memory = seeded()
    ctx = memory.relevant_context("weather forecast dashboard")
    assert ctx.exchanges == []
    assert ctx.is_empty()


def test_relevant_context_takes_latest_relevant_not_best_overlap():
    memory = SessionMemory()
    memory.record_exchange("parse csv csv csv file", "e1")
    memory.record_exchange("unrelated thing", "x")
    memory.record_exchange("csv export", "e2")
    memory.record_exchange("csv import", "e3")
    memory.record_exchange("csv", "e4")

    ctx = memory.relevant_context("csv parse file")
    assert [e.response for e in ctx.exchanges] == ["e2", "e3", "e4"]


def test_relevant_context_keeps_last_two_files():
    memory = SessionMemory()
    for name in ("a.js", "b.js", "c.js"):
        memory.record_file(name, "code", "todo list")
    memory.record_file("d.js", "code", "weather")

    ctx = memory.relevant_context("Todo app")
    assert [f.path for f in ctx.files] == ["b.js", "c.js"]


def test_relevant_context_does_not_mutate():
    memory = seeded()
    before = memory.exchanges
    memory.relevant_context("calculator")
    assert memory.exchanges == before


def test_compact_keeps_last_entries_unconditionally():
    memory = SessionMemory(max_exchanges=20)
    for i in range(12):
        memory.record_exchange(f"prompt {i}", "r")

    dropped = memory.compact()
    assert dropped == 9
    assert [e.prompt for e in memory.exchanges] == ["prompt 9", "prompt 10", "prompt 11"]

    memory.compact(5)
    assert len(memory.exchanges) == 3
    memory.compact(0)
    assert memory.exchanges == []


def test_compact_leaves_file_records_alone():
    memory = seeded()
    memory.record_file("calc.js", "code", "calculator")
    memory.compact(1)
    assert len(memory.file_records) == 1


def test_logs_are_not_constructor_arguments():
    with pytest.raises(TypeError):
        SessionMemory(_exchanges=[None] * 50)
    assert "_exchanges" not in repr(SessionMemory())

from codesphere.context import enrich
from codesphere.memory import SessionMemory


def test_enrich_is_identity_on_empty_memory(capsys):
    prompt = "create a weather app"
    assert enrich(prompt, SessionMemory()) == prompt
    assert "Added context from 0 conversations and 0 files" in capsys.readouterr().out


def test_enrich_is_identity_without_memory():
    assert enrich("anything at all", None) == "anything at all"


def test_enrich_is_identity_when_nothing_relevant():
    memory = SessionMemory()
    memory.record_exchange("create a calculator function", "done")
    memory.record_file("calc.js", "code", "create a calculator function")
    assert enrich("weather forecast", memory) == "weather forecast"


def test_enrich_appends_exchange_context():
    memory = SessionMemory()
    memory.record_exchange("create a calculator function", "x" * 150)

    out = enrich("calculator with subtract", memory)
    assert out == (
        "calculator with subtract\n\n"
        "Context from previous interactions:\n"
        f'Previous related request: "create a calculator function" resulted in code that {"x" * 100}...'
    )


def test_enrich_appends_file_context_directly_after_prompt():
    memory = SessionMemory()
    memory.record_file("todo.js", "class Todo {}", "make a to-do list app")

    out = enrich("extend the list app", memory)
    assert out == (
        "extend the list app\n\n"
        "Previously created files:\n"
        'I previously created file todo.js for this request: "make a to-do list app"'
    )


def test_enrich_orders_conversations_before_files():
    memory = SessionMemory()
    memory.record_exchange("create a calculator function", "Generated a calculator")
    memory.record_exchange("calculator tests", "Generated tests")
    memory.record_file("calculator.js", "function calculator() {}", "create a calculator function")

    out = enrich("calculator", memory)
    prompt, conv, files = out.split("\n\n")
    assert prompt == "calculator"
    assert conv.splitlines() == [
        "Context from previous interactions:",
        'Previous related request: "create a calculator function" resulted in code that Generated a calculator...',
        'Previous related request: "calculator tests" resulted in code that Generated tests...',
    ]
    assert files.splitlines() == [
        "Previously created files:",
        'I previously created file calculator.js for this request: "create a calculator function"',
    ]


def test_enrich_reports_counts(capsys):
    memory = SessionMemory()
    memory.record_exchange("calculator", "r")
    memory.record_file("c.js", "code", "calculator")
    enrich("calculator", memory)
    assert "Added context from 1 conversations and 1 files" in capsys.readouterr().out


def test_enrich_does_not_touch_memory():
    memory = SessionMemory()
    memory.record_exchange("calculator", "r")
    enrich("calculator", memory)
    assert len(memory.exchanges) == 1

import asyncio
from stepwright.core.executor import ExecutionEngine
from stepwright.core.parser import ScriptParser
from stepwright.core.registry import StepRegistry
from stepwright.core.types import OutcomeStatus
from stepwright.report import format_duration, render_feature, status_symbol

def test_format_duration():
    assert format_duration(0) == "0ms"
    assert format_duration(999) == "999ms"
    assert format_duration(1500) == "1s 500ms"
    assert format_duration(3_723_004) == "1h 2m 3s 4ms"
    assert format_duration(60_000) == "1m 0ms"

def test_status_symbols_are_distinct():
    assert len({status_symbol(s) for s in OutcomeStatus}) == len(OutcomeStatus)

def test_render_feature_summary_and_errors():
    reg = StepRegistry()
    reg.register("ok", lambda ctx: None)

    def fails(ctx):
        raise ValueError("bad value")

    reg.register("fails", fails)
    feature = ScriptParser(reg).parse("Feature: Rendu\nScenario: a\nGiven ok\nWhen fails\nThen ok\n")
    outcome = asyncio.run(ExecutionEngine(reg).execute_feature(feature))
    text = render_feature(outcome)
    assert "=====Rendu=====" in text
    assert "Given ok" in text and "When fails" in text
    assert "ValueError: bad value" in text
    assert "Passed steps: 1/3 (33%)" in text

    quiet = render_feature(outcome, show_errors=False)
    assert "bad value" not in quiet

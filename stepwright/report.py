from __future__ import annotations
import traceback
from typing import List
from .core.errors import StepRuntimeError, describe_error
from .core.types import FeatureOutcome, OutcomeStatus

_SYMBOLS = {
    OutcomeStatus.OK: "✔",
    OutcomeStatus.WARNING: "⚠",
    OutcomeStatus.ERROR: "✘",
    OutcomeStatus.SKIPPED: "?",
}

def status_symbol(status: OutcomeStatus) -> str:
    return _SYMBOLS[status]

def format_duration(duration_ms: float) -> str:
    """Ex: 3723004 -> '1h 2m 3s 4ms'. La partie ms est toujours présente."""
    ms = int(round(duration_ms))
    hours, ms = divmod(ms, 3_600_000)
    minutes, ms = divmod(ms, 60_000)
    seconds, ms = divmod(ms, 1000)
    parts: List[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds:
        parts.append(f"{seconds}s")
    parts.append(f"{ms}ms")
    return " ".join(parts)

def _error_lines(error: BaseException) -> List[str]:
    # pour une exception de callback, on montre la trace de l'originale
    if isinstance(error, StepRuntimeError) and error.original.__traceback__ is not None:
        text = "".join(traceback.format_exception(error.original))
        return text.rstrip().splitlines()
    return [describe_error(error) or ""]

def render_feature(outcome: FeatureOutcome, *, show_errors: bool = True) -> str:
    name = outcome.feature.name
    bar = "=" * (len(name) + 10)
    lines = [bar, f"====={name}=====", bar]

    counts = {status: 0 for status in OutcomeStatus}
    total_ms = 0.0
    for scenario_outcome in outcome.scenario_outcomes:
        lines.append(f"  {status_symbol(scenario_outcome.status)}  {scenario_outcome.scenario.name}")
        for step_outcome in scenario_outcome.step_outcomes:
            total_ms += step_outcome.duration_ms
            counts[step_outcome.status] += 1
            lines.append(
                f"    {status_symbol(step_outcome.status)}  {step_outcome.step.raw_text}  {format_duration(step_outcome.duration_ms)}"
            )
            if show_errors and step_outcome.status is OutcomeStatus.ERROR and step_outcome.error is not None:
                lines.extend(f"        {l}" for l in _error_lines(step_outcome.error))

    if not outcome.scenario_outcomes and outcome.error is not None:
        lines.append(f"  {status_symbol(OutcomeStatus.ERROR)}  {describe_error(outcome.error)}")

    total = sum(counts.values())
    pct = round(counts[OutcomeStatus.OK] * 100 / total) if total else 0
    summary = f"Passed steps: {counts[OutcomeStatus.OK]}/{total} ({pct}%) {format_duration(total_ms)}"
    lines.append("_" * len(summary))
    lines.append(summary)
    return "\n".join(lines)

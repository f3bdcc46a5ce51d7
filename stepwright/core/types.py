from __future__ import annotations
import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from .errors import describe_error


class StepKind(str, Enum):
    BACKGROUND = "background"
    SCENARIO = "scenario"


class OutcomeStatus(str, Enum):
    # ordre de gravité pour l'affichage uniquement; WARNING est réservé
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class StepOptions:
    timeout_ms: int = 5000


@dataclass
class StepDefinition:
    pattern: str
    regex: re.Pattern
    converters: List[Callable[[str], Any]]
    callback: Callable[..., Any]
    options: StepOptions = field(default_factory=StepOptions)

    def match(self, text: str) -> Optional[re.Match]:
        return self.regex.fullmatch(text)

    def extract(self, text: str) -> list:
        """Arguments typés, dans l'ordre des placeholders du pattern."""
        m = self.match(text)
        if m is None:
            return []
        return [conv(m.group(f"arg{i}")) for i, conv in enumerate(self.converters)]


@dataclass
class Step:
    id: int
    kind: StepKind
    keyword: str
    text: str
    line: int = 0
    definition: Optional[StepDefinition] = None

    @property
    def raw_text(self) -> str:
        return f"{self.keyword} {self.text}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "keyword": self.keyword,
            "text": self.raw_text,
            "line": self.line,
            "defined": self.definition is not None,
            "pattern": self.definition.pattern if self.definition else None,
        }


@dataclass
class Scenario:
    id: int
    name: str
    steps: List[Step] = field(default_factory=list)
    line: int = 0

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "line": self.line, "steps": [s.to_dict() for s in self.steps]}


@dataclass
class Feature:
    name: str
    background_steps: List[Step] = field(default_factory=list)
    scenarios: List[Scenario] = field(default_factory=list)
    path: Optional[str] = None

    def scenario(self, scenario_id: int) -> Optional[Scenario]:
        return next((s for s in self.scenarios if s.id == scenario_id), None)

    def find_step(self, scenario: Scenario, step_id: int) -> Optional[Step]:
        # le background passe avant les étapes propres au scénario
        for step in [*self.background_steps, *scenario.steps]:
            if step.id == step_id:
                return step
        return None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": self.path,
            "backgroundSteps": [s.to_dict() for s in self.background_steps],
            "scenarios": [s.to_dict() for s in self.scenarios],
        }


class CancelToken:
    """Signal d'abandon posé par le moteur quand une étape dépasse son délai."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


@dataclass
class ExecutionContext:
    variables: dict = field(default_factory=dict)
    cancel: CancelToken = field(default_factory=CancelToken)


@dataclass
class StepOutcome:
    step: Step
    status: OutcomeStatus
    error: Optional[BaseException] = None
    duration_ms: float = 0

    def to_dict(self) -> dict:
        return {
            "step": self.step.id,
            "text": self.step.raw_text,
            "status": self.status.value,
            "error": describe_error(self.error),
            "durationMs": round(self.duration_ms),
        }


@dataclass
class ScenarioOutcome:
    scenario: Scenario
    status: OutcomeStatus = OutcomeStatus.OK
    step_outcomes: List[StepOutcome] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "scenario": self.scenario.id,
            "name": self.scenario.name,
            "status": self.status.value,
            "stepOutcomes": [o.to_dict() for o in self.step_outcomes],
        }


@dataclass
class FeatureOutcome:
    feature: Feature
    status: OutcomeStatus = OutcomeStatus.OK
    scenario_outcomes: List[ScenarioOutcome] = field(default_factory=list)
    error: Optional[BaseException] = None

    def to_dict(self) -> dict:
        return {
            "feature": self.feature.name,
            "status": self.status.value,
            "error": describe_error(self.error),
            "scenarioOutcomes": [o.to_dict() for o in self.scenario_outcomes],
        }


@dataclass
class StepProgress:
    scenario: Scenario
    index: int  # 1-based
    count: int
    step: Step

from .errors import (
    ConfigError,
    HookError,
    NotFoundError,
    ParseError,
    ScriptLoadError,
    StepRuntimeError,
    StepTimeoutError,
    StepwrightError,
    UndefinedStepError,
    ValidationError,
)
from .executor import ExecutionEngine
from .loader import load_scripts, resolve_scripts
from .parser import ScriptParser, load_feature
from .registry import StepRegistry
from .types import (
    ExecutionContext,
    Feature,
    FeatureOutcome,
    OutcomeStatus,
    Scenario,
    ScenarioOutcome,
    Step,
    StepDefinition,
    StepKind,
    StepOutcome,
    StepProgress,
)

__all__ = [
    "ConfigError", "ExecutionContext", "ExecutionEngine", "Feature", "FeatureOutcome", "HookError",
    "NotFoundError", "OutcomeStatus", "ParseError", "Scenario", "ScenarioOutcome",
    "ScriptLoadError", "ScriptParser", "Step", "StepDefinition", "StepKind", "StepOutcome",
    "StepProgress", "StepRegistry", "StepRuntimeError", "StepTimeoutError", "StepwrightError",
    "UndefinedStepError", "ValidationError", "load_feature", "load_scripts", "resolve_scripts",
]

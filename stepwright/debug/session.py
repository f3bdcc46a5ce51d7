from __future__ import annotations
import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional

from ..config import Settings
from ..core.errors import NotFoundError, StepTimeoutError, ValidationError, describe_error
from ..core.executor import ExecutionEngine
from ..core.loader import load_scripts
from ..core.parser import load_feature
from ..core.registry import StepRegistry
from ..core.types import ExecutionContext, Feature, OutcomeStatus
from ..tools.logs import log_event


@dataclass
class StepReply:
    status: OutcomeStatus
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"status": self.status.value}
        if self.error is not None:
            out["error"] = self.error
        return out


class DebugSession:
    """
    Rejeu interactif, dans n'importe quel ordre, des étapes d'une feature.

    Les variables survivent entre deux appels tant que l'opérateur reste sur
    le même scénario, et survivent aussi au rechargement. Changer de scénario
    repart d'un contexte vide, comme le fait l'exécution batch.

    Les écritures d'une étape ne sont conservées que si elle n'a pas expiré.
    """

    def __init__(
        self,
        registry: StepRegistry,
        feature_path: str | Path,
        script_paths: Iterable[str | Path],
        *,
        settings: Settings | None = None,
    ) -> None:
        self.registry = registry
        self.feature_path = Path(feature_path)
        self.script_paths: List[Path] = [Path(p) for p in script_paths]
        self.settings = settings
        self.engine = ExecutionEngine(registry)
        self.current_feature: Optional[Feature] = None
        self.current_context = ExecutionContext()
        self.last_scenario_id: Optional[int] = None
        self._lock = asyncio.Lock()

    def _log(self, message: str) -> None:
        if self.settings is not None:
            log_event(self.settings, f"[debug] {message}")

    async def open(self) -> Feature:
        return await self.reload()

    def get_feature(self) -> Feature:
        if self.current_feature is None:
            raise NotFoundError("No feature loaded")
        return self.current_feature

    async def reload(self) -> Feature:
        async with self._lock:
            # préparation dans un registre neuf: un échec laisse l'état intact
            staged = StepRegistry(default_timeout_ms=self.registry.default_timeout_ms)
            try:
                files = load_scripts(staged, self.script_paths)
                feature = load_feature(self.feature_path, staged)
            except Exception as exc:
                self._log(f"reload failed: {describe_error(exc)}")
                raise
            self.registry.replace_with(staged)
            self.current_feature = feature
            self._log(f"reloaded {feature.name!r} ({len(files)} script(s), {len(feature.scenarios)} scenario(s))")
            return feature

    def get_variables(self) -> dict:
        return dict(self.current_context.variables)

    async def set_variables(self, partial: Any) -> dict:
        if not isinstance(partial, Mapping):
            raise ValidationError("variables must be a mapping")
        if not all(isinstance(k, str) for k in partial):
            raise ValidationError("variable names must be strings")
        async with self._lock:
            # nouveau dict: un lecteur hors boucle ne voit jamais une mise à jour partielle
            self.current_context = ExecutionContext(variables={**self.current_context.variables, **partial})
            return dict(self.current_context.variables)

    async def run_step(self, scenario_id: int, step_id: int) -> StepReply:
        async with self._lock:
            feature = self.get_feature()
            scenario = feature.scenario(scenario_id)
            if scenario is None:
                raise NotFoundError(f"Scenario not found: {scenario_id}")
            step = feature.find_step(scenario, step_id)
            if step is None:
                raise NotFoundError(f"Step not found: {step_id} (scenario {scenario_id})")

            if scenario_id != self.last_scenario_id:
                # même règle que le batch: contexte vide à chaque changement de scénario
                self.current_context = ExecutionContext()
                self.last_scenario_id = scenario_id

            # copie de travail et jeton neufs: un callback abandonné au timeout
            # continue sur cette copie, jamais sur les variables de la session
            working = ExecutionContext(variables=dict(self.current_context.variables))
            outcome = await self.engine.execute_step(step, working)
            if not isinstance(outcome.error, StepTimeoutError):
                self.current_context = working
            self._log(f"scenario {scenario_id} step {step_id} {step.raw_text!r} -> {outcome.status.value}")
            return StepReply(status=outcome.status, error=describe_error(outcome.error))

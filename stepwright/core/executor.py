from __future__ import annotations
import asyncio
import contextlib
import inspect
import threading
import time
from typing import Any, Callable, Optional

from .errors import HookError, StepRuntimeError, StepTimeoutError, UndefinedStepError
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
    StepOutcome,
    StepProgress,
)

ProgressCallback = Callable[[StepProgress], None]


def _consume(task: asyncio.Future) -> None:
    # récupère l'issue d'une tâche abandonnée pour éviter les warnings asyncio
    if not task.cancelled():
        task.exception()


class ExecutionEngine:
    """
    Exécute une étape isolée ou une feature complète, dans l'ordre du document.

    Les callbacks coroutine tournent dans une tâche annulée au timeout; les
    callbacks synchrones tournent sur un thread démon et le jeton d'annulation
    du contexte est levé au timeout.
    """

    def __init__(self, registry: StepRegistry, *, on_progress: Optional[ProgressCallback] = None) -> None:
        self.registry = registry
        self.on_progress = on_progress

    # --- hooks ------------------------------------------------------------
    async def _run_hook(self, slot: str, *args: Any) -> None:
        fn = self.registry.hook(slot)
        if fn is None:
            return
        try:
            result = fn(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            raise HookError(slot, exc) from exc

    # --- course callback / minuteur ----------------------------------------
    @staticmethod
    def _in_thread(fn: Callable[..., Any], args: tuple) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        fut = loop.create_future()

        def settle(setter: Callable[[Any], None], value: Any) -> None:
            if not fut.done():
                setter(value)

        def target() -> None:
            try:
                result = fn(*args)
            except Exception as exc:
                outcome = (fut.set_exception, exc)
            else:
                outcome = (fut.set_result, result)
            # la boucle peut être fermée si l'étape a été abandonnée entre-temps
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(settle, *outcome)

        threading.Thread(target=target, name=f"step-{getattr(fn, '__name__', 'callback')}", daemon=True).start()
        return fut

    async def _race(self, definition: StepDefinition, context: ExecutionContext, args: list) -> None:
        timeout_ms = definition.options.timeout_ms
        deadline = time.perf_counter() + timeout_ms / 1000
        callback = definition.callback

        if inspect.iscoroutinefunction(callback):
            pending: asyncio.Future = asyncio.ensure_future(callback(context, *args))
        else:
            pending = self._in_thread(callback, (context, *args))

        while True:
            remaining = max(0.0, deadline - time.perf_counter())
            done, _ = await asyncio.wait({pending}, timeout=remaining)
            if not done:
                pending.cancel()
                pending.add_done_callback(_consume)
                context.cancel.cancel()
                raise StepTimeoutError(timeout_ms)
            result = pending.result()
            if not inspect.isawaitable(result):
                return
            # callable synchrone qui renvoie une coroutine (partial, lambda...)
            pending = asyncio.ensure_future(result)

    # --- opérations publiques ---------------------------------------------
    async def execute_step(self, step: Step, context: ExecutionContext) -> StepOutcome:
        """Exécute une étape; ne lève jamais, l'erreur est portée par le résultat."""
        if step.definition is None:
            return StepOutcome(step=step, status=OutcomeStatus.ERROR, error=UndefinedStepError(step.text))

        try:
            args = step.definition.extract(step.text)
        except Exception as exc:
            # conversion d'une expression personnalisée en échec
            err = StepRuntimeError(exc)
            err.__cause__ = exc
            return StepOutcome(step=step, status=OutcomeStatus.ERROR, error=err)

        outcome = StepOutcome(step=step, status=OutcomeStatus.OK)
        try:
            await self._run_hook("before_step", step, context)
        except HookError as exc:
            outcome.status, outcome.error = OutcomeStatus.ERROR, exc
        else:
            started = time.perf_counter()
            try:
                await self._race(step.definition, context, args)
            except StepTimeoutError as exc:
                outcome.status, outcome.error = OutcomeStatus.ERROR, exc
            except Exception as exc:
                err = StepRuntimeError(exc)
                err.__cause__ = exc
                outcome.status, outcome.error = OutcomeStatus.ERROR, err
            outcome.duration_ms = (time.perf_counter() - started) * 1000

        try:
            await self._run_hook("after_step", step, outcome)
        except HookError as exc:
            if outcome.status is OutcomeStatus.OK:
                outcome.status, outcome.error = OutcomeStatus.ERROR, exc
        return outcome

    async def execute_feature(self, feature: Feature, *, on_progress: Optional[ProgressCallback] = None) -> FeatureOutcome:
        progress = on_progress or self.on_progress
        outcome = FeatureOutcome(feature=feature)
        try:
            await self._run_hook("before_feature", feature)
        except HookError as exc:
            self._fail(outcome, exc)
        else:
            for scenario in feature.scenarios:
                outcome.scenario_outcomes.append(await self._execute_scenario(feature, scenario, outcome, progress))

        try:
            await self._run_hook("after_feature", feature, outcome)
        except HookError as exc:
            self._fail(outcome, exc)
        return outcome

    async def _execute_scenario(
        self,
        feature: Feature,
        scenario: Scenario,
        feature_outcome: FeatureOutcome,
        progress: Optional[ProgressCallback],
    ) -> ScenarioOutcome:
        # contexte neuf par scénario: aucune variable ne traverse les scénarios
        context = ExecutionContext()
        result = ScenarioOutcome(scenario=scenario)
        steps = [*feature.background_steps, *scenario.steps]

        try:
            await self._run_hook("before_scenario", scenario, context)
        except HookError as exc:
            result.status = OutcomeStatus.ERROR
            result.step_outcomes = [StepOutcome(step=s, status=OutcomeStatus.SKIPPED) for s in steps]
            self._fail(feature_outcome, exc)
        else:
            for index, step in enumerate(steps):
                if progress is not None:
                    progress(StepProgress(scenario=scenario, index=index + 1, count=len(steps), step=step))
                step_outcome = await self.execute_step(step, context)
                result.step_outcomes.append(step_outcome)
                if step_outcome.status is OutcomeStatus.ERROR:
                    result.status = OutcomeStatus.ERROR
                    self._fail(feature_outcome, step_outcome.error)
                    result.step_outcomes.extend(
                        StepOutcome(step=s, status=OutcomeStatus.SKIPPED) for s in steps[index + 1:]
                    )
                    break

        try:
            await self._run_hook("after_scenario", scenario, result)
        except HookError as exc:
            result.status = OutcomeStatus.ERROR
            self._fail(feature_outcome, exc)
        return result

    @staticmethod
    def _fail(outcome: FeatureOutcome, error: Optional[BaseException]) -> None:
        outcome.status = OutcomeStatus.ERROR
        outcome.error = error

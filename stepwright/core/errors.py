from __future__ import annotations


class StepwrightError(Exception):
    """Base pour toutes les erreurs du moteur."""


class ParseError(StepwrightError):
    """Document de scénario mal formé (fatal, rien n'est exécuté)."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        super().__init__(f"line {line}: {message}" if line is not None else message)


class ScriptLoadError(StepwrightError):
    """Script de définitions introuvable ou en échec à l'import."""


class ConfigError(StepwrightError):
    """Configuration invalide (profil, variable d'environnement)."""


class UndefinedStepError(StepwrightError):
    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Undefined step: {text}")


class StepTimeoutError(StepwrightError, TimeoutError):
    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Timeout after {timeout_ms} milliseconds.")


class StepRuntimeError(StepwrightError):
    """Le callback a levé une exception; l'originale est conservée."""

    def __init__(self, original: BaseException) -> None:
        self.original = original
        super().__init__(f"{type(original).__name__}: {original}")


class HookError(StepRuntimeError):
    def __init__(self, hook: str, original: BaseException) -> None:
        self.hook = hook
        super().__init__(original)
        self.args = (f"hook {hook} failed: {type(original).__name__}: {original}",)


class NotFoundError(StepwrightError):
    """Scénario ou étape inconnu(e) côté session de debug."""


class ValidationError(StepwrightError):
    """Payload de fusion de variables invalide."""


def describe_error(exc: BaseException | None) -> str | None:
    if exc is None:
        return None
    if isinstance(exc, StepwrightError):
        return str(exc)
    return f"{type(exc).__name__}: {exc}"

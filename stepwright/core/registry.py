from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .types import StepDefinition, StepOptions

HOOK_SLOTS = (
    "before_feature",
    "after_feature",
    "before_scenario",
    "after_scenario",
    "before_step",
    "after_step",
)

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def _to_number(raw: str) -> int | float:
    return float(raw) if "." in raw else int(raw)


def _unquote(raw: str) -> str:
    return raw[1:-1]


@dataclass
class Expression:
    name: str
    regex: str
    transform: Callable[[str], Any] = str


BUILTIN_EXPRESSIONS = {
    "number": Expression("number", r"-?\d+(?:\.\d+)?", _to_number),
    "string": Expression("string", r"\"[^\"]*\"|'[^']*'", _unquote),
    "word": Expression("word", r"\S+", str),
}


class StepRegistry:
    """
    Registre des définitions d'étapes et des hooks de cycle de vie.

    L'ordre d'enregistrement fait la priorité: `find` renvoie la première
    définition dont le pattern couvre toute la ligne. Chaque slot de hook
    ne contient qu'un callback, le dernier enregistré gagne.
    """

    def __init__(self, default_timeout_ms: int = 5000) -> None:
        self.default_timeout_ms = default_timeout_ms
        self.definitions: List[StepDefinition] = []
        self.expressions: Dict[str, Expression] = dict(BUILTIN_EXPRESSIONS)
        self._hooks: Dict[str, Optional[Callable]] = {slot: None for slot in HOOK_SLOTS}

    # --- expressions / patterns -------------------------------------------
    def define_expression(self, name: str, regex: str, transform: Callable[[str], Any] = str) -> None:
        self.expressions[name] = Expression(name, regex, transform)

    def compile(self, pattern: str) -> tuple[re.Pattern, list[Callable[[str], Any]]]:
        parts: list[str] = []
        converters: list[Callable[[str], Any]] = []
        pos = 0
        for m in _PLACEHOLDER.finditer(pattern):
            expr = self.expressions.get(m.group(1))
            if expr is None:
                raise ValueError(f"Unknown expression {{{m.group(1)}}} in pattern: {pattern}")
            parts.append(re.escape(pattern[pos:m.start()]))
            parts.append(f"(?P<arg{len(converters)}>{expr.regex})")
            converters.append(expr.transform)
            pos = m.end()
        parts.append(re.escape(pattern[pos:]))
        return re.compile("".join(parts)), converters

    def register(self, pattern: str, callback: Callable[..., Any], *, timeout_ms: int | None = None) -> StepDefinition:
        regex, converters = self.compile(pattern)
        definition = StepDefinition(
            pattern=pattern,
            regex=regex,
            converters=converters,
            callback=callback,
            options=StepOptions(timeout_ms=self.default_timeout_ms if timeout_ms is None else timeout_ms),
        )
        self.definitions.append(definition)
        return definition

    def step(self, pattern: str, *, timeout_ms: int | None = None):
        def deco(fn):
            self.register(pattern, fn, timeout_ms=timeout_ms)
            return fn
        return deco

    def find(self, text: str) -> Optional[StepDefinition]:
        for definition in self.definitions:
            if definition.match(text):
                return definition
        return None

    # --- hooks ------------------------------------------------------------
    def _set_hook(self, slot: str, fn: Callable) -> Callable:
        self._hooks[slot] = fn
        return fn

    def before_feature(self, fn: Callable) -> Callable:
        return self._set_hook("before_feature", fn)

    def after_feature(self, fn: Callable) -> Callable:
        return self._set_hook("after_feature", fn)

    def before_scenario(self, fn: Callable) -> Callable:
        return self._set_hook("before_scenario", fn)

    def after_scenario(self, fn: Callable) -> Callable:
        return self._set_hook("after_scenario", fn)

    def before_step(self, fn: Callable) -> Callable:
        return self._set_hook("before_step", fn)

    def after_step(self, fn: Callable) -> Callable:
        return self._set_hook("after_step", fn)

    def hook(self, slot: str) -> Optional[Callable]:
        if slot not in self._hooks:
            raise KeyError(slot)
        return self._hooks[slot]

    # --- rechargement -----------------------------------------------------
    def reset(self) -> None:
        self.definitions.clear()
        self.expressions = dict(BUILTIN_EXPRESSIONS)
        self._hooks = {slot: None for slot in HOOK_SLOTS}

    def replace_with(self, other: "StepRegistry") -> None:
        """reset() puis ré-enregistre tout le contenu de `other`."""
        self.reset()
        self.expressions.update(other.expressions)
        self.definitions.extend(other.definitions)
        for slot in HOOK_SLOTS:
            fn = other.hook(slot)
            if fn is not None:
                self._set_hook(slot, fn)

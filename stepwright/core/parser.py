from __future__ import annotations
import re
from pathlib import Path
from typing import Optional

from .errors import ParseError
from .registry import StepRegistry
from .types import Feature, Scenario, Step, StepKind

_SECTION = re.compile(r"^([A-Za-z]+):\s*(.*)$")
_STEP = re.compile(r"^(given|when|then|and|but)\b\s*(.*)$", re.IGNORECASE)

SCOPE_FEATURE = "feature"
SCOPE_BACKGROUND = "background"
SCOPE_SCENARIO = "scenario"


class ScriptParser:
    """Transforme un document texte en arbre Feature/Scenario/Step."""

    def __init__(self, registry: StepRegistry) -> None:
        self.registry = registry

    def parse(self, text: str, *, path: str | None = None) -> Feature:
        features: list[Feature] = []
        scope: Optional[str] = None
        step_id = 0
        scenario_id = 0

        for line_no, raw in enumerate(text.splitlines(), 1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            section = _SECTION.match(line)
            if section:
                keyword, rest = section.group(1).lower(), section.group(2).strip()
                if keyword == SCOPE_FEATURE:
                    if features:
                        raise ParseError("Multiple features per file are not allowed.", line=line_no)
                    features.append(Feature(name=rest, path=path))
                elif keyword in (SCOPE_BACKGROUND, SCOPE_SCENARIO):
                    if not features:
                        raise ParseError(f"{section.group(1)} outside of a feature.", line=line_no)
                    if keyword == SCOPE_SCENARIO:
                        scenario_id += 1
                        features[-1].scenarios.append(Scenario(id=scenario_id, name=rest, line=line_no))
                else:
                    raise ParseError(f"Scope not found: {section.group(1)}", line=line_no)
                scope = keyword
                continue

            if scope is None:
                raise ParseError(f"Step outside of any section: {line}", line=line_no)
            if scope == SCOPE_FEATURE:
                raise ParseError("Unexpected line in feature scope.", line=line_no)

            m = _STEP.match(line)
            if not m:
                raise ParseError(f"Incorrect step format: {line}", line=line_no)

            # une étape sans définition reste valide ici, l'échec est différé à l'exécution
            body = m.group(2).strip()
            step_id += 1
            kind = StepKind.BACKGROUND if scope == SCOPE_BACKGROUND else StepKind.SCENARIO
            step = Step(
                id=step_id,
                kind=kind,
                keyword=m.group(1),
                text=body,
                line=line_no,
                definition=self.registry.find(body),
            )
            if kind is StepKind.BACKGROUND:
                features[-1].background_steps.append(step)
            else:
                features[-1].scenarios[-1].steps.append(step)

        if len(features) > 1:
            raise ParseError("Multiple features per file are not allowed.")
        if not features:
            raise ParseError("No feature found in document.")
        return features[0]


def load_feature(path: str | Path, registry: StepRegistry) -> Feature:
    p = Path(path)
    if not p.is_file():
        raise ParseError(f"Feature not found: {p}")
    return ScriptParser(registry).parse(p.read_text(encoding="utf-8"), path=str(p))

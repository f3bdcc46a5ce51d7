from __future__ import annotations
import importlib.util
import itertools
from pathlib import Path
from typing import Iterable, List

from .errors import ScriptLoadError
from .registry import StepRegistry

# chaque chargement reçoit un nom de module neuf: le rechargement réimporte vraiment
_load_counter = itertools.count(1)


def resolve_scripts(paths: Iterable[str | Path]) -> List[Path]:
    out: list[Path] = []
    for raw in paths:
        p = Path(raw)
        if p.is_dir():
            out.extend(f for f in p.rglob("*.py") if f.is_file() and not f.name.startswith("_"))
        elif p.is_file():
            out.append(p)
        else:
            raise ScriptLoadError(f"Step definitions not found: {p}")
    # ordre stable, sans doublons
    return sorted({f.resolve() for f in out})


def _import_file(path: Path):
    name = f"stepwright_steps_{next(_load_counter)}_{path.stem}"
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ScriptLoadError(f"Cannot import step definitions: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def load_scripts(registry: StepRegistry, paths: Iterable[str | Path]) -> List[Path]:
    """
    Importe chaque script et appelle son point d'entrée `register(registry)`.

    Le registre n'est pas vidé ici; l'appelant fait `reset()` (ou prépare un
    registre neuf) avant un rechargement.
    """
    files = resolve_scripts(paths)
    for f in files:
        try:
            module = _import_file(f)
        except ScriptLoadError:
            raise
        except Exception as exc:
            raise ScriptLoadError(f"Failed to import {f}: {type(exc).__name__}: {exc}") from exc
        entry = getattr(module, "register", None)
        if not callable(entry):
            raise ScriptLoadError(f"No register(registry) entry point in {f}")
        try:
            entry(registry)
        except Exception as exc:
            raise ScriptLoadError(f"register() failed in {f}: {type(exc).__name__}: {exc}") from exc
    return files

from __future__ import annotations
from dataclasses import dataclass, field, fields
from pathlib import Path
import tomllib, os
from .core.errors import ConfigError

PROFILES = ["local", "ci"]

@dataclass
class General:
    profile: str = "local"
    log_dir: str = "data/logs"
    # nom du journal dans log_dir; {profile} est remplacé par le profil actif
    log_file: str = "stepwright-{profile}.log"
    # fichiers ou dossiers de définitions d'étapes (-r/--require)
    step_paths: list[str] = field(default_factory=lambda: ["steps"])
    default_timeout_ms: int = 5000

@dataclass
class Debug:
    host: str = "127.0.0.1"
    port: int = 3001

@dataclass
class Report:
    show_errors: bool = True
    progress: bool = True

@dataclass
class Settings:
    general: General
    debug: Debug
    report: Report

def _load_toml_if_exists(path: Path) -> dict:
    if path.exists():
        with path.open("rb") as f:
            return tomllib.load(f)
    return {}

def _read_profile_toml(config_path: Path, profile: str) -> dict:
    """
    Cherche dans:
      - config/defaults.toml et config/<profile>.toml
      - puis fallback: config/profiles/defaults.toml et config/profiles/<profile>.toml
    """
    cfg_dir = config_path if config_path.is_dir() else config_path.parent

    data = _load_toml_if_exists(cfg_dir / "defaults.toml")
    if not data:
        data = _load_toml_if_exists(cfg_dir / "profiles" / "defaults.toml")

    prof = _load_toml_if_exists(cfg_dir / f"{profile}.toml")
    if not prof:
        prof = _load_toml_if_exists(cfg_dir / "profiles" / f"{profile}.toml")

    # Fusion superficielle defaults <- profil
    base = data or {}
    for k, v in prof.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            base[k].update(v)
        else:
            base[k] = v
    return base

def _filter_for_dataclass(cls, data: dict) -> dict:
    """Ne garde que les clés connues du dataclass (évite TypeError sur clés en trop)."""
    allowed = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in allowed}

def load_settings(config: str | None, profile: str, overrides: dict | None = None) -> Settings:
    config_path = Path(config) if config else Path("config")
    raw = _read_profile_toml(config_path, profile)

    # Timeout par défaut via env prioritaire
    raw.setdefault("general", {})
    env_timeout = os.environ.get("STEPWRIGHT_TIMEOUT_MS")
    if env_timeout:
        try:
            timeout_ms = int(env_timeout)
        except ValueError:
            raise ConfigError(f"STEPWRIGHT_TIMEOUT_MS must be an integer, got {env_timeout!r}") from None
        if timeout_ms <= 0:
            raise ConfigError(f"STEPWRIGHT_TIMEOUT_MS must be positive, got {timeout_ms}")
        raw["general"]["default_timeout_ms"] = timeout_ms

    g = General(**_filter_for_dataclass(General, raw.get("general")))
    d = Debug(**_filter_for_dataclass(Debug, raw.get("debug")))
    r = Report(**_filter_for_dataclass(Report, raw.get("report")))
    g.profile = profile

    # Overrides (seulement sur General pour l'instant); None = non fourni en CLI
    if overrides:
        for k, v in overrides.items():
            if hasattr(g, k) and v is not None:
                setattr(g, k, v)

    return Settings(general=g, debug=d, report=r)

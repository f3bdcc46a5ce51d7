from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from ..config import Settings
from ..core.errors import ConfigError

def log_path(settings: Settings) -> Path:
    """Journal du profil actif: <log_dir>/<log_file>, {profile} substitué."""
    g = settings.general
    try:
        name = g.log_file.format(profile=g.profile)
    except (KeyError, IndexError, ValueError) as e:
        raise ConfigError(f"invalid general.log_file {g.log_file!r}: {e}") from e
    # un nom de fichier seul: le journal reste dans log_dir
    if not name or Path(name).name != name:
        raise ConfigError(f"general.log_file must be a plain file name, got {name!r}")
    return Path(g.log_dir) / name

def log_event(settings: Settings, message: str) -> Path:
    path = log_path(settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    ts = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
    with path.open("a", encoding="utf-8") as f:
        f.write(f"{ts} | [{settings.general.profile}] {message}\n")
    return path

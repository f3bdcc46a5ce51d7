from pathlib import Path
import pytest
from stepwright.config import load_settings
from stepwright.core.errors import ConfigError
from stepwright.tools.logs import log_event, log_path

def test_log_event_writes_line(tmp_path: Path):
    s = load_settings(config="config", profile="local")
    s.general.log_dir = str(tmp_path / "logs")
    p = log_event(s, "unit-test message")
    assert p.exists()
    data = p.read_text(encoding="utf-8").splitlines()[-1]
    assert "unit-test message" in data and "T" in data  # ISO timestamp
    assert "| [local] " in data

def test_each_profile_gets_its_own_log(tmp_path: Path):
    paths = []
    for profile in ("local", "ci"):
        s = load_settings(config="config", profile=profile)
        s.general.log_dir = str(tmp_path)
        paths.append(log_event(s, f"from {profile}"))
    assert [p.name for p in paths] == ["stepwright-local.log", "stepwright-ci.log"]
    assert paths[1].read_text(encoding="utf-8").count("\n") == 1

def test_fixed_log_file_name(tmp_path: Path):
    s = load_settings(config="config", profile="ci")
    s.general.log_dir = str(tmp_path)
    s.general.log_file = "run.log"
    assert log_path(s) == tmp_path / "run.log"

@pytest.mark.parametrize("name", ["{user}.log", "", "../escape.log", "sub/dir.log"])
def test_invalid_log_file_name(tmp_path: Path, name: str):
    s = load_settings(config="config", profile="local")
    s.general.log_dir = str(tmp_path)
    s.general.log_file = name
    with pytest.raises(ConfigError):
        log_event(s, "never written")

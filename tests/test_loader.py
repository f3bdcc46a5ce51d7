from pathlib import Path
import pytest
from stepwright.core.errors import ScriptLoadError
from stepwright.core.loader import load_scripts, resolve_scripts
from stepwright.core.registry import StepRegistry

SCRIPT = """
def register(steps):
    steps.register("the value is {number}", lambda ctx, n: None)
    steps.before_feature(lambda feature: None)
"""

def test_resolve_scripts_walks_directories(tmp_path: Path):
    (tmp_path / "steps" / "sub").mkdir(parents=True)
    (tmp_path / "steps" / "a.py").write_text(SCRIPT, encoding="utf-8")
    (tmp_path / "steps" / "sub" / "b.py").write_text(SCRIPT, encoding="utf-8")
    (tmp_path / "steps" / "_helpers.py").write_text("", encoding="utf-8")
    (tmp_path / "steps" / "notes.txt").write_text("", encoding="utf-8")
    files = resolve_scripts([tmp_path / "steps"])
    assert [f.name for f in files] == ["a.py", "b.py"]

def test_missing_path_raises(tmp_path: Path):
    with pytest.raises(ScriptLoadError):
        resolve_scripts([tmp_path / "nope"])

def test_load_scripts_calls_register(tmp_path: Path):
    script = tmp_path / "steps.py"
    script.write_text(SCRIPT, encoding="utf-8")
    reg = StepRegistry()
    files = load_scripts(reg, [script])
    assert files == [script.resolve()]
    assert reg.find("the value is 3") is not None
    assert reg.hook("before_feature") is not None

def test_reloading_picks_up_file_changes(tmp_path: Path):
    script = tmp_path / "steps.py"
    script.write_text(SCRIPT, encoding="utf-8")
    reg = StepRegistry()
    load_scripts(reg, [script])
    script.write_text(SCRIPT.replace("the value is", "the amount is"), encoding="utf-8")
    reg.reset()
    load_scripts(reg, [script])
    assert reg.find("the value is 3") is None
    assert reg.find("the amount is 3") is not None

def test_script_without_entry_point_raises(tmp_path: Path):
    script = tmp_path / "steps.py"
    script.write_text("X = 1\n", encoding="utf-8")
    with pytest.raises(ScriptLoadError, match="register"):
        load_scripts(StepRegistry(), [script])

def test_broken_script_raises(tmp_path: Path):
    script = tmp_path / "steps.py"
    script.write_text("def register(steps):\n    raise RuntimeError('nope')\n", encoding="utf-8")
    with pytest.raises(ScriptLoadError, match="nope"):
        load_scripts(StepRegistry(), [script])

def test_syntax_error_is_wrapped(tmp_path: Path):
    script = tmp_path / "steps.py"
    script.write_text("def register(:\n", encoding="utf-8")
    with pytest.raises(ScriptLoadError):
        load_scripts(StepRegistry(), [script])

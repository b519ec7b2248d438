from pathlib import Path

import pytest

import pagesmith.config as cfg_module
from pagesmith.errors import PagesmithError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("PAGESMITH_PORT", raising=False)


def test_missing_file_gives_defaults(tmp_path):
    cfg = cfg_module.load(tmp_path / "config.toml")
    assert cfg_module.get_port(cfg) == 8000
    assert cfg_module.get_interval(cfg) == 1.0
    assert cfg_module.get_output_dir(cfg) == Path("Output")
    assert cfg_module.get_bind(cfg) is None


def test_values_from_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        '[site]\noutput_dir = "public"\n\n'
        '[preview]\nport = 9000\ninterval = 0.5\nbind = "127.0.0.1"\n'
    )
    cfg = cfg_module.load(path)
    assert cfg_module.get_output_dir(cfg) == Path("public")
    assert cfg_module.get_port(cfg) == 9000
    assert cfg_module.get_interval(cfg) == 0.5
    assert cfg_module.get_bind(cfg) == "127.0.0.1"


def test_shell_env_overrides_port(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    path.write_text("[preview]\nport = 9000\n")
    monkeypatch.setenv("PAGESMITH_PORT", "9100")
    assert cfg_module.get_port(cfg_module.load(path)) == 9100


def test_dotenv_port(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("# local settings\nPAGESMITH_PORT='9200'\n")
    cfg = cfg_module.load(tmp_path / "config.toml")
    # .env values are exported into the process environment
    monkeypatch.delenv("PAGESMITH_PORT")
    assert cfg_module.get_port(cfg) == 9200


def test_invalid_env_port(tmp_path, monkeypatch):
    monkeypatch.setenv("PAGESMITH_PORT", "eighty")
    with pytest.raises(PagesmithError):
        cfg_module.load(tmp_path / "config.toml")

import os
import tomllib
from pathlib import Path
from typing import Any

from pagesmith.errors import PagesmithError

_DEFAULT_CONFIG_PATH = Path("config.toml")
_DEFAULT_ENV_PATH = Path(".env")

DEFAULT_PORT = 8000
DEFAULT_INTERVAL = 1.0
DEFAULT_READY_TIMEOUT = 10.0


def load(path: Path = _DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Load config from TOML, then overlay any settings from the environment.

    A missing config file is not an error: every setting has a default, and
    `pagesmith new` has to run before the file exists.
    """
    if path.exists():
        with open(path, "rb") as f:
            cfg = tomllib.load(f)
    else:
        cfg = {}
    _load_env(path.parent / _DEFAULT_ENV_PATH, cfg)
    return cfg


def _load_env(env_path: Path, cfg: dict) -> None:
    """
    Parse a .env file and inject values into the config dict.

    Supported variable names:
      PAGESMITH_PORT  -> cfg["preview"]["port"]

    Shell environment variables take precedence over .env values.
    """
    _apply_env_vars(cfg)

    if not env_path.exists():
        return

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            # Shell environment takes precedence over .env file
            if key not in os.environ:
                os.environ[key] = value

    _apply_env_vars(cfg)


def _apply_env_vars(cfg: dict) -> None:
    preview = cfg.setdefault("preview", {})
    if v := os.environ.get("PAGESMITH_PORT"):
        try:
            preview["port"] = int(v)
        except ValueError:
            raise PagesmithError(f"PAGESMITH_PORT must be a port number, got '{v}'.") from None


def get_site(cfg: dict) -> dict:
    return cfg.get("site", {})


def get_preview(cfg: dict) -> dict:
    return cfg.get("preview", {})


def get_output_dir(cfg: dict) -> Path:
    return Path(get_site(cfg).get("output_dir", "Output"))


def get_port(cfg: dict) -> int:
    return int(get_preview(cfg).get("port", DEFAULT_PORT))


def get_interval(cfg: dict) -> float:
    return float(get_preview(cfg).get("interval", DEFAULT_INTERVAL))


def get_ready_timeout(cfg: dict) -> float:
    return float(get_preview(cfg).get("ready_timeout", DEFAULT_READY_TIMEOUT))


def get_bind(cfg: dict) -> str | None:
    return get_preview(cfg).get("bind")

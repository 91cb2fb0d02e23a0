import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

INTERPRETER_KEY = "PYTHON_EXECUTION_INTERPRETER"
TIMEOUT_KEY = "PYTHON_EXECUTION_TIMEOUT_SEC"
ROOT_KEY = "PYTHON_EXECUTION_ROOT"
LOG_LEVEL_KEY = "LOG_LEVEL"

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "python-execution-service"
EXTENSION_ROOT_DIR = Path(__file__).resolve().parent
INTERPRETER_INFO_SCRIPT = Path("pythonFiles") / "interpreterInfo.py"


@dataclass(frozen=True)
class Settings:
    python_path: str
    timeout_sec: Optional[float]
    extension_root: Path
    log_level: str


def load_env_file(path: Path) -> Dict[str, str]:
    data: Dict[str, str] = {}
    if not path.exists():
        return data
    try:
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            data[k.strip()] = v.strip()
    except OSError as exc:
        logger.warning("Failed to read %s: %s", path, exc)
    return data


def get_env_path(config_dir: Path) -> Path:
    return config_dir / ".env"


def get_env_value(key: str, env_file: Mapping[str, str], env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    source = env if env is not None else os.environ
    return (source.get(key) or "").strip() or (env_file.get(key) or "").strip() or None


def parse_timeout(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return max(1.0, value)


def load_settings(config_dir: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from the process environment, falling back to ``<config_dir>/.env``."""
    resolved_dir = (config_dir or DEFAULT_CONFIG_DIR).expanduser()
    env_file = load_env_file(get_env_path(resolved_dir))

    root_raw = get_env_value(ROOT_KEY, env_file, env)
    return Settings(
        python_path=get_env_value(INTERPRETER_KEY, env_file, env) or sys.executable,
        timeout_sec=parse_timeout(get_env_value(TIMEOUT_KEY, env_file, env)),
        extension_root=Path(root_raw).expanduser().resolve() if root_raw else EXTENSION_ROOT_DIR,
        log_level=(get_env_value(LOG_LEVEL_KEY, env_file, env) or "INFO").upper(),
    )

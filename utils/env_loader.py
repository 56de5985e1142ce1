import os
from pathlib import Path
from typing import Dict


def read_key_values(path: str) -> Dict[str, str]:
    """Read ``key = value`` lines; comments and ``[section]`` headers are skipped."""
    conf_file = Path(path)
    if not conf_file.exists():
        return {}

    values: Dict[str, str] = {}
    for raw_line in conf_file.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", ";", "[")) or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            values[key] = value.strip().strip("'").strip('"')
    return values


def load_environments(env_path: str = ".env") -> None:
    for key, value in read_key_values(env_path).items():
        if key not in os.environ:
            os.environ[key] = value

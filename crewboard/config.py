"""Config defaults and settings file loading."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

SETTINGS_ENV = "CREWBOARD_SETTINGS"

DEFAULT_CONFIG: Dict[str, Any] = {
    "SECRET_KEY": "dev",
    "HOLIDAY_STATE": "QLD",
    "LABEL_BUDGET": 12,
    "SHOW_WEEKENDS": False,
    "DEFAULT_VIEW": "week",
    "LOG_LEVEL": "INFO",
    "AUTO_INIT_DB": True,
}


def load_config(path: str | Path) -> Dict[str, Any]:
    """Read a YAML or JSON settings file; only upper-case keys are kept."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(fh) or {}
        else:
            data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return {key: value for key, value in data.items() if key.isupper()}

"""
Project configuration.

Values come from ``config.yaml`` at the project root (override the path with
``FINANCE_DASHBOARD_CONFIG``).  ``.env`` is loaded first so that
``OPENAI_MODEL`` and friends can override the YAML file.

Example config.yaml
-------------------
    llm:
      model: gpt-4o-mini
      temperature: 0.7
    server:
      port: 5000
    profile_defaults:
      monthly_income: 5000
      risk_tolerance: medium
    store:
      seed_demo_data: true
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()

_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config.yaml"

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "llm": {
        "model": "gpt-4o-mini",
        "temperature": 0.7,
        "max_tokens": 2048,
        "timeout": None,
    },
    "server": {
        "host": "0.0.0.0",
        "port": 5000,
    },
    "profile_defaults": {
        "monthly_income": 5000,
        "risk_tolerance": "medium",
    },
    "store": {
        "seed_demo_data": True,
    },
}


def _config_path() -> Path:
    override = os.getenv("FINANCE_DASHBOARD_CONFIG", "").strip()
    return Path(override) if override else _CONFIG_PATH


def _read_yaml(path: Path) -> dict:
    if path.exists():
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """
    Return the merged configuration: built-in defaults, then the YAML file,
    then environment overrides.  Unknown sections in the YAML are kept.
    """
    raw = _read_yaml(Path(path) if path else _config_path())

    merged: Dict[str, Dict[str, Any]] = {k: dict(v) for k, v in DEFAULTS.items()}
    for section, values in raw.items():
        if isinstance(values, dict):
            merged.setdefault(section, {}).update(values)

    model = os.getenv("OPENAI_MODEL", "").strip()
    if model:
        merged["llm"]["model"] = model
    return merged


def get_section(name: str) -> Dict[str, Any]:
    """Shortcut for ``load_config()[name]`` (empty dict when missing)."""
    return load_config().get(name, {})

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml


REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = REPO_ROOT / "configs" / "config.yaml"


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    cfg_path = Path(config_path).resolve() if config_path else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    if not isinstance(cfg, dict):
        raise ValueError("Invalid config format: expected a mapping at root.")
    return cfg


def comfort_band(cfg: Dict[str, Any], variant: str) -> tuple[float, float]:
    bands = (cfg.get("forecast") or {}).get("comfort_bands") or {}
    if variant not in bands:
        raise ValueError(f"Missing forecast.comfort_bands.{variant} in config.")
    low, high = bands[variant]
    return float(low), float(high)

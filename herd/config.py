"""Configuration loading from settings.yaml and .env."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv


def load_config(
    config_dir: str | Path | None = None,
) -> dict:
    """Load settings.yaml and .env, return merged config dict."""
    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent / "config"
    config_dir = Path(config_dir)

    # .env is optional
    load_dotenv(config_dir / ".env")

    settings_path = config_dir / "settings.yaml"
    if not settings_path.exists():
        raise FileNotFoundError(f"Config not found: {settings_path}")

    with open(settings_path, encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    seed = os.getenv("HIGHLAND_SEED", "").strip()
    cfg["_env"] = {
        "save_file": os.getenv("HIGHLAND_SAVE_FILE", ""),
        "history_db": os.getenv("HIGHLAND_HISTORY_DB", ""),
        "seed": int(seed) if seed.lstrip("-").isdigit() else None,
    }

    return cfg

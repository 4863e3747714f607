"""
Configuration loading for the retrieval pipeline.

Settings live in config/config.yaml; secrets (API keys, endpoints) come from
the environment (.env is loaded by the scripts via python-dotenv).
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"


def load_config(path: Optional[str] = None) -> dict:
    """
    Load configuration from YAML.

    Resolution order: explicit path, RAG_CONFIG_PATH env var, config/config.yaml.
    A missing file yields an empty dict so every component falls back to defaults.
    """
    config_path = Path(path or os.getenv("RAG_CONFIG_PATH") or DEFAULT_CONFIG_PATH)
    if not config_path.exists():
        logger.debug(f"Config file not found at {config_path} - using defaults")
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_section(config: Optional[dict], name: str) -> dict:
    """Return a config section, or an empty dict if absent."""
    if not config:
        return {}
    return config.get(name) or {}

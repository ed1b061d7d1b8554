#!/usr/bin/env python3
"""
Configuration for cross-wiki contribution surveys.

Settings come from built-in defaults, then an optional config.json, then
environment variables.

config.json layout:
    {
        "wiki": {"home": "en.wikipedia.org", "meta": "meta.wikimedia.org", "api_path": "/w/api.php"},
        "requests": {"user_agent": "...", "delay_seconds": 1, "timeout_seconds": 30,
                     "max_retries": 1, "retry_delay_seconds": 5},
        "output": {"outfile": "spam.txt", "log_dir": "./logs"}
    }
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from xwiki_survey.wiki_api import DEFAULT_USER_AGENT

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.json"

# Environment variable -> (attribute, type)
ENV_OVERRIDES = {
    "XWIKI_HOME_WIKI": ("home_wiki", str),
    "XWIKI_META_WIKI": ("meta_wiki", str),
    "XWIKI_USER_AGENT": ("user_agent", str),
    "XWIKI_DELAY": ("delay", float),
    "XWIKI_TIMEOUT": ("timeout", float),
    "XWIKI_MAX_RETRIES": ("max_retries", int),
    "XWIKI_OUTFILE": ("outfile", str),
    "LOG_DIR": ("log_dir", str),
}

# JSON section -> {key: attribute}
JSON_KEYS = {
    "wiki": {"home": "home_wiki", "meta": "meta_wiki", "api_path": "api_path"},
    "requests": {
        "user_agent": "user_agent",
        "delay_seconds": "delay",
        "timeout_seconds": "timeout",
        "max_retries": "max_retries",
        "retry_delay_seconds": "retry_delay",
    },
    "output": {"outfile": "outfile", "log_dir": "log_dir"},
}


@dataclass
class SurveyConfig:
    """Settings shared by every session and the report writer."""

    home_wiki: str = "en.wikipedia.org"
    meta_wiki: str = "meta.wikimedia.org"
    api_path: str = "/w/api.php"
    user_agent: str = DEFAULT_USER_AGENT
    delay: float = 1.0
    timeout: float = 30.0
    max_retries: int = 1
    retry_delay: float = 5.0
    outfile: str = "spam.txt"
    log_dir: str = "./logs"


def _coerce(name: str, value, kind):
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid value for {name}: {value!r}") from None


def load_config(path: Optional[str] = None) -> SurveyConfig:
    """
    Load settings from defaults, config.json and the environment.

    Args:
        path: Config file to read (default: config.json in the project root,
              skipped if missing; an explicit path must exist)

    Returns:
        Populated SurveyConfig

    Raises:
        ValueError: if a setting has the wrong type
    """
    config = SurveyConfig()
    defaults = SurveyConfig()

    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if path or config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        for section, keys in JSON_KEYS.items():
            for key, attr in keys.items():
                if key in data.get(section, {}):
                    kind = type(getattr(defaults, attr))
                    value = _coerce(f"{section}.{key}", data[section][key], kind)
                    setattr(config, attr, value)

    for env_name, (attr, kind) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            setattr(config, attr, _coerce(env_name, value, kind))

    return config

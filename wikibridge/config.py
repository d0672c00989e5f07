#!/usr/bin/env python3
"""
Configuration loading for wikibridge scripts.

Settings live in a JSON file:

    {
        "wiki": {"api_url": "https://en.wikipedia.org/w/", "token": null},
        "client": {"timeout_seconds": 30, "user_agent": "MyTool/1.0", "max_concurrency": 8},
        "logging": {"dir": "./logs", "level": "INFO"}
    }

Keys left out keep their defaults.
"""

import copy
import json
import os
from pathlib import Path
from typing import Optional

CONFIG_ENV = "WIKIBRIDGE_CONFIG"

DEFAULT_CONFIG = {
    "wiki": {
        "api_url": None,
        "token": None,
    },
    "client": {
        "timeout_seconds": 30.0,
        "user_agent": None,
        "max_concurrency": 8,
    },
    "logging": {
        "dir": None,
        "level": "INFO",
    },
}


def get_config_path(path: Optional[str] = None) -> Path:
    """
    Resolve the config file location.

    Uses the given path, else the WIKIBRIDGE_CONFIG environment variable,
    else ./config.json.
    """
    if path is not None:
        return Path(path)
    return Path(os.environ.get(CONFIG_ENV, "config.json"))


def load_config(path: Optional[str] = None) -> dict:
    """
    Load settings, merged over DEFAULT_CONFIG section by section.

    Args:
        path: Config file (default: get_config_path())

    Returns:
        Config dict; the defaults when the file does not exist
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = get_config_path(path)
    if not config_path.exists():
        return config

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    for section, values in data.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values
    return config

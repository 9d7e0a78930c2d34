from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

DEFAULT_CONFIG = os.path.join('data', 'config.json')


class ConfigError(RuntimeError):
    """The configuration document could not be read or parsed."""


def debug_enabled() -> bool:
    return os.getenv('MUTATION_DEBUG', '0').lower() in ('1', 'true', 'yes', 'on')


def debug(tag: str, message: str) -> None:
    if debug_enabled():
        print(f"[{tag}] {message}")


def resolve_config_path(path: Optional[str] = None) -> str:
    """Explicit path, then MUTATION_CONFIG, then data/config.json next to this repo or the cwd."""
    if path:
        return path
    env = os.getenv('MUTATION_CONFIG')
    if env:
        return env
    here = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    bundled = os.path.join(here, DEFAULT_CONFIG)
    if os.path.isfile(bundled):
        return bundled
    return os.path.join(os.getcwd(), DEFAULT_CONFIG)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Reads the catalog configuration JSON. Raises ConfigError on any failure."""
    resolved = resolve_config_path(path)
    debug('config', f"loading {resolved}")
    try:
        with open(resolved, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {resolved}: {e}") from e
    except ValueError as e:
        raise ConfigError(f"invalid JSON in {resolved}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be an object: {resolved}")
    return data

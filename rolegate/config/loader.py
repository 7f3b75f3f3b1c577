"""YAML config and policy loading with env var expansion."""

import json
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import RolegateConfig


def load_config(cli_path: str | None = None) -> RolegateConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./rolegate.yaml"),
        Path.home() / ".rolegate" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return RolegateConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e
            except TypeError as e:
                raise ValueError(f"Invalid config in {path}: expected a mapping") from e

    return RolegateConfig()


def load_policy(path: str | Path, fmt: str = "auto") -> Any:
    """Read a grants file in object or flat-list form.

    ``fmt="auto"`` picks JSON for a ``.json`` suffix and YAML otherwise.
    Shape problems in the grants themselves surface later, as access-control
    errors, when the result is imported.
    """
    path = Path(path)
    if fmt == "auto":
        fmt = "json" if path.suffix.lower() == ".json" else "yaml"
    if fmt not in ("yaml", "json"):
        raise ValueError(f"Unsupported policy format: {fmt!r}")
    if not path.exists():
        raise ValueError(f"Policy file not found: {path}")

    try:
        with open(path) as f:
            raw = json.load(f) if fmt == "json" else yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if raw is None:
        raise ValueError(f"Policy file is empty: {path}")
    return _expand_env_vars(raw)


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `rolegate config init`
DEFAULT_CONFIG_TEMPLATE = """\
# rolegate.yaml

# Policy file holding the grants (object form or flat list)
policy:
  path: "policy.yaml"
  format: "auto"               # auto | yaml | json
  lock_on_load: false

# Logging
log_level: "info"              # debug | info | warn | error
"""

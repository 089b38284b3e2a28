"""
Generator configuration.

Sources, later ones winning:
1. Defaults
2. YAML file (top-level mapping, optionally nested under a ``flakegen:`` key)
3. Environment variables FLAKEGEN_NODE_ID, FLAKEGEN_CLOCK_POLICY,
   FLAKEGEN_MAX_BACKWARD_MS, FLAKEGEN_NODE_ID_SOURCE

Example flakegen.yml:

    flakegen:
      node_id: 42
      clock_policy: wait
      max_backward_ms: 2000
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from .clock import ClockPolicy
from .errors import ConfigurationError
from .identity import parse_node_id

logger = logging.getLogger(__name__)

ENV_PREFIX = "FLAKEGEN_"
NODE_ID_SOURCES = ("none", "env", "host")


@dataclass(frozen=True)
class GeneratorConfig:
    node_id: int = 0
    clock_policy: str = ClockPolicy.WAIT.value
    max_backward_ms: int = 5000
    node_id_source: str = "none"

    def __post_init__(self) -> None:
        if self.node_id < 0:
            raise ConfigurationError(f"node_id must be non-negative, got {self.node_id}")
        if self.clock_policy not in {p.value for p in ClockPolicy}:
            raise ConfigurationError(f"clock_policy must be 'wait' or 'raise', got {self.clock_policy!r}")
        if self.max_backward_ms < 0:
            raise ConfigurationError(f"max_backward_ms must be non-negative, got {self.max_backward_ms}")
        if self.node_id_source not in NODE_ID_SOURCES:
            raise ConfigurationError(
                f"node_id_source must be one of {', '.join(NODE_ID_SOURCES)}, got {self.node_id_source!r}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _coerce(name: str, raw: Any, source: str) -> Any:
    where = f"{name} ({source})"
    if name == "node_id":
        return parse_node_id(raw, source=where)
    if name == "max_backward_ms":
        if isinstance(raw, bool):
            raise ConfigurationError(f"{where} must be an integer, got {raw!r}")
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{where} must be an integer, got {raw!r}") from None
    return str(raw).strip().lower()


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"cannot read config file {path}: {e}") from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"malformed YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")
    nested = data.get("flakegen")
    if isinstance(nested, dict):
        data = nested
    return data


def load_config(path: Path | str | None = None, env: Mapping[str, str] | None = None) -> GeneratorConfig:
    """
    Load configuration from an optional YAML file and the environment.

    Args:
        path: YAML file; None skips the file layer
        env: Environment mapping (defaults to os.environ)

    Returns:
        Validated GeneratorConfig

    Raises:
        ConfigurationError: unreadable file, malformed YAML or invalid values.
    """
    env = os.environ if env is None else env
    known = {f.name for f in fields(GeneratorConfig)}
    values: dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        for key, raw in _read_yaml(path).items():
            if key in known:
                values[key] = _coerce(key, raw, str(path))
            else:
                logger.debug("Ignoring unknown config key %r in %s", key, path)

    for name in known:
        var = ENV_PREFIX + name.upper()
        raw = env.get(var)
        if raw is not None and raw.strip():
            values[name] = _coerce(name, raw, var)

    config = replace(GeneratorConfig(), **values)
    logger.debug("Loaded generator config: %s", config.to_dict())
    return config

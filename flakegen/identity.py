"""
Node identity providers.

A generator needs a node id that is unique across every generator sharing
the same layout. Callers should pass one explicitly; these providers supply a
default when they do not.

Provider names (used by configuration):
- none - no default, node id stays 0
- env  - read FLAKEGEN_NODE_ID from the environment
- host - hash the hostname and hardware address
"""

from __future__ import annotations

import hashlib
import logging
import os
import socket
import uuid
from typing import Mapping, Protocol

from .errors import ConfigurationError
from .layout import MASK_NODE_ID_128

logger = logging.getLogger(__name__)

NODE_ID_ENV_VAR = "FLAKEGEN_NODE_ID"


def parse_node_id(raw: str | int, *, source: str = "node id") -> int:
    """
    Parse a node id from an int or a decimal/``0x`` hex string.

    Raises:
        ConfigurationError: if the value is not a non-negative integer.
    """
    if isinstance(raw, bool):
        raise ConfigurationError(f"{source} must be an integer, got {raw!r}")
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip()
        try:
            value = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError:
            raise ConfigurationError(f"{source} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ConfigurationError(f"{source} must be non-negative, got {value}")
    return value


class NodeIdProvider(Protocol):
    """Protocol for default node id sources."""

    def node_id(self) -> int | None:
        """
        Return a node id, or None if this source has nothing to offer.
        """
        ...


class FixedNodeIdProvider:
    """Always returns the same node id."""

    def __init__(self, value: int) -> None:
        self._value = parse_node_id(value)

    def node_id(self) -> int | None:
        return self._value


class EnvNodeIdProvider:
    """
    Read the node id from an environment variable.

    Example: FLAKEGEN_NODE_ID=42 or FLAKEGEN_NODE_ID=0x2a
    """

    def __init__(self, var_name: str = NODE_ID_ENV_VAR, env: Mapping[str, str] | None = None) -> None:
        self.var_name = var_name
        self._env = env if env is not None else os.environ

    def node_id(self) -> int | None:
        raw = self._env.get(self.var_name)
        if raw is None or not raw.strip():
            return None
        return parse_node_id(raw, source=self.var_name)


class HostNodeIdProvider:
    """
    Derive a node id from the host identity.

    The hostname and hardware address are hashed with blake2b and folded into
    48 bits, the widest node field. The result is never 0.
    """

    def __init__(self, hostname: str | None = None, hardware_address: int | None = None) -> None:
        self._hostname = hostname
        self._hardware_address = hardware_address

    def node_id(self) -> int | None:
        hostname = self._hostname if self._hostname is not None else socket.gethostname()
        hardware = self._hardware_address if self._hardware_address is not None else uuid.getnode()
        digest = hashlib.blake2b(f"{hostname}/{hardware:012x}".encode("utf-8"), digest_size=8).digest()
        value = int.from_bytes(digest, "big") & MASK_NODE_ID_128
        return value or 1


def provider_for(name: str, env: Mapping[str, str] | None = None) -> NodeIdProvider | None:
    """Build the provider registered under ``name`` (``none`` yields None)."""
    key = (name or "none").strip().lower()
    if key == "none":
        return None
    if key == "env":
        return EnvNodeIdProvider(env=env)
    if key == "host":
        return HostNodeIdProvider()
    raise ConfigurationError(f"unknown node id source {name!r} (expected none, env or host)")


def resolve_node_id(node_id: int = 0, provider: NodeIdProvider | None = None) -> int:
    """
    Pick the node id for a generator.

    An explicit non-zero ``node_id`` wins. Otherwise the provider is asked;
    if it has nothing, 0 is returned and uniqueness across instances is the
    caller's problem.
    """
    value = parse_node_id(node_id)
    if value:
        return value
    if provider is None:
        return 0
    supplied = provider.node_id()
    if supplied is None:
        logger.debug("Node id provider %s supplied nothing; using 0", type(provider).__name__)
        return 0
    value = parse_node_id(supplied, source=type(provider).__name__)
    logger.debug("Node id %d supplied by %s", value, type(provider).__name__)
    return value

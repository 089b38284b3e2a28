"""
flakegen - Snowflake-style unique identifier generator.

Three identifier families share one generator:

- id64:     <41 bits: timestamp - epoch><21 bits: node id><2 bits: sequence>
- id64_nil: <41 bits: timestamp - epoch><23 bits: node id>
- id128:    <64 bits: timestamp><48 bits: node id><16 bits: sequence>
"""

__version__ = "0.1.0"

from .clock import Clock, ClockPolicy, SystemClock
from .codec import (
    IdParts,
    decode_id64,
    decode_id64_nil,
    decode_id128,
    extract_timestamp64,
    extract_timestamp64_as_datetime,
    extract_timestamp64_hex,
    extract_timestamp64_hex_as_datetime,
    extract_timestamp64_nil,
    extract_timestamp64_nil_as_datetime,
    extract_timestamp64_nil_hex,
    extract_timestamp64_nil_hex_as_datetime,
    extract_timestamp128,
    extract_timestamp128_as_datetime,
    extract_timestamp128_hex,
    extract_timestamp128_hex_as_datetime,
    millis_to_datetime,
)
from .config import GeneratorConfig, load_config
from .errors import ClockMovedBackwardsError, ConfigurationError, FlakegenError, ParseError
from .generator import SnowflakeGenerator
from .identity import EnvNodeIdProvider, FixedNodeIdProvider, HostNodeIdProvider, NodeIdProvider
from .layout import EPOCH_MS, ID64, ID64_NIL, ID128, BitLayout

__all__ = [
    # Generator
    "SnowflakeGenerator",
    # Clock
    "Clock",
    "ClockPolicy",
    "SystemClock",
    # Identity
    "NodeIdProvider",
    "FixedNodeIdProvider",
    "EnvNodeIdProvider",
    "HostNodeIdProvider",
    # Layouts
    "BitLayout",
    "EPOCH_MS",
    "ID64",
    "ID64_NIL",
    "ID128",
    # Extraction
    "IdParts",
    "decode_id64",
    "decode_id64_nil",
    "decode_id128",
    "extract_timestamp64",
    "extract_timestamp64_hex",
    "extract_timestamp64_as_datetime",
    "extract_timestamp64_hex_as_datetime",
    "extract_timestamp64_nil",
    "extract_timestamp64_nil_hex",
    "extract_timestamp64_nil_as_datetime",
    "extract_timestamp64_nil_hex_as_datetime",
    "extract_timestamp128",
    "extract_timestamp128_hex",
    "extract_timestamp128_as_datetime",
    "extract_timestamp128_hex_as_datetime",
    "millis_to_datetime",
    # Config
    "GeneratorConfig",
    "load_config",
    # Errors
    "FlakegenError",
    "ParseError",
    "ConfigurationError",
    "ClockMovedBackwardsError",
]

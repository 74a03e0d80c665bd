"""
Fido: multi-provider configuration aggregation

Fido fills a dataclass from any number of providers (in-memory values, JSON
or YAML files, anything implementing the Provider protocol), lets providers
added later override those added earlier, and keeps the dataclass up to date
as providers signal changes.

Public API modules (STABLE):
- fido.fido: the Fido facade
- fido.core: registry, coercion, priority and notification building blocks
- fido.providers: provider protocols and stock providers
- fido.config: options and their defaults
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fido")
except PackageNotFoundError:
    # Development install or not installed via pip
    __version__ = "0.1.0"

from fido.config import FidoOptions, LoggingSettings
from fido.core import (
    DEFAULT_STRUCT_TAG,
    Channel,
    ChannelClosed,
    Context,
    FieldUpdate,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    Notification,
    Path,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    config_field,
    walk_map,
)
from fido.fido import Fido
from fido.framework.errors import (
    CancelledError,
    DestinationError,
    DestinationInvalidError,
    DestinationNilError,
    DestinationNotInstanceError,
    ExpectedMapError,
    FidoError,
    FieldNotFoundError,
    InvalidMapKeyTypeError,
    InvalidPathError,
    InvalidTypeError,
    InvalidValueError,
    NonErrorFault,
    NotAddressableError,
    NotSetableError,
    ProviderError,
    ProviderPanicError,
    SetOverflowError,
    StructTagNotFoundError,
)
from fido.observability import configure_logging

__all__ = [
    "DEFAULT_STRUCT_TAG",
    "CancelledError",
    "Channel",
    "ChannelClosed",
    "Context",
    "DestinationError",
    "DestinationInvalidError",
    "DestinationNilError",
    "DestinationNotInstanceError",
    "ExpectedMapError",
    "Fido",
    "FidoError",
    "FidoOptions",
    "FieldNotFoundError",
    "FieldUpdate",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "InvalidMapKeyTypeError",
    "InvalidPathError",
    "InvalidTypeError",
    "InvalidValueError",
    "LoggingSettings",
    "NonErrorFault",
    "NotAddressableError",
    "NotSetableError",
    "Notification",
    "Path",
    "ProviderError",
    "ProviderPanicError",
    "SetOverflowError",
    "StructTagNotFoundError",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "__version__",
    "config_field",
    "configure_logging",
    "walk_map",
]

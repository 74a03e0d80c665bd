"""Provider protocols and stock providers.

Format decoding lives here, never in ``fido.core``: the engine only consumes
``(path, value)`` pairs.
"""

from fido.providers.inmemory import InMemoryProvider, InvalidMapKeyError
from fido.providers.protocol import (
    CloseProvider,
    NotifyProvider,
    Provider,
    ReadProvider,
    join_provider_names,
)
from fido.providers.readers import DecodeError, JSONProvider, YAMLProvider
from fido.providers.sources import (
    BytesProvider,
    FileProvider,
    StringProvider,
    from_bytes,
    from_files,
    from_string,
)

__all__ = [
    "BytesProvider",
    "CloseProvider",
    "DecodeError",
    "FileProvider",
    "InMemoryProvider",
    "InvalidMapKeyError",
    "JSONProvider",
    "NotifyProvider",
    "Provider",
    "ReadProvider",
    "StringProvider",
    "YAMLProvider",
    "from_bytes",
    "from_files",
    "from_string",
    "join_provider_names",
]

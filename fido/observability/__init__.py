"""
Lightweight observability utilities for fido.

Modules log through ``logging.getLogger(__name__)``; this package only
decides how those records are rendered.
"""

from .logging import JSONFormatter, configure_logging

__all__ = ["JSONFormatter", "configure_logging"]

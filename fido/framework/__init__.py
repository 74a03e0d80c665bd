"""Framework-level utilities shared by the core and the providers."""

from . import errors

__all__ = ["errors"]

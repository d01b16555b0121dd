"""HTTP API route handlers."""

from . import tags

__all__ = ["tags"]

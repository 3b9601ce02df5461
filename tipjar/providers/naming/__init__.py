"""Name-service providers."""

from .basenames import BasenameProvider, normalize_basename

__all__ = ["BasenameProvider", "normalize_basename"]

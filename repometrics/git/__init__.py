"""Version-control helpers."""

from .revision import GitRevisionOracle

__all__ = ["GitRevisionOracle"]

"""Listing cache stored as flat files under the user cache directory."""

from .manager import CacheManager

__all__ = ["CacheManager"]

"""Module resolution and management of the local module checkouts."""

from .manager import RepositoryManager, remote_url
from .resolver import ModuleResolver

__all__ = ["RepositoryManager", "ModuleResolver", "remote_url"]

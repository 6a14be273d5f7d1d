"""Repository listing fetched from the GitHub REST API."""

from .lister import RepositoryLister

__all__ = ["RepositoryLister"]

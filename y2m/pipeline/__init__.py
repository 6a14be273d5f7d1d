"""Command dispatch over module sets."""

from .runner import ModulePipeline

__all__ = ["ModulePipeline"]

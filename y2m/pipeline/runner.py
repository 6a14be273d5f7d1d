"""
Pipeline runner that dispatches one y2m command over a set of modules.

This module coordinates:
1. Refreshing the organization listings (list, clone)
2. Expanding the ALL / FAV keywords and explicit names into modules
3. Running clone, pull or checkout once per module, skipping with a warning
   where the module is unknown or its directory state does not fit
"""

import logging
from typing import Dict, List, Optional, Sequence

from rich.console import Console

from y2m.cache import CacheManager
from y2m.config import Settings
from y2m.exceptions import UnknownModuleError
from y2m.listing import RepositoryLister
from y2m.repository import ModuleResolver, RepositoryManager
from y2m.schemas import ModuleStatus, ResolvedModule, RunSummary

logger = logging.getLogger(__name__)

ALL = "ALL"
FAV = "FAV"


def _unique(names: Sequence[str]) -> List[str]:
    seen = set()
    return [name for name in names if not (name in seen or seen.add(name))]


class ModulePipeline:
    """Runs y2m commands against the listing cache and the local checkouts."""

    def __init__(
        self,
        settings: Settings,
        lister: Optional[RepositoryLister] = None,
        manager: Optional[RepositoryManager] = None,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            settings: Loaded settings (favorites, cache and work directories)
            lister: Repository lister (built from settings when None)
            manager: Repository manager (built from settings when None)
            console: Console for regular output
            err_console: Console for warnings
        """
        self.settings = settings
        self.cache = lister.cache if lister is not None else CacheManager(settings.cache_dir)
        self.lister = lister or RepositoryLister(self.cache, token=settings.github_token)
        self.manager = manager or RepositoryManager(settings.work_dir)
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def warn(self, message: str) -> None:
        self.err_console.print(f"[yellow]⚠️  {message}[/yellow]")

    def resolver(self) -> ModuleResolver:
        return ModuleResolver(self.cache, self.settings.organizations)

    def refresh_listings(self) -> Dict[str, List[str]]:
        """Refresh every organization listing.

        Raises:
            ListingFetchError: If an organization cannot be fetched
        """
        return self.lister.fetch_all(self.settings.organizations)

    # ------------------------------------------------------------------
    # Module set expansion
    # ------------------------------------------------------------------

    def expand_remote(self, args: Sequence[str], summary: RunSummary) -> List[ResolvedModule]:
        """Expand clone arguments into resolved modules.

        Unknown names are reported and recorded as skipped.
        """
        resolver = self.resolver()
        if list(args) == [ALL]:
            return resolver.all_modules()

        names = self.settings.favorites if list(args) == [FAV] else args
        modules = []
        for name in _unique(names):
            try:
                modules.append(resolver.resolve(name))
            except UnknownModuleError as e:
                self.warn(str(e))
                summary.record(name, ModuleStatus.SKIPPED)
        return modules

    def expand_local(self, args: Sequence[str]) -> List[str]:
        """Expand pull/checkout arguments into local directory names.

        No arguments, or ALL, means every module currently checked out.
        """
        if not args or list(args) == [ALL]:
            return self.manager.local_modules()

        names = self.settings.favorites if list(args) == [FAV] else args
        resolver = self.resolver()
        return _unique([resolver.local_name(name) for name in names])

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def list_repositories(self) -> Dict[str, List[str]]:
        """Refresh and return the full repository names of every organization."""
        return self.refresh_listings()

    def clone(self, args: Sequence[str], read_only: bool = False) -> RunSummary:
        """Clone the given modules, skipping those already checked out."""
        self.refresh_listings()

        summary = RunSummary()
        seen = set()
        for module in self.expand_remote(args, summary):
            if module.module in seen:
                continue
            seen.add(module.module)

            if self.manager.exists(module.module):
                self.warn(f"{module.module} already exists, skipping")
                summary.record(module.module, ModuleStatus.SKIPPED)
                continue

            self.console.print(f"📦 Cloning [cyan]{module.organization.name}/{module.full_name}[/cyan]")
            summary.record(module.module, self.manager.clone_module(module, read_only=read_only))

        return summary

    def pull(self, args: Sequence[str]) -> RunSummary:
        """Update the given modules, skipping those not checked out."""
        summary = RunSummary()
        for module in self.expand_local(args):
            if not self.manager.exists(module):
                self.warn(f"{module} does not exist, skipping")
                summary.record(module, ModuleStatus.SKIPPED)
                continue

            self.console.print(f"🔄 Pulling [cyan]{module}[/cyan]")
            summary.record(module, self.manager.pull_module(module))

        return summary

    def checkout(self, ref: str, args: Sequence[str]) -> RunSummary:
        """Switch the given modules to a branch or tag, skipping those not checked out."""
        summary = RunSummary()
        for module in self.expand_local(args):
            if not self.manager.exists(module):
                self.warn(f"{module} does not exist, skipping")
                summary.record(module, ModuleStatus.SKIPPED)
                continue

            self.console.print(f"🔀 Checking out [yellow]{ref}[/yellow] in [cyan]{module}[/cyan]")
            summary.record(module, self.manager.checkout_module(module, ref))

        return summary

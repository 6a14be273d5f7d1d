"""Module name resolution against the cached organization listings."""

import logging
from typing import Dict, List, Optional, Sequence

from y2m.cache import CacheManager
from y2m.exceptions import UnknownModuleError
from y2m.schemas import Organization, ResolvedModule

logger = logging.getLogger(__name__)


class ModuleResolver:
    """Maps user-given module names to (organization, repository) pairs.

    Lookups read the merged lists from the cache; the resolver never fetches.
    """

    def __init__(self, cache: CacheManager, organizations: Sequence[Organization]):
        self.cache = cache
        self.organizations = tuple(organizations)
        self._names: Dict[str, List[str]] = {}

    def names(self, organization: Organization) -> List[str]:
        """Merged repository names of an organization, read once per resolver."""
        if organization.name not in self._names:
            self._names[organization.name] = self.cache.get_names(organization.name)
        return self._names[organization.name]

    def find(self, name: str) -> Optional[ResolvedModule]:
        """Return the resolved module for ``name``, or None if no organization has it.

        Both the short name (``core``) and the full name (``yast-core``) are
        accepted; organizations are searched in priority order.
        """
        for organization in self.organizations:
            names = set(self.names(organization))
            for candidate in (name, organization.prefix + name):
                if candidate in names:
                    return ResolvedModule(
                        organization=organization,
                        full_name=candidate,
                        module=organization.module_name(candidate),
                    )
        return None

    def resolve(self, name: str) -> ResolvedModule:
        """Like find(), but raises UnknownModuleError for unknown names."""
        module = self.find(name)
        if module is None:
            raise UnknownModuleError(name)
        logger.debug(f"Resolved {name} -> {module.organization.name}/{module.full_name}")
        return module

    def all_modules(self) -> List[ResolvedModule]:
        """Every module of every organization, in priority then name order."""
        modules = []
        for organization in self.organizations:
            for full_name in self.names(organization):
                modules.append(
                    ResolvedModule(
                        organization=organization,
                        full_name=full_name,
                        module=organization.module_name(full_name),
                    )
                )
        return modules

    def local_name(self, name: str) -> str:
        """Directory name of a module given by short or full name, without network access."""
        for organization in self.organizations:
            if organization.prefix and name.startswith(organization.prefix):
                return organization.module_name(name)
        return name

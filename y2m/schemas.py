"""
Pydantic schemas shared across y2m.

This module holds the data model: the hosting organizations, the typed decode
step for the GitHub repository listing, the cached page snapshot and the
results reported back by the pipeline.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# ============================================================================
# ORGANIZATIONS
# ============================================================================

class Organization(BaseModel):
    """A hosting namespace grouping related repositories."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Organization login on the hosting service, e.g. 'yast'")
    prefix: str = Field(description="Common repository-name prefix stripped to form module names, e.g. 'yast-'")

    def module_name(self, full_name: str) -> str:
        """Strip the organization prefix from a repository name."""
        if self.prefix and full_name.startswith(self.prefix):
            return full_name[len(self.prefix):]
        return full_name


# Lookup priority: a module present in both organizations resolves to the first one.
ORGANIZATIONS = (
    Organization(name="yast", prefix="yast-"),
    Organization(name="libyui", prefix="libyui-"),
)


# ============================================================================
# LISTING SCHEMAS
# ============================================================================

class RepositoryEntry(BaseModel):
    """One repository object of the GitHub `GET /orgs/{org}/repos` reply.

    Only the name is relevant; every other field of the reply is ignored.
    """
    name: str = Field(description="Full repository name, e.g. 'yast-core'")


REPOSITORY_LIST = TypeAdapter(List[RepositoryEntry])


def decode_repository_names(body: str) -> List[str]:
    """Decode a listing page body into a sorted list of repository names.

    Raises:
        pydantic.ValidationError: If the body is not a JSON array of repository objects
    """
    return sorted(entry.name for entry in REPOSITORY_LIST.validate_json(body))


class PageOutcome(str, Enum):
    """Result of fetching one listing page."""
    FRESH = "fresh"          # 200 with a full page, more pages may follow
    UNCHANGED = "unchanged"  # 304, cached page (and later pages) still valid
    SHORT = "short"          # 200 with fewer entries than the page size, last page


class CachedHeaders(BaseModel):
    """Snapshot of a page response's status line and headers."""
    status: int = Field(description="HTTP status code of the response that produced the cached body")
    etag: Optional[str] = Field(None, description="ETag version tag, sent back as If-None-Match")
    headers: Dict[str, str] = Field(default_factory=dict, description="All response headers")
    fetched_at: str = Field(description="ISO timestamp of the fetch")


class PageResult(BaseModel):
    """A fetched listing page, staged until the whole organization fetch succeeds."""
    organization: str
    page: int
    outcome: PageOutcome
    names: List[str] = Field(default_factory=list, description="Sorted repository names (empty when unchanged)")
    headers: Optional[CachedHeaders] = None
    body: Optional[str] = None


# ============================================================================
# MODULE / RUN SCHEMAS
# ============================================================================

class ResolvedModule(BaseModel):
    """A module short name resolved to its owning organization and repository."""
    model_config = ConfigDict(frozen=True)

    organization: Organization
    full_name: str = Field(description="Repository name as known to the hosting API")
    module: str = Field(description="Short name used as the local directory name")


class ModuleStatus(str, Enum):
    """Per-module result of a pipeline operation."""
    DONE = "done"
    SKIPPED = "skipped"    # already exists / does not exist / unknown module
    REMOVED = "removed"    # upstream module removed, clone discarded
    FAILED = "failed"      # git reported an error


class RunSummary(BaseModel):
    """Counts of per-module results for one command."""
    done: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)

    def record(self, module: str, status: ModuleStatus) -> None:
        """Add a module to the bucket matching its status."""
        getattr(self, status.value).append(module)

    @property
    def total(self) -> int:
        return len(self.done) + len(self.skipped) + len(self.removed) + len(self.failed)

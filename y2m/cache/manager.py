"""Cache manager for the per-organization repository listings.

Layout under the cache directory::

    {org}/page-{n}.headers.json   response status line and headers (ETag)
    {org}/page-{n}.body.json      raw response body
    {org}/page-{n}.names          sorted repository names of the page
    {org}.names                   merged sorted names of the organization
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from y2m.schemas import CachedHeaders, PageResult

logger = logging.getLogger(__name__)

PAGE_FILE_RE = re.compile(r"^page-(\d+)\.")


class CacheManager:
    """Reads and writes cached listing pages and merged name lists."""

    def __init__(self, cache_dir: Path):
        """Initialize cache manager.

        Args:
            cache_dir: Base cache directory
        """
        self.cache_dir = Path(cache_dir)

        # Ensure cache directory exists
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def org_dir(self, organization: str) -> Path:
        return self.cache_dir / organization

    def headers_file(self, organization: str, page: int) -> Path:
        return self.org_dir(organization) / f"page-{page}.headers.json"

    def body_file(self, organization: str, page: int) -> Path:
        return self.org_dir(organization) / f"page-{page}.body.json"

    def names_file(self, organization: str, page: int) -> Path:
        return self.org_dir(organization) / f"page-{page}.names"

    def merged_file(self, organization: str) -> Path:
        return self.cache_dir / f"{organization}.names"

    @staticmethod
    def _read_names(path: Path) -> List[str]:
        if not path.exists():
            return []
        return [line for line in path.read_text().splitlines() if line]

    @staticmethod
    def _write_names(path: Path, names: List[str]) -> None:
        path.write_text("".join(f"{name}\n" for name in names))

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def get_headers(self, organization: str, page: int) -> Optional[CachedHeaders]:
        """Return the cached header snapshot of a page, or None if not cached.

        A corrupted snapshot is treated as missing so the page is fetched unconditionally.
        """
        path = self.headers_file(organization, page)
        if not path.exists():
            return None

        try:
            return CachedHeaders.model_validate_json(path.read_text())
        except ValidationError:
            logger.warning(f"Ignoring corrupted cache entry {path}")
            return None

    def get_etag(self, organization: str, page: int) -> Optional[str]:
        """Return the cached ETag of a page, or None."""
        headers = self.get_headers(organization, page)
        return headers.etag if headers else None

    def get_page_names(self, organization: str, page: int) -> List[str]:
        """Return the cached sorted names of a page (empty if not cached)."""
        return self._read_names(self.names_file(organization, page))

    def write_page(self, result: PageResult) -> None:
        """Store a freshly fetched page: headers, body and derived names."""
        org_dir = self.org_dir(result.organization)
        org_dir.mkdir(parents=True, exist_ok=True)

        if result.headers is not None:
            self.headers_file(result.organization, result.page).write_text(
                result.headers.model_dump_json(indent=2)
            )
        self.body_file(result.organization, result.page).write_text(result.body or "")
        self._write_names(self.names_file(result.organization, result.page), sorted(result.names))

        logger.debug(f"Cached {result.organization} page {result.page} ({len(result.names)} names)")

    def cached_pages(self, organization: str) -> List[int]:
        """List cached page numbers of an organization, ascending."""
        org_dir = self.org_dir(organization)
        if not org_dir.exists():
            return []

        pages = set()
        for path in org_dir.iterdir():
            match = PAGE_FILE_RE.match(path.name)
            if match:
                pages.add(int(match.group(1)))
        return sorted(pages)

    def purge_pages_after(self, organization: str, last_page: int) -> List[int]:
        """Delete every cached page numbered above ``last_page``.

        Returns:
            The purged page numbers
        """
        purged = [page for page in self.cached_pages(organization) if page > last_page]
        for page in purged:
            for path in (
                self.headers_file(organization, page),
                self.body_file(organization, page),
                self.names_file(organization, page),
            ):
                path.unlink(missing_ok=True)

        if purged:
            logger.info(f"Purged stale {organization} cache pages: {purged}")
        return purged

    # ------------------------------------------------------------------
    # Merged lists
    # ------------------------------------------------------------------

    def merge_pages(self, organization: str) -> List[str]:
        """Merge all cached pages into the organization's sorted, deduplicated list."""
        names = set()
        for page in self.cached_pages(organization):
            names.update(self.get_page_names(organization, page))

        merged = sorted(names)
        self._write_names(self.merged_file(organization), merged)
        return merged

    def get_names(self, organization: str) -> List[str]:
        """Return the merged name list of an organization (empty if never fetched)."""
        return self._read_names(self.merged_file(organization))


"""GitHub REST client fetching organization repository listings with ETag caching."""

import logging
import time
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import requests
from pydantic import ValidationError

from y2m.cache import CacheManager
from y2m.exceptions import ListingFetchError
from y2m.schemas import (
    CachedHeaders,
    Organization,
    PageOutcome,
    PageResult,
    decode_repository_names,
)

logger = logging.getLogger(__name__)


class RepositoryLister:
    """Fetches and caches the complete repository list of each organization."""

    API_ENDPOINT = "https://api.github.com"
    PAGE_SIZE = 100
    MAX_RETRIES = 3
    RETRY_DELAY_SECONDS = 1
    TIMEOUT_SECONDS = 30

    def __init__(
        self,
        cache: CacheManager,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the lister.

        Args:
            cache: Cache store holding pages and merged lists
            token: GitHub token; anonymous requests are used when None
            session: HTTP session (a new one is created when None)
        """
        self.cache = cache
        self.session = session or requests.Session()
        self.headers = {
            "Accept": "application/vnd.github+json",
        }

        # Add authorization header if token is available
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def page_url(self, organization: str, page: int) -> str:
        return f"{self.API_ENDPOINT}/orgs/{organization}/repos?page={page}&per_page={self.PAGE_SIZE}"

    def _get(self, organization: str, page: int, etag: Optional[str]) -> requests.Response:
        """
        GET one listing page, retrying transport errors and server errors.

        Returns:
            Response with status 200 or 304

        Raises:
            ListingFetchError: If the request keeps failing or returns another status
        """
        url = self.page_url(organization, page)
        headers = dict(self.headers)

        # Conditional request: the server replies 304 if the page is unchanged
        if etag:
            headers["If-None-Match"] = etag

        for attempt in range(self.MAX_RETRIES):
            try:
                logger.debug(f"GET {url} (If-None-Match: {etag})")
                response = self.session.get(url, headers=headers, timeout=self.TIMEOUT_SECONDS)
            except requests.exceptions.RequestException as e:
                error = str(e)
            else:
                if response.status_code in (200, 304):
                    return response
                if response.status_code < 500:
                    raise ListingFetchError(
                        organization, page, f"unexpected status {response.status_code} {response.reason}"
                    )
                error = f"status {response.status_code} {response.reason}"

            if attempt < self.MAX_RETRIES - 1:
                delay = self.RETRY_DELAY_SECONDS * (2 ** attempt)  # Exponential backoff
                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{self.MAX_RETRIES}): {error}. Retrying in {delay}s..."
                )
                time.sleep(delay)

        raise ListingFetchError(organization, page, error)

    def fetch_page(self, organization: str, page: int) -> PageResult:
        """
        Fetch one listing page without touching the cache.

        Args:
            organization: Organization name
            page: Page number, starting at 1

        Returns:
            PageResult: UNCHANGED on 304, otherwise FRESH or SHORT with decoded names

        Raises:
            ListingFetchError: On transport failure, unexpected status or undecodable body
        """
        etag = self.cache.get_etag(organization, page)
        response = self._get(organization, page, etag)

        if response.status_code == 304:
            logger.debug(f"{organization} page {page} unchanged")
            return PageResult(organization=organization, page=page, outcome=PageOutcome.UNCHANGED)

        body = response.text
        try:
            names = decode_repository_names(body)
        except ValidationError as e:
            raise ListingFetchError(organization, page, f"invalid response body: {e.error_count()} error(s)")

        response_headers: Dict[str, str] = dict(response.headers)
        snapshot = CachedHeaders(
            status=response.status_code,
            etag=response.headers.get("ETag"),
            headers=response_headers,
            fetched_at=datetime.now().isoformat(),
        )
        outcome = PageOutcome.SHORT if len(names) < self.PAGE_SIZE else PageOutcome.FRESH

        return PageResult(
            organization=organization,
            page=page,
            outcome=outcome,
            names=names,
            headers=snapshot,
            body=body,
        )

    def fetch_organization(self, organization: Organization) -> List[str]:
        """
        Refresh the cached listing of an organization and return the merged list.

        Pages are requested from 1 upwards until a page is unchanged or short.
        Fresh pages are committed to the cache only after pagination completes,
        so a failed fetch leaves the previous cache as it was.

        Args:
            organization: Organization to fetch

        Returns:
            Sorted, deduplicated repository names

        Raises:
            ListingFetchError: If any page cannot be fetched
        """
        org = organization.name
        staged: List[PageResult] = []
        page = 1

        while True:
            result = self.fetch_page(org, page)
            if result.outcome == PageOutcome.UNCHANGED:
                break
            staged.append(result)
            if result.outcome == PageOutcome.SHORT:
                break
            page += 1

        for result in staged:
            self.cache.write_page(result)

        # Trusts cached pages after an unchanged page without re-checking them.
        if result.outcome == PageOutcome.SHORT:
            self.cache.purge_pages_after(org, result.page)

        names = self.cache.merge_pages(org)
        logger.info(f"{org}: {len(names)} repositories ({len(staged)} page(s) downloaded)")
        return names

    def fetch_all(self, organizations: Sequence[Organization]) -> Dict[str, List[str]]:
        """Refresh every organization in priority order."""
        return {organization.name: self.fetch_organization(organization) for organization in organizations}

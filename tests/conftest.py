import io
import json
from typing import Dict, List
from urllib.parse import parse_qs, urlparse

import pytest
import requests
from rich.console import Console

from y2m.cache import CacheManager
from y2m.config import Settings
from y2m.schemas import CachedHeaders, PageOutcome, PageResult


def make_response(status: int, body: str = "", etag: str = None) -> requests.Response:
    """Build a real requests.Response with the given status, body and ETag."""
    response = requests.Response()
    response.status_code = status
    response.reason = {200: "OK", 304: "Not Modified"}.get(status, "Error")
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    if etag:
        response.headers["ETag"] = etag
    return response


class FakeGitHub:
    """Stands in for requests.Session, serving paginated org listings with ETags."""

    def __init__(self, repos: Dict[str, List[str]]):
        self.repos = {org: list(names) for org, names in repos.items()}
        self.calls = []
        self.failures = {}

    def etag(self, names: List[str]) -> str:
        return '"%s"' % "|".join(names)

    def get(self, url, headers=None, timeout=None):
        parsed = urlparse(url)
        org = parsed.path.split("/")[2]
        query = parse_qs(parsed.query)
        page = int(query["page"][0])
        per_page = int(query["per_page"][0])
        headers = headers or {}
        self.calls.append((org, page, headers.get("If-None-Match")))

        failure = self.failures.get((org, page))
        if isinstance(failure, list):
            failure = failure.pop(0) if failure else None
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return make_response(failure)

        names = self.repos.get(org, [])[(page - 1) * per_page:page * per_page]
        etag = self.etag(names)
        if headers.get("If-None-Match") == etag:
            return make_response(304)

        body = json.dumps([
            {"id": i, "name": name, "owner": {"login": org}, "license": {"name": "GPL-2.0"}}
            for i, name in enumerate(names)
        ])
        return make_response(200, body, etag)


def seed_cache(cache: CacheManager, organization: str, names: List[str]) -> None:
    """Store names as a single cached page and merge them."""
    cache.write_page(PageResult(
        organization=organization,
        page=1,
        outcome=PageOutcome.SHORT,
        names=names,
        headers=CachedHeaders(status=200, etag='"seed"', fetched_at="2024-01-01T00:00:00"),
        body="[]",
    ))
    cache.merge_pages(organization)


@pytest.fixture
def cache(tmp_path):
    return CacheManager(tmp_path / "cache")


@pytest.fixture
def work_dir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_path, work_dir):
    return Settings(
        config_file=tmp_path / "y2m.conf",
        cache_dir=tmp_path / "cache",
        work_dir=work_dir,
    )


@pytest.fixture
def output():
    """A rich console writing into a buffer."""
    buffer = io.StringIO()
    return buffer, Console(file=buffer, width=200, no_color=True)

from y2m.schemas import CachedHeaders, PageOutcome, PageResult


def make_page(page, names, etag='"abc"'):
    return PageResult(
        organization="yast",
        page=page,
        outcome=PageOutcome.FRESH,
        names=names,
        headers=CachedHeaders(status=200, etag=etag, headers={"ETag": etag}, fetched_at="2024-01-01T00:00:00"),
        body='[{"name": "x"}]',
    )


def test_cache_initialization(tmp_path):
    """Test the cache directory is created on demand."""
    from y2m.cache import CacheManager

    cache = CacheManager(tmp_path / "nested" / "cache")

    assert cache.cache_dir.is_dir()
    assert cache.cached_pages("yast") == []
    assert cache.get_names("yast") == []
    assert cache.get_etag("yast", 1) is None


def test_write_page_stores_headers_body_and_names(cache):
    """Test a page is written as three files."""
    cache.write_page(make_page(1, ["yast-network", "yast-core"], etag='W/"123"'))

    assert cache.get_etag("yast", 1) == 'W/"123"'
    assert cache.body_file("yast", 1).read_text() == '[{"name": "x"}]'
    assert cache.names_file("yast", 1).read_text() == "yast-core\nyast-network\n"
    assert cache.get_page_names("yast", 1) == ["yast-core", "yast-network"]


def test_corrupted_headers_are_ignored(cache):
    """Test a broken header snapshot means no conditional request."""
    cache.write_page(make_page(1, ["yast-core"]))
    cache.headers_file("yast", 1).write_text("not json")

    assert cache.get_headers("yast", 1) is None
    assert cache.get_etag("yast", 1) is None


def test_cached_pages_sorted_numerically(cache):
    for page in (10, 2, 1):
        cache.write_page(make_page(page, [f"yast-m{page}"]))

    assert cache.cached_pages("yast") == [1, 2, 10]


def test_purge_pages_after(cache):
    """Test purging removes every file of the later pages only."""
    for page in (1, 2, 3):
        cache.write_page(make_page(page, [f"yast-m{page}"]))

    purged = cache.purge_pages_after("yast", 1)

    assert purged == [2, 3]
    assert cache.cached_pages("yast") == [1]
    assert list(cache.org_dir("yast").iterdir()) != []
    assert not cache.names_file("yast", 2).exists()


def test_merge_pages_sorts_and_deduplicates(cache):
    """Test the merged list is the sorted union of all pages."""
    cache.write_page(make_page(1, ["yast-b", "yast-a"]))
    cache.write_page(make_page(2, ["yast-a", "yast-c"]))

    merged = cache.merge_pages("yast")

    assert merged == ["yast-a", "yast-b", "yast-c"]
    assert cache.get_names("yast") == merged
    assert cache.merged_file("yast").read_text() == "yast-a\nyast-b\nyast-c\n"


def test_organizations_are_separate(cache):
    cache.write_page(make_page(1, ["yast-core"]))
    cache.merge_pages("yast")

    assert cache.merge_pages("libyui") == []
    assert cache.get_names("yast") == ["yast-core"]

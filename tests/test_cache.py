import pytest

from staticsend import AlwaysCachePolicy, CacheEntry, ConfigurationError, MetadataCache, PatternPolicy


def test_ensure_without_matching_policy_returns_ephemeral_entry():
    cache = MetadataCache()

    entry = cache.ensure("index.html")

    assert entry.persistent is False
    assert cache.get("index.html") is None
    assert len(cache) == 0


def test_ensure_creates_entry_once():
    cache = MetadataCache(policy=AlwaysCachePolicy())

    first = cache.ensure("index.html")
    second = cache.ensure("index.html")

    assert first is second
    assert first.persistent is True
    assert cache.get("index.html") is first
    assert "index.html" in cache


def test_existing_entry_is_returned_even_if_policy_no_longer_matches():
    cache = MetadataCache(policy=PatternPolicy(r"\.css$"))
    entry = cache.ensure("style.css")

    cache.policy = PatternPolicy(r"\.js$")

    assert cache.ensure("style.css") is entry


def test_clear():
    cache = MetadataCache(policy=True)
    cache.ensure("a")
    cache.ensure("b")

    cache.clear()

    assert len(cache) == 0
    assert cache.get("a") is None


def test_bounded_cache_evicts_least_frequently_used():
    cache = MetadataCache(policy=True, max_entries=2)

    hot = cache.ensure("hot")
    cache.ensure("hot")
    cache.ensure("cold")
    cache.ensure("new")

    assert cache.get("cold") is None
    assert cache.get("hot") is hot
    assert "new" in cache
    assert len(cache) == 2


@pytest.mark.anyio
async def test_exists_cached_probes_once(tmp_path, file_manager):
    (tmp_path / "a.txt.br").write_bytes(b"x")
    cache = MetadataCache(policy=True, file_manager=file_manager)
    entry = cache.ensure("a.txt")
    path = str(tmp_path / "a.txt.br")

    assert await cache.exists_cached(entry.encodings, "br", path) is True
    assert await cache.exists_cached(entry.encodings, "br", path) is True

    assert file_manager.count("exists", path) == 1
    assert entry.encodings == {"br": True}


@pytest.mark.anyio
async def test_exists_cached_remembers_missing_files(tmp_path, file_manager):
    cache = MetadataCache(file_manager=file_manager)
    entry = CacheEntry()
    path = str(tmp_path / "missing.gz")

    assert await cache.exists_cached(entry.encodings, "gz", path) is False
    (tmp_path / "missing.gz").write_bytes(b"x")
    assert await cache.exists_cached(entry.encodings, "gz", path) is False

    assert file_manager.count("exists", path) == 1


@pytest.mark.anyio
async def test_exists_cached_refresh_always_probes(tmp_path, file_manager):
    cache = MetadataCache(file_manager=file_manager)
    entry = CacheEntry()
    path = str(tmp_path / "page.html")

    assert await cache.exists_cached(entry.exists, path, path, refresh=True) is False
    (tmp_path / "page.html").write_bytes(b"x")
    assert await cache.exists_cached(entry.exists, path, path, refresh=True) is True

    assert file_manager.count("exists", path) == 2
    assert entry.exists == {path: True}


@pytest.mark.anyio
async def test_stat_cached(tmp_path, file_manager):
    (tmp_path / "a.txt").write_bytes(b"hello")
    cache = MetadataCache(file_manager=file_manager)
    entry = CacheEntry()
    path = str(tmp_path / "a.txt")

    first = await cache.stat_cached(entry, path)
    second = await cache.stat_cached(entry, path)

    assert first.st_size == 5
    assert second is first
    assert file_manager.count("stat", path) == 1


@pytest.mark.anyio
async def test_stat_errors_are_not_cached(tmp_path, file_manager):
    cache = MetadataCache(file_manager=file_manager)
    entry = CacheEntry()
    path = str(tmp_path / "missing.txt")

    for _ in range(2):
        with pytest.raises(FileNotFoundError):
            await cache.stat_cached(entry, path)

    assert entry.stats == {}
    assert file_manager.count("stat", path) == 2


@pytest.mark.parametrize("max_entries", [0, -1, 1.5, True, "10"])
def test_invalid_max_entries(max_entries):
    with pytest.raises(ConfigurationError, match="max_entries must be a positive integer"):
        MetadataCache(policy=True, max_entries=max_entries)

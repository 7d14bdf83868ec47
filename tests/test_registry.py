"""Unit and concurrency tests for the bidirectional URL registry."""

import random
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from shortener.generator import ShortCodeGenerator
from shortener.locks import ReadWriteLock
from shortener.registry import URLRegistry


@pytest.fixture
def registry() -> URLRegistry:
    return URLRegistry()


def _assert_mutual_inverse(registry: URLRegistry) -> None:
    for short_id, long_url in registry._short_to_long.items():
        assert registry._long_to_short[long_url] == short_id
    for long_url, short_id in registry._long_to_short.items():
        assert registry._short_to_long[short_id] == long_url


# ============================================================================
# BASIC OPERATIONS
# ============================================================================


def test_empty_registry_misses(registry: URLRegistry) -> None:
    assert registry.resolve("doesnotexist") is None
    assert registry.find_existing("https://example.com") is None
    assert len(registry) == 0


def test_register_round_trip(registry: URLRegistry) -> None:
    registry.register("AbC123", "https://example.com")
    assert registry.resolve("AbC123") == "https://example.com"
    assert registry.find_existing("https://example.com") == "AbC123"
    assert "AbC123" in registry
    assert len(registry) == 1


def test_unknown_code_never_returns_other_url(registry: URLRegistry) -> None:
    registry.register("AbC123", "https://example.com")
    assert registry.resolve("AbC124") is None
    assert registry.resolve("") is None


def test_register_overwrites_short_code(registry: URLRegistry) -> None:
    registry.register("AbC123", "https://first.example")
    registry.register("AbC123", "https://second.example")

    assert registry.resolve("AbC123") == "https://second.example"
    assert registry.find_existing("https://second.example") == "AbC123"
    # The displaced URL no longer points at a code that resolves elsewhere.
    assert registry.find_existing("https://first.example") is None
    assert len(registry) == 1
    _assert_mutual_inverse(registry)


def test_register_same_pair_twice_is_idempotent(registry: URLRegistry) -> None:
    registry.register("AbC123", "https://example.com")
    registry.register("AbC123", "https://example.com")
    assert len(registry) == 1
    _assert_mutual_inverse(registry)


def test_register_without_existence_check_creates_second_code(registry: URLRegistry) -> None:
    registry.register("old111", "https://example.com")
    registry.register("new222", "https://example.com")

    assert registry.resolve("old111") == "https://example.com"
    assert registry.resolve("new222") == "https://example.com"
    assert registry.find_existing("https://example.com") == "new222"


def test_register_if_absent_inserts(registry: URLRegistry) -> None:
    assert registry.register_if_absent("AbC123", "https://example.com") == "AbC123"
    assert registry.resolve("AbC123") == "https://example.com"


def test_register_if_absent_returns_existing_code_for_url(registry: URLRegistry) -> None:
    registry.register_if_absent("AbC123", "https://example.com")
    assert registry.register_if_absent("XyZ789", "https://example.com") == "AbC123"
    assert "XyZ789" not in registry
    assert len(registry) == 1


def test_register_if_absent_refuses_taken_code(registry: URLRegistry) -> None:
    registry.register_if_absent("AbC123", "https://first.example")
    assert registry.register_if_absent("AbC123", "https://second.example") is None
    assert registry.resolve("AbC123") == "https://first.example"
    assert registry.find_existing("https://second.example") is None


def test_bidirectional_consistency_after_many_registrations(registry: URLRegistry) -> None:
    generator = ShortCodeGenerator(rng=random.Random(99))
    for i in range(2000):
        registry.register_if_absent(generator.generate(), f"https://example.com/{i % 1500}")

    for short_id in list(registry._short_to_long):
        assert registry.find_existing(registry.resolve(short_id)) == short_id
    _assert_mutual_inverse(registry)


# ============================================================================
# CONCURRENCY
# ============================================================================


def test_concurrent_resolve_on_prepopulated_registry(registry: URLRegistry) -> None:
    generator = ShortCodeGenerator(rng=random.Random(2024))
    expected: dict[str, str] = {}
    while len(expected) < 10_000:
        long_url = f"https://example.com/item/{len(expected)}"
        short_id = registry.register_if_absent(generator.generate(), long_url)
        if short_id is not None:
            expected[short_id] = long_url

    items = list(expected.items())

    def check(chunk: list[tuple[str, str]]) -> int:
        mismatches = 0
        for short_id, long_url in chunk:
            if registry.resolve(short_id) != long_url:
                mismatches += 1
            if registry.find_existing(long_url) != short_id:
                mismatches += 1
        return mismatches

    chunks = [items[i::16] for i in range(16)]
    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(check, chunks * 4))

    assert sum(results) == 0
    assert len(registry) == 10_000


def test_concurrent_register_if_absent_same_url_agrees(registry: URLRegistry) -> None:
    barrier = threading.Barrier(8)

    def claim(i: int) -> str:
        barrier.wait()
        code = registry.register_if_absent(f"code{i:02d}", "https://example.com/contended")
        assert code is not None
        return code

    with ThreadPoolExecutor(max_workers=8) as pool:
        codes = set(pool.map(claim, range(8)))

    assert len(codes) == 1
    assert len(registry) == 1


def test_concurrent_writers_and_readers_keep_tables_consistent(registry: URLRegistry) -> None:
    stop = threading.Event()
    torn_reads: list[str] = []

    def writer(offset: int) -> None:
        for i in range(2000):
            registry.register(f"w{offset}-{i}", f"https://example.com/{offset}/{i}")

    def reader() -> None:
        while not stop.is_set():
            for i in range(0, 2000, 97):
                long_url = registry.resolve(f"w0-{i}")
                if long_url is not None and registry.find_existing(long_url) != f"w0-{i}":
                    torn_reads.append(long_url)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for thread in readers:
        thread.start()
    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(writer, range(4)))
    stop.set()
    for thread in readers:
        thread.join()

    assert torn_reads == []
    assert len(registry) == 8000
    _assert_mutual_inverse(registry)


# ============================================================================
# READ-WRITE LOCK
# ============================================================================


def test_rwlock_allows_concurrent_readers() -> None:
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5)
    met: list[bool] = []

    def read() -> None:
        with lock.read_locked():
            # Only passes if all three readers hold the lock at once.
            inside.wait()
            met.append(True)

    threads = [threading.Thread(target=read) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert met == [True, True, True]


def test_rwlock_writer_excludes_readers() -> None:
    lock = ReadWriteLock()
    reader_entered = threading.Event()

    lock.acquire_write()

    def read() -> None:
        with lock.read_locked():
            reader_entered.set()

    thread = threading.Thread(target=read)
    thread.start()
    assert not reader_entered.wait(timeout=0.2)

    lock.release_write()
    assert reader_entered.wait(timeout=5)
    thread.join(timeout=5)


def test_rwlock_waiting_writer_blocks_new_readers() -> None:
    lock = ReadWriteLock()
    lock.acquire_read()
    writer_done = threading.Event()
    late_reader_done = threading.Event()

    def write() -> None:
        with lock.write_locked():
            writer_done.set()

    def late_read() -> None:
        with lock.read_locked():
            late_reader_done.set()

    writer = threading.Thread(target=write)
    writer.start()
    while lock._writers_waiting == 0:
        threading.Event().wait(0.01)

    late_reader = threading.Thread(target=late_read)
    late_reader.start()
    assert not late_reader_done.wait(timeout=0.2)

    lock.release_read()
    assert writer_done.wait(timeout=5)
    assert late_reader_done.wait(timeout=5)
    writer.join(timeout=5)
    late_reader.join(timeout=5)


def test_rwlock_unbalanced_release_raises() -> None:
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()

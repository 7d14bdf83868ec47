"""Bidirectional in-memory URL registry.

The registry owns two coupled lookup tables and all of their synchronization.
It is created empty at process start, shared by every request handler, and
discarded on exit.

Table Layout
============
::
    short_to_long                     long_to_short
    ┌────────┬──────────────────┐     ┌──────────────────┬────────┐
    │ AbC123 │ https://a.com/x  │ ◄─► │ https://a.com/x  │ AbC123 │
    │ q9Zk0P │ https://b.org    │ ◄─► │ https://b.org    │ q9Zk0P │
    └────────┴──────────────────┘     └──────────────────┴────────┘

Both tables sit behind one ReadWriteLock and are always updated inside the
same write section, so a reader never sees one side updated and the other
stale.

How to Use
===========
**Step 1 — Create once at startup**::
    registry = URLRegistry()

**Step 2 — Look up**::
    registry.find_existing("https://example.com")  # -> "AbC123" or None
    registry.resolve("AbC123")                      # -> "https://example.com" or None

**Step 3 — Insert**::
    registry.register_if_absent("AbC123", "https://example.com")

Key Behaviours
===============
- Lookups share the lock; writes hold it exclusively. Hold time is O(1).
- ``register`` is unconditional: reusing a short code overwrites it.
- ``register_if_absent`` is the atomic check-and-insert used by the shorten
  flow; it never overwrites.
"""

from typing import Optional

from shortener.locks import ReadWriteLock

__all__ = ["URLRegistry"]


class URLRegistry:
    """Thread-safe short code <-> long URL mapping."""

    def __init__(self) -> None:
        self._short_to_long: dict[str, str] = {}
        self._long_to_short: dict[str, str] = {}
        self._lock = ReadWriteLock()

    def find_existing(self, long_url: str) -> Optional[str]:
        """Return the short code registered for ``long_url``, if any."""
        with self._lock.read_locked():
            return self._long_to_short.get(long_url)

    def resolve(self, short_id: str) -> Optional[str]:
        """Return the long URL registered under ``short_id``, if any."""
        with self._lock.read_locked():
            return self._short_to_long.get(short_id)

    def register(self, short_id: str, long_url: str) -> None:
        """Insert both directions of ``short_id`` <-> ``long_url``.

        Unconditional. A short code that is already in use is overwritten and
        the URL it used to point at loses its reverse entry. Callers are
        expected to check ``find_existing`` first; registering a URL that
        already has a code leaves the older code resolvable, while reverse
        lookups return the newer one.
        """
        with self._lock.write_locked():
            displaced = self._short_to_long.get(short_id)
            if displaced is not None and displaced != long_url:
                if self._long_to_short.get(displaced) == short_id:
                    del self._long_to_short[displaced]
            self._short_to_long[short_id] = long_url
            self._long_to_short[long_url] = short_id

    def register_if_absent(self, short_id: str, long_url: str) -> Optional[str]:
        """Atomically register ``long_url`` unless it or ``short_id`` is taken.

        Returns:
            The short code now mapped to ``long_url``: the existing one if the
            URL was already registered, otherwise ``short_id``. ``None`` when
            ``short_id`` already belongs to a different URL; nothing changes.
        """
        with self._lock.write_locked():
            existing = self._long_to_short.get(long_url)
            if existing is not None:
                return existing
            if short_id in self._short_to_long:
                return None
            self._short_to_long[short_id] = long_url
            self._long_to_short[long_url] = short_id
            return short_id

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._short_to_long)

    def __contains__(self, short_id: object) -> bool:
        with self._lock.read_locked():
            return short_id in self._short_to_long

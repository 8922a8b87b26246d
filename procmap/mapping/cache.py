"""
Mapping Cache

Process-scoped store of resolved field orders keyed by shape name.

Key features:
- Lock-free reads once a key is populated
- Resolution runs outside the lock; racing writers converge on the first
  stored value, so callers never see a partial entry
- Failed resolutions are not cached and run again on the next lookup
"""

import logging
import threading
from typing import Callable, Dict, Optional

from procmap.mapping.resolver import FieldSequence

logger = logging.getLogger(__name__)


class MappingCache:
    """
    Thread-safe cache of resolved field sequences.

    Entries are written once per key and never replaced, except by clear().

    Attributes:
        name: Label used in log lines (e.g. "input" or "output")
    """

    def __init__(self, name: str = "fields"):
        self.name = name
        self._entries: Dict[str, FieldSequence] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[FieldSequence]:
        """Return the cached sequence for key, or None."""
        return self._entries.get(key)

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], FieldSequence]
    ) -> FieldSequence:
        """
        Return the sequence for key, computing and storing it on a miss.

        Args:
            key: Shape name
            compute: Zero-argument resolver, called only on a miss

        Returns:
            The stored sequence. Concurrent misses for the same key may each
            call compute, but all of them return the single stored value.

        Raises:
            Whatever compute raises; nothing is stored in that case.
        """
        cached = self._entries.get(key)
        if cached is not None:
            return cached

        fields = tuple(compute())

        with self._lock:
            stored = self._entries.setdefault(key, fields)

        if stored is fields:
            logger.debug(
                "Cached field order",
                extra={"cache": self.name, "shape": key, "param_count": len(fields)},
            )
        return stored

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

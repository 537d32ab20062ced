"""Decision cache for remote relevance verdicts."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Protocol

logger = logging.getLogger(__name__)

# A cached verdict; None records an abstention and is a valid hit
Verdict = bool | None


def cache_key(task: str, text: str) -> str:
    """Key for a (task, text) pair. Role and strictness are not part of it."""
    return f"{task}|{text}"


class EvictionPolicy(Protocol):
    """Decides which entries to drop after a store."""

    def after_store(self, entries: OrderedDict[str, Verdict], key: str, task: str) -> None: ...

    def after_hit(self, entries: OrderedDict[str, Verdict], key: str) -> None: ...


class UnboundedPolicy:
    """Keep every entry for the lifetime of the process."""

    def after_store(self, entries: OrderedDict[str, Verdict], key: str, task: str) -> None:
        return None

    def after_hit(self, entries: OrderedDict[str, Verdict], key: str) -> None:
        return None


class LRUPolicy:
    """Keep at most ``max_entries``, dropping the least recently used."""

    def __init__(self, max_entries: int = 1000):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries

    def after_store(self, entries: OrderedDict[str, Verdict], key: str, task: str) -> None:
        entries.move_to_end(key)
        while len(entries) > self.max_entries:
            evicted, _ = entries.popitem(last=False)
            logger.debug(f"Evicted cached decision {evicted!r}")

    def after_hit(self, entries: OrderedDict[str, Verdict], key: str) -> None:
        entries.move_to_end(key)


class TaskScopedPolicy:
    """Drop entries belonging to other tasks whenever a new task is stored.

    Decisions for an old task are useless once the user changes focus.
    """

    def after_store(self, entries: OrderedDict[str, Verdict], key: str, task: str) -> None:
        prefix = cache_key(task, "")
        stale = [k for k in entries if not k.startswith(prefix)]
        for k in stale:
            del entries[k]
        if stale:
            logger.debug(f"Dropped {len(stale)} cached decisions from previous tasks")

    def after_hit(self, entries: OrderedDict[str, Verdict], key: str) -> None:
        return None


class DecisionCache:
    """Process-local map from (task, text) to verdict.

    A hit is returned verbatim, including a cached abstention (None), so a
    pair is never sent to the remote model twice.
    """

    def __init__(self, policy: EvictionPolicy | None = None):
        self._entries: OrderedDict[str, Verdict] = OrderedDict()
        self._policy = policy or UnboundedPolicy()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def lookup(self, task: str, text: str) -> tuple[bool, Verdict]:
        """Return (found, verdict); found distinguishes a cached None from a miss."""
        key = cache_key(task, text)
        if key not in self._entries:
            self._misses += 1
            return False, None
        self._hits += 1
        self._policy.after_hit(self._entries, key)
        return True, self._entries[key]

    def store(self, task: str, text: str, verdict: Verdict) -> None:
        key = cache_key(task, text)
        self._entries[key] = verdict
        self._policy.after_store(self._entries, key, task)

    def get_stats(self) -> dict[str, int]:
        """Get cache statistics."""
        return {"entries": len(self._entries), "hits": self._hits, "misses": self._misses}


def build_policy(name: str, max_entries: int = 1000) -> EvictionPolicy:
    """Create an eviction policy from its config name."""
    if name == "unbounded":
        return UnboundedPolicy()
    if name == "lru":
        return LRUPolicy(max_entries)
    if name == "task":
        return TaskScopedPolicy()
    raise ValueError(f"Unknown cache policy: {name}")

"""Ordered-set storage behind the leaderboard engine.

The engine only talks to `OrderedStore`. Members are opaque strings and
order follows sorted-set rules: ascending by score, then by member bytes.
Descending queries walk that order backwards.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
import contextlib
import itertools
import random
import threading


class OrderedStore(ABC):

    @abstractmethod
    def next_sequence(self) -> int:
        """Return a fresh, strictly increasing disambiguator."""

    @abstractmethod
    def insert(self, member: str, score: int) -> bool:
        """Add `member` or update its score. True when the member is new."""

    @abstractmethod
    def range_descending(self, offset: int, count: int) -> List[Tuple[str, int]]:
        """Return up to `count` (member, score) pairs starting at `offset` from the top."""

    @abstractmethod
    def rank(self, member: str) -> Optional[int]:
        """0-based position of `member` in descending order, None if absent."""

    @abstractmethod
    def size(self) -> int:
        ...

    @abstractmethod
    def remove_lowest(self, count: int) -> int:
        """Remove the `count` lowest members and return how many went."""

    @abstractmethod
    def clear(self) -> None:
        ...

    def transaction(self):
        """Group several calls so no other writer interleaves."""
        return contextlib.nullcontext()

    def trim(self, max_size: int) -> int:
        with self.transaction():
            surplus = self.size() - max_size
            if surplus <= 0:
                return 0
            return self.remove_lowest(surplus)


_MAX_LEVEL = 32
_P = 0.25


class _Node:
    __slots__ = ('member', 'score', 'forward', 'span', 'backward')

    def __init__(self, level: int, member: Optional[str] = None, score: int = 0):
        self.member = member
        self.score = score
        self.forward: List[Optional['_Node']] = [None] * level
        self.span = [0] * level
        self.backward: Optional['_Node'] = None


class SkipList:
    """Indexable skip list keyed by (score, member).

    Every forward link records how many nodes it skips, which gives rank
    lookups and positional access in O(log n).
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self.header = _Node(_MAX_LEVEL)
        self.tail: Optional[_Node] = None
        self.level = 1
        self.length = 0

    def __len__(self):
        return self.length

    def _random_level(self) -> int:
        level = 1
        while level < _MAX_LEVEL and self._rng.random() < _P:
            level += 1
        return level

    @staticmethod
    def _before(node: _Node, score: int, member: str) -> bool:
        return (node.score, node.member) < (score, member)

    def insert(self, score: int, member: str) -> None:
        update: List[_Node] = [self.header] * _MAX_LEVEL
        rank = [0] * _MAX_LEVEL
        x = self.header
        for i in range(self.level - 1, -1, -1):
            rank[i] = 0 if i == self.level - 1 else rank[i + 1]
            while x.forward[i] is not None and self._before(x.forward[i], score, member):
                rank[i] += x.span[i]
                x = x.forward[i]
            update[i] = x

        level = self._random_level()
        if level > self.level:
            for i in range(self.level, level):
                rank[i] = 0
                update[i] = self.header
                self.header.span[i] = self.length
            self.level = level

        node = _Node(level, member, score)
        for i in range(level):
            node.forward[i] = update[i].forward[i]
            update[i].forward[i] = node
            node.span[i] = update[i].span[i] - (rank[0] - rank[i])
            update[i].span[i] = (rank[0] - rank[i]) + 1
        for i in range(level, self.level):
            update[i].span[i] += 1

        node.backward = None if update[0] is self.header else update[0]
        if node.forward[0] is not None:
            node.forward[0].backward = node
        else:
            self.tail = node
        self.length += 1

    def delete(self, score: int, member: str) -> bool:
        update: List[_Node] = [self.header] * _MAX_LEVEL
        x = self.header
        for i in range(self.level - 1, -1, -1):
            while x.forward[i] is not None and self._before(x.forward[i], score, member):
                x = x.forward[i]
            update[i] = x
        x = x.forward[0]
        if x is None or x.score != score or x.member != member:
            return False

        for i in range(self.level):
            if update[i].forward[i] is x:
                update[i].span[i] += x.span[i] - 1
                update[i].forward[i] = x.forward[i]
            else:
                update[i].span[i] -= 1
        if x.forward[0] is not None:
            x.forward[0].backward = x.backward
        else:
            self.tail = x.backward
        while self.level > 1 and self.header.forward[self.level - 1] is None:
            self.level -= 1
        self.length -= 1
        return True

    def rank_of(self, score: int, member: str) -> int:
        """1-based ascending rank, 0 when missing."""
        traversed = 0
        x = self.header
        for i in range(self.level - 1, -1, -1):
            while x.forward[i] is not None and (x.forward[i].score, x.forward[i].member) <= (score, member):
                traversed += x.span[i]
                x = x.forward[i]
            if x is not self.header and x.member == member:
                return traversed
        return 0

    def node_at(self, rank: int) -> Optional[_Node]:
        """Node at 1-based ascending rank."""
        traversed = 0
        x = self.header
        for i in range(self.level - 1, -1, -1):
            while x.forward[i] is not None and traversed + x.span[i] <= rank:
                traversed += x.span[i]
                x = x.forward[i]
            if traversed == rank:
                return x if x is not self.header else None
        return None

    def first(self) -> Optional[_Node]:
        return self.header.forward[0]


class MemoryOrderedStore(OrderedStore):
    """In-process sorted set guarded by a single re-entrant lock."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._lock = threading.RLock()
        self._rng = rng
        self._scores = {}
        self._list = SkipList(rng)
        self._sequence = itertools.count(1)

    def transaction(self):
        return self._lock

    def next_sequence(self) -> int:
        with self._lock:
            return next(self._sequence)

    def insert(self, member: str, score: int) -> bool:
        with self._lock:
            current = self._scores.get(member)
            if current is not None:
                if current == score:
                    return False
                self._list.delete(current, member)
            self._list.insert(score, member)
            self._scores[member] = score
            return current is None

    def range_descending(self, offset: int, count: int) -> List[Tuple[str, int]]:
        with self._lock:
            if offset < 0 or count <= 0 or offset >= len(self._list):
                return []
            node = self._list.node_at(len(self._list) - offset)
            out = []
            while node is not None and len(out) < count:
                out.append((node.member, node.score))
                node = node.backward
            return out

    def rank(self, member: str) -> Optional[int]:
        with self._lock:
            score = self._scores.get(member)
            if score is None:
                return None
            ascending = self._list.rank_of(score, member)
            if not ascending:
                return None
            return len(self._list) - ascending

    def size(self) -> int:
        with self._lock:
            return len(self._list)

    def remove_lowest(self, count: int) -> int:
        removed = 0
        with self._lock:
            while removed < count:
                node = self._list.first()
                if node is None:
                    break
                self._list.delete(node.score, node.member)
                del self._scores[node.member]
                removed += 1
        return removed

    def clear(self) -> None:
        with self._lock:
            self._scores = {}
            self._list = SkipList(self._rng)

import logging
from typing import List, Optional

from .entry import ANONYMOUS_PLAYER, MAX_SCORE, Entry, RankedEntry
from .errors import BackendUnavailable
from .store import OrderedStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 1000
DEFAULT_LIMIT = 5
# Page size used when scanning for a player's best entry
_SCAN_PAGE = 100


class LeaderboardEngine:
    """Ranks score submissions, best first, over an OrderedStore.

    Equal scores rank the earliest submission first. Scores must lie in
    0..`max_score`. The collection is capped at `max_size`; the bound is
    enforced on every write, before `add_score` returns. Backend faults
    never escape: writes report False, reads come back empty.
    """

    def __init__(self, store: OrderedStore, max_size: int = DEFAULT_MAX_SIZE, default_limit: int = DEFAULT_LIMIT,
                 max_score: int = MAX_SCORE):
        if max_size < 1:
            raise ValueError('max_size must be at least 1')
        self.store = store
        self.max_size = max_size
        self.max_score = max_score
        self.default_limit = default_limit if default_limit and default_limit > 0 else DEFAULT_LIMIT

    def add_score(self, player: str, score: int) -> bool:
        if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= self.max_score:
            return False
        if not player or not player.strip():
            player = ANONYMOUS_PLAYER
        try:
            with self.store.transaction():
                entry = Entry.create(player, score, self.store.next_sequence())
                self.store.insert(entry.to_member(), score)
                evicted = self.enforce_bound()
        except BackendUnavailable as exc:
            logger.error(f"[add-score-failed] player={player!r} score={score}: {exc}")
            return False
        if evicted:
            logger.debug(f"[evict] removed={evicted} max_size={self.max_size}")
        return True

    def enforce_bound(self) -> int:
        """Drop the lowest entries until size == max_size. Returns how many were removed."""
        return self.store.trim(self.max_size)

    def get_top_scores(self, limit: Optional[int] = None) -> List[RankedEntry]:
        if limit is None or limit <= 0:
            limit = self.default_limit
        try:
            rows = self.store.range_descending(0, limit)
        except BackendUnavailable as exc:
            logger.error(f"[top-scores-failed] limit={limit}: {exc}")
            return []
        return [
            RankedEntry(rank=position, player=Entry.from_member(member, score).player, score=int(score))
            for position, (member, score) in enumerate(rows, start=1)
        ]

    def get_player_rank(self, player: str) -> Optional[int]:
        """1-based rank of the player's best entry, or None."""
        offset = 0
        try:
            with self.store.transaction():
                while True:
                    rows = self.store.range_descending(offset, _SCAN_PAGE)
                    for position, (member, score) in enumerate(rows):
                        # Descending walk: the first hit is the best score
                        if Entry.from_member(member, score).player == player:
                            return offset + position + 1
                    if len(rows) < _SCAN_PAGE:
                        return None
                    offset += _SCAN_PAGE
        except BackendUnavailable as exc:
            logger.error(f"[player-rank-failed] player={player!r}: {exc}")
            return None

    def total_scores(self) -> int:
        try:
            return self.store.size()
        except BackendUnavailable as exc:
            logger.error(f"[total-scores-failed] {exc}")
            return 0

    def is_available(self) -> bool:
        try:
            self.store.size()
        except BackendUnavailable:
            return False
        return True

    def clear(self) -> bool:
        try:
            self.store.clear()
        except BackendUnavailable as exc:
            logger.error(f"[clear-failed] {exc}")
            return False
        logger.info('[clear] leaderboard emptied')
        return True

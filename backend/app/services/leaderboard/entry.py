from dataclasses import dataclass
from typing import Optional
import time

ANONYMOUS_PLAYER = 'Anonymous'
# Fits a 32-bit INTEGER column and is exact as a redis double score
MAX_SCORE = 2**31 - 1

# Sequences are stored inverted so that, among equal scores, the earliest
# submission has the greatest member and sorts first in descending order.
_SEQUENCE_CEILING = 0xFFFFFFFFFFFFFFFF


@dataclass(frozen=True)
class Entry:
    player: str
    score: int
    submitted_at: int
    sequence: int

    @classmethod
    def create(cls, player: str, score: int, sequence: int, submitted_at: Optional[int] = None) -> 'Entry':
        if submitted_at is None:
            submitted_at = int(time.time() * 1000)
        return cls(player=player, score=score, submitted_at=submitted_at, sequence=sequence)

    def to_member(self) -> str:
        """Encode as `<inverted seq>:<score>:<submitted_at>:<player>`.

        The player goes last so names containing ':' decode intact.
        """
        inverted = _SEQUENCE_CEILING - self.sequence
        return f"{inverted:016x}:{self.score}:{self.submitted_at}:{self.player}"

    @classmethod
    def from_member(cls, member, score=None) -> 'Entry':
        if isinstance(member, bytes):
            member = member.decode('utf-8')
        parts = member.split(':', 3)
        if len(parts) != 4:
            # Foreign member, keep it visible rather than dropping it
            return cls(player=member or ANONYMOUS_PLAYER, score=int(score or 0), submitted_at=0, sequence=0)
        inverted, raw_score, submitted_at, player = parts
        return cls(
            player=player or ANONYMOUS_PLAYER,
            score=int(score) if score is not None else int(raw_score),
            submitted_at=int(submitted_at),
            sequence=_SEQUENCE_CEILING - int(inverted, 16),
        )


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    player: str
    score: int

    def to_dict(self):
        return {
            'rank': self.rank,
            'player': self.player,
            'score': self.score,
        }

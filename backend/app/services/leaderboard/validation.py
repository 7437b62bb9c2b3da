from typing import Tuple

from .entry import ANONYMOUS_PLAYER, MAX_SCORE
from .errors import ValidationError

DEFAULT_PLAYER_NAME_MAX_LENGTH = 255


def validate_submission(data, max_name_length: int = DEFAULT_PLAYER_NAME_MAX_LENGTH,
                        max_score: int = MAX_SCORE) -> Tuple[str, int]:
    """Turn a raw `{player, score}` body into a clean (player, score) pair.

    Raises ValidationError for missing fields, a player that is not a
    string, a score that is not an integer or falls outside
    0..`max_score`, and names over `max_name_length` characters.
    A blank name becomes 'Anonymous'.
    """
    if not isinstance(data, dict) or data.get('score') is None or data.get('player') is None:
        raise ValidationError('Missing data')

    raw_score = data['score']
    if isinstance(raw_score, bool):
        raise ValidationError('Score must be an integer')
    try:
        score = int(raw_score)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError('Score must be an integer')
    if isinstance(raw_score, float) and raw_score != score:
        raise ValidationError('Score must be an integer')
    if score < 0:
        raise ValidationError('Score must be positive')
    if score > max_score:
        raise ValidationError(f'Score must not exceed {max_score}')

    if not isinstance(data['player'], str):
        raise ValidationError('Player must be a string')
    player = data['player'].strip() or ANONYMOUS_PLAYER
    if len(player) > max_name_length:
        raise ValidationError('Player name is too long')
    return player, score

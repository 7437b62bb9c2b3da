import pytest

from app.services.leaderboard import MAX_SCORE, ValidationError, validate_submission


def test_valid_submission():
    assert validate_submission({'player': ' Alice ', 'score': 10}) == ('Alice', 10)
    assert validate_submission({'player': '', 'score': '7'}) == ('Anonymous', 7)
    assert validate_submission({'player': 'a', 'score': 3.0}) == ('a', 3)


@pytest.mark.parametrize('score', [float('inf'), float('-inf'), float('nan'), 10**30, MAX_SCORE + 1, -1, 1.5, 'x', True])
def test_bad_scores(score):
    with pytest.raises(ValidationError):
        validate_submission({'player': 'a', 'score': score})


def test_score_ceiling_is_configurable():
    assert validate_submission({'player': 'a', 'score': 100}, max_score=100) == ('a', 100)
    with pytest.raises(ValidationError):
        validate_submission({'player': 'a', 'score': 101}, max_score=100)


@pytest.mark.parametrize('player', [['a'], {'n': 1}, 12])
def test_player_must_be_string(player):
    with pytest.raises(ValidationError, match='Player must be a string'):
        validate_submission({'player': player, 'score': 1})


def test_missing_fields():
    with pytest.raises(ValidationError):
        validate_submission({'player': 'a'})
    with pytest.raises(ValidationError):
        validate_submission(None)

from datetime import datetime

import pytest

import config
from game.models import AnswerType
from game.scoring import (
    calculate_base_exp,
    calculate_exp,
    calculate_level_up,
    calculate_points,
    cumulative_exp_table,
    group_size_modifier,
    is_power_hour,
    position_points,
    streak_modifier,
)

# A Wednesday outside power hours, so no time-based modifiers apply
WEEKDAY = datetime(2024, 1, 10, 12, 0)


def test_base_exp_grows_with_pool_size():
    assert calculate_base_exp(100) < calculate_base_exp(1000) < calculate_base_exp(5000)
    assert calculate_base_exp(100000) <= config.EXP_CURVE_MAX


def test_base_exp_jitter_is_clamped():
    base = calculate_base_exp(1000)
    assert calculate_base_exp(1000, jitter=1.0) == pytest.approx(base * (1 + config.EXP_JITTER))
    assert calculate_base_exp(1000, jitter=-1.0) == pytest.approx(base * (1 - config.EXP_JITTER))


def test_points():
    assert calculate_points() == 1
    assert calculate_points(hint_used=True) == 0.5
    assert calculate_points(artist_only=True) == config.POINTS_BOTH_MODE_ARTIST
    assert position_points(1, 0) == 1
    assert position_points(1, 3) == 0.5


def test_streak_modifier_is_capped():
    assert streak_modifier(0) == 1
    assert streak_modifier(1) == 1
    assert streak_modifier(2) == pytest.approx(1 + config.STREAK_BONUS_STEP)
    assert streak_modifier(1000) == streak_modifier(config.STREAK_BONUS_MAX_STREAK)


def test_smaller_groups_earn_more():
    assert group_size_modifier(1) > group_size_modifier(5) >= group_size_modifier(10)


def test_later_guessers_earn_less():
    first = calculate_exp(100, position=0, now=WEEKDAY)
    second = calculate_exp(100, position=1, now=WEEKDAY)
    assert second == pytest.approx(first / 2)


def test_bonuses_multiply():
    plain = calculate_exp(100, now=WEEKDAY)
    assert calculate_exp(100, now=WEEKDAY, vote_bonus=True) == pytest.approx(plain * 2)
    assert calculate_exp(100, now=WEEKDAY, hint_used=True) == pytest.approx(plain / 2)
    assert calculate_exp(100, now=datetime(2024, 1, 13, 12, 0)) == pytest.approx(plain * 2)


def test_multiple_choice_earns_less():
    plain = calculate_exp(100, now=WEEKDAY)
    easy = calculate_exp(100, now=WEEKDAY, answer_type=AnswerType.MULTIPLE_CHOICE_EASY)
    hard = calculate_exp(100, now=WEEKDAY, answer_type=AnswerType.MULTIPLE_CHOICE_HARD)
    assert easy < hard < plain


def test_power_hour_only_on_weekdays():
    hour = min(config.POWER_HOURS)
    assert is_power_hour(datetime(2024, 1, 10, hour, 0))
    assert not is_power_hour(datetime(2024, 1, 13, hour, 0))


def test_level_table():
    table = cumulative_exp_table()
    assert table[1] == 0
    assert table[2] == 240
    assert table[3] == 730


def test_level_up():
    assert calculate_level_up("1", 0, 1, 100) is None

    result = calculate_level_up("1", 0, 1, 241)
    assert (result.start_level, result.end_level) == (1, 2)

    result = calculate_level_up("1", 0, 1, 1000)
    assert result.end_level == 3

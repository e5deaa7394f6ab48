"""EXP, points and level calculations for correct guesses."""

import math
from datetime import datetime
from functools import lru_cache
from typing import List, Optional

import config
from game.models import AnswerType, LevelUpResult


def calculate_base_exp(song_count: int, jitter: float = 0.0) -> float:
    """
    Calculate the base EXP awarded for a correct guess.

    Follows a logistic curve over the size of the song pool, so bigger pools
    are worth more, approaching ``EXP_CURVE_MAX``.

    Args:
        song_count: Number of songs in the session's pool
        jitter: Random factor in [-EXP_JITTER, EXP_JITTER], supplied by the caller

    Returns:
        Base EXP as float
    """
    jitter = max(-config.EXP_JITTER, min(config.EXP_JITTER, jitter))
    base = config.EXP_CURVE_MAX / (1 + math.exp(1 - 0.0005 * (song_count - 1500)))
    return base * (1 + jitter)


def calculate_points(hint_used: bool = False, artist_only: bool = False) -> float:
    """Points a correct guess is worth before position is applied."""
    if artist_only:
        return config.POINTS_BOTH_MODE_ARTIST

    if hint_used:
        return config.POINTS_CORRECT * config.POINTS_HINT_PENALTY

    return config.POINTS_CORRECT


def position_points(points: float, position: int) -> float:
    """The first guesser receives full points, everyone after them half."""
    return points if position == 0 else points / 2


def streak_modifier(streak: int) -> float:
    streak = min(max(streak - 1, 0), config.STREAK_BONUS_MAX_STREAK - 1)
    return 1 + config.STREAK_BONUS_STEP * streak


def position_modifier(position: int) -> float:
    """EXP halves for each guesser after the first (position is 0-based)."""
    return 0.5 ** position


def group_size_modifier(num_participants: int) -> float:
    num_participants = min(max(num_participants, 1), 10)
    return max(
        config.GROUP_SIZE_BONUS_MIN,
        config.GROUP_SIZE_BONUS_MAX - config.GROUP_SIZE_BONUS_STEP * (num_participants - 1)
    )


def quick_guess_modifier(time_to_guess_ms: Optional[float]) -> float:
    if time_to_guess_ms is not None and time_to_guess_ms < config.QUICK_GUESS_MS:
        return config.EXP_MODIFIERS['quick_guess']
    return 1.0


def answer_type_modifier(answer_type: str) -> float:
    if answer_type == AnswerType.TYPING_TYPOS:
        return config.EXP_MODIFIERS['typos_allowed']

    if answer_type in AnswerType.MULTIPLE_CHOICE:
        return config.EXP_MODIFIERS[answer_type]

    return 1.0


def is_weekend(now: datetime) -> bool:
    return now.weekday() >= 5


def is_power_hour(now: datetime) -> bool:
    """Power hours only apply on weekdays."""
    return not is_weekend(now) and now.hour in config.POWER_HOURS


def calculate_exp(
    base_exp: float,
    streak: int = 0,
    position: int = 0,
    num_participants: int = 1,
    time_to_guess_ms: Optional[float] = None,
    now: Optional[datetime] = None,
    vote_bonus: bool = False,
    first_game_of_day: bool = False,
    hint_used: bool = False,
    answer_type: str = AnswerType.TYPING
) -> float:
    """
    Calculate the EXP earned by one correct guesser.

    Args:
        base_exp: The round's base EXP, see calculate_base_exp
        streak: The guesser's current streak, counting this guess
        position: 0-based order among this round's correct guessers
        num_participants: Players in the voice channel
        time_to_guess_ms: Time from round start to the guess
        now: Current time, for weekend and power hour bonuses
        vote_bonus: Whether the guesser has an active vote bonus
        first_game_of_day: Whether this is the guesser's first game today
        hint_used: Whether a hint was revealed this round
        answer_type: The guild's answer type option

    Returns:
        EXP as float
    """
    now = now or datetime.utcnow()

    exp = base_exp
    exp *= streak_modifier(streak)
    exp *= position_modifier(position)
    exp *= group_size_modifier(num_participants)
    exp *= quick_guess_modifier(time_to_guess_ms)

    if is_weekend(now):
        exp *= config.EXP_MODIFIERS['weekend']
    elif is_power_hour(now):
        exp *= config.EXP_MODIFIERS['power_hour']

    if vote_bonus:
        exp *= config.EXP_MODIFIERS['vote_bonus']

    if first_game_of_day:
        exp *= config.EXP_MODIFIERS['first_game_of_day']

    if hint_used:
        exp *= config.EXP_MODIFIERS['hint_used']

    exp *= answer_type_modifier(answer_type)

    return exp


@lru_cache(maxsize=1)
def cumulative_exp_table() -> List[int]:
    """Total EXP needed to reach each level, indexed by level."""
    table = [0, 0]
    for level in range(2, config.MAX_LEVEL + 2):
        table.append(table[-1] + int(10 * level ** 2 + 200 * level - 200))
    return table


def calculate_level_up(user_id: str, start_exp: int, start_level: int, exp_gain: int) -> Optional[LevelUpResult]:
    """Return the level change from an EXP gain, or None if the level is unchanged."""
    table = cumulative_exp_table()
    new_exp = start_exp + exp_gain
    end_level = start_level
    while end_level < config.MAX_LEVEL and new_exp > table[end_level + 1]:
        end_level += 1

    if end_level == start_level:
        return None

    return LevelUpResult(user_id=user_id, start_level=start_level, end_level=end_level)

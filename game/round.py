"""Rounds: one song played in a session."""

import logging
import random
import time
import uuid
from typing import Dict, List, Optional, Set, Tuple

from game.models import CorrectGuesser, GuessModeType, LocaleType, PlayerRoundResult, SeekType, Song
from game.scoring import calculate_points
from utils.formatters import mask_hint
from utils.text_similarity import matches_any

logger = logging.getLogger(__name__)

BOOKMARK_COMPONENT_ID = "bookmark"


def get_seek_location(seek_type: str, duration: Optional[float], rng: Optional[random.Random] = None) -> float:
    """Where playback starts, in seconds."""
    rng = rng or random
    if seek_type == SeekType.BEGINNING or not duration:
        return 0.0

    if seek_type == SeekType.MIDDLE:
        return duration * (0.4 + 0.2 * rng.random())

    return duration * (0.6 * rng.random())


class Round:
    """State shared by every kind of round."""

    def __init__(self, song: Song):
        self.song = song
        self.started_at = time.monotonic()
        self.finished = False
        self.skip_achieved = False
        self.skippers: Set[str] = set()
        self.round_message_id: Optional[str] = None
        self.interaction_message = None
        self.interaction_components: List = []
        self.interaction_skip_id = str(uuid.uuid4())

    def time_elapsed_ms(self) -> float:
        return (time.monotonic() - self.started_at) * 1000

    def user_skipped(self, user_id: str):
        self.skippers.add(user_id)

    def get_skip_count(self) -> int:
        return len(self.skippers)

    def is_valid_interaction(self, custom_id: str) -> bool:
        return custom_id == self.interaction_skip_id


class GameRound(Round):
    """A round where players race to name the song or artist."""

    def __init__(self, song: Song, base_exp: float = 0.0):
        super().__init__(song)
        self.base_exp = base_exp
        self.correct_guessers: List[CorrectGuesser] = []
        self.incorrect_mc_guessers: Set[str] = set()
        self.player_round_results: List[PlayerRoundResult] = []
        self.hint_requesters: Set[str] = set()
        self.hint_used = False
        self.multiguess_window_open = False
        self.interaction_correct_answer_id: Optional[str] = None
        self.interaction_incorrect_answer_ids: Dict[str, int] = {}

    def check_guess(self, guess: str, guess_mode_type: str, typos_allowed: bool = False) -> float:
        """Points the guess is worth, or 0 if it is wrong."""
        if not guess:
            return 0

        song_match = matches_any(guess, self.song.accepted_song_names(), typos_allowed)
        artist_match = matches_any(guess, self.song.accepted_artist_names(), typos_allowed)

        if guess_mode_type == GuessModeType.SONG_NAME:
            return calculate_points(self.hint_used) if song_match else 0

        if guess_mode_type == GuessModeType.ARTIST:
            return calculate_points(self.hint_used) if artist_match else 0

        if song_match:
            return calculate_points(self.hint_used)
        if artist_match:
            return calculate_points(self.hint_used, artist_only=True)
        return 0

    def user_correct(self, user_id: str, points: float):
        """Record a correct guesser. Each user is credited once."""
        if self.is_correct_guesser(user_id):
            return
        self.correct_guessers.append(CorrectGuesser(user_id, points))

    def is_correct_guesser(self, user_id: str) -> bool:
        return any(guesser.id == user_id for guesser in self.correct_guessers)

    def hint_requested(self, user_id: str):
        self.hint_requesters.add(user_id)

    def get_hint_request_count(self) -> int:
        return len(self.hint_requesters)

    def get_hint(self, guess_mode_type: str, locale: str = LocaleType.EN) -> str:
        if guess_mode_type == GuessModeType.ARTIST:
            return mask_hint(self.song.localized_artist_name(locale))
        return mask_hint(self.song.localized_song_name(locale))

    def set_multiple_choice_options(self, correct_choice: str, wrong_choices: List[str],
                                    rng: Optional[random.Random] = None) -> List[Tuple[str, str]]:
        """Assign a fresh id to every option. Returns shuffled (custom_id, label) pairs."""
        rng = rng or random
        options = []
        for choice in wrong_choices:
            custom_id = str(uuid.uuid4())
            self.interaction_incorrect_answer_ids[custom_id] = 0
            options.append((custom_id, choice))

        self.interaction_correct_answer_id = str(uuid.uuid4())
        options.append((self.interaction_correct_answer_id, correct_choice))
        rng.shuffle(options)
        return options

    def is_correct_interaction_answer(self, custom_id: str) -> bool:
        return custom_id == self.interaction_correct_answer_id

    def mark_incorrect_answer(self, custom_id: str, user_id: str):
        self.incorrect_mc_guessers.add(user_id)
        if custom_id in self.interaction_incorrect_answer_ids:
            self.interaction_incorrect_answer_ids[custom_id] += 1

    def is_valid_interaction(self, custom_id: str) -> bool:
        return (
            super().is_valid_interaction(custom_id)
            or custom_id == self.interaction_correct_answer_id
            or custom_id in self.interaction_incorrect_answer_ids
        )

    def get_end_round_description(self, unique_song_counter: Tuple[int, int]) -> str:
        played, total = unique_song_counter
        if self.player_round_results:
            lines = []
            for position, result in enumerate(self.player_round_results):
                prefix = "guessed correctly" if position == 0 else "also guessed"
                line = f"<@{result.player.id}> {prefix} (+{int(result.exp_gain)} EXP)"
                if position == 0 and result.streak >= 5:
                    line += f" 🔥 {result.streak}"
                lines.append(line)
            description = "\n".join(lines)
        elif self.skip_achieved:
            description = "Song skipped."
        else:
            description = "Nobody got it."

        return f"{description}\n{played}/{total} unique songs played"


class ListeningRound(Round):
    """A round in a listening session: no guessing, just skip and bookmark."""

    def is_valid_interaction(self, custom_id: str) -> bool:
        return custom_id in (self.interaction_skip_id, BOOKMARK_COMPONENT_ID)

import random

from game.models import GuessModeType, Song
from game.round import BOOKMARK_COMPONENT_ID, GameRound, ListeningRound, get_seek_location

SONG = Song(
    youtube_link="bbbbbbbbbbb",
    song_name="Fantastic Baby",
    artist_name="BIGBANG",
    song_aliases=["Fantastic Bebe"],
    artist_aliases=["Big Bang"],
    duration=200.0,
)


def test_song_name_guesses():
    round_ = GameRound(SONG)
    assert round_.check_guess("fantastic baby", GuessModeType.SONG_NAME) == 1
    assert round_.check_guess("fantastic bebe", GuessModeType.SONG_NAME) == 1
    assert round_.check_guess("bigbang", GuessModeType.SONG_NAME) == 0


def test_artist_guesses():
    round_ = GameRound(SONG)
    assert round_.check_guess("big bang", GuessModeType.ARTIST) == 1
    assert round_.check_guess("fantastic baby", GuessModeType.ARTIST) == 0


def test_both_mode_gives_partial_points_for_artist():
    round_ = GameRound(SONG)
    assert round_.check_guess("fantastic baby", GuessModeType.BOTH) == 1
    assert 0 < round_.check_guess("bigbang", GuessModeType.BOTH) < 1


def test_hint_halves_points():
    round_ = GameRound(SONG)
    round_.hint_used = True
    assert round_.check_guess("fantastic baby", GuessModeType.SONG_NAME) == 0.5
    assert round_.get_hint(GuessModeType.SONG_NAME) == "F________ B___"


def test_users_are_credited_once():
    round_ = GameRound(SONG)
    round_.user_correct("1", 1)
    round_.user_correct("1", 1)
    round_.user_correct("2", 1)
    assert [guesser.id for guesser in round_.correct_guessers] == ["1", "2"]


def test_multiple_choice_ids():
    round_ = GameRound(SONG)
    options = round_.set_multiple_choice_options("Fantastic Baby", ["A", "B", "C"], random.Random(1))

    assert len(options) == 4
    correct_id = next(custom_id for custom_id, label in options if label == "Fantastic Baby")
    wrong_id = next(custom_id for custom_id, label in options if label == "A")
    assert round_.is_correct_interaction_answer(correct_id)
    assert round_.is_valid_interaction(wrong_id)
    assert not round_.is_valid_interaction("stale-id")

    round_.mark_incorrect_answer(wrong_id, "1")
    assert "1" in round_.incorrect_mc_guessers
    assert round_.interaction_incorrect_answer_ids[wrong_id] == 1


def test_rounds_have_unique_skip_ids():
    assert GameRound(SONG).interaction_skip_id != GameRound(SONG).interaction_skip_id


def test_listening_round_accepts_bookmarks_and_skips():
    round_ = ListeningRound(SONG)
    assert round_.is_valid_interaction(BOOKMARK_COMPONENT_ID)
    assert round_.is_valid_interaction(round_.interaction_skip_id)
    assert not round_.is_valid_interaction("other")


def test_seek_locations():
    rng = random.Random(3)
    assert get_seek_location("beginning", 200, rng) == 0
    assert 80 <= get_seek_location("middle", 200, rng) <= 120
    assert 0 <= get_seek_location("random", 200, rng) <= 120
    assert get_seek_location("random", None, rng) == 0

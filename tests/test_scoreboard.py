import pytest

import config
from game.models import SuccessfulGuessResult
from game.options import GameOptions
from game.scoreboard import EliminationScoreboard, Scoreboard, TeamScoreboard

USER_IDS = ["12345", "23456", "34567"]
DEFAULT_LIVES = 10


def correct(user_id, points=1, exp=0):
    return [SuccessfulGuessResult(user_id, points, exp)]


@pytest.fixture
def elimination():
    return EliminationScoreboard(DEFAULT_LIVES)


@pytest.fixture
def elimination_with_players(elimination):
    elimination.add_player(USER_IDS[0], "irene")
    elimination.add_player(USER_IDS[1], "seulgi")
    elimination.add_player(USER_IDS[2], "joy")
    return elimination


# Classic

def test_classic_guesses_add_points_and_exp():
    scoreboard = Scoreboard()
    scoreboard.add_player("1", "Alice")
    scoreboard.add_player("2", "Bob")

    scoreboard.update(correct("1", 1, 100))
    scoreboard.update(correct("1", 0.5, 50))

    assert scoreboard.get_player_score("1") == 1.5
    assert scoreboard.get_player_exp_gain("1") == 150
    assert scoreboard.get_player("1").correct_guess_count == 2
    assert scoreboard.get_player_score("2") == 0


def test_classic_winners_need_a_positive_score():
    scoreboard = Scoreboard()
    scoreboard.add_player("1", "Alice")
    assert scoreboard.get_winners() == []

    scoreboard.update(correct("1"))
    assert [player.id for player in scoreboard.get_winners()] == ["1"]


def test_classic_tied_winners():
    scoreboard = Scoreboard()
    for user_id in USER_IDS:
        scoreboard.add_player(user_id)

    scoreboard.update(correct(USER_IDS[0]))
    scoreboard.update(correct(USER_IDS[1]))

    assert [player.id for player in scoreboard.get_winners()] == USER_IDS[:2]


def test_classic_goal_finishes_game():
    scoreboard = Scoreboard()
    scoreboard.add_player("1")
    options = GameOptions(goal=2)

    scoreboard.update(correct("1"))
    assert not scoreboard.game_finished(options)

    scoreboard.update(correct("1"))
    assert scoreboard.game_finished(options)


def test_classic_without_goal_never_finishes():
    scoreboard = Scoreboard()
    scoreboard.add_player("1")
    for _ in range(50):
        scoreboard.update(correct("1"))
    assert not scoreboard.game_finished(GameOptions())


def test_update_ignores_unknown_players():
    scoreboard = Scoreboard()
    scoreboard.update(correct("ghost"))
    assert scoreboard.get_players() == []


def test_embed_fields_sorted_by_score_and_hide_zero_scores():
    scoreboard = Scoreboard()
    scoreboard.add_player("1", "Alice")
    scoreboard.add_player("2", "Bob")
    scoreboard.add_player("3", "Carol")
    scoreboard.update(correct("2"))
    scoreboard.update(correct("2"))
    scoreboard.update(correct("1"))

    fields = scoreboard.get_scoreboard_embed_fields()
    assert [field["name"] for field in fields] == ["Bob", "Alice"]
    assert fields[0]["value"] == "2"
    assert all(field["inline"] for field in fields)


# Elimination

def test_correct_guesses_do_not_change_own_lives(elimination):
    elimination.add_player(USER_IDS[0], "yeonwoo")
    for _ in range(20):
        elimination.update(correct(USER_IDS[0]))
        assert elimination.get_player_lives(USER_IDS[0]) == DEFAULT_LIVES


def test_one_guesser_decrements_everyone_else(elimination_with_players):
    for _ in range(5):
        elimination_with_players.update(correct(USER_IDS[0], exp=50))

    assert elimination_with_players.get_player_lives(USER_IDS[0]) == DEFAULT_LIVES
    assert elimination_with_players.get_player_lives(USER_IDS[1]) == DEFAULT_LIVES - 5
    assert elimination_with_players.get_player_lives(USER_IDS[2]) == DEFAULT_LIVES - 5


def test_lives_lost_equal_other_players_guesses(elimination_with_players):
    for user_id in [USER_IDS[0]] * 2 + [USER_IDS[1]] * 3 + [USER_IDS[2]]:
        elimination_with_players.update(correct(user_id, exp=50))

    assert elimination_with_players.get_player_lives(USER_IDS[0]) == DEFAULT_LIVES - 4
    assert elimination_with_players.get_player_lives(USER_IDS[1]) == DEFAULT_LIVES - 3
    assert elimination_with_players.get_player_lives(USER_IDS[2]) == DEFAULT_LIVES - 5


def test_no_winners_before_any_round(elimination_with_players):
    assert elimination_with_players.get_winners() == []


def test_single_guesser_is_the_winner(elimination_with_players):
    elimination_with_players.update(correct(USER_IDS[0], points=10))
    winners = elimination_with_players.get_winners()
    assert [player.id for player in winners] == [USER_IDS[0]]


def test_winner_has_most_lives(elimination_with_players):
    elimination_with_players.update(correct(USER_IDS[0]))
    elimination_with_players.update(correct(USER_IDS[0]))
    elimination_with_players.update(correct(USER_IDS[1]))

    assert [player.id for player in elimination_with_players.get_winners()] == [USER_IDS[0]]


def test_tied_players_are_both_winners(elimination_with_players):
    for user_id in [USER_IDS[0], USER_IDS[1], USER_IDS[1], USER_IDS[2], USER_IDS[2]]:
        elimination_with_players.update(correct(user_id))

    assert [player.id for player in elimination_with_players.get_winners()] == USER_IDS[1:]


def test_everyone_dead_finishes_game(elimination):
    for user_id in USER_IDS:
        elimination.add_player(user_id, lives=0)
    assert elimination.game_finished()


def test_one_survivor_finishes_multiplayer_game(elimination):
    elimination.add_player(USER_IDS[0], lives=0)
    elimination.add_player(USER_IDS[1], lives=0)
    elimination.add_player(USER_IDS[2], lives=5)
    assert elimination.game_finished()


def test_single_player_alive_does_not_finish(elimination):
    elimination.add_player(USER_IDS[0], lives=5)
    assert not elimination.game_finished()


def test_several_alive_does_not_finish(elimination):
    for user_id, lives in zip(USER_IDS, [5, 8, 2]):
        elimination.add_player(user_id, lives=lives)
    assert not elimination.game_finished()


@pytest.mark.parametrize("lives, weakest", [([5, 8, 2], 2), ([3, 2, 2], 2)])
def test_lives_of_weakest_player(elimination, lives, weakest):
    for user_id, player_lives in zip(USER_IDS, lives):
        elimination.add_player(user_id, lives=player_lives)
    assert elimination.get_lives_of_weakest_player() == weakest


def test_starting_lives_default_and_explicit(elimination):
    elimination.add_player(USER_IDS[0])
    elimination.add_player(USER_IDS[1], lives=17)
    assert elimination.get_player_lives(USER_IDS[0]) == DEFAULT_LIVES
    assert elimination.get_player_lives(USER_IDS[1]) == 17


def test_nobody_guessing_costs_everyone_a_life(elimination_with_players):
    elimination_with_players.decrement_all_lives()
    assert all(
        elimination_with_players.get_player_lives(user_id) == DEFAULT_LIVES - 1 for user_id in USER_IDS
    )


def test_lives_never_go_negative(elimination):
    elimination.add_player(USER_IDS[0], lives=1)
    elimination.decrement_all_lives()
    elimination.decrement_all_lives()
    assert elimination.get_player_lives(USER_IDS[0]) == 0
    assert elimination.is_player_eliminated(USER_IDS[0])


# Teams

def test_team_score_is_sum_of_members():
    scoreboard = TeamScoreboard()
    scoreboard.add_team_player("red", "1", "Alice")
    scoreboard.add_team_player("red", "2", "Bob")
    scoreboard.add_team_player("blue", "3", "Carol")

    scoreboard.update(correct("1"))
    scoreboard.update(correct("2"))
    scoreboard.update(correct("3"))

    assert scoreboard.get_team("red").score == 2
    assert [team.name for team in scoreboard.get_winners()] == ["red"]


def test_switching_teams_removes_empty_team():
    scoreboard = TeamScoreboard()
    scoreboard.add_team_player("red", "1", "Alice")
    scoreboard.add_team_player("blue", "1", "Alice")

    assert not scoreboard.has_team("red")
    assert scoreboard.get_team_of_player("1").name == "blue"
    assert scoreboard.get_num_players() == 1


def test_players_cannot_join_without_team():
    with pytest.raises(ValueError):
        TeamScoreboard().add_player("1", "Alice")


def test_team_goal_finishes_game():
    scoreboard = TeamScoreboard()
    scoreboard.add_team_player("red", "1")
    scoreboard.add_team_player("red", "2")
    scoreboard.update(correct("1"))
    scoreboard.update(correct("2"))
    assert scoreboard.game_finished(GameOptions(goal=2))


def test_large_scoreboard_renders_as_one_capped_column():
    scoreboard = Scoreboard()
    for index in range(30):
        scoreboard.add_player(str(index), f"Player {index}")
        scoreboard.update(correct(str(index), points=index + 1))

    fields = scoreboard.get_scoreboard_embed_fields(show_exp=True)

    assert len(fields) == 1
    assert not fields[0]["inline"]
    lines = fields[0]["value"].split("\n")
    assert lines[0] == "1. Player 29: 30"
    assert len(lines) == config.EMBED_FIELDS_PER_PAGE + 1
    assert lines[-1] == "...and 10 more"
    assert len(fields[0]["value"]) <= config.EMBED_FIELD_VALUE_LIMIT


def test_team_fields_are_capped():
    scoreboard = TeamScoreboard()
    for index in range(30):
        scoreboard.add_team_player(f"team{index}", str(index))

    fields = scoreboard.get_scoreboard_embed_fields()

    assert len(fields) == config.EMBED_FIELDS_PER_PAGE
    assert not any(field["inline"] for field in fields)

"""Players and teams tracked by a scoreboard."""

from typing import Dict, List, Optional

import config


def format_score(score: float) -> str:
    """Show whole scores without decimals and partial scores with one."""
    if float(score).is_integer():
        return str(int(score))
    return f"{score:.1f}"


class Player:
    """A participant on a scoreboard."""

    def __init__(
        self,
        user_id: str,
        name: str = "",
        avatar_url: str = "",
        score: float = 0,
        first_game_of_day: bool = False,
        premium: bool = False
    ):
        self.id = user_id
        self.name = name
        self.avatar_url = avatar_url
        self.score = score
        self.exp_gain = 0.0
        self.correct_guess_count = 0
        self.in_vc = True
        self.first_game_of_day = first_game_of_day
        self.premium = premium

    def increment_score(self, points: float):
        self.score += points
        self.correct_guess_count += 1

    def increment_exp(self, exp: float):
        self.exp_gain += exp

    @property
    def songs_guessed(self) -> float:
        return self.score

    def get_displayed_score(self) -> str:
        return format_score(self.score)

    def should_include_in_scoreboard(self) -> bool:
        return self.score > 0

    def __repr__(self) -> str:
        return f"<Player id={self.id} score={self.score}>"


class EliminationPlayer(Player):
    """A player whose score is the number of lives left."""

    def __init__(self, user_id: str, name: str = "", avatar_url: str = "",
                 lives: int = config.ELIMINATION_DEFAULT_LIVES, **kwargs):
        super().__init__(user_id, name, avatar_url, score=lives, **kwargs)

    @property
    def lives(self) -> int:
        return int(self.score)

    def increment_score(self, points: float):
        # Lives never grow; a correct guess only counts towards stats
        self.correct_guess_count += 1

    @property
    def songs_guessed(self) -> float:
        return self.correct_guess_count

    def decrement_lives(self):
        if self.score > 0:
            self.score -= 1

    def is_eliminated(self) -> bool:
        return self.score <= 0

    def get_displayed_score(self) -> str:
        return f"❤️ x {self.lives}" if not self.is_eliminated() else "☠️"

    def should_include_in_scoreboard(self) -> bool:
        return True


class Team:
    """A named group of players sharing a combined score."""

    def __init__(self, name: str):
        self.name = name
        self.players: Dict[str, Player] = {}

    @property
    def id(self) -> str:
        return self.name

    @property
    def score(self) -> float:
        return sum(player.score for player in self.players.values())

    def add_player(self, player: Player):
        self.players[player.id] = player

    def remove_player(self, user_id: str) -> Optional[Player]:
        return self.players.pop(user_id, None)

    def has_player(self, user_id: str) -> bool:
        return user_id in self.players

    def get_player(self, user_id: str) -> Optional[Player]:
        return self.players.get(user_id)

    def get_players(self) -> List[Player]:
        return list(self.players.values())

    def get_displayed_score(self) -> str:
        return format_score(self.score)

    def __len__(self) -> int:
        return len(self.players)

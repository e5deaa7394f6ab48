"""Scoreboards for classic, elimination and teams games."""

import logging
from typing import Dict, List, Optional, Sequence

import config
from game.models import SuccessfulGuessResult
from game.options import GameOptions
from game.player import EliminationPlayer, Player, Team
from utils.formatters import truncate_text

logger = logging.getLogger(__name__)


class Scoreboard:
    """Classic scoreboard: every correct guess adds points to the guesser."""

    def __init__(self, guild_id: Optional[str] = None):
        self.guild_id = guild_id
        self.players: Dict[str, Player] = {}

    def add_player(self, user_id: str, name: str = "", avatar_url: str = "",
                   first_game_of_day: bool = False, premium: bool = False) -> Player:
        player = Player(user_id, name, avatar_url, first_game_of_day=first_game_of_day, premium=premium)
        self.players[user_id] = player
        return player

    def has_player(self, user_id: str) -> bool:
        return user_id in self.players

    def get_player(self, user_id: str) -> Optional[Player]:
        return self.players.get(user_id)

    def get_players(self) -> List[Player]:
        return list(self.players.values())

    def get_player_ids(self) -> List[str]:
        return list(self.players.keys())

    def get_num_players(self) -> int:
        return len(self.players)

    def set_in_vc(self, user_id: str, in_vc: bool):
        player = self.players.get(user_id)
        if player:
            player.in_vc = in_vc

    def update(self, results: Sequence[SuccessfulGuessResult]):
        """Credit each correct guesser with their points and EXP."""
        for result in results:
            player = self.players.get(result.user_id)
            if player is None:
                logger.warning(f"gid: {self.guild_id} | Scoreboard update for unknown player {result.user_id}")
                continue

            player.increment_score(result.points_earned)
            player.increment_exp(result.exp_gain)

    def get_winners(self) -> List:
        """Players tied for the highest score, empty until someone has scored."""
        if not self.players:
            return []

        high_score = max(player.score for player in self.players.values())
        if high_score <= 0:
            return []

        return [player for player in self.players.values() if player.score == high_score]

    def game_finished(self, options: GameOptions) -> bool:
        """Whether a player has reached the goal."""
        if not options.goal:
            return False

        return any(player.score >= options.goal for player in self.players.values())

    def get_player_score(self, user_id: str) -> float:
        player = self.players.get(user_id)
        return player.score if player else 0

    def get_player_exp_gain(self, user_id: str) -> int:
        player = self.players.get(user_id)
        return int(player.exp_gain) if player else 0

    def get_player_displayed_score(self, user_id: str) -> str:
        player = self.players.get(user_id)
        return player.get_displayed_score() if player else "0"

    def get_scoreboard_embed_fields(self, show_exp: bool = False) -> List[Dict]:
        """
        Embed fields for every visible player, highest score first.

        Small scoreboards get one inline field per player. Larger ones are a
        single ranked column of the top ``EMBED_FIELDS_PER_PAGE`` players.
        """
        players = sorted(
            (player for player in self.players.values() if player.should_include_in_scoreboard()),
            key=lambda player: player.score,
            reverse=True
        )

        if len(players) <= config.SCOREBOARD_FIELD_CUTOFF:
            return [
                {"name": player.name or player.id, "value": self._player_score_text(player, show_exp), "inline": True}
                for player in players
            ]

        shown = players[:config.EMBED_FIELDS_PER_PAGE]
        lines = [
            f"{rank}. {truncate_text(player.name or player.id, 32)}: {self._player_score_text(player, show_exp)}"
            for rank, player in enumerate(shown, start=1)
        ]
        if len(players) > len(shown):
            lines.append(f"...and {len(players) - len(shown)} more")

        value = truncate_text("\n".join(lines), config.EMBED_FIELD_VALUE_LIMIT)
        return [{"name": "Scoreboard", "value": value, "inline": False}]

    @staticmethod
    def _player_score_text(player: Player, show_exp: bool) -> str:
        value = player.get_displayed_score()
        if show_exp and player.exp_gain:
            value += f" (+{int(player.exp_gain)} EXP)"
        return value


class EliminationScoreboard(Scoreboard):
    """
    Scoreboard where every player starts with a number of lives.

    Each round, every player who did not guess correctly loses a life.
    """

    def __init__(self, lives: int = config.ELIMINATION_DEFAULT_LIVES, guild_id: Optional[str] = None):
        super().__init__(guild_id)
        self.starting_lives = lives
        self.first_place: List[EliminationPlayer] = []

    def add_player(self, user_id: str, name: str = "", avatar_url: str = "",
                   first_game_of_day: bool = False, premium: bool = False,
                   lives: Optional[int] = None) -> EliminationPlayer:
        player = EliminationPlayer(
            user_id, name, avatar_url,
            lives=self.starting_lives if lives is None else lives,
            first_game_of_day=first_game_of_day,
            premium=premium
        )
        self.players[user_id] = player
        return player

    def update(self, results: Sequence[SuccessfulGuessResult]):
        winner_ids = {result.user_id for result in results}
        for result in results:
            player = self.players.get(result.user_id)
            if player:
                player.increment_score(result.points_earned)
                player.increment_exp(result.exp_gain)

        for player in self.players.values():
            if player.id not in winner_ids:
                player.decrement_lives()

        self._update_first_place()

    def decrement_all_lives(self):
        """Nobody guessed the song: everyone loses a life."""
        for player in self.players.values():
            player.decrement_lives()

        self._update_first_place()

    def _update_first_place(self):
        if not self.players:
            self.first_place = []
            return

        max_lives = max(player.lives for player in self.players.values())
        self.first_place = [player for player in self.players.values() if player.lives == max_lives]

    def get_winners(self) -> List[EliminationPlayer]:
        return list(self.first_place)

    def game_finished(self, options: Optional[GameOptions] = None) -> bool:
        players = list(self.players.values())
        if not players:
            return False

        all_eliminated = all(player.is_eliminated() for player in players)
        alive = [player for player in players if not player.is_eliminated()]
        one_left = len(players) > 1 and len(alive) == 1
        return all_eliminated or one_left

    def is_player_eliminated(self, user_id: str) -> bool:
        player = self.players.get(user_id)
        return player.is_eliminated() if player else False

    def get_player_lives(self, user_id: str) -> int:
        player = self.players.get(user_id)
        return player.lives if player else 0

    def get_lives_of_weakest_player(self) -> int:
        """Late joiners start with as many lives as the weakest player."""
        if not self.players:
            return self.starting_lives
        return min(player.lives for player in self.players.values())


class TeamScoreboard(Scoreboard):
    """Scoreboard where guesses credit both the player and their team."""

    def __init__(self, guild_id: Optional[str] = None):
        super().__init__(guild_id)
        self.teams: Dict[str, Team] = {}

    def add_team(self, team_name: str) -> Team:
        team = self.teams.get(team_name)
        if team is None:
            team = Team(team_name)
            self.teams[team_name] = team
        return team

    def add_team_player(self, team_name: str, user_id: str, name: str = "", avatar_url: str = "",
                        first_game_of_day: bool = False, premium: bool = False) -> Team:
        """Put a player on a team, moving them off their previous team if needed."""
        player = self.players.get(user_id)
        if player is None:
            player = super().add_player(user_id, name, avatar_url, first_game_of_day, premium)

        previous_team = self.get_team_of_player(user_id)
        if previous_team is not None and previous_team.name != team_name:
            previous_team.remove_player(user_id)
            if len(previous_team) == 0:
                del self.teams[previous_team.name]

        team = self.add_team(team_name)
        team.add_player(player)
        return team

    def add_player(self, user_id: str, name: str = "", avatar_url: str = "",
                   first_game_of_day: bool = False, premium: bool = False) -> Player:
        raise ValueError("Players must join a team in teams mode")

    def get_team(self, team_name: str) -> Optional[Team]:
        return self.teams.get(team_name)

    def get_team_of_player(self, user_id: str) -> Optional[Team]:
        for team in self.teams.values():
            if team.has_player(user_id):
                return team
        return None

    def has_team(self, team_name: str) -> bool:
        return team_name in self.teams

    def get_num_teams(self) -> int:
        return len(self.teams)

    def get_winners(self) -> List[Team]:
        if not self.teams:
            return []

        high_score = max(team.score for team in self.teams.values())
        if high_score <= 0:
            return []

        return [team for team in self.teams.values() if team.score == high_score]

    def game_finished(self, options: GameOptions) -> bool:
        if not options.goal:
            return False

        return any(team.score >= options.goal for team in self.teams.values())

    def get_scoreboard_embed_fields(self, show_exp: bool = False) -> List[Dict]:
        teams = sorted(self.teams.values(), key=lambda team: team.score, reverse=True)
        inline = len(teams) <= config.SCOREBOARD_FIELD_CUTOFF
        teams = teams[:config.EMBED_FIELDS_PER_PAGE]

        fields = []
        for team in teams:
            members = sorted(team.get_players(), key=lambda player: player.score, reverse=True)
            lines = []
            for player in members:
                lines.append(f"{player.name or player.id}: {self._player_score_text(player, show_exp)}")

            fields.append({
                "name": f"Team {team.name}: {team.get_displayed_score()}",
                "value": truncate_text("\n".join(lines), config.EMBED_FIELD_VALUE_LIMIT) or "-",
                "inline": inline
            })
        return fields

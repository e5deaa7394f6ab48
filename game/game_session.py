"""Guessing game session: scoring, streaks, hints, teams and end of game stats."""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

import config
from game.models import (
    GameType,
    GuessModeType,
    GuessResult,
    GuildMember,
    InteractionResponse,
    LastGuesser,
    LevelUpResult,
    MessageContext,
    MultiGuessType,
    PlayerRoundResult,
    Song,
    SuccessfulGuessResult,
)
from game.options import GuildPreference
from game.round import BOOKMARK_COMPONENT_ID, GameRound
from game.scoreboard import EliminationScoreboard, Scoreboard, TeamScoreboard
from game.scoring import calculate_base_exp, calculate_exp, position_points
from game.session import Session, SessionServices
from utils.embeds import (
    ButtonSpec,
    EmbedPayload,
    create_end_game_payload,
    create_level_up_payload,
    create_multiple_choice_payload,
    create_round_payload,
    create_scoreboard_payload,
)
from utils.formatters import bold, ordinal

logger = logging.getLogger(__name__)


class GameSession(Session):
    """A session where players guess the song playing in voice."""

    def __init__(
        self,
        guild_preference: GuildPreference,
        text_channel_id: str,
        voice_channel_id: str,
        guild_id: str,
        owner: GuildMember,
        services: SessionServices,
        game_type: str = GameType.CLASSIC,
        is_premium: bool = False,
        elimination_lives: Optional[int] = None
    ):
        super().__init__(guild_preference, text_channel_id, voice_channel_id, guild_id, owner, services, is_premium)
        self.game_type = game_type
        self.correct_guesses = 0
        self.guess_times: List[float] = []
        self.song_stats: Dict[str, Dict[str, int]] = {}
        self.last_guesser: Optional[LastGuesser] = None

        if game_type == GameType.TEAMS:
            self.scoreboard = TeamScoreboard(guild_id)
        elif game_type == GameType.ELIMINATION:
            lives = elimination_lives or config.ELIMINATION_DEFAULT_LIVES
            self.scoreboard = EliminationScoreboard(min(lives, config.ELIMINATION_MAX_LIVES), guild_id)
        else:
            self.scoreboard = Scoreboard(guild_id)

    def get_guess_timeout(self) -> Optional[float]:
        if not self.guild_preference.is_guess_timeout_set():
            return None
        return self.guild_preference.game_options.guess_timeout

    def multiguess_delay_is_active(self) -> bool:
        """Multiguess only waits for other players when there are other players."""
        player_is_alone = len(self.get_voice_members()) == 1
        return self.guild_preference.game_options.multi_guess_type == MultiGuessType.ON and not player_is_alone

    def prepare_round(self, song: Song) -> GameRound:
        jitter = self.services.rng.uniform(-config.EXP_JITTER, config.EXP_JITTER)
        return GameRound(song, base_exp=calculate_base_exp(self.get_song_count(), jitter))

    async def start_round(self, ctx: MessageContext) -> bool:
        if self.initialized:
            # Gap between rounds; the multiguess window already waited part of it
            delay = config.SONG_START_DELAY
            if self.multiguess_delay_is_active():
                delay -= config.MULTIGUESS_DELAY
            await asyncio.sleep(max(delay, 0))

        if self.finished or self.round is not None:
            return False

        if not await super().start_round(ctx):
            return False

        round_ = self.round
        if round_ is not None and self.guild_preference.is_multiple_choice_mode():
            await self.send_multiple_choice_options(round_)

        return True

    async def send_multiple_choice_options(self, round_: GameRound):
        options = self.guild_preference.game_options
        if options.guess_mode_type == GuessModeType.ARTIST:
            correct_choice = round_.song.localized_artist_name(self.locale)
        else:
            correct_choice = round_.song.localized_song_name(self.locale)

        wrong_choices = self.song_selector.get_multiple_choice_options(
            options.answer_type, options.guess_mode_type, round_.song, self.locale
        )
        choices = round_.set_multiple_choice_options(correct_choice, wrong_choices, self.services.rng)
        row_size = config.MULTIPLE_CHOICE_ROW_SIZE.get(options.answer_type, 4)
        payload = create_multiple_choice_payload(choices, row_size, options.guess_mode_type)
        round_.interaction_components = payload.components
        round_.interaction_message = await self.messenger.send_info_message(self.text_channel_id, payload)

    # Guessing

    def guess_eligible(self, ctx: MessageContext) -> bool:
        """Whether the message author may guess in this session right now."""
        if ctx.author is None:
            return False

        user_voice_channel = self.voice.get_user_voice_channel_id(self.guild_id, ctx.author.id)
        if user_voice_channel != self.voice_channel_id:
            return False

        if ctx.text_channel_id != self.text_channel_id:
            return False

        if self.game_type == GameType.ELIMINATION:
            if not self.scoreboard.has_player(ctx.author.id) or self.scoreboard.is_player_eliminated(ctx.author.id):
                return False
        elif self.game_type == GameType.TEAMS:
            if self.scoreboard.get_player(ctx.author.id) is None:
                return False

        return True

    def check_guess(self, user_id: str, guess: str) -> float:
        round_ = self.round
        if round_ is None:
            return 0

        if self.guild_preference.is_multiple_choice_mode() and user_id in round_.incorrect_mc_guessers:
            return 0

        points = round_.check_guess(
            guess,
            self.guild_preference.game_options.guess_mode_type,
            self.guild_preference.typos_allowed()
        )
        if points:
            round_.user_correct(user_id, points)
        return points

    async def guess_song(self, ctx: MessageContext, guess: str):
        """Process a message that may be a guess for the current round."""
        if self.playback is None or not self.playback.active:
            return

        round_ = self.round
        if round_ is None:
            return

        if not self.guess_eligible(ctx):
            return

        if round_.finished and not round_.multiguess_window_open:
            return

        if self.game_type != GameType.TEAMS and not self.scoreboard.has_player(ctx.author.id):
            await self.add_player(ctx.author)

        points = self.check_guess(ctx.author.id, guess)
        if points > 0:
            if round_.finished:
                # Guessed during the multiguess window, already recorded
                return

            round_.finished = True
            if self.multiguess_delay_is_active():
                round_.multiguess_window_open = True
                await asyncio.sleep(config.MULTIGUESS_DELAY)
                round_.multiguess_window_open = False

            if self.finished or self.round is not round_:
                return

            self.correct_guesses += 1
            await self.end_round(ctx, GuessResult(correct=True, correct_guessers=list(round_.correct_guessers)))
            await self.last_active_now()
            await self.run_isolated(
                "Incrementing guild songs guessed", self.db.increment_guild_songs_guessed(self.guild_id)
            )
            await self.start_round(ctx)
        elif self.guild_preference.is_multiple_choice_mode():
            voice_member_ids = {member.id for member in self.get_voice_members()}
            if voice_member_ids and voice_member_ids <= round_.incorrect_mc_guessers:
                await self.end_round(self.system_context(), GuessResult(correct=False))
                await self.start_round(ctx)

    # Round end

    async def process_round_end(self, round_: GameRound, ctx: Optional[MessageContext], guess_result: GuessResult):
        time_played = round_.time_elapsed_ms()

        if guess_result.correct and guess_result.correct_guessers:
            first_guesser = guess_result.correct_guessers[0].id
            if self.last_guesser is None or self.last_guesser.user_id != first_guesser:
                self.last_guesser = LastGuesser(first_guesser)
            else:
                self.last_guesser.streak += 1

            self.guess_times.append(time_played)
            await self.update_scoreboard(round_, guess_result, time_played, ctx)
        elif not guess_result.error:
            self.last_guesser = None
            if self.game_type == GameType.ELIMINATION and not self.finished:
                self.scoreboard.decrement_all_lives()

        self.increment_song_stats(
            round_.song.youtube_link, guess_result.correct, round_.skip_achieved, round_.hint_used, time_played
        )

        if ctx is not None:
            message = await self.send_round_result_message(round_, ctx, guess_result)
            if message is not None:
                round_.round_message_id = str(message.id)

    async def update_scoreboard(
        self,
        round_: GameRound,
        guess_result: GuessResult,
        time_played: float,
        ctx: Optional[MessageContext]
    ):
        streak = self.last_guesser.streak if self.last_guesser else 0
        num_participants = len(self.get_voice_members())
        now = datetime.utcnow()
        header = ctx.debug_header() if ctx else self.debug_header()

        results = []
        for position, guesser in enumerate(guess_result.correct_guessers):
            player = self.scoreboard.get_player(guesser.id)
            exp_gain = calculate_exp(
                round_.base_exp,
                streak=streak,
                position=position,
                num_participants=num_participants,
                time_to_guess_ms=time_played,
                now=now,
                vote_bonus=await self.user_bonus_is_active(guesser.id),
                first_game_of_day=bool(player and player.first_game_of_day),
                hint_used=round_.hint_used,
                answer_type=self.guild_preference.game_options.answer_type
            )

            if position == 0:
                logger.info(
                    f"{header}, uid: {guesser.id} | Song correctly guessed. song = {round_.song.song_name}. "
                    f"Gained {exp_gain:.0f} EXP"
                )
            else:
                logger.info(
                    f"{header}, uid: {guesser.id} | Song correctly guessed {ordinal(position + 1)}. "
                    f"song = {round_.song.song_name}. Gained {exp_gain:.0f} EXP"
                )

            results.append(PlayerRoundResult(
                player=guesser,
                points_earned=position_points(guesser.points_awarded, position),
                exp_gain=exp_gain,
                streak=streak if position == 0 else 0
            ))

        round_.player_round_results = results
        self.scoreboard.update([
            SuccessfulGuessResult(result.player.id, result.points_earned, result.exp_gain)
            for result in results
        ])

    async def user_bonus_is_active(self, user_id: str) -> bool:
        try:
            return await self.db.user_bonus_is_active(user_id)
        except Exception:
            logger.exception(f"{self.debug_header()} | Error checking vote bonus for {user_id}")
            return False

    async def send_round_result_message(self, round_: GameRound, ctx: MessageContext, guess_result: GuessResult):
        correct = bool(round_.player_round_results)
        if correct:
            first_id = round_.player_round_results[0].player.id
            bonus = await self.user_bonus_is_active(first_id)
            color = config.EMBED_SUCCESS_BONUS_COLOR if bonus else config.EMBED_SUCCESS_COLOR
        else:
            color = config.EMBED_FAILURE_COLOR

        fields = self.scoreboard.get_scoreboard_embed_fields()
        description = round_.get_end_round_description(self.song_selector.get_unique_song_counter())
        if fields and len(fields) <= config.SCOREBOARD_FIELD_CUTOFF:
            description += "\n\n" + bold("Scoreboard")

        payload = create_round_payload(
            round_.song,
            self.locale,
            description,
            fields,
            color,
            self.song_selector.get_unique_song_counter(),
            self.guild_preference.game_options.guess_mode_type,
            self.get_remaining_duration()
        )
        payload.components = [[ButtonSpec(label="Bookmark", custom_id=BOOKMARK_COMPONENT_ID)]]

        if self.guild_preference.is_multiple_choice_mode() and round_.interaction_message is not None:
            edited = await self.messenger.edit_message(round_.interaction_message, payload)
            return edited or round_.interaction_message

        reply_to = ctx.referenced_message_id if correct else None
        return await self.messenger.send_info_message(self.text_channel_id, payload, reply_to=reply_to)

    def increment_song_stats(self, link: str, correct: bool, skipped: bool, hint_used: bool, time_played: float):
        stats = self.song_stats.setdefault(link, {
            'correct_guesses': 0,
            'rounds_played': 0,
            'skip_count': 0,
            'hint_count': 0,
            'time_to_guess': 0,
            'time_played': 0,
        })
        stats['rounds_played'] += 1
        stats['time_played'] += int(time_played)

        if correct:
            stats['correct_guesses'] += 1
            stats['time_to_guess'] += int(time_played)

        if skipped:
            stats['skip_count'] += 1

        if hint_used:
            stats['hint_count'] += 1

    async def end_round(self, ctx: Optional[MessageContext] = None, guess_result: Optional[GuessResult] = None):
        await super().end_round(ctx, guess_result)

        if not self.finished and self.scoreboard.game_finished(self.guild_preference.game_options):
            await self.end_session()

    # Session end

    async def commit_session(self):
        if self.game_type == GameType.COMPETITION:
            ranking = sorted(self.scoreboard.get_players(), key=lambda player: player.score, reverse=True)
            logger.info(f"{self.debug_header()} | Scoreboard: " + ", ".join(
                f"{player.name} ({player.id}): {player.get_displayed_score()}" for player in ranking
            ))

        level_ups: List[LevelUpResult] = []
        await self.run_isolated("Committing player stats", *[
            self.commit_player_stats(player_id, level_ups) for player_id in self.scoreboard.get_player_ids()
        ])

        if level_ups:
            names = {player.id: player.name for player in self.scoreboard.get_players()}
            await self.messenger.send_info_message(self.text_channel_id, create_level_up_payload(level_ups, names))

        session_length = (datetime.utcnow() - self.started_at).total_seconds() / 60
        average_guess_time = sum(self.guess_times) / (len(self.guess_times) * 1000) if self.guess_times else -1
        await self.run_isolated("Storing game session", self.db.insert_game_session(
            self.started_at,
            self.guild_id,
            self.scoreboard.get_num_players(),
            average_guess_time,
            session_length,
            self.rounds_played,
            self.correct_guesses
        ))

        if not self.guild_preference.is_multiple_choice_mode():
            await self.run_isolated("Storing song stats", *[
                self.db.increment_song_metadata(link, stats) for link, stats in self.song_stats.items()
            ])

        await self.send_end_game_message()
        logger.info(
            f"{self.debug_header()} | Game session ended. rounds_played = {self.rounds_played}. "
            f"session_length = {session_length:.2f}. game_type = {self.game_type}"
        )

    async def commit_player_stats(self, player_id: str, level_ups: List[LevelUpResult]):
        player = self.scoreboard.get_player(player_id)
        await self.db.ensure_player_stat(player_id, self.guild_id)
        await self.db.increment_player_games_played(player_id)

        songs_guessed = player.songs_guessed if player else 0
        if songs_guessed > 0:
            await self.db.increment_player_songs_guessed(player_id, songs_guessed)

        exp_gain = self.scoreboard.get_player_exp_gain(player_id)
        level_up = None
        if exp_gain > 0:
            level_up = await self.db.increment_player_exp(player_id, exp_gain)
            if level_up:
                level_ups.append(level_up)

        levels_gained = level_up.end_level - level_up.start_level if level_up else 0
        await self.db.insert_player_session_stats(player_id, songs_guessed, exp_gain, levels_gained)

    async def send_end_game_message(self):
        winners = self.scoreboard.get_winners()
        fields = self.scoreboard.get_scoreboard_embed_fields(show_exp=self.game_type != GameType.TEAMS)
        bonus = False
        if winners and self.game_type != GameType.TEAMS:
            bonus = await self.user_bonus_is_active(winners[0].id)

        payload = create_end_game_payload(
            winners,
            fields,
            self.correct_guesses,
            self.rounds_played,
            bonus_active=bonus,
            large_scoreboard=len(fields) > config.SCOREBOARD_FIELD_CUTOFF
        )
        await self.messenger.send_info_message(self.text_channel_id, payload)

    # Players and voice

    async def add_player(self, member: GuildMember, lives: Optional[int] = None):
        first_game_of_day = False
        premium = False
        try:
            first_game_of_day = await self.db.is_first_game_of_day(member.id)
            premium = await self.db.is_user_premium(member.id)
        except Exception:
            logger.exception(f"{self.debug_header()} | Error looking up player {member.id}")

        if isinstance(self.scoreboard, EliminationScoreboard):
            self.scoreboard.add_player(
                member.id, member.name, member.avatar_url, first_game_of_day, premium, lives=lives
            )
        else:
            self.scoreboard.add_player(member.id, member.name, member.avatar_url, first_game_of_day, premium)

    async def set_player_in_vc(self, member: GuildMember, in_vc: bool):
        if in_vc and not self.scoreboard.has_player(member.id) and self.game_type != GameType.TEAMS:
            lives = None
            if isinstance(self.scoreboard, EliminationScoreboard):
                lives = self.scoreboard.get_lives_of_weakest_player()
            await self.add_player(member, lives)

        self.scoreboard.set_in_vc(member.id, in_vc)

    async def sync_all_voice_members(self):
        """Track everyone in voice and mark players who left."""
        voice_members = self.get_voice_members()
        voice_member_ids = {member.id for member in voice_members}

        for player_id in self.scoreboard.get_player_ids():
            if player_id not in voice_member_ids:
                self.scoreboard.set_in_vc(player_id, False)

        if self.game_type == GameType.TEAMS:
            # Players pick their own team with /join
            return

        for member in voice_members:
            if not self.scoreboard.has_player(member.id):
                await self.add_player(member)

    def choose_new_owner(self, voice_members: List[GuildMember]) -> Optional[GuildMember]:
        """The first player to join the game who is still in voice."""
        members_by_id = {member.id: member for member in voice_members}
        for player_id in self.scoreboard.get_player_ids():
            if player_id in members_by_id:
                return members_by_id[player_id]
        return None

    # Teams

    async def join_team(self, member: GuildMember, team_name: str) -> InteractionResponse:
        if not isinstance(self.scoreboard, TeamScoreboard):
            return InteractionResponse(description="Teams can only be joined in a teams game.", error=True)

        team_name = team_name.strip()
        if not team_name:
            return InteractionResponse(description="Team names can't be empty.", error=True)

        created = not self.scoreboard.has_team(team_name)
        first_game_of_day = False
        try:
            first_game_of_day = await self.db.is_first_game_of_day(member.id)
        except Exception:
            logger.exception(f"{self.debug_header()} | Error looking up player {member.id}")

        self.scoreboard.add_team_player(team_name, member.id, member.name, member.avatar_url, first_game_of_day)
        logger.info(f"{self.debug_header()} | {member.id} joined team {team_name} (created = {created})")

        if created:
            return InteractionResponse(
                title=f"Team {team_name} created",
                description=f"{member.mention} created team {bold(team_name)}. "
                            f"Others can join with `/join {team_name}`; start with `/begin`.",
                ephemeral=False
            )
        return InteractionResponse(
            title=f"Joined team {team_name}",
            description=f"{member.mention} joined team {bold(team_name)}.",
            ephemeral=False
        )

    async def begin(self, member: GuildMember, ctx: MessageContext) -> InteractionResponse:
        """Start a teams game once at least one team exists."""
        if self.initialized:
            return InteractionResponse(description="The game has already started.", error=True)

        if member.id != self.owner.id:
            return InteractionResponse(description=f"Only the owner {self.owner.mention} can begin the game.", error=True)

        if isinstance(self.scoreboard, TeamScoreboard) and self.scoreboard.get_num_teams() == 0:
            return InteractionResponse(description="Create a team with `/join` before beginning.", error=True)

        await self.start_round(ctx)
        return InteractionResponse(title="Game starting", ephemeral=False)

    # Hints

    async def request_hint(self, member: GuildMember, ctx: MessageContext) -> InteractionResponse:
        round_ = self.round
        if round_ is None or round_.finished:
            return InteractionResponse(description="There is no song to give a hint for.", error=True)

        if self.guild_preference.is_multiple_choice_mode():
            return InteractionResponse(description="Hints aren't available in multiple choice.", error=True)

        if not self.guess_eligible(ctx):
            return InteractionResponse(description="You must be playing to request a hint.", error=True)

        round_.hint_requested(member.id)
        hint_counter = f"{round_.get_hint_request_count()}/{self.get_majority_count()}"
        if round_.get_hint_request_count() < self.get_majority_count():
            return InteractionResponse(title="Hint request received", description=f"{hint_counter} requests",
                                       ephemeral=False)

        return self.reveal_hint(round_)

    async def force_hint(self, member: GuildMember, ctx: MessageContext) -> InteractionResponse:
        round_ = self.round
        if member.id != self.owner.id:
            return InteractionResponse(description=f"Only the owner {self.owner.mention} can force a hint.", error=True)

        if round_ is None or round_.finished:
            return InteractionResponse(description="There is no song to give a hint for.", error=True)

        return self.reveal_hint(round_)

    def reveal_hint(self, round_: GameRound) -> InteractionResponse:
        round_.hint_used = True
        hint = round_.get_hint(self.guild_preference.game_options.guess_mode_type, self.locale)
        logger.info(f"{self.debug_header()} | Hint revealed")
        return InteractionResponse(title="Hint", description=f"`{hint}`\nCorrect guesses are worth half points.",
                                   ephemeral=False)

    # Interactions

    async def handle_component_interaction(
        self,
        custom_id: str,
        user: GuildMember,
        message_id: Optional[str],
        ctx: MessageContext
    ) -> InteractionResponse:
        if custom_id == BOOKMARK_COMPONENT_ID:
            return self.handle_bookmark_interaction(message_id, user)

        rejection = self.check_interaction(custom_id, user)
        if rejection is not None:
            return rejection

        round_ = self.round
        if user.id in round_.incorrect_mc_guessers or not self.guess_eligible(ctx):
            return InteractionResponse(description="You've already been eliminated this round.", error=True)

        if not round_.is_correct_interaction_answer(custom_id):
            round_.mark_incorrect_answer(custom_id, user.id)
            await self.guess_song(ctx, "")
            return InteractionResponse(description="Wrong answer! You're out for this round.", error=True)

        if self.guild_preference.game_options.guess_mode_type == GuessModeType.ARTIST:
            answer = round_.song.artist_name
        else:
            answer = round_.song.song_name

        await self.guess_song(ctx, answer)
        return InteractionResponse()

    # Score display

    def get_score_payload(self, user_id: str) -> EmbedPayload:
        if isinstance(self.scoreboard, EliminationScoreboard):
            footer_text = f"Your lives: {self.scoreboard.get_player_lives(user_id)}"
        elif isinstance(self.scoreboard, TeamScoreboard):
            team = self.scoreboard.get_team_of_player(user_id)
            team_score = team.get_displayed_score() if team else "0"
            footer_text = (
                f"Your team's score: {team_score}\n"
                f"Your score: {self.scoreboard.get_player_displayed_score(user_id)}"
            )
        else:
            footer_text = f"Your score: {self.scoreboard.get_player_displayed_score(user_id)}"

        return create_scoreboard_payload(self.scoreboard.get_scoreboard_embed_fields(show_exp=True), footer_text)

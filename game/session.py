"""Base class for a guild's live session: song pool, rounds, playback and teardown."""

import asyncio
import logging
import os
import random
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Deque, Dict, List, Optional, Tuple

import config
from game.models import (
    BookmarkedSong,
    GuessResult,
    GuildMember,
    InteractionResponse,
    MessageContext,
    Song,
)
from game.options import GuildPreference
from game.round import Round, get_seek_location
from game.song_selector import SongSelector
from game.timer import GuessTimeout
from utils.embeds import EmbedPayload, create_bookmarks_payload

logger = logging.getLogger(__name__)


@dataclass
class SessionServices:
    """Collaborators a session talks to; swapped for fakes in tests."""
    voice: object
    messenger: object
    db: object
    registry: object
    song_dir: str = config.SONG_DOWNLOAD_DIR
    rng: random.Random = field(default_factory=random.Random)


class Session(ABC):
    """
    A guild's live session.

    Owns at most one round, one guess timeout and one playback subscription at
    a time. ``finished`` only ever goes from False to True.
    """

    def __init__(
        self,
        guild_preference: GuildPreference,
        text_channel_id: str,
        voice_channel_id: str,
        guild_id: str,
        owner: GuildMember,
        services: SessionServices,
        is_premium: bool = False
    ):
        self.guild_preference = guild_preference
        self.text_channel_id = text_channel_id
        self.voice_channel_id = voice_channel_id
        self.guild_id = guild_id
        self.owner = owner
        self.services = services
        self.is_premium = is_premium

        self.started_at = datetime.utcnow()
        self.last_active = datetime.utcnow()
        self.initialized = False
        self.finished = False
        self.round: Optional[Round] = None
        self.rounds_played = 0

        self.song_selector = SongSelector(services.db, services.rng)
        self.song_messages: Deque[Tuple[str, Song]] = deque(maxlen=config.BOOKMARK_MESSAGE_SIZE)
        self.bookmarked_songs: Dict[str, Dict[str, BookmarkedSong]] = {}

        self.guess_timeout = GuessTimeout()
        self.playback = None

        self.guild_preference.reload_song_callback = self.reload_songs

    # Helpers

    @property
    def voice(self):
        return self.services.voice

    @property
    def messenger(self):
        return self.services.messenger

    @property
    def db(self):
        return self.services.db

    @property
    def locale(self) -> str:
        return self.guild_preference.locale

    def system_context(self) -> MessageContext:
        """Context for messages the session sends on its own."""
        return MessageContext(self.text_channel_id, guild_id=self.guild_id)

    def debug_header(self) -> str:
        return f"gid: {self.guild_id} | tcid: {self.text_channel_id}"

    def session_name(self) -> str:
        return type(self).__name__

    def get_voice_members(self) -> List[GuildMember]:
        return self.voice.get_voice_members(self.voice_channel_id)

    def get_majority_count(self) -> int:
        return len(self.get_voice_members()) // 2 + 1

    async def send_info(self, title: str, description: Optional[str] = None, **kwargs):
        return await self.messenger.send_info_message(
            self.text_channel_id, EmbedPayload(title=title, description=description, **kwargs)
        )

    async def send_error(self, title: str, description: Optional[str] = None):
        return await self.messenger.send_error_message(
            self.text_channel_id, EmbedPayload(title=title, description=description)
        )

    async def run_isolated(self, description: str, *coros) -> List:
        """Await independent writes; a failure is logged without affecting the others."""
        results = await asyncio.gather(*coros, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error(f"{self.debug_header()} | {description} failed: {result!r}", exc_info=result)
        return results

    # Song pool

    async def reload_songs(self):
        await self.song_selector.reload_songs(self.guild_preference, self.is_premium)

    def get_song_count(self) -> int:
        return self.song_selector.get_current_song_count()

    # Round lifecycle

    @abstractmethod
    def prepare_round(self, song: Song) -> Round:
        """Build the round for the drawn song."""

    async def start_round(self, ctx: MessageContext) -> bool:
        """
        Draw a song and start playing it.

        Returns:
            True if a round started, False if the session is finished, a round
            is already active, or starting failed (which ends the session)
        """
        if self.finished or self.round is not None:
            return False

        if not self.initialized:
            logger.info(f"{ctx.debug_header()} | {self.session_name()} starting")
        self.initialized = True

        if self.song_selector.get_songs() is None:
            try:
                await self.reload_songs()
            except Exception as e:
                logger.error(
                    f"{ctx.debug_header()} | Error querying songs: {e!r}. "
                    f"options = {self.guild_preference.to_json()}"
                )
                await self.send_error(
                    "Error selecting song",
                    "Something went wrong while choosing songs. Please try starting a new game."
                )
                await self.end_session()
                return False

            if self.finished or self.round is not None:
                return False

        if self.song_selector.check_unique_song_queue():
            total = self.song_selector.get_current_song_count()
            logger.info(f"{ctx.debug_header()} | Resetting unique songs played (all {total} songs played)")
            await self.send_info(
                "Resetting unique songs",
                f"Every song in the current options ({total}) has been played. Starting over!"
            )

            if self.finished or self.round is not None:
                return False

        self.song_selector.check_alternating_gender(self.guild_preference)
        song = self.song_selector.query_random_song(self.guild_preference)
        if song is None:
            await self.send_error(
                "No songs found",
                "No songs match the current game options. Try changing them and starting again."
            )
            await self.end_session()
            return False

        round_ = self.prepare_round(song)
        self.round = round_

        if not self.voice.voice_channel_exists(self.voice_channel_id) or not self.get_voice_members():
            logger.info(f"{ctx.debug_header()} | Voice channel is empty, ending {self.session_name()}")
            self._detach_round()
            await self.send_error("Voice channel empty", "Nobody is left in the voice channel.")
            await self.end_session()
            return False

        try:
            await self.voice.ensure_connection(self.guild_id, self.voice_channel_id)
        except Exception as e:
            if self.round is round_:
                self._detach_round()
            await self.end_session()
            logger.error(f"{ctx.debug_header()} | Error obtaining voice connection: {e!r}")
            await self.send_error(
                "Missing voice permissions",
                "I couldn't join your voice channel. Check that I can connect and speak there."
            )
            return False

        if self.finished or self.round is not round_:
            # Ended while connecting; teardown already ran, so leave again
            if self.finished:
                logger.info(f"{ctx.debug_header()} | Session ended while connecting to voice")
                try:
                    await self.voice.disconnect(self.guild_id)
                except Exception:
                    logger.exception(f"{self.debug_header()} | Error leaving voice channel")
            return False

        await self.play_song(ctx)
        return True

    def get_seek_type(self) -> str:
        return self.guild_preference.game_options.seek_type

    def get_guess_timeout(self) -> Optional[float]:
        """Seconds before an unguessed round ends, or None for no timeout."""
        return None

    async def play_song(self, ctx: MessageContext):
        round_ = self.round
        if round_ is None:
            return

        song = round_.song
        seek = get_seek_location(self.get_seek_type(), song.duration, self.services.rng)
        song_path = os.path.join(self.services.song_dir, f"{song.youtube_link}.ogg")

        logger.info(
            f"{ctx.debug_header()} | Playing song. seek = {self.get_seek_type()} ({seek:.1f}s). "
            f"song = {song.song_name}:{song.artist_name}:{song.youtube_link}"
        )

        if self.playback is not None:
            self.playback.close()

        try:
            self.playback = self.voice.play(
                self.guild_id, song_path, seek, partial(self._on_playback_finished, round_, ctx)
            )
        except Exception:
            logger.exception(f"{ctx.debug_header()} | Error playing on voice connection")
            await self.error_restart_round()
            return

        self.start_guess_timeout(round_, ctx)

    async def _on_playback_finished(self, round_: Round, ctx: MessageContext, error: Optional[Exception]):
        if self.finished or self.round is not round_:
            return

        if round_.finished:
            # A correct guess is already ending this round
            if error is not None:
                logger.warning(f"{ctx.debug_header()} | Stream error after round was guessed: {error!r}")
            return

        if error is not None:
            logger.error(f"{ctx.debug_header()} | Error with stream: {error!r}. song = {round_.song.youtube_link}")
            await self.error_restart_round()
            return

        logger.info(f"{ctx.debug_header()} | Song finished without being guessed")
        await self.end_round(self.system_context(), GuessResult(correct=False))
        await self.start_round(ctx)

    def start_guess_timeout(self, round_: Round, ctx: MessageContext):
        timeout = self.get_guess_timeout()
        if not timeout:
            return

        async def on_timeout():
            if self.finished or self.round is not round_ or round_.finished:
                return

            logger.info(f"{ctx.debug_header()} | Song finished without being guessed, timer of {timeout} seconds")
            await self.end_round(self.system_context(), GuessResult(correct=False))
            await self.start_round(ctx)

        self.guess_timeout.start(timeout, on_timeout)

    async def error_restart_round(self):
        """The stream failed: drop this round without counting it and try another song."""
        rounds_before = self.rounds_played
        await self.end_round(None, GuessResult(correct=False, error=True))
        if self.rounds_played > rounds_before:
            self.rounds_played -= 1

        if self.finished:
            return

        await self.send_error(
            "Error playing song",
            "Something went wrong while playing the song. Starting a new round."
        )
        await self.start_round(self.system_context())

    def _detach_round(self) -> Optional[Round]:
        round_, self.round = self.round, None
        self.guess_timeout.cancel()
        return round_

    async def process_round_end(self, round_: Round, ctx: Optional[MessageContext], guess_result: GuessResult):
        """Hook for round results and the song reveal message."""

    async def end_round(self, ctx: Optional[MessageContext] = None, guess_result: Optional[GuessResult] = None):
        """
        End the active round, if any.

        Safe to call from several paths at once: only the first call for a
        round has any effect.
        """
        round_ = self._detach_round()
        if round_ is None:
            return

        guess_result = guess_result or GuessResult(correct=False)
        try:
            await self.process_round_end(round_, ctx, guess_result)
        except Exception:
            logger.exception(f"{self.debug_header()} | Error processing end of round")

        self.update_bookmark_song_list(round_)

        if self.finished:
            return

        self.rounds_played += 1

        remaining = self.get_remaining_duration()
        if remaining is not None and remaining < 0:
            logger.info(f"{self.debug_header()} | Session duration reached")
            await self.end_session()

    def get_remaining_duration(self) -> Optional[float]:
        """Minutes left before the configured duration ends the session."""
        if not self.guild_preference.is_duration_set():
            return None

        elapsed = (datetime.utcnow() - self.started_at).total_seconds() / 60
        return self.guild_preference.game_options.duration - elapsed

    # Session lifecycle

    async def end_session(self):
        """End the session. Only the first call does anything."""
        if self.finished:
            return

        self.finished = True
        await self.teardown_session()
        await self.commit_session()

    async def teardown_session(self):
        self.guild_preference.reload_song_callback = None
        self.services.registry.remove(self.guild_id, self)

        await self.end_round(self.system_context(), GuessResult(correct=False))

        if self.playback is not None:
            self.playback.close()
            self.playback = None

        try:
            await self.voice.disconnect(self.guild_id)
        except Exception:
            logger.exception(f"{self.debug_header()} | Error leaving voice channel")

        if self.bookmarked_songs:
            await self.send_bookmarked_songs()

        await self.run_isolated("Incrementing guild games played", self.db.increment_guild_games_played(self.guild_id))

    async def commit_session(self):
        """Hook for persisting the session's results and announcing them."""

    async def last_active_now(self):
        self.last_active = datetime.utcnow()
        await self.run_isolated("Updating guild last active", self.db.update_guild_last_active(self.guild_id))

    # Bookmarks

    def update_bookmark_song_list(self, round_: Round):
        if not round_.round_message_id:
            return

        if any(message_id == round_.round_message_id for message_id, _ in self.song_messages):
            return

        self.song_messages.append((round_.round_message_id, round_.song))

    def get_song_from_message_id(self, message_id: str) -> Optional[Song]:
        for stored_id, song in self.song_messages:
            if stored_id == message_id:
                return song
        return None

    def add_bookmarked_song(self, user_id: str, bookmark: BookmarkedSong):
        if not user_id or bookmark is None:
            return

        self.bookmarked_songs.setdefault(user_id, {})[bookmark.song.youtube_link] = bookmark
        logger.info(f"{self.debug_header()} | User {user_id} bookmarked song {bookmark.song.youtube_link}")

    def handle_bookmark_interaction(self, message_id: Optional[str], user: GuildMember) -> InteractionResponse:
        song = self.get_song_from_message_id(message_id) if message_id else None
        if song is None:
            return InteractionResponse(
                description=f"You can only bookmark songs from the last {config.BOOKMARK_MESSAGE_SIZE} rounds.",
                error=True
            )

        self.add_bookmarked_song(user.id, BookmarkedSong(song, datetime.utcnow()))
        return InteractionResponse(
            title="Song bookmarked",
            description=f"You'll receive a direct message with **{song.localized_song_name(self.locale)}** "
                        f"when the game ends."
        )

    async def send_bookmarked_songs(self):
        """DM every player their bookmarks and store them."""
        song_count = sum(len(songs) for songs in self.bookmarked_songs.values())
        player_count = len(self.bookmarked_songs)
        await self.send_info(
            "Sending bookmarked songs...",
            f"Sending {song_count} song(s) to {player_count} player(s)."
        )

        await self.run_isolated("Sending bookmarked songs", *[
            self.messenger.send_direct_message(
                user_id, create_bookmarks_payload(list(songs.values()), self.locale)
            )
            for user_id, songs in self.bookmarked_songs.items()
        ])

        entries = [
            (user_id, link, bookmark.bookmarked_at)
            for user_id, songs in self.bookmarked_songs.items()
            for link, bookmark in songs.items()
        ]
        await self.run_isolated("Storing bookmarked songs", self.db.insert_bookmarked_songs(entries))

    # Voice membership

    @abstractmethod
    def choose_new_owner(self, voice_members: List[GuildMember]) -> Optional[GuildMember]:
        """Pick the next owner from the members still in voice."""

    async def update_owner(self):
        """Hand ownership to someone else if the owner left the voice channel."""
        if self.finished:
            return

        voice_members = self.get_voice_members()
        member_ids = {member.id for member in voice_members}
        if self.owner.id in member_ids or not member_ids:
            return

        new_owner = self.choose_new_owner(voice_members)
        if new_owner is None:
            return

        self.owner = new_owner
        await self.send_info(
            "Game owner changed",
            f"The new game owner is {new_owner.mention}. They are in charge of `/forcehint` and `/forceskip`."
        )

    async def update_premium_status(self):
        """Recompute premium from who is in voice; a change reloads the song pool."""
        member_ids = [member.id for member in self.get_voice_members()]
        is_premium = await self.db.are_users_premium(member_ids)
        if is_premium == self.is_premium:
            return

        self.is_premium = is_premium
        logger.info(f"{self.debug_header()} | Premium status changed to {is_premium}")
        await self.reload_songs()

    # Interactions

    def check_interaction(self, custom_id: str, user: GuildMember) -> Optional[InteractionResponse]:
        """Reasons to reject a button press on the current round, or None if it is valid."""
        if self.round is None:
            return InteractionResponse()

        if user.id not in {member.id for member in self.get_voice_members()}:
            return InteractionResponse()

        if not self.round.is_valid_interaction(custom_id):
            return InteractionResponse(description="That option is from a previous round.", error=True)

        return None

    @abstractmethod
    async def handle_component_interaction(
        self,
        custom_id: str,
        user: GuildMember,
        message_id: Optional[str],
        ctx: MessageContext
    ) -> InteractionResponse:
        """Handle a button press on one of the session's messages."""

    async def guess_song(self, ctx: MessageContext, guess: str):
        """Sessions without guessing ignore messages."""

    async def vote_skip(self, user: GuildMember, ctx: MessageContext) -> InteractionResponse:
        round_ = self.round
        if round_ is None or round_.finished:
            return InteractionResponse(description="There is no song to skip.", error=True)

        if user.id not in {member.id for member in self.get_voice_members()}:
            return InteractionResponse(description="You must be in the voice channel to skip.", error=True)

        round_.user_skipped(user.id)
        skip_counter = f"{round_.get_skip_count()}/{self.get_majority_count()}"
        if round_.get_skip_count() < self.get_majority_count():
            logger.info(f"{ctx.debug_header()} | Skip vote received")
            return InteractionResponse(title="Skip vote received", description=f"{skip_counter} skips", ephemeral=False)

        await self.skip_song(ctx)
        return InteractionResponse(title="Skipped", description=f"{skip_counter} skips", ephemeral=False)

    async def force_skip(self, user: GuildMember, ctx: MessageContext) -> InteractionResponse:
        if user.id != self.owner.id:
            return InteractionResponse(description=f"Only the owner {self.owner.mention} can force skip.", error=True)

        if self.round is None or self.round.finished:
            return InteractionResponse(description="There is no song to skip.", error=True)

        await self.skip_song(ctx)
        return InteractionResponse(title="Skipped", description="The owner skipped the song.", ephemeral=False)

    async def skip_song(self, ctx: MessageContext):
        round_ = self.round
        if round_ is None:
            return

        round_.skip_achieved = True
        logger.info(f"{ctx.debug_header()} | Skip majority achieved")
        await self.end_round(self.system_context(), GuessResult(correct=False))
        await self.start_round(ctx)

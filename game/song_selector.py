"""Chooses the songs played in a session."""

import logging
import random
from typing import List, Optional, Set, Tuple

import config
from game.models import Gender, GuessModeType, LocaleType, ShuffleType, Song

logger = logging.getLogger(__name__)


class SongSelector:
    """
    Holds a session's song pool and draws songs from it.

    Songs are not repeated until every song in the pool has been played.
    """

    def __init__(self, db, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()
        self.songs: Optional[List[Song]] = None
        self.count_before_limit = 0
        self.unique_songs_played: Set[str] = set()
        self.last_alternating_gender: Optional[str] = None

    async def reload_songs(self, guild_preference, is_premium: bool = False):
        """Query the pool for the guild's current options, replacing the old one."""
        songs, count_before_limit = await self.db.get_filtered_songs(
            guild_preference.game_options, is_premium
        )
        self.songs = songs
        self.count_before_limit = count_before_limit

        # Forget played songs that fell out of the pool
        links = {song.youtube_link for song in songs}
        self.unique_songs_played &= links

        logger.info(
            f"gid: {guild_preference.guild_id} | Loaded {len(songs)} songs "
            f"({count_before_limit} before limit), premium = {is_premium}"
        )

    def get_songs(self) -> Optional[List[Song]]:
        return self.songs

    def get_current_song_count(self) -> int:
        return len(self.songs) if self.songs else 0

    def get_unique_song_counter(self) -> Tuple[int, int]:
        """(songs played so far, songs in the pool)"""
        return len(self.unique_songs_played), self.get_current_song_count()

    def check_unique_song_queue(self) -> bool:
        """Reset the played set once every song was played. Returns whether it was reset."""
        total = self.get_current_song_count()
        if total == 0 or len(self.unique_songs_played) < total:
            return False

        self.unique_songs_played.clear()
        return True

    def check_alternating_gender(self, guild_preference):
        if not guild_preference.is_alternating_gender():
            self.last_alternating_gender = None
            return

        if self.last_alternating_gender == Gender.MALE:
            self.last_alternating_gender = Gender.FEMALE
        else:
            self.last_alternating_gender = Gender.MALE

    def query_random_song(self, guild_preference) -> Optional[Song]:
        """Draw an unplayed song, or None if the pool is empty."""
        if not self.songs:
            return None

        candidates = [song for song in self.songs if song.youtube_link not in self.unique_songs_played]
        if not candidates:
            candidates = list(self.songs)

        if self.last_alternating_gender:
            gendered = [
                song for song in candidates
                if song.members in (self.last_alternating_gender, Gender.COED)
            ]
            candidates = gendered or candidates

        if guild_preference.game_options.shuffle_type == ShuffleType.POPULARITY:
            # Pool is ordered by views, so rank weights favour popular songs
            ranked = sorted(candidates, key=lambda song: song.views, reverse=True)
            weights = [len(ranked) - i for i in range(len(ranked))]
            song = self.rng.choices(ranked, weights=weights, k=1)[0]
        else:
            song = self.rng.choice(candidates)

        self.unique_songs_played.add(song.youtube_link)
        return song

    def get_multiple_choice_options(
        self,
        answer_type: str,
        guess_mode_type: str,
        correct_song: Song,
        locale: str = LocaleType.EN
    ) -> List[str]:
        """Wrong answers for a multiple choice round, drawn from the rest of the pool."""
        num_options = config.MULTIPLE_CHOICE_WRONG_OPTIONS.get(answer_type, 3)
        artist_mode = guess_mode_type == GuessModeType.ARTIST

        if artist_mode:
            correct = correct_song.localized_artist_name(locale)
            names = {song.localized_artist_name(locale) for song in self.songs or []
                     if song.artist_id != correct_song.artist_id}
        else:
            correct = correct_song.localized_song_name(locale)
            names = {song.localized_song_name(locale) for song in self.songs or []}

        names.discard(correct)
        names = sorted(names)
        self.rng.shuffle(names)
        return names[:num_options]

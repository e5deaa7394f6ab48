"""Database operations manager."""

import aiosqlite
from typing import Optional, List, Dict, Iterable, Tuple
from datetime import datetime

import config
from game.models import Gender, LevelUpResult, Song
from game.scoring import calculate_level_up


class DatabaseManager:
    """Manages all database operations."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or config.DATABASE_PATH

    def _get_connection(self) -> aiosqlite.Connection:
        """Get database connection."""
        return aiosqlite.connect(self.db_path)

    # Song operations
    async def get_filtered_songs(self, options, is_premium: bool = False) -> Tuple[List[Song], int]:
        """
        Get the songs matching a guild's game options.

        Args:
            options: The guild's GameOptions
            is_premium: Whether the session has premium members (raises the popularity cap)

        Returns:
            The selected songs, and how many songs matched before the popularity limit
        """
        genders = [g for g in options.gender if g != Gender.ALTERNATING]
        if Gender.ALTERNATING in options.gender:
            genders.extend([Gender.MALE, Gender.FEMALE])

        query = """
            SELECT * FROM available_songs
            WHERE CAST(substr(publish_date, 1, 4) AS INTEGER) BETWEEN ? AND ?
        """
        params: List = [options.beginning_year, options.end_year]

        if genders:
            query += f" AND members IN ({','.join('?' * len(set(genders)))})"
            params.extend(sorted(set(genders)))

        if options.groups:
            query += f" AND artist_id IN ({','.join('?' * len(options.groups))})"
            params.extend(options.groups)

        if options.excludes:
            query += f" AND artist_id NOT IN ({','.join('?' * len(options.excludes))})"
            params.extend(options.excludes)

        query += " ORDER BY views DESC"

        async with self._get_connection() as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(query, params) as cursor:
                rows = [dict(row) for row in await cursor.fetchall()]

            included_rows = []
            if options.includes:
                async with db.execute(
                    f"SELECT * FROM available_songs WHERE artist_id IN ({','.join('?' * len(options.includes))})",
                    list(options.includes)
                ) as cursor:
                    included_rows = [dict(row) for row in await cursor.fetchall()]

        song_cap = config.PREMIUM_SONG_LIMIT if is_premium else config.NON_PREMIUM_SONG_LIMIT
        limit_end = min(options.limit_end, song_cap)
        count_before_limit = len(rows)
        selected = rows[options.limit_start:limit_end]

        seen = {row['youtube_link'] for row in selected}
        selected.extend(row for row in included_rows if row['youtube_link'] not in seen)

        return [Song.from_row(row) for row in selected], count_before_limit

    # Guild operations
    async def get_guild_preference(self, guild_id: str) -> Optional[Dict]:
        async with self._get_connection() as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM guild_preferences WHERE guild_id = ?",
                (guild_id,)
            ) as cursor:
                row = await cursor.fetchone()
                return dict(row) if row else None

    async def save_guild_preference(self, guild_id: str, game_options: str, locale: str):
        async with self._get_connection() as db:
            await db.execute(
                """
                INSERT INTO guild_preferences (guild_id, game_options, locale)
                VALUES (?, ?, ?)
                ON CONFLICT(guild_id) DO UPDATE SET game_options = excluded.game_options,
                                                    locale = excluded.locale
                """,
                (guild_id, game_options, locale)
            )
            await db.commit()

    async def ensure_guild(self, guild_id: str):
        async with self._get_connection() as db:
            await db.execute(
                "INSERT OR IGNORE INTO guilds (guild_id, last_active) VALUES (?, ?)",
                (guild_id, datetime.utcnow())
            )
            await db.commit()

    async def increment_guild_games_played(self, guild_id: str):
        async with self._get_connection() as db:
            await db.execute(
                "UPDATE guilds SET games_played = games_played + 1 WHERE guild_id = ?",
                (guild_id,)
            )
            await db.commit()

    async def increment_guild_songs_guessed(self, guild_id: str):
        async with self._get_connection() as db:
            await db.execute(
                "UPDATE guilds SET songs_guessed = songs_guessed + 1 WHERE guild_id = ?",
                (guild_id,)
            )
            await db.commit()

    async def update_guild_last_active(self, guild_id: str):
        async with self._get_connection() as db:
            await db.execute(
                "UPDATE guilds SET last_active = ? WHERE guild_id = ?",
                (datetime.utcnow(), guild_id)
            )
            await db.commit()

    async def get_guild_stats(self, guild_id: str) -> Optional[Dict]:
        async with self._get_connection() as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("SELECT * FROM guilds WHERE guild_id = ?", (guild_id,)) as cursor:
                row = await cursor.fetchone()
                return dict(row) if row else None

    # Player operations
    async def ensure_player_stat(self, user_id: str, guild_id: str):
        """Create the player's stats row and guild link if they don't exist."""
        now = datetime.utcnow()
        async with self._get_connection() as db:
            await db.execute(
                """
                INSERT OR IGNORE INTO player_stats (player_id, first_play, last_active)
                VALUES (?, ?, ?)
                """,
                (user_id, now, now)
            )
            await db.execute(
                "INSERT OR IGNORE INTO player_servers (player_id, server_id) VALUES (?, ?)",
                (user_id, guild_id)
            )
            await db.commit()

    async def increment_player_games_played(self, user_id: str):
        async with self._get_connection() as db:
            await db.execute(
                "UPDATE player_stats SET games_played = games_played + 1 WHERE player_id = ?",
                (user_id,)
            )
            await db.commit()

    async def increment_player_songs_guessed(self, user_id: str, score: float):
        async with self._get_connection() as db:
            await db.execute(
                """
                UPDATE player_stats
                SET songs_guessed = songs_guessed + ?,
                    last_active = ?
                WHERE player_id = ?
                """,
                (score, datetime.utcnow(), user_id)
            )
            await db.commit()

    async def get_player_exp(self, user_id: str) -> Optional[Tuple[int, int]]:
        """Get a player's (exp, level)."""
        async with self._get_connection() as db:
            async with db.execute(
                "SELECT exp, level FROM player_stats WHERE player_id = ?",
                (user_id,)
            ) as cursor:
                row = await cursor.fetchone()
                return (row[0], row[1]) if row else None

    async def set_player_exp(self, user_id: str, exp: int, level: int):
        async with self._get_connection() as db:
            await db.execute(
                "UPDATE player_stats SET exp = ?, level = ? WHERE player_id = ?",
                (exp, level, user_id)
            )
            await db.commit()

    async def increment_player_exp(self, user_id: str, exp_gain: int) -> Optional[LevelUpResult]:
        """Add EXP to a player, levelling them up when they pass a level threshold."""
        current = await self.get_player_exp(user_id)
        if current is None:
            return None

        current_exp, current_level = current
        level_up = calculate_level_up(user_id, current_exp, current_level, exp_gain)
        end_level = level_up.end_level if level_up else current_level
        await self.set_player_exp(user_id, current_exp + exp_gain, end_level)
        return level_up

    async def get_player_stats(self, user_id: str) -> Optional[Dict]:
        async with self._get_connection() as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("SELECT * FROM player_stats WHERE player_id = ?", (user_id,)) as cursor:
                row = await cursor.fetchone()
                return dict(row) if row else None

    async def insert_player_session_stats(self, user_id: str, score: float, exp_gain: int, levels_gained: int):
        """Store per-session stats for the temporary leaderboard."""
        async with self._get_connection() as db:
            await db.execute(
                """
                INSERT INTO player_game_session_stats
                (player_id, date, songs_guessed, exp_gained, levels_gained)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, datetime.utcnow(), score, exp_gain, levels_gained)
            )
            await db.commit()

    async def is_first_game_of_day(self, user_id: str) -> bool:
        async with self._get_connection() as db:
            async with db.execute(
                "SELECT last_active FROM player_stats WHERE player_id = ?",
                (user_id,)
            ) as cursor:
                row = await cursor.fetchone()

        if not row or not row[0]:
            return True

        last_active = row[0]
        if isinstance(last_active, str):
            last_active = datetime.fromisoformat(last_active)
        return last_active.date() < datetime.utcnow().date()

    async def is_user_premium(self, user_id: str) -> bool:
        return await self.are_users_premium([user_id])

    async def are_users_premium(self, user_ids: Iterable[str]) -> bool:
        user_ids = list(user_ids)
        if not user_ids:
            return False

        async with self._get_connection() as db:
            async with db.execute(
                f"""
                SELECT COUNT(*) FROM premium_users
                WHERE active = 1 AND user_id IN ({','.join('?' * len(user_ids))})
                """,
                user_ids
            ) as cursor:
                (count,) = await cursor.fetchone()
                return count > 0

    async def user_bonus_is_active(self, user_id: str) -> bool:
        """Whether the user has an unexpired vote bonus."""
        async with self._get_connection() as db:
            async with db.execute(
                "SELECT buff_expiry_date FROM top_gg_user_votes WHERE user_id = ?",
                (user_id,)
            ) as cursor:
                row = await cursor.fetchone()

        if not row or not row[0]:
            return False

        expiry = row[0]
        if isinstance(expiry, str):
            expiry = datetime.fromisoformat(expiry)
        return expiry > datetime.utcnow()

    # Session operations
    async def insert_game_session(
        self,
        start_date: datetime,
        guild_id: str,
        num_participants: int,
        avg_guess_time: float,
        session_length: float,
        rounds_played: int,
        correct_guesses: int
    ):
        async with self._get_connection() as db:
            await db.execute(
                """
                INSERT INTO game_sessions
                (start_date, guild_id, num_participants, avg_guess_time,
                 session_length, rounds_played, correct_guesses)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    start_date, guild_id, num_participants, avg_guess_time,
                    session_length, rounds_played, correct_guesses
                )
            )
            await db.commit()

    async def increment_song_metadata(self, vlink: str, stats: Dict[str, int]):
        """Create the song's metadata row if needed and add this session's counters."""
        async with self._get_connection() as db:
            await db.execute(
                "INSERT OR IGNORE INTO song_metadata (vlink) VALUES (?)",
                (vlink,)
            )
            await db.execute(
                """
                UPDATE song_metadata
                SET correct_guesses = correct_guesses + ?,
                    rounds_played = rounds_played + ?,
                    skip_count = skip_count + ?,
                    hint_count = hint_count + ?,
                    time_to_guess_ms = time_to_guess_ms + ?,
                    time_played_ms = time_played_ms + ?
                WHERE vlink = ?
                """,
                (
                    stats['correct_guesses'],
                    stats['rounds_played'],
                    stats['skip_count'],
                    stats['hint_count'],
                    stats['time_to_guess'],
                    stats['time_played'],
                    vlink
                )
            )
            await db.commit()

    async def get_song_metadata(self, vlink: str) -> Optional[Dict]:
        async with self._get_connection() as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("SELECT * FROM song_metadata WHERE vlink = ?", (vlink,)) as cursor:
                row = await cursor.fetchone()
                return dict(row) if row else None

    async def insert_bookmarked_songs(self, entries: List[Tuple[str, str, datetime]]):
        """Store (user_id, vlink, bookmarked_at) rows in a single transaction."""
        if not entries:
            return

        async with self._get_connection() as db:
            await db.executemany(
                "INSERT INTO bookmarked_songs (user_id, vlink, bookmarked_at) VALUES (?, ?, ?)",
                entries
            )
            await db.commit()

    async def get_bookmarked_songs(self, user_id: str) -> List[str]:
        async with self._get_connection() as db:
            async with db.execute(
                "SELECT vlink FROM bookmarked_songs WHERE user_id = ? ORDER BY bookmarked_at",
                (user_id,)
            ) as cursor:
                return [row[0] async for row in cursor]


# Global database manager instance
db_manager = DatabaseManager()

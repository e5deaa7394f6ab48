"""Database initialization and migrations."""

import logging
from pathlib import Path
from typing import Optional

import aiosqlite

import config
from database.models import ALL_TABLES, CREATE_INDEXES
from data.songs import SONGS

logger = logging.getLogger(__name__)


async def initialize_database(db_path: Optional[str] = None, seed_songs: bool = True):
    """Initialize database with all tables and seed data."""
    db_path = db_path or config.DATABASE_PATH

    # Create data directory if it doesn't exist
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(db_path) as db:
        for table_sql in ALL_TABLES:
            await db.execute(table_sql)

        for index_sql in CREATE_INDEXES:
            await db.execute(index_sql)

        if seed_songs:
            async with db.execute("SELECT COUNT(*) FROM available_songs") as cursor:
                (song_count,) = await cursor.fetchone()

            if song_count == 0:
                await db.executemany(
                    """
                    INSERT OR IGNORE INTO available_songs
                    (youtube_link, song_name, hangul_song_name, artist_name, hangul_artist_name,
                     artist_id, members, publish_date, views, duration, song_aliases, artist_aliases)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            song['youtube_link'],
                            song['song_name'],
                            song.get('hangul_song_name'),
                            song['artist_name'],
                            song.get('hangul_artist_name'),
                            song['artist_id'],
                            song['members'],
                            song['publish_date'],
                            song['views'],
                            song['duration'],
                            ";".join(song.get('song_aliases', [])),
                            ";".join(song.get('artist_aliases', [])),
                        )
                        for song in SONGS
                    ]
                )
                logger.info(f"Seeded {len(SONGS)} songs")

        await db.commit()
        logger.info(f"Database initialized at {db_path}")

from datetime import datetime, timedelta

import aiosqlite

from conftest import ALICE, BOB, GUILD_ID, context_for
from game.models import Gender
from game.options import GuildPreference


async def execute(db, sql, params=()):
    async with aiosqlite.connect(db.db_path) as conn:
        await conn.execute(sql, params)
        await conn.commit()


async def test_guild_stats_follow_session(make_game_session, voice, db):
    await db.ensure_guild(GUILD_ID)
    voice.join(ALICE)
    session = await make_game_session()
    await session.start_round(context_for(ALICE))
    await session.guess_song(context_for(ALICE), session.round.song.song_name)
    await session.end_session()

    stats = await db.get_guild_stats(GUILD_ID)
    assert stats["games_played"] == 1
    assert stats["songs_guessed"] == 1


async def test_song_metadata_recorded_at_end(make_game_session, voice, db):
    voice.join(ALICE)
    session = await make_game_session()
    await session.start_round(context_for(ALICE))
    song = session.round.song
    await session.guess_song(context_for(ALICE), song.song_name)
    await session.end_session()

    metadata = await db.get_song_metadata(song.youtube_link)
    assert metadata["rounds_played"] == 1
    assert metadata["correct_guesses"] == 1


async def test_level_up_persisted(db):
    await db.ensure_player_stat(ALICE.id, GUILD_ID)

    result = await db.increment_player_exp(ALICE.id, 1000)

    assert (result.start_level, result.end_level) == (1, 3)
    assert await db.get_player_exp(ALICE.id) == (1000, 3)


async def test_premium_and_vote_bonus(db):
    assert not await db.are_users_premium([ALICE.id, BOB.id])
    await execute(db, "INSERT INTO premium_users (user_id, active) VALUES (?, 1)", (BOB.id,))
    assert await db.are_users_premium([ALICE.id, BOB.id])
    assert not await db.is_user_premium(ALICE.id)

    assert not await db.user_bonus_is_active(ALICE.id)
    await execute(
        db, "INSERT INTO top_gg_user_votes (user_id, buff_expiry_date) VALUES (?, ?)",
        (ALICE.id, datetime.utcnow() + timedelta(hours=1))
    )
    assert await db.user_bonus_is_active(ALICE.id)


async def test_first_game_of_day(db):
    assert await db.is_first_game_of_day(ALICE.id)
    await db.ensure_player_stat(ALICE.id, GUILD_ID)
    assert not await db.is_first_game_of_day(ALICE.id)


async def test_first_game_of_day_uses_utc_dates(db):
    await db.ensure_player_stat(ALICE.id, GUILD_ID)
    yesterday = datetime.utcnow() - timedelta(days=1)
    await execute(db, "UPDATE player_stats SET last_active = ? WHERE player_id = ?", (yesterday.isoformat(), ALICE.id))
    assert await db.is_first_game_of_day(ALICE.id)

    await execute(db, "UPDATE player_stats SET last_active = ? WHERE player_id = ?", (datetime.utcnow().isoformat(), ALICE.id))
    assert not await db.is_first_game_of_day(ALICE.id)


async def test_preference_changes_persist_and_reload_pool(make_game_session, voice, db):
    voice.join(ALICE)
    session = await make_game_session()
    preference = session.guild_preference
    await session.start_round(context_for(ALICE))
    assert session.get_song_count() == 3

    await preference.set_option("gender", [Gender.FEMALE])

    assert session.get_song_count() == 1
    stored = await GuildPreference.get(GUILD_ID, db)
    assert stored.game_options.gender == [Gender.FEMALE]

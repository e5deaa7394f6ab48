from datetime import datetime, timedelta

from conftest import ALICE, GUILD_ID


async def test_one_session_per_guild(make_game_session, make_listening_session, voice, registry):
    voice.join(ALICE)
    game = await make_game_session()
    assert registry.get(GUILD_ID) is game

    listening = await make_listening_session()

    assert game.finished
    assert registry.get(GUILD_ID) is listening
    assert len(registry) == 1


async def test_remove_only_matches_registered_session(make_game_session, make_listening_session, voice, registry):
    voice.join(ALICE)
    game = await make_game_session()
    listening = await make_listening_session()

    assert not registry.remove(GUILD_ID, game)
    assert registry.get(GUILD_ID) is listening
    assert registry.remove(GUILD_ID, listening)
    assert registry.get(GUILD_ID) is None


async def test_inactive_sessions(make_game_session, voice, registry):
    voice.join(ALICE)
    session = await make_game_session()
    now = datetime.utcnow()

    assert registry.get_inactive_sessions(now, 30) == []

    session.last_active = now - timedelta(minutes=31)
    assert registry.get_inactive_sessions(now, 30) == [session]


async def test_end_all(make_game_session, voice, registry):
    voice.join(ALICE)
    session = await make_game_session()

    await registry.end_all()

    assert session.finished
    assert registry.get_all_sessions() == []

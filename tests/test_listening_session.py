from conftest import ALICE, BOB, CAROL, GUILD_ID, context_for
from game.round import BOOKMARK_COMPONENT_ID


async def test_listening_round_posts_buttons_and_plays_from_start(make_listening_session, voice, messenger):
    voice.join(ALICE)
    session = await make_listening_session()

    assert await session.start_round(context_for(ALICE))

    assert voice.current_play.seek == 0
    message = messenger.info[-1]
    custom_ids = [button.custom_id for row in message.payload.components for button in row]
    assert custom_ids == [session.round.interaction_skip_id, BOOKMARK_COMPONENT_ID]
    assert session.song_messages[-1] == (str(message.id), session.round.song)


async def test_song_end_removes_buttons_and_plays_next(make_listening_session, voice, messenger):
    voice.join(ALICE)
    session = await make_listening_session()
    await session.start_round(context_for(ALICE))
    first_message = messenger.info[-1]

    await voice.current_play.subscription.dispatch(None)

    assert first_message in messenger.component_edits
    assert first_message.payload.components == []
    assert session.rounds_played == 1
    assert len(voice.plays) == 2


async def test_skip_button_needs_majority(make_listening_session, voice):
    for member in (ALICE, BOB, CAROL):
        voice.join(member)
    session = await make_listening_session()
    await session.start_round(context_for(ALICE))
    first_round = session.round
    skip_id = first_round.interaction_skip_id

    response = await session.handle_component_interaction(skip_id, ALICE, None, context_for(ALICE))
    assert response.title == "Skip vote received"

    response = await session.handle_component_interaction(skip_id, ALICE, None, context_for(ALICE))
    assert session.round is first_round

    await session.handle_component_interaction(skip_id, BOB, None, context_for(BOB))
    assert session.round is not first_round


async def test_bookmark_from_listening_message(make_listening_session, voice, messenger):
    voice.join(ALICE)
    session = await make_listening_session()
    await session.start_round(context_for(ALICE))
    message_id = str(messenger.info[-1].id)

    response = await session.handle_component_interaction(BOOKMARK_COMPONENT_ID, ALICE, message_id, context_for(ALICE))

    assert response.title == "Song bookmarked"
    assert session.round.song.youtube_link in session.bookmarked_songs[ALICE.id]


async def test_owner_change_picks_someone_in_voice(make_listening_session, voice):
    voice.join(ALICE)
    voice.join(BOB)
    session = await make_listening_session()

    voice.leave(ALICE)
    await session.update_owner()

    assert session.owner.id == BOB.id


async def test_end_session_leaves_voice(make_listening_session, voice, registry):
    voice.join(ALICE)
    session = await make_listening_session()
    await session.start_round(context_for(ALICE))

    await session.end_session()

    assert session.finished
    assert session.round is None
    assert registry.get(GUILD_ID) is None
    assert voice.disconnects == [GUILD_ID]

import itertools
import random
from typing import Dict, List, Optional

import aiosqlite
import pytest

import config
from database.manager import DatabaseManager
from database.migrations import initialize_database
from game.game_session import GameSession
from game.listening_session import ListeningSession
from game.models import GameType, GuildMember, MessageContext
from game.options import GameOptions, GuildPreference
from game.session import SessionServices
from game.session_manager import SessionManager
from voice.handler import PlaybackSubscription

GUILD_ID = "100"
TEXT_CHANNEL_ID = "200"
VOICE_CHANNEL_ID = "300"

ALICE = GuildMember("1", "Alice")
BOB = GuildMember("2", "Bob")
CAROL = GuildMember("3", "Carol")

TEST_SONGS = [
    ("aaaaaaaaaaa", "Red Flavor", "Red Velvet", 10, "female", "2017-07-09", 300000000),
    ("bbbbbbbbbbb", "Fantastic Baby", "BIGBANG", 11, "male", "2012-03-07", 400000000),
    ("ccccccccccc", "Sorry Sorry", "Super Junior", 12, "male", "2009-03-12", 200000000),
]


class FakePlay:
    def __init__(self, guild_id: str, song_path: str, seek: float, subscription: PlaybackSubscription):
        self.guild_id = guild_id
        self.song_path = song_path
        self.seek = seek
        self.subscription = subscription


class FakeVoice:
    """Voice transport that records plays instead of streaming audio."""

    def __init__(self):
        self.channels: Dict[str, List[GuildMember]] = {}
        self.user_channels: Dict[str, str] = {}
        self.plays: List[FakePlay] = []
        self.disconnects: List[str] = []
        self.fail_connect = False
        self.fail_play = False

    def join(self, member: GuildMember, voice_channel_id: str = VOICE_CHANNEL_ID):
        self.channels.setdefault(voice_channel_id, []).append(member)
        self.user_channels[member.id] = voice_channel_id

    def leave(self, member: GuildMember):
        voice_channel_id = self.user_channels.pop(member.id, None)
        if voice_channel_id:
            self.channels[voice_channel_id] = [m for m in self.channels[voice_channel_id] if m.id != member.id]

    def voice_channel_exists(self, voice_channel_id: str) -> bool:
        return voice_channel_id in self.channels

    def get_voice_members(self, voice_channel_id: str) -> List[GuildMember]:
        return [member for member in self.channels.get(voice_channel_id, []) if not member.bot]

    def get_user_voice_channel_id(self, guild_id: str, user_id: str) -> Optional[str]:
        return self.user_channels.get(user_id)

    async def ensure_connection(self, guild_id: str, voice_channel_id: str):
        if self.fail_connect:
            raise ConnectionError("Missing permissions")

    def play(self, guild_id: str, song_path: str, seek: float, callback) -> PlaybackSubscription:
        if self.fail_play:
            raise RuntimeError("Not connected to voice")
        subscription = PlaybackSubscription(callback)
        self.plays.append(FakePlay(guild_id, song_path, seek, subscription))
        return subscription

    async def disconnect(self, guild_id: str) -> bool:
        self.disconnects.append(guild_id)
        return True

    @property
    def current_play(self) -> FakePlay:
        return self.plays[-1]


class FakeMessage:
    _ids = itertools.count(1000)

    def __init__(self, payload):
        self.id = next(self._ids)
        self.payload = payload


class FakeMessenger:
    """Records outgoing messages."""

    def __init__(self):
        self.info: List[FakeMessage] = []
        self.errors: List[FakeMessage] = []
        self.edits: List[FakeMessage] = []
        self.component_edits: List[FakeMessage] = []
        self.direct_messages: List = []

    async def send_info_message(self, text_channel_id, payload, reply_to=None):
        message = FakeMessage(payload)
        self.info.append(message)
        return message

    async def send_error_message(self, text_channel_id, payload):
        message = FakeMessage(payload)
        self.errors.append(message)
        return message

    async def edit_message(self, message, payload):
        message.payload = payload
        self.edits.append(message)
        return message

    async def edit_message_components(self, message, payload=None):
        message.payload.components = payload.components if payload else []
        self.component_edits.append(message)

    async def send_direct_message(self, user_id, payload):
        self.direct_messages.append((user_id, payload))
        return FakeMessage(payload)

    def titles(self) -> List[str]:
        return [message.payload.title or "" for message in self.info]

    def error_titles(self) -> List[str]:
        return [message.payload.title or "" for message in self.errors]


@pytest.fixture(autouse=True)
def no_delays(monkeypatch):
    monkeypatch.setattr(config, "SONG_START_DELAY", 0)
    monkeypatch.setattr(config, "MULTIGUESS_DELAY", 0)


@pytest.fixture
async def db(tmp_path):
    db_path = str(tmp_path / "test.db")
    await initialize_database(db_path, seed_songs=False)
    async with aiosqlite.connect(db_path) as conn:
        await conn.executemany(
            """
            INSERT INTO available_songs
            (youtube_link, song_name, artist_name, artist_id, members, publish_date, views, duration)
            VALUES (?, ?, ?, ?, ?, ?, ?, 180.0)
            """,
            TEST_SONGS
        )
        await conn.commit()
    return DatabaseManager(db_path)


@pytest.fixture
def voice():
    return FakeVoice()


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def registry():
    return SessionManager()


@pytest.fixture
def services(voice, messenger, db, registry):
    return SessionServices(
        voice=voice, messenger=messenger, db=db, registry=registry,
        song_dir="/tmp/songs", rng=random.Random(7)
    )


@pytest.fixture
def make_game_session(services, registry):
    async def factory(game_type=GameType.CLASSIC, owner=ALICE, lives=None, **options):
        preference = GuildPreference(GUILD_ID, GameOptions(**options), db=services.db)
        session = GameSession(
            preference, TEXT_CHANNEL_ID, VOICE_CHANNEL_ID, GUILD_ID, owner, services,
            game_type=game_type, elimination_lives=lives
        )
        await registry.register(session)
        await session.sync_all_voice_members()
        return session
    return factory


@pytest.fixture
def make_listening_session(services, registry):
    async def factory(owner=ALICE):
        session = ListeningSession(
            GuildPreference(GUILD_ID), TEXT_CHANNEL_ID, VOICE_CHANNEL_ID, GUILD_ID, owner, services
        )
        await registry.register(session)
        return session
    return factory


def context_for(member: GuildMember, message_id: str = "5000") -> MessageContext:
    return MessageContext(TEXT_CHANNEL_ID, author=member, guild_id=GUILD_ID, referenced_message_id=message_id)

"""Core value types shared by sessions, rounds and scoreboards."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, List


class GameType:
    CLASSIC = 'classic'
    ELIMINATION = 'elimination'
    TEAMS = 'teams'
    COMPETITION = 'competition'

    ALL = (CLASSIC, ELIMINATION, TEAMS, COMPETITION)


class GuessModeType:
    SONG_NAME = 'song'
    ARTIST = 'artist'
    BOTH = 'both'


class AnswerType:
    TYPING = 'typing'
    TYPING_TYPOS = 'typingtypos'
    MULTIPLE_CHOICE_EASY = 'multiple_choice_easy'
    MULTIPLE_CHOICE_MEDIUM = 'multiple_choice_medium'
    MULTIPLE_CHOICE_HARD = 'multiple_choice_hard'

    MULTIPLE_CHOICE = (MULTIPLE_CHOICE_EASY, MULTIPLE_CHOICE_MEDIUM, MULTIPLE_CHOICE_HARD)


class SeekType:
    BEGINNING = 'beginning'
    RANDOM = 'random'
    MIDDLE = 'middle'


class ShuffleType:
    RANDOM = 'random'
    POPULARITY = 'popularity'


class MultiGuessType:
    ON = 'on'
    OFF = 'off'


class Gender:
    MALE = 'male'
    FEMALE = 'female'
    COED = 'coed'
    ALTERNATING = 'alternating'


class LocaleType:
    EN = 'en'
    KO = 'ko'


@dataclass
class Song:
    """A song that can be played in a round."""
    youtube_link: str
    song_name: str
    artist_name: str
    hangul_song_name: Optional[str] = None
    hangul_artist_name: Optional[str] = None
    artist_id: int = 0
    members: str = Gender.COED
    publish_date: Optional[date] = None
    views: int = 0
    duration: Optional[float] = None
    song_aliases: List[str] = field(default_factory=list)
    artist_aliases: List[str] = field(default_factory=list)

    def localized_song_name(self, locale: str = LocaleType.EN) -> str:
        if locale == LocaleType.KO and self.hangul_song_name:
            return self.hangul_song_name
        return self.song_name

    def localized_artist_name(self, locale: str = LocaleType.EN) -> str:
        if locale == LocaleType.KO and self.hangul_artist_name:
            return self.hangul_artist_name
        return self.artist_name

    def accepted_song_names(self) -> List[str]:
        names = [self.song_name, *self.song_aliases]
        if self.hangul_song_name:
            names.append(self.hangul_song_name)
        return names

    def accepted_artist_names(self) -> List[str]:
        names = [self.artist_name, *self.artist_aliases]
        if self.hangul_artist_name:
            names.append(self.hangul_artist_name)
        return names

    @property
    def url(self) -> str:
        return f"https://youtu.be/{self.youtube_link}"

    @property
    def thumbnail_url(self) -> str:
        return f"https://img.youtube.com/vi/{self.youtube_link}/hqdefault.jpg"

    @classmethod
    def from_row(cls, row: dict) -> "Song":
        publish_date = row.get('publish_date')
        if isinstance(publish_date, str) and publish_date:
            publish_date = date.fromisoformat(publish_date[:10])

        return cls(
            youtube_link=row['youtube_link'],
            song_name=row['song_name'],
            artist_name=row['artist_name'],
            hangul_song_name=row.get('hangul_song_name'),
            hangul_artist_name=row.get('hangul_artist_name'),
            artist_id=row.get('artist_id') or 0,
            members=row.get('members') or Gender.COED,
            publish_date=publish_date or None,
            views=row.get('views') or 0,
            duration=row.get('duration'),
            song_aliases=_split_aliases(row.get('song_aliases')),
            artist_aliases=_split_aliases(row.get('artist_aliases')),
        )


def _split_aliases(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [alias.strip() for alias in value.split(';') if alias.strip()]


@dataclass(frozen=True)
class GuildMember:
    """A user as seen by the game (not tied to a discord.Member)."""
    id: str
    name: str = ""
    avatar_url: str = ""
    bot: bool = False

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"

    @classmethod
    def from_discord(cls, member) -> "GuildMember":
        avatar = getattr(member, 'display_avatar', None)
        return cls(
            id=str(member.id),
            name=getattr(member, 'display_name', str(member)),
            avatar_url=str(avatar.url) if avatar else "",
            bot=bool(getattr(member, 'bot', False))
        )


@dataclass
class MessageContext:
    """The parts of an inbound message the engine needs to reply to it."""
    text_channel_id: str
    author: Optional[GuildMember] = None
    guild_id: Optional[str] = None
    referenced_message_id: Optional[str] = None

    def debug_header(self) -> str:
        author_id = self.author.id if self.author else "-"
        return f"gid: {self.guild_id} | tcid: {self.text_channel_id} | uid: {author_id}"

    @classmethod
    def from_message(cls, message) -> "MessageContext":
        return cls(
            text_channel_id=str(message.channel.id),
            author=GuildMember.from_discord(message.author),
            guild_id=str(message.guild.id) if message.guild else None,
            referenced_message_id=str(message.id)
        )


@dataclass
class CorrectGuesser:
    """A player who guessed the round's song, with the points their guess is worth."""
    id: str
    points_awarded: float


@dataclass
class GuessResult:
    correct: bool
    correct_guessers: List[CorrectGuesser] = field(default_factory=list)
    error: bool = False


@dataclass
class SuccessfulGuessResult:
    """Scoreboard update payload for one correct guesser."""
    user_id: str
    points_earned: float
    exp_gain: float


@dataclass
class PlayerRoundResult:
    player: CorrectGuesser
    points_earned: float
    exp_gain: float
    streak: int


@dataclass
class BookmarkedSong:
    song: Song
    bookmarked_at: datetime


@dataclass
class LevelUpResult:
    user_id: str
    start_level: int
    end_level: int


@dataclass
class LastGuesser:
    """The most recent first guesser and how many rounds in a row they got it."""
    user_id: str
    streak: int = 1


@dataclass
class InteractionResponse:
    """
    Reply to a button press or command handled by a session.

    A response with no title or description is a silent acknowledgement.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    error: bool = False
    ephemeral: bool = True

    @property
    def silent(self) -> bool:
        return not self.title and not self.description

"""Per-guild game options and the preference store."""

import json
import logging
from dataclasses import dataclass, field, asdict, fields
from datetime import date
from typing import Optional, List, Callable, Awaitable

from game.models import (
    AnswerType,
    Gender,
    GuessModeType,
    LocaleType,
    MultiGuessType,
    SeekType,
    ShuffleType,
)

logger = logging.getLogger(__name__)


@dataclass
class GameOptions:
    """Options that shape song selection and round behaviour for a guild."""
    beginning_year: int = 1990
    end_year: int = field(default_factory=lambda: date.today().year)
    gender: List[str] = field(default_factory=lambda: [Gender.FEMALE, Gender.MALE, Gender.COED])
    limit_start: int = 0
    limit_end: int = 500
    seek_type: str = SeekType.RANDOM
    guess_mode_type: str = GuessModeType.SONG_NAME
    answer_type: str = AnswerType.TYPING
    shuffle_type: str = ShuffleType.RANDOM
    multi_guess_type: str = MultiGuessType.ON
    groups: List[int] = field(default_factory=list)
    excludes: List[int] = field(default_factory=list)
    includes: List[int] = field(default_factory=list)
    goal: Optional[int] = None
    guess_timeout: Optional[int] = None
    duration: Optional[int] = None


class GuildPreference:
    """
    A guild's stored game options.

    Whenever an option changes, ``reload_song_callback`` (attached by the
    guild's live session) is awaited so the song pool follows the new options.
    """

    def __init__(self, guild_id: str, game_options: Optional[GameOptions] = None, locale: str = LocaleType.EN, db=None):
        self.guild_id = guild_id
        self.game_options = game_options or GameOptions()
        self.locale = locale
        self.reload_song_callback: Optional[Callable[[], Awaitable[None]]] = None
        self._db = db

    @classmethod
    async def get(cls, guild_id: str, db) -> "GuildPreference":
        """Load a guild's preference from the database, falling back to defaults."""
        row = await db.get_guild_preference(guild_id)
        if not row:
            return cls(guild_id, db=db)

        options = GameOptions()
        stored = json.loads(row['game_options'] or "{}")
        known = {f.name for f in fields(GameOptions)}
        for key, value in stored.items():
            if key in known:
                setattr(options, key, value)
            else:
                logger.warning(f"gid: {guild_id} | Ignoring unknown stored option '{key}'")

        return cls(guild_id, options, row['locale'] or LocaleType.EN, db=db)

    async def set_option(self, name: str, value) -> None:
        """Update one option, persist it and reload the song pool of any live session."""
        if not hasattr(self.game_options, name):
            raise ValueError(f"Unknown game option: {name}")

        setattr(self.game_options, name, value)
        await self._options_changed()

    async def reset(self) -> None:
        self.game_options = GameOptions()
        await self._options_changed()

    async def _options_changed(self) -> None:
        if self._db is not None:
            await self._db.save_guild_preference(self.guild_id, self.to_json(), self.locale)

        if self.reload_song_callback:
            await self.reload_song_callback()

    def to_json(self) -> str:
        return json.dumps(asdict(self.game_options))

    def is_multiple_choice_mode(self) -> bool:
        return self.game_options.answer_type in AnswerType.MULTIPLE_CHOICE

    def typos_allowed(self) -> bool:
        return self.game_options.answer_type == AnswerType.TYPING_TYPOS

    def is_guess_timeout_set(self) -> bool:
        return bool(self.game_options.guess_timeout)

    def is_duration_set(self) -> bool:
        return bool(self.game_options.duration)

    def is_alternating_gender(self) -> bool:
        return Gender.ALTERNATING in self.game_options.gender

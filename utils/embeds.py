"""Discord embed builders for bot responses."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import discord

import config
from game.models import BookmarkedSong, GuessModeType, LevelUpResult, LocaleType, Song
from utils.formatters import bold, code_line, format_list, format_number, minutes_remaining, truncate_text

VOTE_LINK = "https://top.gg/"


@dataclass
class ButtonSpec:
    """A button on a message. Link buttons have a url instead of a custom id."""
    label: str
    custom_id: Optional[str] = None
    url: Optional[str] = None
    emoji: Optional[str] = None


@dataclass
class EmbedPayload:
    """Everything needed to render one embed message, independent of discord.py."""
    title: Optional[str] = None
    description: Optional[str] = None
    color: int = config.EMBED_INFO_COLOR
    url: Optional[str] = None
    fields: List[Dict] = field(default_factory=list)
    thumbnail_url: Optional[str] = None
    footer_text: Optional[str] = None
    components: List[List[ButtonSpec]] = field(default_factory=list)


def build_embed(payload: EmbedPayload) -> discord.Embed:
    """Render a payload as a discord.Embed."""
    embed = discord.Embed(
        title=payload.title,
        description=payload.description,
        color=payload.color,
        url=payload.url
    )

    for embed_field in payload.fields:
        embed.add_field(
            name=embed_field["name"],
            value=str(embed_field["value"])[:1024],  # Discord field limit
            inline=embed_field.get("inline", False)
        )

    if payload.thumbnail_url:
        embed.set_thumbnail(url=payload.thumbnail_url)

    if payload.footer_text:
        embed.set_footer(text=payload.footer_text)

    return embed


def build_view(payload: EmbedPayload) -> Optional[discord.ui.View]:
    """Render the payload's button rows. Clicks are handled by the interaction listener."""
    if not payload.components:
        return None

    view = discord.ui.View(timeout=None)
    for row_index, row in enumerate(payload.components):
        for button in row:
            if button.url:
                item = discord.ui.Button(
                    style=discord.ButtonStyle.link, label=button.label,
                    url=button.url, emoji=button.emoji, row=row_index
                )
            else:
                item = discord.ui.Button(
                    style=discord.ButtonStyle.primary, label=truncate_text(button.label, 70),
                    custom_id=button.custom_id, emoji=button.emoji, row=row_index
                )
            view.add_item(item)
    return view


def chunk(items: Sequence, size: int) -> List[List]:
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def create_round_payload(
    song: Song,
    locale: str,
    description: str,
    fields: List[Dict],
    color: int,
    unique_song_counter: Tuple[int, int],
    guess_mode_type: str = GuessModeType.SONG_NAME,
    time_remaining: Optional[float] = None
) -> EmbedPayload:
    """Create the message revealing a round's song."""
    song_and_artist = bold(f'"{song.localized_song_name(locale)}" - {song.localized_artist_name(locale)}')
    year = f" ({song.publish_date.year})" if song.publish_date else ""

    footer_lines = [f"{format_number(song.views)} views"]
    aliases = get_alias_footer(song, guess_mode_type, locale)
    if aliases:
        footer_lines.append(aliases)

    played, total = unique_song_counter
    footer_lines.append(f"{played}/{total} unique songs played")

    remaining = minutes_remaining(time_remaining)
    if remaining:
        footer_lines.append(remaining)

    return EmbedPayload(
        title=f"{song_and_artist}{year}",
        url=song.url,
        description=description,
        color=color,
        fields=fields,
        thumbnail_url=song.thumbnail_url,
        footer_text="\n".join(footer_lines)
    )


def get_alias_footer(song: Song, guess_mode_type: str, locale: str) -> str:
    """Other accepted answers for the round, shown after the song is revealed."""
    aliases: List[str] = []
    if guess_mode_type == GuessModeType.ARTIST:
        if song.hangul_artist_name:
            aliases.append(song.artist_name if locale == LocaleType.KO else song.hangul_artist_name)
        aliases.extend(song.artist_aliases)
    else:
        if song.hangul_song_name:
            aliases.append(song.song_name if locale == LocaleType.KO else song.hangul_song_name)
        aliases.extend(song.song_aliases)

    if not aliases:
        return ""

    return f"Aliases: {', '.join(aliases)}"


def create_multiple_choice_payload(options: List[Tuple[str, str]], row_size: int, guess_mode_type: str) -> EmbedPayload:
    """Create the button grid a multiple choice round is answered with."""
    buttons = [ButtonSpec(label=label, custom_id=custom_id) for custom_id, label in options]
    song_or_artist = "artist" if guess_mode_type == GuessModeType.ARTIST else "song"
    return EmbedPayload(
        title=f"Guess the {song_or_artist}!",
        components=chunk(buttons, row_size)
    )


def create_listening_components(skip_id: str, bookmark_id: str) -> List[List[ButtonSpec]]:
    return [[ButtonSpec(label="Skip", custom_id=skip_id), ButtonSpec(label="Bookmark", custom_id=bookmark_id)]]


def create_end_game_payload(
    winners: List,
    fields: List[Dict],
    correct_guesses: int,
    rounds_played: int,
    bonus_active: bool = False,
    large_scoreboard: bool = False
) -> EmbedPayload:
    """Create the end of game message announcing the winners."""
    footer_text = f"Songs correctly guessed: {correct_guesses}/{rounds_played}"
    if not winners:
        return EmbedPayload(title="No winners 😔", footer_text=footer_text)

    names = [getattr(winner, "name", None) or str(winner.id) for winner in winners]
    if len(names) == 1:
        title = f"🎉 {names[0]} wins! 🎉"
    else:
        title = f"🎉 {format_list(names)} tie! 🎉"

    return EmbedPayload(
        title=title,
        description=None if large_scoreboard else bold("Scoreboard"),
        color=config.EMBED_SUCCESS_BONUS_COLOR if bonus_active else config.EMBED_SUCCESS_COLOR,
        fields=fields,
        thumbnail_url=getattr(winners[0], "avatar_url", None) or None,
        footer_text=footer_text,
        components=[[ButtonSpec(label="Vote", url=VOTE_LINK, emoji="✅")]]
    )


def create_level_up_payload(level_ups: List[LevelUpResult], names: Dict[str, str]) -> EmbedPayload:
    """Create the level up announcement, listing at most ten players."""
    ordered = sorted(
        level_ups,
        key=lambda result: (result.end_level - result.start_level, result.end_level),
        reverse=True
    )
    lines = [
        f"{names.get(result.user_id) or f'<@{result.user_id}>'} has leveled from "
        f"{code_line(str(result.start_level))} to {code_line(str(result.end_level))}"
        for result in ordered[:10]
    ]
    if len(ordered) > 10:
        lines.append("and many others...")

    return EmbedPayload(title="🆙 Level up!", description="\n".join(lines))


def create_scoreboard_payload(fields: List[Dict], footer_text: str) -> EmbedPayload:
    return EmbedPayload(
        title="Scoreboard",
        color=config.EMBED_SUCCESS_COLOR,
        fields=fields[:config.EMBED_FIELDS_PER_PAGE],
        footer_text=footer_text
    )


def create_bookmarks_payload(bookmarks: List[BookmarkedSong], locale: str = LocaleType.EN) -> EmbedPayload:
    """Create the direct message listing a player's bookmarked songs."""
    fields = [
        {
            "name": f'"{bookmark.song.localized_song_name(locale)}" - {bookmark.song.localized_artist_name(locale)}',
            "value": bookmark.song.url,
            "inline": False
        }
        for bookmark in bookmarks[:config.EMBED_FIELDS_PER_PAGE]
    ]
    return EmbedPayload(title="🔖 Your bookmarked songs", fields=fields)

"""Voice channel management and song playback."""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional

import discord
from discord.ext import commands

from game.models import GuildMember

logger = logging.getLogger(__name__)

PlaybackCallback = Callable[[Optional[Exception]], Awaitable[None]]


class PlaybackSubscription:
    """
    Handle for one ``play`` call.

    The end-of-stream or error signal is delivered at most once, and never
    after the subscription was closed, so a stale stream cannot end a newer round.
    """

    def __init__(self, callback: PlaybackCallback):
        self._callback = callback
        self.closed = False
        self._fired = False

    @property
    def active(self) -> bool:
        return not self.closed and not self._fired

    def close(self):
        self.closed = True

    async def dispatch(self, error: Optional[Exception] = None):
        if not self.active:
            return

        self._fired = True
        await self._callback(error)


class VoiceHandler:
    """Manages Discord voice channel connections."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.voice_clients: Dict[str, discord.VoiceClient] = {}

    def _get_channel(self, voice_channel_id: str) -> Optional[discord.VoiceChannel]:
        channel = self.bot.get_channel(int(voice_channel_id))
        return channel if isinstance(channel, (discord.VoiceChannel, discord.StageChannel)) else None

    def voice_channel_exists(self, voice_channel_id: str) -> bool:
        return self._get_channel(voice_channel_id) is not None

    def get_voice_members(self, voice_channel_id: str) -> List[GuildMember]:
        """Members in the voice channel, excluding bots."""
        channel = self._get_channel(voice_channel_id)
        if channel is None:
            return []

        return [GuildMember.from_discord(member) for member in channel.members if not member.bot]

    def get_user_voice_channel_id(self, guild_id: str, user_id: str) -> Optional[str]:
        guild = self.bot.get_guild(int(guild_id))
        if guild is None:
            return None

        member = guild.get_member(int(user_id))
        if member is None or member.voice is None or member.voice.channel is None:
            return None

        return str(member.voice.channel.id)

    async def ensure_connection(self, guild_id: str, voice_channel_id: str) -> discord.VoiceClient:
        """
        Connect to the voice channel, or move the existing connection there.

        Raises:
            ConnectionError: if the channel is gone or the connection fails
        """
        channel = self._get_channel(voice_channel_id)
        if channel is None:
            raise ConnectionError(f"Voice channel {voice_channel_id} not found")

        voice_client = self.voice_clients.get(guild_id)
        if voice_client and voice_client.is_connected():
            if voice_client.channel.id != channel.id:
                await voice_client.move_to(channel)
            return voice_client

        try:
            voice_client = await channel.connect(timeout=10.0, reconnect=True)
        except (discord.ClientException, asyncio.TimeoutError, discord.opus.OpusNotLoaded) as e:
            raise ConnectionError(f"Could not join voice channel {voice_channel_id}: {e}") from e

        self.voice_clients[guild_id] = voice_client
        return voice_client

    def play(self, guild_id: str, song_path: str, seek: float, callback: PlaybackCallback) -> PlaybackSubscription:
        """
        Play an audio file from the given offset.

        Returns:
            A subscription whose callback receives None when the song ends,
            or the exception if the stream failed
        """
        voice_client = self.voice_clients.get(guild_id)
        if voice_client is None or not voice_client.is_connected():
            raise ConnectionError(f"gid: {guild_id} | Not connected to voice")

        if voice_client.is_playing():
            voice_client.stop()

        subscription = PlaybackSubscription(callback)
        loop = self.bot.loop

        def after(error: Optional[Exception]):
            # Runs on the audio player thread
            asyncio.run_coroutine_threadsafe(subscription.dispatch(error), loop)

        source = discord.FFmpegOpusAudio(song_path, before_options=f"-ss {seek:.2f}")
        voice_client.play(source, after=after)
        return subscription

    async def disconnect(self, guild_id: str) -> bool:
        """
        Leave the guild's voice channel.

        Returns:
            True if successfully left, False otherwise
        """
        voice_client = self.voice_clients.pop(guild_id, None)
        if voice_client is None:
            return False

        try:
            voice_client.stop()
            await voice_client.disconnect()
            return True
        except discord.ClientException as e:
            logger.warning(f"gid: {guild_id} | Error leaving voice channel: {e}")
            return False

"""Message delivery to text channels and DMs."""

import logging
from typing import Optional

import discord
from discord.ext import commands

import config
from utils.embeds import EmbedPayload, build_embed, build_view

logger = logging.getLogger(__name__)


class Messenger:
    """
    Sends embed payloads through the bot.

    Delivery failures (missing permissions, deleted channels) are logged and
    reported as None; they never end a session on their own.
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    async def _get_channel(self, text_channel_id: str) -> Optional[discord.abc.Messageable]:
        channel = self.bot.get_channel(int(text_channel_id))
        if channel is not None:
            return channel

        try:
            return await self.bot.fetch_channel(int(text_channel_id))
        except discord.HTTPException as e:
            logger.warning(f"tcid: {text_channel_id} | Could not fetch channel: {e}")
            return None

    async def send_info_message(
        self,
        text_channel_id: str,
        payload: EmbedPayload,
        reply_to: Optional[str] = None
    ) -> Optional[discord.Message]:
        channel = await self._get_channel(text_channel_id)
        if channel is None:
            return None

        kwargs = {"embed": build_embed(payload)}
        view = build_view(payload)
        if view is not None:
            kwargs["view"] = view

        if reply_to:
            kwargs["reference"] = discord.MessageReference(
                message_id=int(reply_to), channel_id=int(text_channel_id), fail_if_not_exists=False
            )

        try:
            return await channel.send(**kwargs)
        except discord.HTTPException as e:
            logger.warning(f"tcid: {text_channel_id} | Failed to send message: {e}")
            return None

    async def send_error_message(self, text_channel_id: str, payload: EmbedPayload) -> Optional[discord.Message]:
        payload.color = config.EMBED_ERROR_COLOR
        if payload.title and not payload.title.startswith("❌"):
            payload.title = f"❌ {payload.title}"
        return await self.send_info_message(text_channel_id, payload)

    async def edit_message(self, message: discord.Message, payload: EmbedPayload) -> Optional[discord.Message]:
        try:
            return await message.edit(embed=build_embed(payload), view=build_view(payload))
        except discord.HTTPException as e:
            logger.warning(f"Failed to edit message {message.id}: {e}")
            return None

    async def edit_message_components(self, message: discord.Message, payload: Optional[EmbedPayload] = None):
        """Replace a message's buttons, or remove them when no payload is given."""
        view = build_view(payload) if payload else None
        try:
            await message.edit(view=view)
        except discord.HTTPException as e:
            logger.warning(f"Failed to edit components of message {message.id}: {e}")

    async def send_direct_message(self, user_id: str, payload: EmbedPayload) -> Optional[discord.Message]:
        try:
            user = self.bot.get_user(int(user_id)) or await self.bot.fetch_user(int(user_id))
            return await user.send(embed=build_embed(payload))
        except discord.HTTPException as e:
            logger.warning(f"uid: {user_id} | Failed to send direct message: {e}")
            return None

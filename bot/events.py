"""Discord bot event handlers."""

import logging

import discord
from discord import app_commands
from discord.ext import commands

logger = logging.getLogger(__name__)


def setup_events(bot: commands.Bot):
    """Set up event handlers for the bot."""

    @bot.event
    async def on_ready():
        """Called when bot is ready."""
        logger.info(f"{bot.user} has connected to Discord, in {len(bot.guilds)} guilds")

        # Guild syncs are available immediately, the global sync can take up to an hour
        for guild in bot.guilds:
            try:
                bot.tree.copy_global_to(guild=guild)
                synced = await bot.tree.sync(guild=guild)
                logger.info(f"Synced {len(synced)} command(s) to guild: {guild.name}")
            except discord.HTTPException as e:
                logger.warning(f"Failed to sync commands to {guild.name}: {e}")

        try:
            synced = await bot.tree.sync()
            logger.info(f"Synced {len(synced)} command(s) globally")
        except discord.HTTPException as e:
            logger.warning(f"Failed to sync commands globally: {e}")

    @bot.event
    async def on_error(event, *args, **kwargs):
        """Handle errors."""
        logger.exception(f"Error in {event}")

    @bot.tree.error
    async def on_app_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Handle application command errors."""
        if isinstance(error, app_commands.CheckFailure):
            message = "You don't have permission to use this command."
        elif isinstance(error, app_commands.CommandOnCooldown):
            message = f"This command is on cooldown. Try again in {error.retry_after:.1f} seconds."
        else:
            logger.error(f"gid: {interaction.guild_id} | Error in /{interaction.command.name if interaction.command else '?'}",
                         exc_info=error)
            message = "An error occurred while executing this command."

        if interaction.response.is_done():
            await interaction.followup.send(f"❌ {message}", ephemeral=True)
        else:
            await interaction.response.send_message(f"❌ {message}", ephemeral=True)

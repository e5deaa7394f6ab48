"""Discord bot client setup."""

import discord
from discord.ext import commands
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def create_bot() -> commands.Bot:
    """Create and configure Discord bot."""
    # Guesses are read from messages; voice states drive owner and player tracking
    intents = discord.Intents.default()
    intents.message_content = True
    intents.voice_states = True
    intents.guilds = True
    intents.members = True

    # command_prefix is required even though only slash commands are registered
    bot = commands.Bot(command_prefix='!', intents=intents)

    return bot

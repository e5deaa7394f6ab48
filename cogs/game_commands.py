"""Slash commands and listeners that drive song quiz sessions."""

import logging
from datetime import datetime
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands, tasks

import config
from database.manager import db_manager
from game.game_session import GameSession
from game.listening_session import ListeningSession
from game.models import GameType, GuildMember, InteractionResponse, MessageContext
from game.options import GuildPreference
from game.session import Session, SessionServices
from game.session_manager import session_manager
from utils.embeds import EmbedPayload, build_embed
from utils.messenger import Messenger
from voice.handler import VoiceHandler

logger = logging.getLogger(__name__)


def interaction_context(interaction: discord.Interaction) -> MessageContext:
    """Build a message context for a slash command or button press."""
    return MessageContext(
        text_channel_id=str(interaction.channel_id),
        author=GuildMember.from_discord(interaction.user),
        guild_id=str(interaction.guild_id) if interaction.guild_id else None
    )


def response_embed(response: InteractionResponse) -> discord.Embed:
    if response.error:
        return build_embed(EmbedPayload(
            title=f"❌ {response.title or 'Error'}",
            description=response.description,
            color=config.EMBED_ERROR_COLOR
        ))
    return build_embed(EmbedPayload(title=response.title, description=response.description))


class GameCommands(commands.Cog):
    """Song quiz commands: games, listening sessions, skips, hints and scores."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.voice_handler = VoiceHandler(bot)
        self.messenger = Messenger(bot)

    async def cog_load(self):
        self.check_inactive_sessions.start()

    async def cog_unload(self):
        self.check_inactive_sessions.cancel()
        await session_manager.end_all()

    def build_services(self) -> SessionServices:
        return SessionServices(
            voice=self.voice_handler,
            messenger=self.messenger,
            db=db_manager,
            registry=session_manager
        )

    async def reply(self, interaction: discord.Interaction, response: InteractionResponse):
        """Send a session's response, as a followup if the interaction was already acknowledged."""
        if response.silent:
            if not interaction.response.is_done():
                await interaction.response.defer()
            return

        embed = response_embed(response)
        if interaction.response.is_done():
            await interaction.followup.send(embed=embed, ephemeral=response.ephemeral)
        else:
            await interaction.response.send_message(embed=embed, ephemeral=response.ephemeral)

    async def reply_error(self, interaction: discord.Interaction, description: str):
        await self.reply(interaction, InteractionResponse(description=description, error=True))

    def get_session(self, interaction: discord.Interaction) -> Optional[Session]:
        if interaction.guild_id is None:
            return None
        return session_manager.get(str(interaction.guild_id))

    async def get_game_session(self, interaction: discord.Interaction) -> Optional[GameSession]:
        session = self.get_session(interaction)
        if not isinstance(session, GameSession):
            await self.reply_error(interaction, "There is no game in progress. Start one with `/play`.")
            return None
        return session

    async def prepare_session_start(self, interaction: discord.Interaction):
        """Checks shared by /play and /listen. Returns (voice_channel, preference, is_premium) or None."""
        if interaction.guild is None:
            await self.reply_error(interaction, "Games can only be played in a server.")
            return None

        voice_state = getattr(interaction.user, "voice", None)
        if not voice_state or not voice_state.channel:
            await self.reply_error(interaction, "You must be in a voice channel to start a game!")
            return None

        guild_id = str(interaction.guild.id)
        await db_manager.ensure_guild(guild_id)
        guild_preference = await GuildPreference.get(guild_id, db_manager)

        voice_channel = voice_state.channel
        member_ids = [str(member.id) for member in voice_channel.members if not member.bot]
        is_premium = await db_manager.are_users_premium(member_ids)
        return voice_channel, guild_preference, is_premium

    # Sessions

    @app_commands.command(name="play", description="Start a song guessing game in your voice channel")
    @app_commands.describe(mode="Game mode", lives="Lives per player (elimination only)")
    @app_commands.choices(mode=[
        app_commands.Choice(name="Classic", value=GameType.CLASSIC),
        app_commands.Choice(name="Elimination", value=GameType.ELIMINATION),
        app_commands.Choice(name="Teams", value=GameType.TEAMS),
        app_commands.Choice(name="Competition", value=GameType.COMPETITION)
    ])
    async def play(
        self,
        interaction: discord.Interaction,
        mode: Optional[app_commands.Choice[str]] = None,
        lives: Optional[app_commands.Range[int, 1, 10000]] = None
    ):
        """Start a game session."""
        game_type = mode.value if mode else GameType.CLASSIC
        if game_type == GameType.COMPETITION and not await self.bot.is_owner(interaction.user):
            await self.reply_error(interaction, "Only moderators can start a competition.")
            return

        await interaction.response.defer()
        prepared = await self.prepare_session_start(interaction)
        if prepared is None:
            return

        voice_channel, guild_preference, is_premium = prepared
        ctx = interaction_context(interaction)
        session = GameSession(
            guild_preference,
            ctx.text_channel_id,
            str(voice_channel.id),
            ctx.guild_id,
            ctx.author,
            self.build_services(),
            game_type=game_type,
            is_premium=is_premium,
            elimination_lives=lives
        )
        await session_manager.register(session)
        await session.sync_all_voice_members()

        logger.info(f"{ctx.debug_header()} | Game session created. game_type = {game_type}")

        if game_type == GameType.TEAMS:
            await self.reply(interaction, InteractionResponse(
                title="Teams game created",
                description="Create or join a team with `/join <team>`. "
                            f"{ctx.author.mention} starts the game with `/begin`.",
                ephemeral=False
            ))
            return

        description = "Type your guesses in this channel!"
        if game_type == GameType.ELIMINATION:
            description += f" Everyone starts with {session.scoreboard.starting_lives} lives."
        await self.reply(interaction, InteractionResponse(
            title=f"{game_type.capitalize()} game starting", description=description, ephemeral=False
        ))
        await session.start_round(ctx)

    @app_commands.command(name="listen", description="Play songs in your voice channel without guessing")
    async def listen(self, interaction: discord.Interaction):
        """Start a listening session."""
        await interaction.response.defer()
        prepared = await self.prepare_session_start(interaction)
        if prepared is None:
            return

        voice_channel, guild_preference, is_premium = prepared
        ctx = interaction_context(interaction)
        session = ListeningSession(
            guild_preference,
            ctx.text_channel_id,
            str(voice_channel.id),
            ctx.guild_id,
            ctx.author,
            self.build_services(),
            is_premium=is_premium
        )
        await session_manager.register(session)
        logger.info(f"{ctx.debug_header()} | Listening session created")

        await self.reply(interaction, InteractionResponse(
            title="Listening session starting", description="Sit back and enjoy!", ephemeral=False
        ))
        await session.start_round(ctx)

    @app_commands.command(name="join", description="Create or join a team")
    @app_commands.describe(team="Team name")
    async def join(self, interaction: discord.Interaction, team: str):
        session = await self.get_game_session(interaction)
        if session is None:
            return

        member = GuildMember.from_discord(interaction.user)
        await self.reply(interaction, await session.join_team(member, team))

    @app_commands.command(name="begin", description="Start a teams game")
    async def begin(self, interaction: discord.Interaction):
        session = await self.get_game_session(interaction)
        if session is None:
            return

        await interaction.response.defer()
        ctx = interaction_context(interaction)
        await self.reply(interaction, await session.begin(ctx.author, ctx))

    @app_commands.command(name="end", description="End the current game or listening session")
    async def end(self, interaction: discord.Interaction):
        session = self.get_session(interaction)
        if session is None:
            await self.reply_error(interaction, "There is nothing to end.")
            return

        user_id = str(interaction.user.id)
        if user_id not in {member.id for member in session.get_voice_members()} and user_id != session.owner.id:
            await self.reply_error(interaction, "You must be in the voice channel to end the game.")
            return

        await interaction.response.defer()
        ctx = interaction_context(interaction)
        logger.info(f"{ctx.debug_header()} | {session.session_name()} ended by command")
        await self.reply(interaction, InteractionResponse(title="Ending game", ephemeral=False))
        await session.end_session()

    # Rounds

    @app_commands.command(name="skip", description="Vote to skip the current song")
    async def skip(self, interaction: discord.Interaction):
        session = self.get_session(interaction)
        if session is None:
            await self.reply_error(interaction, "There is no song to skip.")
            return

        await interaction.response.defer()
        ctx = interaction_context(interaction)
        await self.reply(interaction, await session.vote_skip(ctx.author, ctx))

    @app_commands.command(name="forceskip", description="Skip the current song (owner only)")
    async def forceskip(self, interaction: discord.Interaction):
        session = self.get_session(interaction)
        if session is None:
            await self.reply_error(interaction, "There is no song to skip.")
            return

        await interaction.response.defer()
        ctx = interaction_context(interaction)
        await self.reply(interaction, await session.force_skip(ctx.author, ctx))

    @app_commands.command(name="hint", description="Vote for a hint on the current song")
    async def hint(self, interaction: discord.Interaction):
        session = await self.get_game_session(interaction)
        if session is None:
            return

        ctx = interaction_context(interaction)
        await self.reply(interaction, await session.request_hint(ctx.author, ctx))

    @app_commands.command(name="forcehint", description="Reveal a hint for the current song (owner only)")
    async def forcehint(self, interaction: discord.Interaction):
        session = await self.get_game_session(interaction)
        if session is None:
            return

        ctx = interaction_context(interaction)
        await self.reply(interaction, await session.force_hint(ctx.author, ctx))

    @app_commands.command(name="score", description="Show the scoreboard")
    async def score(self, interaction: discord.Interaction):
        session = await self.get_game_session(interaction)
        if session is None:
            return

        payload = session.get_score_payload(str(interaction.user.id))
        await interaction.response.send_message(embed=build_embed(payload))

    # Listeners

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.author.bot or message.guild is None:
            return

        session = session_manager.get(str(message.guild.id))
        if session is None:
            return

        await session.guess_song(MessageContext.from_message(message), message.content)

    @commands.Cog.listener()
    async def on_interaction(self, interaction: discord.Interaction):
        """Route button presses on session messages to the guild's session."""
        if interaction.type != discord.InteractionType.component or interaction.guild_id is None:
            return

        custom_id = (interaction.data or {}).get("custom_id")
        if not custom_id:
            return

        age = (discord.utils.utcnow() - interaction.created_at).total_seconds()
        if age > config.INTERACTION_ACK_DEADLINE:
            logger.warning(f"gid: {interaction.guild_id} | Ignoring interaction received {age:.1f}s late")
            return

        session = session_manager.get(str(interaction.guild_id))
        if session is None:
            await self.reply_error(interaction, "This game has already ended.")
            return

        await interaction.response.defer()
        message_id = str(interaction.message.id) if interaction.message else None
        ctx = interaction_context(interaction)
        try:
            response = await session.handle_component_interaction(custom_id, ctx.author, message_id, ctx)
        except Exception:
            logger.exception(f"{ctx.debug_header()} | Error handling interaction {custom_id}")
            response = InteractionResponse(description="Something went wrong.", error=True)

        await self.reply(interaction, response)

    @commands.Cog.listener()
    async def on_voice_state_update(self, member: discord.Member, before: discord.VoiceState,
                                    after: discord.VoiceState):
        session = session_manager.get(str(member.guild.id))
        if session is None:
            return

        if self.bot.user and member.id == self.bot.user.id:
            if after.channel is None:
                logger.info(f"{session.debug_header()} | Bot was disconnected from voice")
                await session.end_session()
            return

        voice_channel_id = session.voice_channel_id
        joined = after.channel is not None and str(after.channel.id) == voice_channel_id
        left = before.channel is not None and str(before.channel.id) == voice_channel_id and not joined
        if not joined and not left:
            return

        if not member.bot and isinstance(session, GameSession):
            await session.set_player_in_vc(GuildMember.from_discord(member), joined)

        if not session.get_voice_members():
            logger.info(f"{session.debug_header()} | Bot is alone in voice, ending {session.session_name()}")
            await session.end_session()
            return

        await session.update_owner()
        try:
            await session.update_premium_status()
        except Exception:
            logger.exception(f"{session.debug_header()} | Error updating premium status")

    @tasks.loop(minutes=1)
    async def check_inactive_sessions(self):
        now = datetime.utcnow()
        for session in session_manager.get_inactive_sessions(now, config.SESSION_IDLE_TIMEOUT):
            logger.info(f"{session.debug_header()} | Ending inactive {session.session_name()}")
            await session.send_info(
                "Session ended",
                f"Nothing happened for {config.SESSION_IDLE_TIMEOUT} minutes, so the session has ended."
            )
            await session.end_session()

    @check_inactive_sessions.before_loop
    async def before_check_inactive_sessions(self):
        await self.bot.wait_until_ready()


async def setup(bot: commands.Bot):
    """Load the cog."""
    await bot.add_cog(GameCommands(bot))

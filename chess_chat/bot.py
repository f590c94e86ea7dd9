"""Discord front end: command routing and reaction prompts via discord.py."""

from collections.abc import Sequence

import discord
from discord.ext import commands
from loguru import logger

from chess_chat.config import Settings
from chess_chat.game import ChessSessionService
from chess_chat.transport import CONFIRMATION_OPTIONS, ChatTransport
from chess_chat.types import OriginId, SessionScope

ACKNOWLEDGE_REACTION = "😔"


def resolve_origin(author_id: int, channel_id: int, scope: SessionScope) -> OriginId:
    """Key a command to the game it belongs to.

    Args:
        author_id: Discord id of the message author.
        channel_id: Discord id of the channel the message was sent in.
        scope: Whether games belong to users or to channels.

    Returns:
        Origin identifier, the same for every command of that user/channel.
    """
    if scope == "channel":
        return f"channel:{channel_id}"
    return f"user:{author_id}"


class DiscordTransport(ChatTransport):
    """Sends replies to the channel an origin last issued a command in."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self._channels: dict[OriginId, discord.abc.Messageable] = {}

    def bind(self, origin: OriginId, channel: discord.abc.Messageable) -> None:
        self._channels[origin] = channel

    async def send(self, origin: OriginId, text: str) -> None:
        await self._channels[origin].send(text)

    async def prompt(
        self,
        origin: OriginId,
        user: str,
        text: str,
        options: Sequence[str] = CONFIRMATION_OPTIONS,
    ) -> str | None:
        message = await self._channels[origin].send(text)
        for option in options:
            await message.add_reaction(option)

        def check(reaction: discord.Reaction, reactor: discord.abc.User) -> bool:
            return reaction.message.id == message.id and str(reactor.id) == user

        # No timeout here, the caller cancels the wait at its deadline
        reaction, _ = await self.bot.wait_for("reaction_add", check=check)
        return str(reaction.emoji)


class ChessCog(commands.Cog):
    """Chess commands: ping, start and move."""

    def __init__(self, bot: commands.Bot, settings: Settings) -> None:
        self.bot = bot
        self.settings = settings
        self.transport = DiscordTransport(bot)
        self.service = ChessSessionService.from_settings(self.transport, settings)

    def _origin(self, ctx: commands.Context) -> OriginId:
        origin = resolve_origin(
            ctx.author.id, ctx.channel.id, self.settings.session_scope
        )
        self.transport.bind(origin, ctx.channel)
        return origin

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        """React to every prefixed message, commands or not."""
        if message.author.bot or not message.content.startswith(
            self.settings.command_prefix
        ):
            return
        try:
            await message.add_reaction(ACKNOWLEDGE_REACTION)
        except discord.HTTPException as e:
            logger.warning(f"Could not react to message {message.id}: {e}")

    @commands.command(name="ping")
    async def ping_command(self, ctx: commands.Context) -> None:
        await ctx.reply(self.service.ping())

    @commands.command(name="start", aliases=["startchess"])
    async def start_command(self, ctx: commands.Context) -> None:
        await self.service.start(self._origin(ctx), str(ctx.author.id))

    @commands.command(name="move")
    async def move_command(self, ctx: commands.Context, *, text: str = "") -> None:
        await self.service.move(self._origin(ctx), str(ctx.author.id), text)


class ChessBot(commands.Bot):
    """Bot with the chess commands installed under the configured prefix."""

    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(command_prefix=settings.command_prefix, intents=intents)
        self.settings = settings

    async def setup_hook(self) -> None:
        await self.add_cog(ChessCog(self, self.settings))

    async def on_ready(self) -> None:
        logger.info(f"Logged in as {self.user}")


def run_bot(settings: Settings) -> None:
    """Connect to Discord and serve commands until interrupted.

    Args:
        settings: Bot settings; must carry a token.

    Raises:
        ValueError: If no Discord token is configured.
    """
    if not settings.discord_token:
        raise ValueError("DISCORD_TOKEN is not set")

    bot = ChessBot(settings)
    logger.info(f"Starting bot with prefix '{settings.command_prefix}'")
    bot.run(settings.discord_token, log_handler=None)

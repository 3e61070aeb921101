# apps/bot/hornbotx_bot/main.py
from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import dataclass
import logging

import discord

from hornbotx_bot.catalog import COLLECTIONS
from hornbotx_bot.discord.guilds import DiscordGuildDirectory
from hornbotx_bot.discord.voice import DiscordVoiceGateway
from hornbotx_bot.settings import BotSettings, ConfigError, load_bot_settings
from hornbotx_core.use_cases.build_play_request import PlayRequestBuilder
from hornbotx_core.use_cases.play_command import PlayCommand, PlayCommandInput
from hornbotx_core.use_cases.route_command import CommandRouter
from hornbotx_infra.clip_registry import ClipRegistry
from hornbotx_infra.guild_scheduler import GuildPlaybackScheduler


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BotDeps:
    """Collaborators built before the client exists (clips are already loaded)."""
    router: CommandRouter
    builder: PlayRequestBuilder


class HornBot(discord.Client):
    """
    Discord client entrypoint for HornBotx.

    Key rule:
    - The voice gateway, guild lookup and scheduler need the client, so they
      are wired here; everything else arrives through deps.
    - The message path only awaits the enqueue critical section, never playback.
    """

    def __init__(
        self,
        *,
        settings: BotSettings,
        deps: BotDeps,
        intents: discord.Intents,
    ) -> None:
        super().__init__(intents=intents)
        self.settings = settings
        self.deps = deps

        self.scheduler = GuildPlaybackScheduler(
            voice_gateway=DiscordVoiceGateway(self),
            max_queue_size=settings.max_queue_size,
            switch_settle_ms=settings.channel_switch_settle_ms,
            lead_in_ms=settings.lead_in_ms,
        )
        self.play_command = PlayCommand(
            router=deps.router,
            builder=deps.builder,
            guilds=DiscordGuildDirectory(self),
            play_queue=self.scheduler,
        )

        self._register_events()

    async def close(self) -> None:
        await self.scheduler.close()
        await super().close()

    # -----------------------------
    # Events
    # -----------------------------
    def _register_events(self) -> None:
        @self.event
        async def on_ready() -> None:
            """
            Fired when the client has connected and the bot identity is known.
            """
            logger.info("Received READY payload, connected as %s", self.user)
            await self.change_presence(activity=discord.Game(name=self.settings.status_text))

        @self.event
        async def on_message(message: discord.Message) -> None:
            if message.author.bot:
                return

            if message.guild is None:
                return

            await self.play_command.execute(
                PlayCommandInput(
                    guild_id=message.guild.id,
                    channel_id=message.channel.id,
                    message_id=message.id,
                    author_id=message.author.id,
                    content=message.content,
                )
            )


def build_deps(settings: BotSettings) -> BotDeps:
    logger.info("Preloading sounds from %s...", settings.audio_dir)
    collections = ClipRegistry(audio_dir=settings.audio_dir).load(COLLECTIONS)
    return BotDeps(
        router=CommandRouter(collections),
        builder=PlayRequestBuilder(),
    )


def build_bot(settings: BotSettings) -> HornBot:
    """
    Construct the bot with all dependencies wired.
    Clips are loaded here, synchronously, before any connection is made.
    """
    intents = discord.Intents.default()
    intents.message_content = True  # required to read "!airhorn" style commands
    intents.voice_states = True

    return HornBot(
        settings=settings,
        deps=build_deps(settings),
        intents=intents,
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="hornbotx", description="Play sound clips into Discord voice channels.")
    parser.add_argument("-t", "--token", default=None, help="Discord authentication token (overrides DISCORD_TOKEN)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    """Process entrypoint."""
    args = parse_args(argv)
    try:
        settings = load_bot_settings(token=args.token)
    except ConfigError as exc:
        raise SystemExit(f"hornbotx: {exc}") from None

    logging.basicConfig(level=settings.log_level)

    bot = build_bot(settings)
    logger.info("Starting discord session...")
    bot.run(settings.active_discord_token, log_handler=None)
    logger.info("HornBotx exiting")


if __name__ == "__main__":
    main()

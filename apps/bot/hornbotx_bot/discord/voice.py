from __future__ import annotations

import asyncio
import logging
from typing import Final

import discord

from hornbotx_core.ports.voice import (
    VoiceConnectError,
    VoiceConnection,
    VoiceGateway,
    VoiceTransportError,
)


logger = logging.getLogger(__name__)

# DCA clips carry 20 ms Opus frames.
FRAME_DURATION: Final = 0.02
_JOIN_TIMEOUT_SECONDS: Final = 30.0


class DiscordVoiceConnection(VoiceConnection):
    """
    Sends pre-encoded Opus frames straight to a discord.VoiceClient, paced to
    the 20 ms frame clock.
    """

    def __init__(self, voice_client: discord.VoiceClient) -> None:
        self._voice_client = voice_client
        self._next_frame_at: float | None = None

    @property
    def channel_id(self) -> int:
        return self._voice_client.channel.id

    def is_ready(self) -> bool:
        return self._voice_client.is_connected()

    async def switch_channel(self, channel_id: int) -> None:
        guild = self._voice_client.guild
        channel = guild.get_channel(channel_id)
        if not isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            raise VoiceConnectError(f"Channel {channel_id} is not a voice channel in guild {guild.id}")
        try:
            await self._voice_client.move_to(channel)
        except (discord.DiscordException, asyncio.TimeoutError) as exc:
            raise VoiceConnectError(f"Failed to move to channel {channel_id} in guild {guild.id}: {exc}") from exc

    async def set_speaking(self, speaking: bool) -> None:
        if speaking:
            self._next_frame_at = None
        state = discord.SpeakingState.voice if speaking else discord.SpeakingState.none
        try:
            await self._voice_client.ws.speak(state)
        except (discord.DiscordException, OSError) as exc:
            raise VoiceTransportError(f"Failed to update speaking state: {exc}") from exc

    async def send_frame(self, frame: bytes) -> None:
        if not self._voice_client.is_connected():
            raise VoiceTransportError("Voice client disconnected mid-stream")

        loop = asyncio.get_running_loop()
        if self._next_frame_at is None:
            self._next_frame_at = loop.time()
        delay = self._next_frame_at - loop.time()
        if delay > 0:
            await asyncio.sleep(delay)

        try:
            self._voice_client.send_audio_packet(frame, encode=False)
        except (discord.DiscordException, OSError) as exc:
            raise VoiceTransportError(f"Failed to send audio frame: {exc}") from exc
        self._next_frame_at += FRAME_DURATION

    async def disconnect(self) -> None:
        await self._voice_client.disconnect()


class DiscordVoiceGateway(VoiceGateway):
    def __init__(self, client: discord.Client, *, timeout: float = _JOIN_TIMEOUT_SECONDS) -> None:
        self._client = client
        self._timeout = timeout

    async def join(self, *, guild_id: int, channel_id: int) -> VoiceConnection:
        guild = self._client.get_guild(guild_id)
        if guild is None:
            raise VoiceConnectError(f"Guild {guild_id} is not available")

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            raise VoiceConnectError(f"Channel {channel_id} is not a voice channel in guild {guild_id}")

        stale = guild.voice_client
        if stale is not None:
            logger.info("Dropping stale voice client in guild %s", guild_id)
            await stale.disconnect(force=True)

        try:
            voice_client = await channel.connect(timeout=self._timeout, self_deaf=True)
        except (discord.DiscordException, asyncio.TimeoutError) as exc:
            raise VoiceConnectError(f"Failed to join channel {channel_id} in guild {guild_id}: {exc}") from exc

        logger.info("Joined voice channel %s in guild %s", channel_id, guild_id)
        return DiscordVoiceConnection(voice_client)

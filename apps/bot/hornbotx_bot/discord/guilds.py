from __future__ import annotations

import discord

from hornbotx_core.ports.voice import GuildDirectory, GuildVoiceState, VoicePresence


class DiscordGuildDirectory(GuildDirectory):
    """
    Reads voice presences from the client's guild cache (needs the voice_states intent).
    """

    def __init__(self, client: discord.Client) -> None:
        self._client = client

    def voice_state(self, guild_id: int) -> GuildVoiceState | None:
        guild = self._client.get_guild(guild_id)
        if guild is None:
            return None

        presences = tuple(
            VoicePresence(user_id=member_id, channel_id=channel.id)
            for channel in (*guild.voice_channels, *guild.stage_channels)
            for member_id in channel.voice_states
        )
        afk_channel = guild.afk_channel
        return GuildVoiceState(
            guild_id=guild.id,
            afk_channel_id=afk_channel.id if afk_channel is not None else None,
            presences=presences,
        )
